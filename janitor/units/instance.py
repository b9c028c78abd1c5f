"""Cleanup unit for EC2 instances."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from botocore.exceptions import ClientError

from janitor.aws.client import create_boto_client
from janitor.errors import CleanupError
from janitor.models.resource import Resource, ResourceType
from janitor.units.tracked import TrackedCleanupUnit

logger = logging.getLogger(__name__)

# Instances in these states are gone or going away
_SKIPPED_STATES = ("shutting-down", "terminated")


class InstanceJanitor(TrackedCleanupUnit):
    """Marks and terminates EC2 instances that break the configured rules.

    Typical rules require an owner tag, see ``janitor.units.rules.MissingTagRule``.
    """

    def __init__(
        self,
        *args: Any,
        client: Optional[Any] = None,
        aws_profile: Optional[str] = None,
        owner_tag: str = "owner",
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.aws_profile = aws_profile
        self.owner_tag = owner_tag
        self._client = client

    @property
    def resource_type(self) -> ResourceType:
        return ResourceType.INSTANCE

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = create_boto_client("ec2", region_name=self.region, profile_name=self.aws_profile)
        return self._client

    def crawl(self) -> List[Resource]:
        resources = []
        paginator = self.client.get_paginator("describe_instances")

        for page in paginator.paginate():
            for reservation in page.get("Reservations", []):
                for instance in reservation.get("Instances", []):
                    state = instance.get("State", {}).get("Name", "unknown")
                    if state in _SKIPPED_STATES:
                        continue

                    tags = {tag["Key"]: tag["Value"] for tag in instance.get("Tags", [])}
                    owner = tags.get(self.owner_tag)

                    resources.append(
                        Resource(
                            id=instance["InstanceId"],
                            region=self.region,
                            resource_type=ResourceType.INSTANCE,
                            tags=tags,
                            owner_email=owner if owner and "@" in owner else None,
                            description=f"type={instance.get('InstanceType')}, state={state}",
                            launch_time=instance.get("LaunchTime"),
                            additional_fields={
                                "state": state,
                                "instance_type": instance.get("InstanceType"),
                            },
                        )
                    )

        logger.debug(f"Crawled {len(resources)} EC2 instances in {self.region}")
        return resources

    def clean_up_resource(self, resource: Resource) -> None:
        try:
            self.client.terminate_instances(InstanceIds=[resource.id])
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "InvalidInstanceID.NotFound":
                logger.info(f"Instance {resource.id} already terminated")
                return
            error_message = e.response.get("Error", {}).get("Message", str(e))
            raise CleanupError(
                f"{error_code}: {error_message}", resource_id=resource.id, resource_type=self.resource_type.value
            ) from e

        logger.info(f"Terminated instance {resource.id} in {self.region}")
