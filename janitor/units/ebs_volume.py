"""Cleanup unit for unattached EBS volumes."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from botocore.exceptions import ClientError

from janitor.aws.client import create_boto_client
from janitor.errors import CleanupError
from janitor.models.resource import Resource, ResourceType
from janitor.units.tracked import TrackedCleanupUnit

logger = logging.getLogger(__name__)


class EBSVolumeJanitor(TrackedCleanupUnit):
    """Marks and deletes EBS volumes that are not attached to an instance."""

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
        return ResourceType.EBS_VOLUME

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = create_boto_client("ec2", region_name=self.region, profile_name=self.aws_profile)
        return self._client

    def crawl(self) -> List[Resource]:
        """Collect EBS volumes in the unit's region.

        Returns:
            List of volume resources
        """
        resources = []
        paginator = self.client.get_paginator("describe_volumes")

        for page in paginator.paginate():
            for volume in page.get("Volumes", []):
                tags = {tag["Key"]: tag["Value"] for tag in volume.get("Tags", [])}
                owner = tags.get(self.owner_tag)

                resources.append(
                    Resource(
                        id=volume["VolumeId"],
                        region=self.region,
                        resource_type=ResourceType.EBS_VOLUME,
                        tags=tags,
                        owner_email=owner if owner and "@" in owner else None,
                        description=f"size={volume.get('Size')}GiB, type={volume.get('VolumeType')}",
                        launch_time=volume.get("CreateTime"),
                        additional_fields={
                            "state": volume.get("State"),
                            "attachments": [a["InstanceId"] for a in volume.get("Attachments", [])],
                            "size_gib": volume.get("Size"),
                        },
                    )
                )

        logger.debug(f"Crawled {len(resources)} EBS volumes in {self.region}")
        return resources

    def clean_up_resource(self, resource: Resource) -> None:
        try:
            self.client.delete_volume(VolumeId=resource.id)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "InvalidVolume.NotFound":
                logger.info(f"Volume {resource.id} already deleted")
                return
            error_message = e.response.get("Error", {}).get("Message", str(e))
            raise CleanupError(
                f"{error_code}: {error_message}", resource_id=resource.id, resource_type=self.resource_type.value
            ) from e

        logger.info(f"Deleted EBS volume {resource.id} in {self.region}")
