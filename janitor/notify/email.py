"""Email notification through Amazon SES."""

from __future__ import annotations

import html
import logging
import re
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from janitor.aws.client import create_boto_client
from janitor.business_calendar import JanitorCalendar
from janitor.errors import NotificationError
from janitor.models.resource import CleanupState, Resource
from janitor.storage.tracker import ResourceTracker

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
DEFAULT_DAYS_BEFORE_TERMINATION = 2


class EmailNotifier:
    """Sends janitor emails: owner notices and the run summary.

    Owner notices cover resources that were marked but not yet notified. They
    are grouped into one email per owner, and each resource's notification
    time is stamped once its email is sent.

    Attributes:
        tracker: Resource tracker holding marked resources
        calendar: Calendar for notification timestamps
        source_email: Sender address
        default_email: Recipient for resources without a resolvable owner
        owner_tag: Tag holding the owner's user name
        owner_email_domain: Domain appended to owner tag values without "@"
        days_before_termination: Minimum business days between a notice and
            the cleanup of the resources it lists
    """

    def __init__(
        self,
        tracker: ResourceTracker,
        calendar: JanitorCalendar,
        source_email: str,
        default_email: Optional[str] = None,
        owner_tag: str = "owner",
        owner_email_domain: Optional[str] = None,
        days_before_termination: int = DEFAULT_DAYS_BEFORE_TERMINATION,
        region: Optional[str] = None,
        client: Optional[Any] = None,
        aws_profile: Optional[str] = None,
    ) -> None:
        self.tracker = tracker
        self.calendar = calendar
        self.source_email = source_email
        self.default_email = default_email
        self.owner_tag = owner_tag
        self.owner_email_domain = owner_email_domain
        self.days_before_termination = days_before_termination
        self.region = region
        self.aws_profile = aws_profile
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = create_boto_client("ses", region_name=self.region, profile_name=self.aws_profile)
        return self._client

    def is_valid_email(self, address: Optional[str]) -> bool:
        return bool(address) and EMAIL_PATTERN.match(address) is not None

    def send_email(self, to: str, subject: str, body: str) -> None:
        """Send an HTML email.

        Args:
            to: Recipient address
            subject: Email subject
            body: HTML body

        Raises:
            NotificationError: If the address is invalid or SES rejects the email
        """
        if not self.is_valid_email(to):
            raise NotificationError(f"Invalid email address: {to}", address=to)

        try:
            self.client.send_email(
                Source=self.source_email,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Html": {"Data": body, "Charset": "UTF-8"}},
                },
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            raise NotificationError(f"Failed to send email to {to}: {error_code}", address=to) from e

        logger.info(f"Sent email '{subject}' to {to}")

    def get_owner_email(self, resource: Resource) -> Optional[str]:
        """Resolve who should hear about a resource.

        Order: the resource's owner email, the owner tag (with the configured
        domain appended when it holds a bare user name), the default address.
        """
        if self.is_valid_email(resource.owner_email):
            return resource.owner_email

        owner = resource.get_tag(self.owner_tag)
        if owner:
            if "@" not in owner and self.owner_email_domain:
                owner = f"{owner}@{self.owner_email_domain}"
            if self.is_valid_email(owner):
                return owner

        return self.default_email

    def send_notifications(self) -> None:
        """Notify owners about newly marked resources.

        A failed email leaves its resources un-notified so the next cycle
        retries them; other owners are still notified.

        Resources due sooner than ``days_before_termination`` business days
        after their notice have their expected termination time moved to that
        day.
        """
        pending: Dict[str, List[Resource]] = defaultdict(list)

        for resource in self.tracker.get_resources(state=CleanupState.MARKED):
            if resource.notification_time is not None or resource.opt_out_of_janitor:
                continue
            owner = self.get_owner_email(resource)
            if owner is None:
                logger.warning(f"No owner email for resource {resource.id}, skipping notification")
                continue
            pending[owner].append(resource)

        now = self.calendar.now()
        earliest = self.calendar.get_business_day(now, self.days_before_termination)

        for owner, resources in pending.items():
            try:
                self.send_email(owner, self._notice_subject(resources), self._notice_body(resources, earliest))
            except NotificationError as e:
                logger.error(f"Could not notify {owner} about {len(resources)} resources: {e}")
                continue

            for resource in resources:
                resource.notification_time = now
                resource.expected_termination_time = _termination_after_notice(resource, earliest)
                self.tracker.add_or_update(resource)

    def _notice_subject(self, resources: List[Resource]) -> str:
        return f"Janitor: {len(resources)} of your resources are scheduled for cleanup"

    def _notice_body(self, resources: List[Resource], earliest: datetime) -> str:
        rows = "".join(
            f"<tr><td>{html.escape(r.id)}</td><td>{r.resource_type.value}</td><td>{html.escape(r.region)}</td>"
            f"<td>{html.escape(r.termination_reason or '')}</td>"
            f"<td>{_termination_after_notice(r, earliest).strftime('%Y-%m-%d')}</td></tr>"
            for r in resources
        )
        return (
            "<p>The following resources were marked for cleanup. Opt them out of the janitor "
            "or fix them before the termination date to keep them.</p>"
            "<table border='1' cellpadding='4'><tr><th>Resource ID</th><th>Type</th><th>Region</th>"
            f"<th>Reason</th><th>Termination date</th></tr>{rows}</table>"
        )


def _termination_after_notice(resource: Resource, earliest: datetime) -> datetime:
    """Expected termination time of a resource notified now.

    A late notice moves the termination back to ``earliest``.
    """
    if resource.expected_termination_time is None or resource.expected_termination_time < earliest:
        return earliest
    return resource.expected_termination_time
