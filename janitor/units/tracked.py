"""Cleanup unit backed by the resource tracker.

Implements the mark/unmark/clean lifecycle shared by all concrete units:
subclasses only crawl their resource type and delete a single resource.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Dict, List, Optional

from janitor.business_calendar import JanitorCalendar
from janitor.config import NS, JanitorConfig
from janitor.models.event import EventCategory, EventType, make_event_id
from janitor.models.resource import CleanupState, Resource
from janitor.storage.recorder import EventRecorder
from janitor.storage.tracker import ResourceTracker
from janitor.units.base import CleanupUnit
from janitor.units.rules import Rule, evaluate

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 3


class TrackedCleanupUnit(CleanupUnit):
    """Cleanup unit that persists its marks in the resource tracker.

    Mark phase: every crawled resource is checked against the rules. Failing
    resources are marked with an expected termination time ``retention_days``
    business days ahead; marked resources that pass again, or that were opted
    out, are unmarked. Marked resources that are no longer crawled are recorded
    as terminated by their owner.

    Clean phase: marked resources past their expected termination time are
    cleaned up, provided they are not opted out and their owner was notified.

    While the janitor is leashed, result buckets are filled but nothing is
    written to the tracker or event log and nothing is deleted.

    Attributes:
        tracker: Resource tracker holding marks and opt state
        recorder: Event recorder for mark/unmark/cleanup events
        calendar: Calendar for timestamps and business days
        config: Janitor configuration (read for the leashed flag)
        rules: Rules a healthy resource satisfies, evaluated in order
        retention_days: Business days between marking and cleanup
    """

    def __init__(
        self,
        region: str,
        tracker: ResourceTracker,
        recorder: EventRecorder,
        calendar: JanitorCalendar,
        config: JanitorConfig,
        rules: List[Rule],
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self._region = region
        self.tracker = tracker
        self.recorder = recorder
        self.calendar = calendar
        self.config = config
        self.rules = rules
        self.retention_days = retention_days

        self._marked: List[Resource] = []
        self._unmarked: List[Resource] = []
        self._cleaned: List[Resource] = []
        self._failed_to_clean: List[Resource] = []

    @abstractmethod
    def crawl(self) -> List[Resource]:
        """List the live resources of this unit's type in its region."""
        pass

    @abstractmethod
    def clean_up_resource(self, resource: Resource) -> None:
        """Delete one resource.

        Raises:
            CleanupError: If the resource could not be deleted
        """
        pass

    @property
    def region(self) -> str:
        return self._region

    @property
    def leashed(self) -> bool:
        return self.config.get_bool_or_else(NS + "leashed", True)

    @property
    def marked_resources(self) -> List[Resource]:
        return self._marked

    @property
    def unmarked_resources(self) -> List[Resource]:
        return self._unmarked

    @property
    def cleaned_resources(self) -> List[Resource]:
        return self._cleaned

    @property
    def failed_to_clean_resources(self) -> List[Resource]:
        return self._failed_to_clean

    def prepare_to_run(self) -> None:
        self._marked = []
        self._unmarked = []
        self._cleaned = []
        self._failed_to_clean = []

    def mark_resources(self) -> None:
        known: Dict[str, Resource] = {
            r.id: r for r in self.tracker.get_resources(resource_type=self.resource_type, region=self.region)
        }
        crawled_ids = set()
        leashed = self.leashed

        for resource in self.crawl():
            crawled_ids.add(resource.id)
            tracked = known.get(resource.id)
            is_marked = tracked is not None and tracked.state == CleanupState.MARKED

            if tracked is not None and tracked.opt_out_of_janitor:
                if is_marked:
                    self._unmark(tracked, "opted out of janitor", leashed)
                continue

            reason = evaluate(self.rules, resource)
            if reason is None:
                if is_marked:
                    self._unmark(tracked, "passes all rules", leashed)
                continue

            if is_marked:
                continue

            self._mark(resource, tracked, reason, leashed)

        for resource_id, tracked in known.items():
            if tracked.state == CleanupState.MARKED and resource_id not in crawled_ids:
                logger.info(
                    f"Marked {self.resource_type.value} resource {resource_id} no longer exists, "
                    f"assuming it was terminated by its owner"
                )
                if not leashed:
                    tracked.state = CleanupState.USER_TERMINATED
                    self.tracker.add_or_update(tracked)

    def cleanup_resources(self) -> None:
        now = self.calendar.now()
        leashed = self.leashed

        for resource in self.tracker.get_resources(
            resource_type=self.resource_type, state=CleanupState.MARKED, region=self.region
        ):
            if resource.opt_out_of_janitor:
                logger.info(f"Resource {resource.id} is opted out of janitor, not cleaning it up")
                continue
            if resource.expected_termination_time is None or resource.expected_termination_time > now:
                continue
            if resource.notification_time is None:
                logger.info(f"Owner of resource {resource.id} has not been notified yet, not cleaning it up")
                continue
            if leashed:
                logger.info(f"The janitor is leashed, no data change is made for cleaning up resource {resource.id}")
                continue

            try:
                self.clean_up_resource(resource)
            except Exception as e:
                logger.error(f"Failed to clean up {self.resource_type.value} resource {resource.id}: {e}")
                self._failed_to_clean.append(resource)
                continue

            resource.state = CleanupState.JANITOR_TERMINATED
            resource.actual_termination_time = now
            self.tracker.add_or_update(resource)
            self._record(resource, EventType.CLEANUP_RESOURCE)
            self._cleaned.append(resource)

    def _mark(self, resource: Resource, tracked: Optional[Resource], reason: str, leashed: bool) -> None:
        now = self.calendar.now()
        resource.state = CleanupState.MARKED
        resource.termination_reason = reason
        resource.marked_time = now
        resource.notification_time = None
        resource.expected_termination_time = self.calendar.get_business_day(now, self.retention_days)
        if tracked is not None:
            resource.opt_out_of_janitor = tracked.opt_out_of_janitor
            resource.owner_email = resource.owner_email or tracked.owner_email
        self._marked.append(resource)

        if leashed:
            logger.info(f"The janitor is leashed, no data change is made for marking resource {resource.id}")
            return
        self.tracker.add_or_update(resource)
        self._record(resource, EventType.MARK_RESOURCE, {"termination_reason": reason})

    def _unmark(self, resource: Resource, why: str, leashed: bool) -> None:
        logger.info(f"Unmarking {self.resource_type.value} resource {resource.id}: {why}")
        resource.state = CleanupState.UNMARKED
        resource.expected_termination_time = None
        resource.termination_reason = None
        self._unmarked.append(resource)

        if leashed:
            return
        self.tracker.add_or_update(resource)
        self._record(resource, EventType.UNMARK_RESOURCE)

    def _record(self, resource: Resource, event_type: EventType, fields: Optional[dict] = None) -> None:
        timestamp = self.calendar.now()
        event = self.recorder.new_event(
            EventCategory.JANITOR,
            event_type,
            resource,
            make_event_id(resource.id, timestamp),
            timestamp=timestamp,
            fields=fields,
        )
        self.recorder.record_event(event)
