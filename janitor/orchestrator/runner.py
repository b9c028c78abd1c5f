"""Janitor run-cycle orchestrator.

Drives the cleanup units through prepare → mark → notify → clean → summary
and owns the opt-in/opt-out transaction on tracked resources.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from janitor.business_calendar import JanitorCalendar
from janitor.config import NS, JanitorConfig
from janitor.errors import NotificationError
from janitor.models.event import Event, EventCategory, EventType, make_event_id
from janitor.notify.email import EmailNotifier
from janitor.notify.reporter import SummaryReporter
from janitor.orchestrator.counters import RunCounters
from janitor.orchestrator.isolation import call_unit
from janitor.storage.recorder import EventRecorder
from janitor.storage.tracker import ResourceTracker
from janitor.units.base import CleanupUnit

logger = logging.getLogger(__name__)


class JanitorMonkey:
    """Janitor orchestrator.

    Runs one cleanup cycle per ``run_cycle()`` call. A failing unit call is
    logged and counted in ``errors`` but never stops the cycle: every unit
    still gets its mark and clean calls, and the summary is still sent.

    Units are called one at a time, in list order, on the caller's thread.
    Nothing prevents two cycles from overlapping; callers that need mutual
    exclusion must serialize ``run_cycle()`` themselves.

    Attributes:
        config: Janitor configuration (reloaded by the caller)
        units: Cleanup units, fixed for the orchestrator's lifetime
        tracker: Resource tracker holding opt state
        recorder: Event recorder for the audit log
        calendar: Calendar for event timestamps
        notifier: Email notifier for owner notices and the summary
        reporter: Summary reporter
        region: Home region used when an opt call omits the region
        account_name: Account label used in the summary subject
        counters: Run, error, and running counters
    """

    def __init__(
        self,
        config: JanitorConfig,
        units: Sequence[CleanupUnit],
        tracker: ResourceTracker,
        recorder: EventRecorder,
        calendar: JanitorCalendar,
        notifier: EmailNotifier,
        reporter: Optional[SummaryReporter] = None,
        region: str = "us-east-1",
        account_name: str = "default",
        counters: Optional[RunCounters] = None,
    ) -> None:
        self.config = config
        self.units: List[CleanupUnit] = list(units)
        self.tracker = tracker
        self.recorder = recorder
        self.calendar = calendar
        self.notifier = notifier
        self.reporter = reporter or SummaryReporter()
        self.region = region
        self.account_name = account_name
        self.counters = counters or RunCounters()

    @property
    def runs(self) -> int:
        return self.counters.runs.get()

    @property
    def errors(self) -> int:
        return self.counters.errors.get()

    @property
    def running(self) -> int:
        return self.counters.running.get()

    def is_enabled(self) -> bool:
        prop = NS + "enabled"
        if self.config.get_bool_or_else(prop, True):
            return True
        logger.info(f"Janitor disabled, set {prop}=true")
        return False

    def run_cycle(self) -> None:
        """Run one cleanup cycle.

        A disabled janitor returns right away without touching counters or
        units. Exceptions raised by unit calls are contained; any other
        exception propagates after the running gauge is reset.
        """
        self.recorder.reset_event_report()

        if not self.is_enabled():
            return

        with self.counters.cycle():
            logger.info(f"Marking resources with {len(self.units)} janitors.")

            # Only resets the result buckets so monitoring stays sane
            for unit in self.units:
                unit.prepare_to_run()

            for unit in self.units:
                logger.info(f"Running {unit.resource_type.value} janitor for region {unit.region}")
                result = call_unit(unit, "mark", unit.mark_resources)
                if not result.succeeded:
                    self.counters.errors.increment()
                logger.info(
                    f"Marked {len(unit.marked_resources)} resources of type "
                    f"{unit.resource_type.value} in the last run."
                )
                logger.info(
                    f"Unmarked {len(unit.unmarked_resources)} resources of type "
                    f"{unit.resource_type.value} in the last run."
                )

            if not self.config.get_bool_or_else(NS + "leashed", True):
                try:
                    self.notifier.send_notifications()
                except Exception:
                    logger.exception("Failed to send janitor notifications, continuing with cleanup")
            else:
                logger.info("Janitor is leashed, no notification is sent.")

            logger.info(f"Cleaning resources with {len(self.units)} janitors.")
            for unit in self.units:
                result = call_unit(unit, "clean", unit.cleanup_resources)
                if not result.succeeded:
                    self.counters.errors.increment()
                logger.info(
                    f"Cleaned {len(unit.cleaned_resources)} resources of type "
                    f"{unit.resource_type.value} in the last run."
                )
                logger.info(
                    f"Failed to clean {len(unit.failed_to_clean_resources)} resources of type "
                    f"{unit.resource_type.value} in the last run."
                )

            if self.config.get_bool_or_else(NS + "summaryEmail.enabled", True):
                logger.info("Janitor is generating a summary email....")
                self.send_summary_email()

    def send_summary_email(self) -> None:
        """Send the summary of the last cycle to the configured address.

        An empty ``summaryEmail.to`` disables the summary. An invalid address
        or a delivery failure is logged and the summary is skipped.
        """
        target = self.config.get_str(NS + "summaryEmail.to")
        if not target:
            return
        if not self.notifier.is_valid_email(target):
            logger.error(f"The email target address '{target}' for Janitor summary email is invalid")
            return

        sections = self.reporter.collect(self.units)

        report_dir = self.config.get_str(NS + "report.dir")
        if report_dir:
            written = self.reporter.export_csv(sections, report_dir)
            logger.info(f"Exported {len(written)} summary CSV files to {report_dir}")

        subject = self.reporter.get_subject(self.account_name, self.region)
        try:
            self.notifier.send_email(target, subject, self.reporter.render_html(sections))
        except NotificationError as e:
            logger.error(f"Failed to send Janitor summary email: {e}")

    def set_resource_opt_state(
        self, resource_id: str, region: Optional[str] = None, opt_in: bool = True
    ) -> Optional[Event]:
        """Opt a tracked resource in to or out of cleanup.

        The event is recorded before the resource is saved. No lock is held
        across the two writes, so concurrent calls on the same resource race:
        the last save wins and both events stay in the log.

        Args:
            resource_id: Resource identifier
            region: Resource region (default: the janitor's home region)
            opt_in: True to make the resource eligible for cleanup again,
                False to exclude it

        Returns:
            The recorded event, or None if the resource is not tracked
        """
        if region is None:
            region = self.region

        resource = self.tracker.get_resource(resource_id, region)
        if resource is None:
            return None

        event_type = EventType.OPT_IN_RESOURCE if opt_in else EventType.OPT_OUT_RESOURCE
        timestamp = self.calendar.now()
        event = self.recorder.new_event(
            EventCategory.JANITOR,
            event_type,
            resource,
            make_event_id(resource_id, timestamp),
            timestamp=timestamp,
        )
        self.recorder.record_event(event)
        resource.opt_out_of_janitor = not opt_in
        self.tracker.add_or_update(resource)
        logger.info(f"Recorded {event_type.value} for resource {resource_id} in {region}")
        return event

    def opt_in_resource(self, resource_id: str, region: Optional[str] = None) -> Optional[Event]:
        return self.set_resource_opt_state(resource_id, region, opt_in=True)

    def opt_out_resource(self, resource_id: str, region: Optional[str] = None) -> Optional[Event]:
        return self.set_resource_opt_state(resource_id, region, opt_in=False)
