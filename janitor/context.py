"""Builds a janitor orchestrator and its collaborators from configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from janitor.business_calendar import JanitorCalendar
from janitor.config import NS, JanitorConfig
from janitor.errors import ConfigurationError
from janitor.notify.email import DEFAULT_DAYS_BEFORE_TERMINATION, EmailNotifier
from janitor.notify.reporter import SummaryReporter
from janitor.orchestrator.runner import JanitorMonkey
from janitor.storage.recorder import EventRecorder
from janitor.storage.tracker import ResourceTracker
from janitor.units.base import CleanupUnit
from janitor.units.ebs_volume import EBSVolumeJanitor
from janitor.units.instance import InstanceJanitor
from janitor.units.rules import MissingTagRule, UnattachedVolumeRule
from janitor.units.tracked import DEFAULT_RETENTION_DAYS

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_UNITS = ["ebs_volume", "instance"]


class JanitorContext:
    """Shared collaborators of one janitor process.

    Attributes:
        config: Janitor configuration
        region: Home region
        account_name: Account label for reports
        aws_profile: AWS profile for boto3 clients (optional)
        calendar: Calendar
        tracker: Resource tracker
        recorder: Event recorder
        notifier: Email notifier
        reporter: Summary reporter
    """

    def __init__(self, config: JanitorConfig, aws_profile: Optional[str] = None) -> None:
        self.config = config
        self.region = config.get_str_or_else(NS + "region", DEFAULT_REGION)
        self.account_name = config.get_str_or_else(NS + "accountName", "default")
        self.aws_profile = aws_profile
        self.owner_tag = config.get_str_or_else(NS + "ownerTag", "owner")

        storage_path = Path(config.get_str_or_else(NS + "storagePath", str(Path.home() / ".janitor")))
        self.calendar = JanitorCalendar()
        self.tracker = ResourceTracker(str(storage_path / "resources"))
        self.recorder = EventRecorder(str(storage_path / "events"))
        self.notifier = EmailNotifier(
            tracker=self.tracker,
            calendar=self.calendar,
            source_email=config.get_str(NS + "notification.sourceEmail"),
            default_email=config.get_str(NS + "notification.defaultEmail") or None,
            owner_tag=self.owner_tag,
            owner_email_domain=config.get_str(NS + "notification.ownerEmailDomain") or None,
            days_before_termination=config.get_int_or_else(
                NS + "notification.daysBeforeTermination", DEFAULT_DAYS_BEFORE_TERMINATION
            ),
            region=self.region,
            aws_profile=aws_profile,
        )
        self.reporter = SummaryReporter(owner_tag=self.owner_tag)

    def retention_days(self, unit_name: str) -> int:
        return self.config.get_int_or_else(f"{NS}retentionDays.{unit_name}", DEFAULT_RETENTION_DAYS)

    def build_units(self) -> List[CleanupUnit]:
        """Create the cleanup units listed in ``janitor.units``, in that order.

        Raises:
            ConfigurationError: If a unit name is unknown
        """
        factories: Dict[str, Callable[[], CleanupUnit]] = {
            "ebs_volume": self._ebs_volume_unit,
            "instance": self._instance_unit,
        }

        names = self.config.get_list(NS + "units") or DEFAULT_UNITS
        units = []
        for name in names:
            if name not in factories:
                raise ConfigurationError(f"Unknown cleanup unit '{name}'. Must be one of: {', '.join(factories)}")
            units.append(factories[name]())

        logger.debug(f"Configured cleanup units: {', '.join(names)}")
        return units

    def _ebs_volume_unit(self) -> CleanupUnit:
        grace_days = self.config.get_int_or_else(NS + "rule.unattachedVolume.graceDays", 0)
        return EBSVolumeJanitor(
            self.region,
            self.tracker,
            self.recorder,
            self.calendar,
            self.config,
            rules=[UnattachedVolumeRule(self.calendar.now, grace_days=grace_days)],
            retention_days=self.retention_days("ebs_volume"),
            aws_profile=self.aws_profile,
            owner_tag=self.owner_tag,
        )

    def _instance_unit(self) -> CleanupUnit:
        return InstanceJanitor(
            self.region,
            self.tracker,
            self.recorder,
            self.calendar,
            self.config,
            rules=[MissingTagRule(self.owner_tag)],
            retention_days=self.retention_days("instance"),
            aws_profile=self.aws_profile,
            owner_tag=self.owner_tag,
        )

    def build_janitor(self) -> JanitorMonkey:
        return JanitorMonkey(
            config=self.config,
            units=self.build_units(),
            tracker=self.tracker,
            recorder=self.recorder,
            calendar=self.calendar,
            notifier=self.notifier,
            reporter=self.reporter,
            region=self.region,
            account_name=self.account_name,
        )
