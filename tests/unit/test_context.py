"""Tests for JanitorContext."""

from __future__ import annotations

from pathlib import Path

import pytest

from janitor.context import JanitorContext
from janitor.errors import ConfigurationError
from janitor.orchestrator.runner import JanitorMonkey
from janitor.units.ebs_volume import EBSVolumeJanitor
from janitor.units.instance import InstanceJanitor
from janitor.units.rules import MissingTagRule, UnattachedVolumeRule
from tests.fixtures.resources import create_config


class TestJanitorContext:
    """Test suite for JanitorContext class."""

    def test_defaults(self, tmp_path: Path) -> None:
        context = JanitorContext(create_config(janitor__storagePath=str(tmp_path)))

        assert context.region == "us-east-1"
        assert context.account_name == "default"
        assert context.tracker.storage_dir == tmp_path / "resources"
        assert context.recorder.storage_dir == tmp_path / "events"

    def test_build_units_default_order(self, tmp_path: Path) -> None:
        context = JanitorContext(create_config(janitor__storagePath=str(tmp_path)), aws_profile="dev")

        units = context.build_units()

        assert [type(u) for u in units] == [EBSVolumeJanitor, InstanceJanitor]
        assert all(u.region == "us-east-1" for u in units)
        assert units[0].aws_profile == "dev"

    def test_build_units_from_config(self, tmp_path: Path) -> None:
        """Test unit list, retention days and rule settings come from config."""
        context = JanitorContext(
            create_config(
                janitor__storagePath=str(tmp_path),
                janitor__region="eu-central-1",
                janitor__units="instance,ebs_volume",
                janitor__ownerTag="team",
                janitor__retentionDays__ebs_volume=7,
                janitor__rule__unattachedVolume__graceDays=30,
            )
        )

        instance_unit, volume_unit = context.build_units()

        assert isinstance(instance_unit, InstanceJanitor)
        assert instance_unit.region == "eu-central-1"
        assert isinstance(instance_unit.rules[0], MissingTagRule)
        assert instance_unit.rules[0].tag_key == "team"
        assert instance_unit.retention_days == 3
        assert volume_unit.retention_days == 7
        assert isinstance(volume_unit.rules[0], UnattachedVolumeRule)
        assert volume_unit.rules[0].grace_days == 30
        assert volume_unit.owner_tag == "team"

    def test_unknown_unit_raises(self, tmp_path: Path) -> None:
        context = JanitorContext(create_config(janitor__storagePath=str(tmp_path), janitor__units="rds"))

        with pytest.raises(ConfigurationError, match="Unknown cleanup unit 'rds'"):
            context.build_units()

    def test_build_janitor(self, tmp_path: Path) -> None:
        context = JanitorContext(
            create_config(janitor__storagePath=str(tmp_path), janitor__accountName="prod", janitor__units="instance")
        )

        janitor = context.build_janitor()

        assert isinstance(janitor, JanitorMonkey)
        assert janitor.account_name == "prod"
        assert janitor.tracker is context.tracker
        assert len(janitor.units) == 1

    def test_notifier_days_before_termination(self, tmp_path: Path) -> None:
        context = JanitorContext(
            create_config(janitor__storagePath=str(tmp_path), janitor__notification__daysBeforeTermination=4)
        )

        assert context.notifier.days_before_termination == 4
