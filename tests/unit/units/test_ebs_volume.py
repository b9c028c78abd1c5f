"""Tests for EBSVolumeJanitor.

Test coverage for EBS volume crawling and deletion with boto3 mocks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError

from janitor.errors import CleanupError
from janitor.models.resource import CleanupState, ResourceType
from janitor.storage.recorder import EventRecorder
from janitor.storage.tracker import ResourceTracker
from janitor.units.ebs_volume import EBSVolumeJanitor
from janitor.units.rules import UnattachedVolumeRule
from tests.fixtures.resources import FIXED_NOW, create_calendar, create_config, create_resource


def _volume(volume_id: str, state: str = "available", attachments: Optional[List[str]] = None, **extra: Any) -> Dict:
    volume = {
        "VolumeId": volume_id,
        "State": state,
        "Size": 100,
        "VolumeType": "gp3",
        "CreateTime": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "Attachments": [{"InstanceId": i} for i in attachments or []],
    }
    volume.update(extra)
    return volume


class TestEBSVolumeJanitor:
    """Test suite for EBSVolumeJanitor class."""

    @pytest.fixture
    def client(self) -> Mock:
        return Mock()

    @pytest.fixture
    def unit(self, tmp_path: Path, client: Mock) -> EBSVolumeJanitor:
        calendar = create_calendar()
        return EBSVolumeJanitor(
            "us-west-2",
            ResourceTracker(storage_dir=str(tmp_path / "resources")),
            EventRecorder(storage_dir=str(tmp_path / "events")),
            calendar,
            create_config(janitor__leashed=False),
            rules=[UnattachedVolumeRule(calendar.now)],
            client=client,
        )

    def _pages(self, client: Mock, volumes: List[Dict]) -> None:
        client.get_paginator.return_value.paginate.return_value = [{"Volumes": volumes}]

    def test_resource_type_and_region(self, unit: EBSVolumeJanitor) -> None:
        assert unit.resource_type == ResourceType.EBS_VOLUME
        assert unit.region == "us-west-2"

    def test_crawl_converts_volumes(self, unit: EBSVolumeJanitor, client: Mock) -> None:
        """Test crawled volumes carry tags, owner and attachment details."""
        self._pages(
            client,
            [
                _volume(
                    "vol-1",
                    Tags=[{"Key": "owner", "Value": "alice@example.com"}, {"Key": "Name", "Value": "scratch"}],
                ),
                _volume("vol-2", state="in-use", attachments=["i-1"], Tags=[{"Key": "owner", "Value": "bob"}]),
            ],
        )

        resources = unit.crawl()

        client.get_paginator.assert_called_once_with("describe_volumes")
        assert [r.id for r in resources] == ["vol-1", "vol-2"]
        first, second = resources
        assert first.region == "us-west-2"
        assert first.tags == {"owner": "alice@example.com", "Name": "scratch"}
        assert first.owner_email == "alice@example.com"
        assert first.description == "size=100GiB, type=gp3"
        assert first.additional_fields["attachments"] == []
        assert second.owner_email is None
        assert second.additional_fields["state"] == "in-use"
        assert second.additional_fields["attachments"] == ["i-1"]

    def test_crawl_empty_region(self, unit: EBSVolumeJanitor, client: Mock) -> None:
        self._pages(client, [])

        assert unit.crawl() == []

    def test_mark_resources_marks_only_unattached(self, unit: EBSVolumeJanitor, client: Mock) -> None:
        self._pages(client, [_volume("vol-free"), _volume("vol-used", state="in-use", attachments=["i-1"])])
        unit.prepare_to_run()

        unit.mark_resources()

        assert [r.id for r in unit.marked_resources] == ["vol-free"]
        stored = unit.tracker.get_resource("vol-free", "us-west-2")
        assert stored.state == CleanupState.MARKED
        assert stored.marked_time == FIXED_NOW

    def test_clean_up_resource_deletes_volume(self, unit: EBSVolumeJanitor, client: Mock) -> None:
        unit.clean_up_resource(create_resource("vol-1", region="us-west-2"))

        client.delete_volume.assert_called_once_with(VolumeId="vol-1")

    def test_clean_up_resource_already_deleted(self, unit: EBSVolumeJanitor, client: Mock) -> None:
        """Test a volume that no longer exists counts as cleaned."""
        client.delete_volume.side_effect = ClientError(
            {"Error": {"Code": "InvalidVolume.NotFound", "Message": "not found"}}, "DeleteVolume"
        )

        unit.clean_up_resource(create_resource("vol-1", region="us-west-2"))

    def test_clean_up_resource_raises_cleanup_error(self, unit: EBSVolumeJanitor, client: Mock) -> None:
        client.delete_volume.side_effect = ClientError(
            {"Error": {"Code": "VolumeInUse", "Message": "Volume vol-1 is currently attached"}}, "DeleteVolume"
        )

        with pytest.raises(CleanupError) as exc_info:
            unit.clean_up_resource(create_resource("vol-1", region="us-west-2"))

        assert "VolumeInUse" in str(exc_info.value)
        assert exc_info.value.resource_id == "vol-1"

    @patch("janitor.units.ebs_volume.create_boto_client")
    def test_client_created_lazily(self, mock_create_client: Mock, tmp_path: Path) -> None:
        unit = EBSVolumeJanitor(
            "eu-west-1",
            ResourceTracker(storage_dir=str(tmp_path)),
            EventRecorder(storage_dir=str(tmp_path)),
            create_calendar(),
            create_config(),
            rules=[],
            aws_profile="prod",
        )

        mock_create_client.assert_not_called()
        assert unit.client is mock_create_client.return_value
        assert unit.client is mock_create_client.return_value
        mock_create_client.assert_called_once_with("ec2", region_name="eu-west-1", profile_name="prod")

    def test_crawl_reads_configured_owner_tag(self, tmp_path: Path, client: Mock) -> None:
        """Test the owner email comes from the configured owner tag."""
        unit = EBSVolumeJanitor(
            "us-west-2",
            ResourceTracker(storage_dir=str(tmp_path)),
            EventRecorder(storage_dir=str(tmp_path)),
            create_calendar(),
            create_config(),
            rules=[],
            client=client,
            owner_tag="team",
        )
        self._pages(
            client,
            [
                _volume(
                    "vol-1",
                    Tags=[{"Key": "owner", "Value": "alice@example.com"}, {"Key": "team", "Value": "ops@example.com"}],
                )
            ],
        )

        assert unit.crawl()[0].owner_email == "ops@example.com"
