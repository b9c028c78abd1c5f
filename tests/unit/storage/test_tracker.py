"""Tests for ResourceTracker class.

Test coverage for resource storage and retrieval with YAML format.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from janitor.models.resource import CleanupState, ResourceType
from janitor.storage.tracker import ResourceTracker
from tests.fixtures.resources import create_resource


class TestResourceTracker:
    """Test suite for ResourceTracker class."""

    @pytest.fixture
    def storage_dir(self, tmp_path: Path) -> Path:
        return tmp_path / ".janitor" / "resources"

    @pytest.fixture
    def tracker(self, storage_dir: Path) -> ResourceTracker:
        return ResourceTracker(storage_dir=str(storage_dir))

    def test_init_creates_storage_directory(self, storage_dir: Path) -> None:
        assert not storage_dir.exists()

        ResourceTracker(storage_dir=str(storage_dir))

        assert storage_dir.is_dir()

    def test_get_unknown_resource_returns_none(self, tracker: ResourceTracker) -> None:
        assert tracker.get_resource("vol-404", "us-east-1") is None

    def test_add_and_get_round_trip(self, tracker: ResourceTracker) -> None:
        """Test a saved resource is read back with all tracked fields."""
        marked_at = datetime(2025, 11, 10, 9, 0, tzinfo=timezone.utc)
        resource = create_resource(
            "vol-001",
            tags={"Name": "scratch", "owner": "alice"},
            state=CleanupState.MARKED,
            opt_out=True,
            termination_reason="Volume not attached to any instance",
            marked_time=marked_at,
            additional_fields={"attachments": [], "size_gib": 100},
        )

        tracker.add_or_update(resource)
        loaded = tracker.get_resource("vol-001", "us-east-1")

        assert loaded == resource

    def test_add_or_update_replaces_existing(self, tracker: ResourceTracker) -> None:
        tracker.add_or_update(create_resource("vol-001"))
        tracker.add_or_update(create_resource("vol-001", opt_out=True))

        assert tracker.get_resource("vol-001", "us-east-1").opt_out_of_janitor is True
        assert len(tracker.get_resources()) == 1

    def test_same_id_in_different_regions_is_distinct(self, tracker: ResourceTracker) -> None:
        """Test resources are keyed by (id, region)."""
        tracker.add_or_update(create_resource("vol-001", region="us-east-1"))
        tracker.add_or_update(create_resource("vol-001", region="eu-west-1", opt_out=True))

        assert tracker.get_resource("vol-001", "us-east-1").opt_out_of_janitor is False
        assert tracker.get_resource("vol-001", "eu-west-1").opt_out_of_janitor is True

    def test_get_resources_filters(self, tracker: ResourceTracker) -> None:
        tracker.add_or_update(create_resource("vol-1", state=CleanupState.MARKED))
        tracker.add_or_update(create_resource("vol-2", state=CleanupState.UNMARKED))
        tracker.add_or_update(
            create_resource("i-1", resource_type=ResourceType.INSTANCE, state=CleanupState.MARKED)
        )
        tracker.add_or_update(create_resource("vol-3", region="eu-west-1", state=CleanupState.MARKED))

        marked_volumes = tracker.get_resources(resource_type=ResourceType.EBS_VOLUME, state=CleanupState.MARKED)
        east_only = tracker.get_resources(region="us-east-1")

        assert sorted(r.id for r in marked_volumes) == ["vol-1", "vol-3"]
        assert sorted(r.id for r in east_only) == ["i-1", "vol-1", "vol-2"]

    def test_region_file_is_yaml(self, tracker: ResourceTracker, storage_dir: Path) -> None:
        tracker.add_or_update(create_resource("vol-1"))

        with open(storage_dir / "us-east-1.yaml") as f:
            data = yaml.safe_load(f)

        assert data["metadata"]["region"] == "us-east-1"
        assert data["resources"][0]["id"] == "vol-1"
        assert data["resources"][0]["resource_type"] == "EBS_VOLUME"
        assert tracker.regions() == ["us-east-1"]
