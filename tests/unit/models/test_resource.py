"""Tests for the Resource model."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from janitor.models.resource import CleanupState, Resource, ResourceType


class TestResource:
    """Test suite for Resource."""

    def test_defaults(self) -> None:
        resource = Resource(id="i-1", region="us-east-1", resource_type=ResourceType.INSTANCE)

        assert resource.opt_out_of_janitor is False
        assert resource.state is None
        assert resource.tags == {}
        assert resource.key == ("i-1", "us-east-1")

    @pytest.mark.parametrize("field,value", [("id", ""), ("region", "")])
    def test_empty_identity_rejected(self, field: str, value: str) -> None:
        kwargs = {"id": "i-1", "region": "us-east-1", "resource_type": ResourceType.INSTANCE, field: value}

        with pytest.raises(ValueError):
            Resource(**kwargs)

    def test_resource_type_must_be_enum(self) -> None:
        with pytest.raises(ValueError, match="Invalid resource type"):
            Resource(id="i-1", region="us-east-1", resource_type="INSTANCE")  # type: ignore[arg-type]

    def test_tags(self) -> None:
        resource = Resource(id="i-1", region="us-east-1", resource_type=ResourceType.INSTANCE)

        resource.set_tag("owner", "alice")

        assert resource.get_tag("owner") == "alice"
        assert resource.get_tag("missing") is None

    def test_to_dict_serializes_enums_and_times(self) -> None:
        launched = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        resource = Resource(
            id="vol-1",
            region="us-east-1",
            resource_type=ResourceType.EBS_VOLUME,
            state=CleanupState.MARKED,
            launch_time=launched,
        )

        data = resource.to_dict()

        assert data["resource_type"] == "EBS_VOLUME"
        assert data["state"] == "MARKED"
        assert data["launch_time"] == "2025-01-01T12:00:00+00:00"
        assert data["expected_termination_time"] is None

    def test_from_dict_accepts_minimal_data(self) -> None:
        resource = Resource.from_dict({"id": "vol-1", "region": "us-east-1", "resource_type": "EBS_VOLUME"})

        assert resource.state is None
        assert resource.opt_out_of_janitor is False

    def test_from_dict_parses_z_suffix(self) -> None:
        resource = Resource.from_dict(
            {
                "id": "vol-1",
                "region": "us-east-1",
                "resource_type": "EBS_VOLUME",
                "marked_time": "2025-11-12T15:30:00Z",
            }
        )

        assert resource.marked_time == datetime(2025, 11, 12, 15, 30, tzinfo=timezone.utc)

    def test_from_dict_rejects_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            Resource.from_dict({"id": "x", "region": "us-east-1", "resource_type": "LAMBDA"})
