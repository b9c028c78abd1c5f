"""Audit event model for state-changing janitor actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class EventCategory(Enum):
    """Component that produced the event."""

    JANITOR = "JANITOR"


class EventType(Enum):
    """State-changing actions recorded in the audit log."""

    MARK_RESOURCE = "MARK_RESOURCE"
    UNMARK_RESOURCE = "UNMARK_RESOURCE"
    CLEANUP_RESOURCE = "CLEANUP_RESOURCE"
    OPT_IN_RESOURCE = "OPT_IN_RESOURCE"
    OPT_OUT_RESOURCE = "OPT_OUT_RESOURCE"


def make_event_id(resource_id: str, timestamp: datetime) -> str:
    """Build the synthetic id of an event about a resource.

    The same resource can be the subject of many events, so the epoch
    milliseconds of the event are appended to the resource id.
    """
    millis = int(timestamp.timestamp()) * 1000 + timestamp.microsecond // 1000
    return f"{resource_id}@{millis}"


@dataclass(frozen=True)
class Event:
    """Immutable audit event.

    Attributes:
        event_id: Unique id, "<resource id>@<epoch millis>"
        category: Component that produced the event
        event_type: Action that was taken
        timestamp: When the action was taken
        resource_id: Subject resource id
        region: Subject resource region
        resource_type: Subject resource type name
        fields: Extra details about the action
    """

    event_id: str
    category: EventCategory
    event_type: EventType
    timestamp: datetime
    resource_id: str
    region: str
    resource_type: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "category": self.category.value,
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "resource_id": self.resource_id,
            "region": self.region,
            "resource_type": self.resource_type,
            "fields": dict(self.fields),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Event:
        timestamp = data["timestamp"]
        return cls(
            event_id=data["event_id"],
            category=EventCategory(data["category"]),
            event_type=EventType(data["event_type"]),
            timestamp=timestamp if isinstance(timestamp, datetime) else datetime.fromisoformat(timestamp),
            resource_id=data["resource_id"],
            region=data["region"],
            resource_type=data["resource_type"],
            fields=data.get("fields") or {},
        )
