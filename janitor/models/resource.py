"""Resource model.

A cloud resource tracked by the janitor, keyed by (resource id, region).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ResourceType(Enum):
    """Kinds of resources managed by cleanup units."""

    INSTANCE = "INSTANCE"
    ASG = "ASG"
    EBS_VOLUME = "EBS_VOLUME"
    EBS_SNAPSHOT = "EBS_SNAPSHOT"
    LAUNCH_CONFIG = "LAUNCH_CONFIG"
    IMAGE = "IMAGE"
    ELB = "ELB"


class CleanupState(Enum):
    """Cleanup lifecycle state of a tracked resource.

    State transitions:
        (untracked) → marked → janitor_terminated
        marked → unmarked (resource became valid again or was opted out)
        marked → user_terminated (resource disappeared before cleanup)
    """

    MARKED = "MARKED"
    UNMARKED = "UNMARKED"
    JANITOR_TERMINATED = "JANITOR_TERMINATED"
    USER_TERMINATED = "USER_TERMINATED"


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Resource:
    """Resource entity.

    Created by a cleanup unit while crawling, persisted through the resource
    tracker. The ``opt_out_of_janitor`` flag is the only switch units consult to
    decide whether a resource may be acted on; it is changed only by the
    orchestrator's opt-in/opt-out operation.

    Attributes:
        id: Resource identifier (e.g. "i-0abc", "vol-123")
        region: AWS region
        resource_type: Kind of resource
        tags: Resource tags
        opt_out_of_janitor: True when the resource is excluded from cleanup
        state: Cleanup lifecycle state (None until first marked)
        termination_reason: Why the resource was marked (optional)
        owner_email: Owner notified about the resource (optional)
        description: Free-form description (optional)
        launch_time: When the resource was created (optional)
        expected_termination_time: When the resource becomes eligible for cleanup
        marked_time: When the resource was marked
        notification_time: When the owner was notified
        actual_termination_time: When the janitor cleaned the resource up
        additional_fields: Unit-specific metadata
    """

    id: str
    region: str
    resource_type: ResourceType
    tags: Dict[str, str] = field(default_factory=dict)
    opt_out_of_janitor: bool = False
    state: Optional[CleanupState] = None
    termination_reason: Optional[str] = None
    owner_email: Optional[str] = None
    description: Optional[str] = None
    launch_time: Optional[datetime] = None
    expected_termination_time: Optional[datetime] = None
    marked_time: Optional[datetime] = None
    notification_time: Optional[datetime] = None
    actual_termination_time: Optional[datetime] = None
    additional_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate identity fields."""
        if not self.id:
            raise ValueError("Resource id cannot be empty")
        if not self.region:
            raise ValueError("Resource region cannot be empty")
        if not isinstance(self.resource_type, ResourceType):
            raise ValueError(f"Invalid resource type: {self.resource_type!r}. Must be ResourceType enum.")

    @property
    def key(self) -> tuple[str, str]:
        return (self.id, self.region)

    def get_tag(self, key: str) -> Optional[str]:
        return self.tags.get(key)

    def set_tag(self, key: str, value: str) -> None:
        self.tags[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert resource to a dictionary for YAML persistence."""
        return {
            "id": self.id,
            "region": self.region,
            "resource_type": self.resource_type.value,
            "tags": dict(self.tags),
            "opt_out_of_janitor": self.opt_out_of_janitor,
            "state": self.state.value if self.state else None,
            "termination_reason": self.termination_reason,
            "owner_email": self.owner_email,
            "description": self.description,
            "launch_time": _format_time(self.launch_time),
            "expected_termination_time": _format_time(self.expected_termination_time),
            "marked_time": _format_time(self.marked_time),
            "notification_time": _format_time(self.notification_time),
            "actual_termination_time": _format_time(self.actual_termination_time),
            "additional_fields": dict(self.additional_fields),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Resource:
        """Create a resource from its dictionary representation.

        Raises:
            ValueError: If the resource type or state value is unknown
        """
        state = data.get("state")
        return cls(
            id=data["id"],
            region=data["region"],
            resource_type=ResourceType(data["resource_type"]),
            tags=data.get("tags") or {},
            opt_out_of_janitor=bool(data.get("opt_out_of_janitor", False)),
            state=CleanupState(state) if state else None,
            termination_reason=data.get("termination_reason"),
            owner_email=data.get("owner_email"),
            description=data.get("description"),
            launch_time=_parse_time(data.get("launch_time")),
            expected_termination_time=_parse_time(data.get("expected_termination_time")),
            marked_time=_parse_time(data.get("marked_time")),
            notification_time=_parse_time(data.get("notification_time")),
            actual_termination_time=_parse_time(data.get("actual_termination_time")),
            additional_fields=data.get("additional_fields") or {},
        )
