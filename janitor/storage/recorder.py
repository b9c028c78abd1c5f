"""Event recorder for janitor actions.

Appends audit events in YAML format for compliance and troubleshooting.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from janitor.models.event import Event, EventCategory, EventType
from janitor.models.resource import Resource

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.@-]")


class EventRecorder:
    """Append-only audit log of state-changing actions.

    Each event is written once to its own YAML file, organized by year/month.
    Events recorded since the last ``reset_event_report()`` are also kept in
    memory so the run summary can list this cycle's activity.

    Storage structure:
        ~/.janitor/events/
            2025/
                11/
                    event-i-123@1762875000000.yaml

    Attributes:
        storage_dir: Base directory for event files
        event_report: Events recorded since the last reset
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize event recorder.

        Args:
            storage_dir: Base directory for events (default: ~/.janitor/events)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".janitor" / "events")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.event_report: List[Event] = []

    def new_event(
        self,
        category: EventCategory,
        event_type: EventType,
        resource: Resource,
        event_id: str,
        timestamp: Optional[datetime] = None,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Event:
        """Create an event about a resource without recording it.

        Args:
            category: Component producing the event
            event_type: Action taken
            resource: Subject resource
            event_id: Unique event id
            timestamp: Event time (default: now, UTC)
            fields: Extra details (optional)

        Returns:
            The new event
        """
        return Event(
            event_id=event_id,
            category=category,
            event_type=event_type,
            timestamp=timestamp or datetime.now(timezone.utc),
            resource_id=resource.id,
            region=resource.region,
            resource_type=resource.resource_type.value,
            fields=dict(fields or {}),
        )

    def record_event(self, event: Event) -> None:
        """Append an event to the audit log.

        Events with the same id (same resource, same millisecond) are written
        to separate files with a numeric suffix.
        """
        month_dir = self.storage_dir / str(event.timestamp.year) / f"{event.timestamp.month:02d}"
        month_dir.mkdir(parents=True, exist_ok=True)

        filename = _UNSAFE_FILENAME_CHARS.sub("_", event.event_id)
        event_file = month_dir / f"event-{filename}.yaml"
        suffix = 0
        while True:
            try:
                # Existing event files are never replaced
                with open(event_file, "x") as f:
                    yaml.dump(event.to_dict(), f, default_flow_style=False, sort_keys=False)
                break
            except FileExistsError:
                suffix += 1
                event_file = month_dir / f"event-{filename}-{suffix}.yaml"

        self.event_report.append(event)
        logger.debug(f"Recorded {event.event_type.value} event {event.event_id}")

    def reset_event_report(self) -> None:
        """Forget the in-memory events of the previous cycle."""
        self.event_report = []

    def find_events(
        self,
        since: Optional[datetime] = None,
        event_type: Optional[EventType] = None,
        resource_id: Optional[str] = None,
    ) -> List[Event]:
        """Query recorded events.

        Args:
            since: Only events at or after this time (optional)
            event_type: Filter by event type (optional)
            resource_id: Filter by subject resource (optional)

        Returns:
            Matching events in chronological order
        """
        results = []

        for year_dir in sorted(self.storage_dir.glob("*")):
            if not year_dir.is_dir():
                continue

            for month_dir in sorted(year_dir.glob("*")):
                if not month_dir.is_dir():
                    continue

                for event_file in month_dir.glob("event-*.yaml"):
                    with open(event_file, "r") as f:
                        event = Event.from_dict(yaml.safe_load(f))

                    if since and event.timestamp < since:
                        continue
                    if event_type and event.event_type != event_type:
                        continue
                    if resource_id and event.resource_id != resource_id:
                        continue

                    results.append(event)

        return sorted(results, key=lambda e: e.timestamp)
