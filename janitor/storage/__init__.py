"""Durable storage for tracked resources and audit events.

Classes:
    ResourceTracker: Opt state and cleanup state of resources
    EventRecorder: Append-only audit log
"""

from __future__ import annotations

__all__ = [
    "ResourceTracker",
    "EventRecorder",
]
