"""Cleanup units, one per managed resource type.

Classes:
    CleanupUnit: Contract the orchestrator drives
    TrackedCleanupUnit: Mark/unmark/clean lifecycle backed by the resource tracker
    EBSVolumeJanitor: Unattached EBS volumes
    InstanceJanitor: EC2 instances
"""

from __future__ import annotations

__all__ = [
    "CleanupUnit",
    "TrackedCleanupUnit",
    "EBSVolumeJanitor",
    "InstanceJanitor",
]
