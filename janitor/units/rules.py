"""Rules deciding whether a crawled resource should be marked for cleanup."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from janitor.models.resource import Resource


class Rule(ABC):
    """A condition every healthy resource satisfies.

    A resource that fails a rule is marked for cleanup, with the rule's
    termination reason.
    """

    @abstractmethod
    def is_valid(self, resource: Resource) -> bool:
        pass

    @abstractmethod
    def termination_reason(self, resource: Resource) -> str:
        pass


class MissingTagRule(Rule):
    """Resources must carry a non-empty tag."""

    def __init__(self, tag_key: str) -> None:
        self.tag_key = tag_key

    def is_valid(self, resource: Resource) -> bool:
        return bool(resource.get_tag(self.tag_key))

    def termination_reason(self, resource: Resource) -> str:
        return f"Missing required tag {self.tag_key}"


class UnattachedVolumeRule(Rule):
    """EBS volumes must be attached to an instance.

    Volumes created less than ``grace_days`` ago are left alone. The crawler
    stores the volume's attachments and state in ``additional_fields``.
    """

    def __init__(self, now: Callable[[], datetime], grace_days: int = 0) -> None:
        self.now = now
        self.grace_days = grace_days

    def is_valid(self, resource: Resource) -> bool:
        if resource.additional_fields.get("attachments"):
            return True
        if resource.additional_fields.get("state") not in (None, "available"):
            return True
        if resource.launch_time is None or self.grace_days == 0:
            return False
        return self.now() - resource.launch_time < timedelta(days=self.grace_days)

    def termination_reason(self, resource: Resource) -> str:
        if self.grace_days:
            return f"Volume older than {self.grace_days} days not attached to any instance"
        return "Volume not attached to any instance"


def evaluate(rules: List[Rule], resource: Resource) -> Optional[str]:
    """Return the termination reason of the first failed rule, None if all pass."""
    for rule in rules:
        if not rule.is_valid(resource):
            return rule.termination_reason(resource)
    return None
