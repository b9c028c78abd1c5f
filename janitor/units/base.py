"""Base class for cleanup units."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from janitor.models.resource import Resource, ResourceType


class CleanupUnit(ABC):
    """Abstract base class for all cleanup units.

    A cleanup unit manages one resource type in one region. Each cycle the
    orchestrator calls, in order:
    1. prepare_to_run() - resets the result buckets, must not raise
    2. mark_resources() - may raise
    3. cleanup_resources() - may raise

    When a call raises, the result buckets keep whatever partial progress was
    made before the failure.
    """

    @property
    @abstractmethod
    def resource_type(self) -> ResourceType:
        """Kind of resource this unit manages."""
        pass

    @property
    @abstractmethod
    def region(self) -> str:
        """AWS region this unit works in."""
        pass

    @abstractmethod
    def prepare_to_run(self) -> None:
        """Reset the per-cycle result buckets."""
        pass

    @abstractmethod
    def mark_resources(self) -> None:
        """Identify resources eligible for future cleanup."""
        pass

    @abstractmethod
    def cleanup_resources(self) -> None:
        """Clean up marked resources whose grace period has passed."""
        pass

    @property
    @abstractmethod
    def marked_resources(self) -> List[Resource]:
        pass

    @property
    @abstractmethod
    def unmarked_resources(self) -> List[Resource]:
        pass

    @property
    @abstractmethod
    def cleaned_resources(self) -> List[Resource]:
        pass

    @property
    @abstractmethod
    def failed_to_clean_resources(self) -> List[Resource]:
        pass
