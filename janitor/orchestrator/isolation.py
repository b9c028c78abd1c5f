"""Failure boundary around cleanup unit calls."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from janitor.units.base import CleanupUnit

logger = logging.getLogger(__name__)


@dataclass
class UnitCallResult:
    """Outcome of one cleanup unit call.

    Attributes:
        unit: The unit that was called
        phase: "mark" or "clean"
        error: Exception raised by the call, None on success
    """

    unit: CleanupUnit
    phase: str
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def call_unit(unit: CleanupUnit, phase: str, call: Callable[[], None]) -> UnitCallResult:
    """Run a unit call, turning any exception it raises into a failed result.

    Args:
        unit: Unit being called (used for log context)
        phase: Phase name used in logs, "mark" or "clean"
        call: Bound unit method to invoke

    Returns:
        UnitCallResult, failed if the call raised
    """
    try:
        call()
    except Exception as e:
        logger.error(
            f"Got an exception while {unit.resource_type.value} janitor was {phase}ing "
            f"for region {unit.region}: {e}",
            exc_info=True,
        )
        return UnitCallResult(unit=unit, phase=phase, error=e)

    return UnitCallResult(unit=unit, phase=phase)
