"""Janitor run-cycle orchestration.

Classes:
    JanitorMonkey: Run cycle and opt-in/opt-out operations
    RunCounters: Process-wide run, error, and running counters
    UnitCallResult: Outcome of a cleanup unit call
"""

from __future__ import annotations

__all__ = [
    "JanitorMonkey",
    "RunCounters",
    "UnitCallResult",
]
