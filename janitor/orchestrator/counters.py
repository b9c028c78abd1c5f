"""Process-wide run counters shared by run cycles and opt-state calls."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class AtomicCounter:
    """Integer guarded by a lock so concurrent increments are never lost."""

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = value

    def get(self) -> int:
        with self._lock:
            return self._value


class RunCounters:
    """Counters of the janitor orchestrator.

    Attributes:
        runs: Enabled cycles started (never decreases)
        errors: Failed cleanup unit calls across all cycles (never decreases)
        running: 1 while an enabled cycle is in flight, else 0
    """

    def __init__(self) -> None:
        self.runs = AtomicCounter()
        self.errors = AtomicCounter()
        self.running = AtomicCounter()

    @contextmanager
    def cycle(self) -> Iterator[None]:
        """Count a run and hold the running gauge at 1 until the block exits.

        The gauge is reset on every exit path, including exceptions.
        """
        self.runs.increment()
        self.running.set(1)
        try:
            yield
        finally:
            self.running.set(0)

    def snapshot(self) -> Dict[str, int]:
        return {
            "runs": self.runs.get(),
            "errors": self.errors.get(),
            "running": self.running.get(),
        }
