"""Calendar used to timestamp events and schedule cleanups."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


class JanitorCalendar:
    """Wall clock with business-day arithmetic.

    Weekends (Saturday, Sunday) are not business days. Holidays are not
    modelled.
    """

    def now(self) -> datetime:
        """Current time in UTC."""
        return datetime.now(timezone.utc)

    def is_business_day(self, day: datetime) -> bool:
        return day.weekday() < 5

    def get_business_day(self, start: datetime, days: int) -> datetime:
        """Return the time ``days`` business days after ``start``.

        Args:
            start: Starting time
            days: Number of business days to add (must be >= 0)

        Returns:
            The resulting time, same time of day as ``start``
        """
        if days < 0:
            raise ValueError("days must be >= 0")

        result = start
        while not self.is_business_day(result):
            result += timedelta(days=1)

        remaining = days
        while remaining > 0:
            result += timedelta(days=1)
            if self.is_business_day(result):
                remaining -= 1
        return result
