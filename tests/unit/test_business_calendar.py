"""Tests for JanitorCalendar."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from janitor.business_calendar import JanitorCalendar


def _day(day: int) -> datetime:
    return datetime(2025, 11, day, 9, 0, tzinfo=timezone.utc)


class TestJanitorCalendar:
    """Test suite for JanitorCalendar class."""

    @pytest.fixture
    def calendar(self) -> JanitorCalendar:
        return JanitorCalendar()

    def test_now_is_utc(self, calendar: JanitorCalendar) -> None:
        assert calendar.now().tzinfo == timezone.utc

    def test_is_business_day(self, calendar: JanitorCalendar) -> None:
        assert calendar.is_business_day(_day(14)) is True  # Friday
        assert calendar.is_business_day(_day(15)) is False  # Saturday
        assert calendar.is_business_day(_day(16)) is False  # Sunday

    @pytest.mark.parametrize(
        "start,days,expected",
        [
            (12, 0, 12),  # Wednesday stays
            (12, 3, 17),  # Wednesday -> Monday
            (14, 1, 17),  # Friday -> Monday
            (10, 5, 17),  # Monday -> next Monday
            (15, 0, 17),  # Saturday rolls to Monday
            (16, 1, 18),  # Sunday -> Monday -> Tuesday
        ],
    )
    def test_get_business_day(self, calendar: JanitorCalendar, start: int, days: int, expected: int) -> None:
        assert calendar.get_business_day(_day(start), days) == _day(expected)

    def test_get_business_day_rejects_negative(self, calendar: JanitorCalendar) -> None:
        with pytest.raises(ValueError):
            calendar.get_business_day(_day(12), -1)
