"""Tests for calendar and unit arithmetic."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from periods import (
    calendar_day_difference,
    period_end,
    period_name,
    period_start,
    unit_to_days,
    unit_to_delta,
)


@pytest.mark.parametrize("count, unit, days", [(3, "days", 3), (2, "weeks", 14), (2, "months", 60)])
def test_unit_to_days(count, unit, days):
    assert unit_to_days(count, unit) == days
    assert unit_to_delta(count, unit) == timedelta(days=days)


class TestPeriodBounds:
    def test_weekly_from_midweek(self):
        now = datetime(2024, 1, 10, 15, 30)
        assert period_start(now, "weekly") == datetime(2024, 1, 8)
        assert period_end(now, "weekly") == datetime(2024, 1, 14, 23, 59, 59, 999000)

    def test_weekly_on_monday_and_sunday(self):
        assert period_start(datetime(2024, 1, 8, 0, 0), "weekly") == datetime(2024, 1, 8)
        assert period_start(datetime(2024, 1, 14, 23, 0), "weekly") == datetime(2024, 1, 8)
        assert period_end(datetime(2024, 1, 14, 23, 0), "weekly").date() == datetime(2024, 1, 14).date()

    def test_weekly_across_month_boundary(self):
        now = datetime(2024, 3, 2, 10, 0)  # Saturday
        assert period_start(now, "weekly") == datetime(2024, 2, 26)
        assert period_end(now, "weekly") == datetime(2024, 3, 3, 23, 59, 59, 999000)

    def test_daily(self):
        now = datetime(2024, 1, 10, 15, 30)
        assert period_start(now, "daily") == datetime(2024, 1, 10)
        assert period_end(now, "daily") == datetime(2024, 1, 10, 23, 59, 59, 999000)

    @pytest.mark.parametrize(
        "now, last_day",
        [
            (datetime(2024, 2, 10), 29),
            (datetime(2023, 2, 10), 28),
            (datetime(2024, 4, 30, 8), 30),
            (datetime(2024, 12, 1), 31),
        ],
    )
    def test_monthly(self, now, last_day):
        assert period_start(now, "monthly") == datetime(now.year, now.month, 1)
        assert period_end(now, "monthly").day == last_day

    def test_yearly(self):
        now = datetime(2024, 6, 15, 12, 0)
        assert period_start(now, "yearly") == datetime(2024, 1, 1)
        assert period_end(now, "yearly") == datetime(2024, 12, 31, 23, 59, 59, 999000)

    def test_keeps_timezone(self):
        tz = timezone(timedelta(hours=2))
        now = datetime(2024, 1, 10, 1, 0, tzinfo=tz)
        assert period_start(now, "daily") == datetime(2024, 1, 10, tzinfo=tz)

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            period_start(datetime(2024, 1, 1), "hourly")


class TestCalendarDayDifference:
    def test_same_day(self):
        assert calendar_day_difference(datetime(2024, 1, 10, 23), datetime(2024, 1, 10, 0, 1)) == 0

    def test_across_midnight(self):
        assert calendar_day_difference(datetime(2024, 1, 10, 0, 5), datetime(2024, 1, 9, 23, 55)) == 1

    def test_aware_values_compared_in_later_zone(self):
        local = timezone(timedelta(hours=-5))
        now = datetime(2024, 1, 10, 20, 0, tzinfo=local)
        # 01:00 UTC on the 11th is still the evening of the 10th locally
        event = datetime(2024, 1, 11, 1, 0, tzinfo=timezone.utc)
        assert calendar_day_difference(now, event) == 0


@pytest.mark.parametrize(
    "period, name",
    [("daily", "day"), ("weekly", "week"), ("monthly", "month"), ("yearly", "year")],
)
def test_period_name(period, name):
    assert period_name(period) == name
