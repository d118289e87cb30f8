"""Date arithmetic shared by the progress strategies.

Months are approximated as a flat 30 days wherever a count of units is turned
into a span of time. Calendar periods, in contrast, use real boundaries.
"""
import calendar
from datetime import datetime, timedelta

TIME_UNITS = ("days", "weeks", "months")
CALENDAR_PERIODS = ("daily", "weekly", "monthly", "yearly")

_DAYS_PER_UNIT = {"days": 1, "weeks": 7, "months": 30}


def unit_to_days(count: int, unit: str) -> int:
    return count * _DAYS_PER_UNIT[unit]


def unit_to_delta(count: int, unit: str) -> timedelta:
    return timedelta(days=unit_to_days(count, unit))


def calendar_day_difference(later: datetime, earlier: datetime) -> int:
    """Whole calendar days between two instants, counted midnight to midnight."""
    if later.tzinfo is not None and earlier.tzinfo is not None:
        earlier = earlier.astimezone(later.tzinfo)
    return (later.date() - earlier.date()).days


def _start_of_day(d: datetime) -> datetime:
    return d.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(d: datetime) -> datetime:
    return d.replace(hour=23, minute=59, second=59, microsecond=999000)


def period_start(now: datetime, period: str) -> datetime:
    if period == "daily":
        return _start_of_day(now)
    if period == "weekly":
        # weekday(): Monday == 0 ... Sunday == 6
        return _start_of_day(now - timedelta(days=now.weekday()))
    if period == "monthly":
        return _start_of_day(now.replace(day=1))
    if period == "yearly":
        return _start_of_day(now.replace(month=1, day=1))
    raise ValueError(f"Unknown calendar period: {period}")


def period_end(now: datetime, period: str) -> datetime:
    if period == "daily":
        return _end_of_day(now)
    if period == "weekly":
        return _end_of_day(now + timedelta(days=6 - now.weekday()))
    if period == "monthly":
        last = calendar.monthrange(now.year, now.month)[1]
        return _end_of_day(now.replace(day=last))
    if period == "yearly":
        return _end_of_day(now.replace(month=12, day=31))
    raise ValueError(f"Unknown calendar period: {period}")


def period_name(period: str) -> str:
    if period == "daily":
        return "day"
    return period[:-2] if period.endswith("ly") else period
