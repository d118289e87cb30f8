"""Rhythms decide when an activity is due.

- trailing: sliding window ending now ("3 times in the last 7 days")
- recurring: due again N units after the last event ("every 5 days")
- calendar: fixed calendar period containing now ("per week")
"""
import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy.orm import Session

from errors import ValidationError
from models import RhythmRow
from periods import CALENDAR_PERIODS, TIME_UNITS, period_name

logger = logging.getLogger(__name__)


def _check_count(name: str, value) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValidationError(f"{name} must be an integer >= 1")


def _check_choice(name: str, value, choices) -> None:
    if value not in choices:
        raise ValidationError(f"{name} must be one of: {', '.join(choices)}")


@dataclass(frozen=True)
class TrailingRhythm:
    count: int
    unit: str
    kind = "trailing"

    def __post_init__(self):
        _check_count("count", self.count)
        _check_choice("unit", self.unit, TIME_UNITS)


@dataclass(frozen=True)
class RecurringRhythm:
    every: int
    unit: str
    kind = "recurring"

    def __post_init__(self):
        _check_count("every", self.every)
        _check_choice("unit", self.unit, TIME_UNITS)


@dataclass(frozen=True)
class CalendarRhythm:
    period: str
    kind = "calendar"

    def __post_init__(self):
        _check_choice("period", self.period, CALENDAR_PERIODS)


Rhythm = Union[TrailingRhythm, RecurringRhythm, CalendarRhythm]
RHYTHM_KINDS = ("trailing", "recurring", "calendar")


def describe_rhythm(rhythm: Rhythm) -> str:
    if rhythm.kind == "calendar":
        return f"per {period_name(rhythm.period)}"
    if rhythm.kind == "trailing":
        return f"in the last {rhythm.count} {rhythm.unit}"
    return f"every {rhythm.every} {rhythm.unit}"


def rhythm_from_dict(data) -> Rhythm:
    """Build a rhythm from a JSON payload like {"kind": "recurring", "every": 2, "unit": "weeks"}."""
    if not isinstance(data, dict):
        raise ValidationError("rhythm must be an object")
    kind = data.get("kind")
    if kind == "trailing":
        return TrailingRhythm(count=data.get("count"), unit=data.get("unit"))
    if kind == "recurring":
        return RecurringRhythm(every=data.get("every"), unit=data.get("unit"))
    if kind == "calendar":
        return CalendarRhythm(period=data.get("period"))
    raise ValidationError(f"Unknown rhythm kind: {kind}")


def rhythm_to_dict(rhythm: Rhythm) -> dict:
    if rhythm.kind == "trailing":
        return {"kind": "trailing", "count": rhythm.count, "unit": rhythm.unit}
    if rhythm.kind == "recurring":
        return {"kind": "recurring", "every": rhythm.every, "unit": rhythm.unit}
    return {"kind": "calendar", "period": rhythm.period}


def to_rhythm(row: RhythmRow) -> Rhythm:
    if row.kind == "trailing":
        return TrailingRhythm(count=row.trailing_count, unit=row.trailing_unit)
    if row.kind == "recurring":
        return RecurringRhythm(every=row.recurring_every, unit=row.recurring_unit)
    if row.kind == "calendar":
        return CalendarRhythm(period=row.calendar_period)
    raise ValidationError(f"Unknown rhythm kind: {row.kind}")


def _to_row(rhythm: Rhythm) -> RhythmRow:
    if rhythm.kind == "trailing":
        return RhythmRow(kind="trailing", trailing_count=rhythm.count, trailing_unit=rhythm.unit)
    if rhythm.kind == "recurring":
        return RhythmRow(kind="recurring", recurring_every=rhythm.every, recurring_unit=rhythm.unit)
    return RhythmRow(kind="calendar", calendar_period=rhythm.period)


# ---------- Store ----------
def create_rhythm(db: Session, rhythm: Rhythm, commit: bool = True) -> RhythmRow:
    row = _to_row(rhythm)
    db.add(row)
    if not commit:
        # the caller owns the transaction and may still roll it back
        db.flush()
        logger.debug("Staged %s rhythm %s (%s)", row.kind, row.id, describe_rhythm(rhythm))
        return row
    db.commit()
    logger.info("Created %s rhythm %s (%s)", row.kind, row.id, describe_rhythm(rhythm))
    return row


def get_rhythm_row(db: Session, rhythm_id: int) -> RhythmRow | None:
    return db.get(RhythmRow, rhythm_id)


def get_rhythm(db: Session, rhythm_id: int) -> Rhythm | None:
    row = get_rhythm_row(db, rhythm_id)
    if row is None:
        return None
    return to_rhythm(row)


def delete_rhythm(db: Session, rhythm_id: int, commit: bool = True) -> bool:
    row = get_rhythm_row(db, rhythm_id)
    if row is None:
        return False
    db.delete(row)
    if commit:
        db.commit()
    return True
