"""Progress evaluation for activities.

Given an activity, its rhythm and its history, answer "is this on track, and
by how much" at a given instant:

- recurring: on track while the last event is at most one interval old
- trailing: on track when the rolling window holds at least `target`
- calendar: on track when the current calendar period holds at least `target`

Everything here is pure. Callers load the records and pass `now` explicitly
when they need a reproducible answer.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from periods import (
    calendar_day_difference,
    period_end,
    period_name,
    period_start,
    unit_to_days,
    unit_to_delta,
)
from rhythms import CalendarRhythm, RecurringRhythm, Rhythm, TrailingRhythm

NOT_STARTED = "Not started yet"
_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class ProgressStatus:
    current: int
    target: int
    is_on_track: bool
    context: str
    days_remaining: int | None = None
    days_until_due: int | None = None
    days_overdue: int | None = None
    period_label: str | None = None

    def to_dict(self):
        out = {
            "current": self.current,
            "target": self.target,
            "isOnTrack": self.is_on_track,
            "context": self.context,
        }
        optional = {
            "daysRemaining": self.days_remaining,
            "daysUntilDue": self.days_until_due,
            "daysOverdue": self.days_overdue,
            "periodLabel": self.period_label,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out


def _days(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


def aggregate(events: Iterable, measurement: str) -> int:
    """Count events, or sum their minutes for duration-measured activities."""
    if measurement == "instances":
        return sum(1 for _ in events)
    return sum(e.minutes or 0 for e in events)


def find_last_event(history: Sequence):
    if not history:
        return None
    return max(history, key=lambda e: e.timestamp)


# ---------- Strategies ----------
def recurring_progress(activity, rhythm: RecurringRhythm, history: Sequence, now: datetime) -> ProgressStatus:
    last = find_last_event(history)
    interval = unit_to_days(rhythm.every, rhythm.unit)

    if last is None:
        return ProgressStatus(
            current=0,
            target=activity.target,
            is_on_track=False,
            context=NOT_STARTED,
            days_overdue=0,
        )

    days_since = calendar_day_difference(now, last.timestamp)

    if days_since <= interval:
        return ProgressStatus(
            current=activity.target,
            target=activity.target,
            is_on_track=True,
            context="today" if days_since == 0 else f"{_days(days_since)} ago",
            days_until_due=interval - days_since,
        )

    overdue = days_since - interval
    return ProgressStatus(
        current=0,
        target=activity.target,
        is_on_track=False,
        context=f"{_days(overdue)} overdue",
        days_overdue=overdue,
    )


def trailing_progress(activity, rhythm: TrailingRhythm, history: Sequence, now: datetime) -> ProgressStatus:
    window_start = now - unit_to_delta(rhythm.count, rhythm.unit)
    in_window = [e for e in history if e.timestamp >= window_start]
    current = aggregate(in_window, activity.measurement)
    label = f"last {rhythm.count} {rhythm.unit}"

    return ProgressStatus(
        current=current,
        target=activity.target,
        is_on_track=current >= activity.target,
        context=label,
        period_label=label,
    )


def calendar_progress(activity, rhythm: CalendarRhythm, history: Sequence, now: datetime) -> ProgressStatus:
    start = period_start(now, rhythm.period)
    end = period_end(now, rhythm.period)
    # now never passes the period end, so only the lower bound matters
    in_period = [e for e in history if e.timestamp >= start]
    current = aggregate(in_period, activity.measurement)
    label = f"this {period_name(rhythm.period)}"
    days_remaining = max(0, math.ceil((end - now) / _ONE_DAY))

    return ProgressStatus(
        current=current,
        target=activity.target,
        is_on_track=current >= activity.target,
        context=label,
        days_remaining=days_remaining,
        period_label=label,
    )


_STRATEGIES = {
    "recurring": recurring_progress,
    "trailing": trailing_progress,
    "calendar": calendar_progress,
}


def evaluate(activity, rhythm: Rhythm, history: Sequence, now: datetime | None = None) -> ProgressStatus:
    """Compute the progress status of `activity` at `now` (defaults to the current local time).

    `history` may be in any order and is assumed to belong to `activity`.
    Naive datetimes are read as local time; `now` is brought to the same
    naive or aware form as the event timestamps.
    """
    events = list(history)
    if now is None:
        now = datetime.now()
    return _STRATEGIES[rhythm.kind](activity, rhythm, events, _align_now(now, events))


def _align_now(now: datetime, events: Sequence) -> datetime:
    if not events:
        return now
    events_aware = events[0].timestamp.tzinfo is not None
    if events_aware and now.tzinfo is None:
        return now.astimezone()
    if not events_aware and now.tzinfo is not None:
        return now.astimezone().replace(tzinfo=None)
    return now


def classify(status: ProgressStatus) -> str:
    """Bucket a status for grouped display: overdue, not_started, complete or in_progress."""
    if status.days_overdue:
        return "overdue"
    if status.context == NOT_STARTED:
        return "not_started"
    if status.is_on_track:
        return "complete"
    return "in_progress"
