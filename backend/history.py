"""History store: completions and duration logs recorded against activities.

A completion belongs to an instances-measured activity, a duration log to a
duration-measured one. Mixing them is rejected here, so the evaluator never
sees an inconsistent event set.
"""
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from activities import require_activity
from errors import MeasurementMismatch, ValidationError
from models import HistoryEvent

logger = logging.getLogger(__name__)


def record_completion(db: Session, activity_id: int, timestamp: datetime | None = None) -> HistoryEvent:
    a = require_activity(db, activity_id)
    if a.measurement == "duration":
        raise MeasurementMismatch("Cannot record completion for duration-measurement activity")

    ev = HistoryEvent(activity_id=a.id, kind="completion", minutes=None, timestamp=timestamp or datetime.now())
    db.add(ev)
    db.commit()
    logger.info("Logged completion %s for activity %s at %s", ev.id, a.id, ev.timestamp)
    return ev


def record_duration(
    db: Session,
    activity_id: int,
    minutes: int,
    timestamp: datetime | None = None,
) -> HistoryEvent:
    a = require_activity(db, activity_id)
    if a.measurement == "instances":
        raise MeasurementMismatch("Cannot record duration for instances-measurement activity")
    if not isinstance(minutes, int) or isinstance(minutes, bool) or minutes < 0:
        raise ValidationError("minutes must be an integer >= 0")

    ev = HistoryEvent(activity_id=a.id, kind="duration", minutes=minutes, timestamp=timestamp or datetime.now())
    db.add(ev)
    db.commit()
    logger.info("Logged %s minutes (%s) for activity %s at %s", minutes, ev.id, a.id, ev.timestamp)
    return ev


def get_activity_history(
    db: Session,
    activity_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int | None = None,
) -> list[HistoryEvent]:
    """Events for one activity, most recent first; `start`/`end` are inclusive."""
    stmt = select(HistoryEvent).where(HistoryEvent.activity_id == activity_id)
    if start is not None:
        stmt = stmt.where(HistoryEvent.timestamp >= start)
    if end is not None:
        stmt = stmt.where(HistoryEvent.timestamp <= end)
    stmt = stmt.order_by(HistoryEvent.timestamp.desc(), HistoryEvent.id.desc())
    if limit:
        stmt = stmt.limit(limit)
    return list(db.execute(stmt).scalars().all())


def get_recent_history(db: Session, limit: int = 10) -> list[HistoryEvent]:
    stmt = select(HistoryEvent).order_by(HistoryEvent.timestamp.desc(), HistoryEvent.id.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())


def delete_history_event(db: Session, event_id: int) -> bool:
    ev = db.get(HistoryEvent, event_id)
    if ev is None:
        return False
    db.delete(ev)
    db.commit()
    logger.info("Deleted history event %s", event_id)
    return True

