"""Errands: one-off tasks with no rhythm.

An errand is due as soon as it is created. Once completed it stays visible for
three days before dropping out of the default list.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from errors import NotFound, ValidationError
from models import Errand

logger = logging.getLogger(__name__)

VISIBILITY_WINDOW = timedelta(days=3)


def create_errand(db: Session, name: str) -> Errand:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required")
    e = Errand(name=name.strip())
    db.add(e)
    db.commit()
    logger.info("Created errand %s %r", e.id, e.name)
    return e


def get_errand(db: Session, errand_id: int) -> Errand | None:
    return db.get(Errand, errand_id)


def list_errands(db: Session, include_expired: bool = False, now: datetime | None = None) -> list[Errand]:
    stmt = select(Errand).order_by(Errand.id)
    if not include_expired:
        cutoff = (now or datetime.now()) - VISIBILITY_WINDOW
        stmt = stmt.where(or_(Errand.completed_at.is_(None), Errand.completed_at > cutoff))
    return list(db.execute(stmt).scalars().all())


def list_pending_errands(db: Session) -> list[Errand]:
    stmt = select(Errand).where(Errand.completed_at.is_(None)).order_by(Errand.id)
    return list(db.execute(stmt).scalars().all())


def complete_errand(db: Session, errand_id: int, timestamp: datetime | None = None) -> Errand:
    e = get_errand(db, errand_id)
    if e is None:
        raise NotFound(f"Errand with id {errand_id} not found")
    if e.completed_at is not None:
        raise ValidationError(f'Errand "{e.name}" is already completed')

    e.completed_at = timestamp or datetime.now()
    db.commit()
    logger.info("Completed errand %s", e.id)
    return e


def delete_errand(db: Session, errand_id: int) -> bool:
    e = get_errand(db, errand_id)
    if e is None:
        return False
    db.delete(e)
    db.commit()
    return True
