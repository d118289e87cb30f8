"""Activity store.

An activity pairs a framing (task or pursuit) with a rhythm, a target and a
measurement. Tasks are checkbox-style, so they are always measured in instances.
"""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from errors import InvariantViolation, NotFound, ValidationError
from models import Activity
from rhythms import Rhythm, create_rhythm, delete_rhythm, describe_rhythm, get_rhythm_row

logger = logging.getLogger(__name__)

FRAMINGS = ("task", "pursuit")
MEASUREMENTS = ("instances", "duration")
EDITABLE_FIELDS = ("name", "framing", "target", "measurement")


def _validate(name, framing, target, measurement):
    if not name or not str(name).strip():
        raise ValidationError("name is required")
    if framing not in FRAMINGS:
        raise ValidationError(f"framing must be one of: {', '.join(FRAMINGS)}")
    if measurement not in MEASUREMENTS:
        raise ValidationError(f"measurement must be one of: {', '.join(MEASUREMENTS)}")
    if not isinstance(target, int) or isinstance(target, bool) or target < 1:
        raise ValidationError("target must be an integer >= 1")
    if framing == "task" and measurement != "instances":
        raise InvariantViolation("Tasks must use instances measurement")


def _log_created(a: Activity) -> None:
    logger.info("Created activity %s %r (%s, target %s %s)", a.id, a.name, a.framing, a.target, a.measurement)


def create_activity(
    db: Session,
    name: str,
    framing: str,
    rhythm_id: int,
    target: int,
    measurement: str,
    commit: bool = True,
) -> Activity:
    _validate(name, framing, target, measurement)
    if get_rhythm_row(db, rhythm_id) is None:
        raise NotFound(f"Rhythm {rhythm_id} not found")

    a = Activity(
        name=str(name).strip(),
        framing=framing,
        rhythm_id=rhythm_id,
        target=target,
        measurement=measurement,
    )
    db.add(a)
    if not commit:
        db.flush()
        return a
    db.commit()
    _log_created(a)
    return a


def create_activity_with_rhythm(
    db: Session,
    name: str,
    framing: str,
    rhythm: Rhythm,
    target: int,
    measurement: str,
) -> Activity:
    """Create the rhythm and the activity that uses it in a single transaction."""
    # fail before touching the session so no orphan rhythm is left behind
    _validate(name, framing, target, measurement)
    try:
        row = create_rhythm(db, rhythm, commit=False)
        a = create_activity(db, name, framing, row.id, target, measurement, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    _log_created(a)
    logger.info("Created rhythm %s (%s) for activity %s", row.id, describe_rhythm(rhythm), a.id)
    return a


def get_activity(db: Session, activity_id: int) -> Activity | None:
    return db.get(Activity, activity_id)


def require_activity(db: Session, activity_id: int) -> Activity:
    a = get_activity(db, activity_id)
    if a is None:
        raise NotFound("Activity not found")
    return a


def list_activities(db: Session, framing: str | None = None) -> list[Activity]:
    stmt = select(Activity).order_by(Activity.id)
    if framing:
        stmt = stmt.where(Activity.framing == framing)
    return list(db.execute(stmt).scalars().all())


def search_activities(db: Session, query: str) -> list[Activity]:
    # SQLite LIKE is case-insensitive for ASCII; % and _ in the query match literally
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    stmt = (
        select(Activity)
        .where(Activity.name.like(f"%{escaped}%", escape="\\"))
        .order_by(Activity.id)
    )
    return list(db.execute(stmt).scalars().all())


def update_activity(db: Session, activity_id: int, commit: bool = True, **changes) -> Activity | None:
    a = get_activity(db, activity_id)
    if a is None:
        return None

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")

    merged = {k: changes.get(k, getattr(a, k)) for k in EDITABLE_FIELDS}
    _validate(merged["name"], merged["framing"], merged["target"], merged["measurement"])

    for k, v in changes.items():
        setattr(a, k, str(v).strip() if k == "name" else v)
    if not commit:
        db.flush()
        return a
    db.commit()
    logger.info("Updated activity %s: %s", a.id, ", ".join(sorted(changes)) or "no changes")
    return a


def rename_activity(db: Session, activity_id: int, new_name: str) -> Activity | None:
    # history is keyed by activity id, so it follows the rename
    return update_activity(db, activity_id, name=new_name)


def replace_rhythm(db: Session, activity_id: int, rhythm: Rhythm, commit: bool = True) -> Activity:
    """Point the activity at a freshly created rhythm and drop the old one."""
    a = require_activity(db, activity_id)
    old_id = a.rhythm_id
    try:
        row = create_rhythm(db, rhythm, commit=False)
        a.rhythm_id = row.id
        db.flush()
        if row.id != old_id:
            delete_rhythm(db, old_id, commit=False)
        if not commit:
            db.flush()
            return a
        db.commit()
    except Exception:
        if commit:
            db.rollback()
        raise
    logger.info("Activity %s moved from rhythm %s to %s", a.id, old_id, a.rhythm_id)
    return a


def edit_activity(db: Session, activity_id: int, changes: dict, rhythm: Rhythm | None = None) -> Activity | None:
    """Apply field changes and an optional new rhythm all at once, or not at all."""
    try:
        a = update_activity(db, activity_id, commit=False, **changes)
        if a is None:
            return None
        if rhythm is not None:
            replace_rhythm(db, activity_id, rhythm, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(
        "Edited activity %s: %s",
        a.id,
        ", ".join(sorted(changes) + (["rhythm"] if rhythm is not None else [])) or "no changes",
    )
    return a


def delete_activity(db: Session, activity_id: int) -> bool:
    """Delete an activity, its history (cascade) and its rhythm."""
    a = get_activity(db, activity_id)
    if a is None:
        return False
    rhythm_id = a.rhythm_id
    db.delete(a)
    db.flush()
    delete_rhythm(db, rhythm_id, commit=False)
    db.commit()
    logger.info("Deleted activity %s", activity_id)
    return True
