"""Load activities together with their computed progress."""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from activities import get_activity, list_activities
from history import get_activity_history
from models import Activity
from progress import ProgressStatus, classify, evaluate
from rhythms import Rhythm, describe_rhythm, get_rhythm, rhythm_to_dict

logger = logging.getLogger(__name__)


@dataclass
class ActivityStatus:
    id: int
    name: str
    measurement: str
    rhythm: Rhythm
    progress: ProgressStatus

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "measurement": self.measurement,
            "rhythm": rhythm_to_dict(self.rhythm),
            "rhythm_description": describe_rhythm(self.rhythm),
            "group": classify(self.progress),
            "progress": self.progress.to_dict(),
        }


def _status_for(db: Session, activity: Activity, now: datetime) -> ActivityStatus | None:
    rhythm = get_rhythm(db, activity.rhythm_id)
    if rhythm is None:
        logger.warning("Activity %s references missing rhythm %s", activity.id, activity.rhythm_id)
        return None
    events = get_activity_history(db, activity.id)
    return ActivityStatus(
        id=activity.id,
        name=activity.name,
        measurement=activity.measurement,
        rhythm=rhythm,
        progress=evaluate(activity, rhythm, events, now),
    )


def load_activity_status(db: Session, activity_id: int, now: datetime | None = None) -> ActivityStatus | None:
    a = get_activity(db, activity_id)
    if a is None:
        return None
    return _status_for(db, a, now or datetime.now())


def load_all_statuses(db: Session, now: datetime | None = None) -> list[ActivityStatus]:
    now = now or datetime.now()
    items = []
    for a in list_activities(db):
        item = _status_for(db, a, now)
        if item is not None:
            items.append(item)
    return items
