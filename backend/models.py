# models.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from db import Base


def iso_local(d: datetime | None):
    if d is None:
        return None
    return d.replace(microsecond=0).isoformat()


class RhythmRow(Base):
    __tablename__ = "rhythms"

    id   = Column(Integer, primary_key=True)
    kind = Column(String(16), nullable=False)  # trailing|recurring|calendar

    # only the columns of the row's own kind are populated
    trailing_count  = Column(Integer)
    trailing_unit   = Column(String(16))  # days|weeks|months
    recurring_every = Column(Integer)
    recurring_unit  = Column(String(16))  # days|weeks|months
    calendar_period = Column(String(16))  # daily|weekly|monthly|yearly

    created_at = Column(DateTime, nullable=False, default=datetime.now)


class Activity(Base):
    __tablename__ = "activities"

    id          = Column(Integer, primary_key=True)
    name        = Column(String(255), nullable=False)
    framing     = Column(String(16), nullable=False, default="pursuit")  # task|pursuit
    rhythm_id   = Column(Integer, ForeignKey("rhythms.id"), nullable=False)
    target      = Column(Integer, nullable=False, default=1)
    measurement = Column(String(16), nullable=False, default="instances")  # instances|duration
    created_at  = Column(DateTime, nullable=False, default=datetime.now)

    events = relationship(
        "HistoryEvent",
        back_populates="activity",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "framing": self.framing,
            "rhythm_id": self.rhythm_id,
            "target": self.target,
            "measurement": self.measurement,
            "created_at": iso_local(self.created_at),
        }


class HistoryEvent(Base):
    __tablename__ = "history"

    id          = Column(Integer, primary_key=True)
    activity_id = Column(Integer, ForeignKey("activities.id", ondelete="CASCADE"), index=True, nullable=False)
    kind        = Column(String(16), nullable=False)  # completion|duration
    minutes     = Column(Integer, nullable=True)  # NULL for completions
    timestamp   = Column(DateTime, nullable=False, default=datetime.now, index=True)

    activity = relationship("Activity", back_populates="events")

    def to_dict(self):
        return {
            "id": self.id,
            "activity_id": self.activity_id,
            "kind": self.kind,
            "minutes": self.minutes,
            "timestamp": iso_local(self.timestamp),
        }


class Errand(Base):
    __tablename__ = "errands"

    id           = Column(Integer, primary_key=True)
    name         = Column(String(255), nullable=False)
    created_at   = Column(DateTime, nullable=False, default=datetime.now)
    completed_at = Column(DateTime, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "created_at": iso_local(self.created_at),
            "completed_at": iso_local(self.completed_at),
        }
