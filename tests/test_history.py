"""Tests for recording and reading history events."""

from __future__ import annotations

from datetime import datetime

import pytest

from activities import create_activity_with_rhythm
from errors import MeasurementMismatch, NotFound, ValidationError
from history import (
    delete_history_event,
    get_activity_history,
    get_recent_history,
    record_completion,
    record_duration,
)
from rhythms import TrailingRhythm


@pytest.fixture
def counted(db):
    return create_activity_with_rhythm(db, "Run", "pursuit", TrailingRhythm(7, "days"), 3, "instances")


@pytest.fixture
def timed(db):
    return create_activity_with_rhythm(db, "Guitar", "pursuit", TrailingRhythm(7, "days"), 150, "duration")


class TestRecord:
    def test_completion(self, db, counted):
        ts = datetime(2024, 1, 10, 8, 0)
        ev = record_completion(db, counted.id, ts)
        assert ev.kind == "completion"
        assert ev.minutes is None
        assert ev.timestamp == ts

    def test_completion_defaults_to_now(self, db, counted):
        before = datetime.now()
        ev = record_completion(db, counted.id)
        assert ev.timestamp >= before

    def test_duration(self, db, timed):
        ev = record_duration(db, timed.id, 45, datetime(2024, 1, 10, 8, 0))
        assert ev.kind == "duration"
        assert ev.minutes == 45

    def test_zero_minutes_allowed(self, db, timed):
        assert record_duration(db, timed.id, 0).minutes == 0

    def test_negative_minutes_rejected(self, db, timed):
        with pytest.raises(ValidationError):
            record_duration(db, timed.id, -5)

    def test_completion_on_duration_activity(self, db, timed):
        with pytest.raises(MeasurementMismatch):
            record_completion(db, timed.id)

    def test_duration_on_instances_activity(self, db, counted):
        with pytest.raises(MeasurementMismatch):
            record_duration(db, counted.id, 30)

    @pytest.mark.parametrize("record", [record_completion, lambda db, i: record_duration(db, i, 10)])
    def test_missing_activity(self, db, record):
        with pytest.raises(NotFound):
            record(db, 999)


class TestRead:
    def test_history_is_newest_first_and_filtered(self, db, counted):
        for day in (1, 5, 3, 9):
            record_completion(db, counted.id, datetime(2024, 1, day, 12, 0))

        events = get_activity_history(db, counted.id)
        assert [e.timestamp.day for e in events] == [9, 5, 3, 1]

        ranged = get_activity_history(
            db, counted.id, start=datetime(2024, 1, 3, 12, 0), end=datetime(2024, 1, 5, 12, 0)
        )
        assert [e.timestamp.day for e in ranged] == [5, 3]

        assert len(get_activity_history(db, counted.id, limit=2)) == 2

    def test_recent_across_activities(self, db, counted, timed):
        record_completion(db, counted.id, datetime(2024, 1, 1))
        record_duration(db, timed.id, 20, datetime(2024, 1, 2))
        record_completion(db, counted.id, datetime(2024, 1, 3))
        recent = get_recent_history(db, limit=2)
        assert [e.timestamp.day for e in recent] == [3, 2]

    def test_delete(self, db, counted):
        ev = record_completion(db, counted.id)
        assert delete_history_event(db, ev.id) is True
        assert get_activity_history(db, counted.id) == []
        assert delete_history_event(db, ev.id) is False
