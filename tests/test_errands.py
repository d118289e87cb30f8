"""Tests for one-off errands."""

from __future__ import annotations

from datetime import datetime

import pytest

from errands import (
    complete_errand,
    create_errand,
    delete_errand,
    get_errand,
    list_errands,
    list_pending_errands,
)
from errors import NotFound, ValidationError

NOW = datetime(2024, 1, 10, 12, 0)


def test_create_and_get(db):
    e = create_errand(db, "Buy stamps")
    assert get_errand(db, e.id).name == "Buy stamps"
    assert e.completed_at is None


def test_create_requires_name(db):
    with pytest.raises(ValidationError):
        create_errand(db, "   ")


class TestVisibility:
    def test_completed_errands_hide_after_three_days(self, db):
        pending = create_errand(db, "Pending")
        recent = create_errand(db, "Recent")
        old = create_errand(db, "Old")
        complete_errand(db, recent.id, datetime(2024, 1, 8, 12, 0))
        complete_errand(db, old.id, datetime(2024, 1, 6, 12, 0))

        visible = [e.name for e in list_errands(db, now=NOW)]
        assert visible == ["Pending", "Recent"]
        assert len(list_errands(db, include_expired=True, now=NOW)) == 3
        assert [e.id for e in list_pending_errands(db)] == [pending.id]

    def test_cutoff_is_exclusive(self, db):
        e = create_errand(db, "Edge")
        complete_errand(db, e.id, datetime(2024, 1, 7, 12, 0))
        assert list_errands(db, now=NOW) == []


class TestComplete:
    def test_complete_twice(self, db):
        e = create_errand(db, "Once")
        complete_errand(db, e.id, NOW)
        with pytest.raises(ValidationError):
            complete_errand(db, e.id, NOW)

    def test_complete_missing(self, db):
        with pytest.raises(NotFound):
            complete_errand(db, 404)


def test_delete(db):
    e = create_errand(db, "Gone")
    assert delete_errand(db, e.id) is True
    assert delete_errand(db, e.id) is False
