"""Shared fixtures for tracker tests."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Allow running tests without `pip install -e .` by making `backend/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_BACKEND_DIR = _PROJECT_ROOT / "backend"
if str(_BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(_BACKEND_DIR))

from app import create_app  # noqa: E402
from db import init_db, make_engine, make_session_factory  # noqa: E402
from models import Activity, HistoryEvent  # noqa: E402


@pytest.fixture
def db():
    engine = make_engine("sqlite://")
    init_db(engine)
    session = make_session_factory(engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def app():
    return create_app("sqlite://")


@pytest.fixture
def client(app):
    return app.test_client()


def make_activity(**overrides) -> Activity:
    """Unsaved activity with sensible defaults."""
    defaults = dict(
        id=1,
        name="Test Activity",
        framing="pursuit",
        rhythm_id=1,
        target=3,
        measurement="instances",
        created_at=datetime(2024, 1, 1),
    )
    defaults.update(overrides)
    return Activity(**defaults)


def make_event(timestamp: datetime, minutes: int | None = None) -> HistoryEvent:
    return HistoryEvent(
        activity_id=1,
        kind="completion" if minutes is None else "duration",
        minutes=minutes,
        timestamp=timestamp,
    )
