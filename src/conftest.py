"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base
from engine import WorkoutEngine
from log_sync import InMemoryLogSync
from settings import Settings
from templates import InMemoryTemplateProvider
from typedefs import TemplateExercise, WorkoutTemplate


class FakeClock:
    """Deterministic clock; advance it to simulate elapsed time."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 11, 30, 9, 0, 0, tzinfo=UTC))


@pytest.fixture
def push_day() -> WorkoutTemplate:
    """Single-exercise template: Bench 3 x 10 @ 135."""
    return WorkoutTemplate(
        id="push-day",
        name="Push Day",
        exercises=[
            TemplateExercise(
                id="bench",
                name="Bench",
                target_sets=3,
                target_reps=10,
                target_weight=135,
            )
        ],
    )


@pytest.fixture
def leg_day() -> WorkoutTemplate:
    return WorkoutTemplate(
        id="leg-day",
        name="leg Day",
        exercises=[
            TemplateExercise(id="squat", name="Squat", target_sets=5, target_reps=5),
            TemplateExercise(
                id="rdl", name="Romanian Deadlift", target_sets=3, target_reps=10
            ),
        ],
    )


@pytest.fixture
def log_sync() -> InMemoryLogSync:
    return InMemoryLogSync()


@pytest.fixture
def engine(push_day, leg_day, log_sync, clock) -> WorkoutEngine:
    """Engine on in-memory stores whose rest timer is ticked by hand."""
    return WorkoutEngine(
        InMemoryTemplateProvider([push_day, leg_day]),
        log_sync,
        settings=Settings(),
        scheduler=None,
        clock=clock,
    )


# SQL fixtures


@pytest.fixture
def sql_engine():
    """In-memory SQLite engine shared by every session in a test."""
    import models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(sql_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=sql_engine)


# Firestore fixtures


@pytest.fixture
def mock_firestore_client():
    """Mock Firestore client; ``.collection()`` always returns the same mock."""
    client = MagicMock()
    collection = MagicMock()
    client.collection.return_value = collection
    return client
