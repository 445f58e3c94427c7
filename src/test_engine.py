"""Tests for engine assembly and backend selection."""

import pytest

import firebase_config
from engine import build_engine
from firestore_backend import FirestoreLogSync, FirestoreTemplateProvider
from log_sync import InMemoryLogSync
from settings import Settings
from templates import InMemoryTemplateProvider


def test_build_memory_engine():
    engine = build_engine(Settings(rest_timer_seconds=90, require_reps_and_weight=True))

    assert isinstance(engine.templates, InMemoryTemplateProvider)
    assert isinstance(engine.log_sync, InMemoryLogSync)
    assert engine.timer.default_duration == 90
    assert engine.set_logger.require_both_values is True


def test_build_firestore_engine(monkeypatch, mock_firestore_client):
    monkeypatch.setattr(
        firebase_config, "get_firestore_client", lambda: mock_firestore_client
    )

    engine = build_engine(
        Settings(
            store_backend="firestore", firebase_app_id="lifts", workout_user_id="u1"
        )
    )

    assert isinstance(engine.templates, FirestoreTemplateProvider)
    assert isinstance(engine.log_sync, FirestoreLogSync)
    paths = [call.args[0] for call in mock_firestore_client.collection.call_args_list]
    assert "artifacts/lifts/users/u1/workouts" in paths
    assert "artifacts/lifts/users/u1/workoutLogs" in paths


def test_start_from_template(engine, push_day):
    session = engine.start_from_template("push-day")

    assert session.name == push_day.name
    assert engine.controller.is_active


def test_open_and_close(engine):
    engine.open()
    assert engine.history.is_open

    engine.timer.start()
    engine.close()

    assert engine.history.is_open is False
    assert engine.timer.running is False


@pytest.mark.parametrize("backend", ["mongo", ""])
def test_unknown_backend_rejected(backend):
    with pytest.raises(ValueError):
        Settings(store_backend=backend)
