"""Tests for log storage, subscriptions and the history feed."""

from datetime import UTC, datetime, timedelta

import pytest

from errors import PersistenceError
from log_sync import HistoryFeed, InMemoryLogSync, Subscription, sort_logs
from typedefs import LogExercise, LogSet, WorkoutLog


def make_log(name: str, start: datetime | None, minutes: int = 60) -> WorkoutLog:
    return WorkoutLog(
        template_id="push-day",
        name=name,
        start_time=start,
        end_time=start + timedelta(minutes=minutes) if start else None,
        body_weight=170,
        notes="",
        exercises=[
            LogExercise(
                id="bench",
                name="Bench",
                target_sets=3,
                target_reps=10,
                target_weight=135,
                logged_sets=[LogSet(reps=10, weight=135)],
            )
        ],
    )


DAY_1 = datetime(2025, 11, 28, 9, 0, tzinfo=UTC)
DAY_2 = datetime(2025, 11, 29, 9, 0, tzinfo=UTC)
DAY_3 = datetime(2025, 11, 30, 9, 0, tzinfo=UTC)


class Recorder:
    def __init__(self):
        self.pushes = []
        self.errors = []

    def __call__(self, logs):
        self.pushes.append(logs)

    def on_error(self, error):
        self.errors.append(error)


def test_append_assigns_unique_ids(log_sync):
    first = log_sync.append(make_log("A", DAY_1))
    second = log_sync.append(make_log("B", DAY_2))

    assert first.id and second.id
    assert first.id != second.id
    assert log_sync.record_count == 2


def test_append_does_not_mutate_input(log_sync):
    log = make_log("A", DAY_1)
    stored = log_sync.append(log)

    assert log.id is None
    assert stored.id is not None
    assert stored.name == log.name


def test_subscribe_pushes_initial_history(log_sync):
    log_sync.append(make_log("A", DAY_1))
    recorder = Recorder()

    subscription = log_sync.subscribe(recorder)

    assert len(recorder.pushes) == 1
    assert [log.name for log in recorder.pushes[0]] == ["A"]
    subscription.unsubscribe()


def test_subscribe_pushes_on_every_append_most_recent_first(log_sync):
    recorder = Recorder()
    log_sync.subscribe(recorder)

    log_sync.append(make_log("Middle", DAY_2))
    log_sync.append(make_log("Oldest", DAY_1))
    log_sync.append(make_log("Newest", DAY_3))

    assert len(recorder.pushes) == 4
    assert recorder.pushes[0] == []
    assert [log.name for log in recorder.pushes[-1]] == ["Newest", "Middle", "Oldest"]


def test_unsubscribe_stops_pushes(log_sync):
    recorder = Recorder()
    subscription = log_sync.subscribe(recorder)
    subscription.unsubscribe()

    log_sync.append(make_log("A", DAY_1))

    assert len(recorder.pushes) == 1
    assert subscription.active is False
    # Releasing twice is harmless
    subscription.unsubscribe()


def test_subscription_context_manager(log_sync):
    recorder = Recorder()
    with log_sync.subscribe(recorder) as subscription:
        log_sync.append(make_log("A", DAY_1))
    log_sync.append(make_log("B", DAY_2))

    assert subscription.active is False
    assert len(recorder.pushes) == 2


def test_stored_logs_are_independent_copies(log_sync):
    recorder = Recorder()
    log_sync.subscribe(recorder)
    log_sync.append(make_log("A", DAY_1))

    first = recorder.pushes[-1][0]
    log_sync.append(make_log("B", DAY_2))
    again = [log for log in recorder.pushes[-1] if log.id == first.id][0]

    assert again == first


def test_failing_subscriber_does_not_break_append(log_sync):
    def broken(logs):
        if logs:
            raise RuntimeError("render failed")

    log_sync.subscribe(broken)
    stored = log_sync.append(make_log("A", DAY_1))

    assert stored.id is not None
    assert log_sync.record_count == 1


def test_subscriber_rejecting_initial_push_is_not_registered(log_sync):
    calls = []

    def broken(logs):
        calls.append(logs)
        raise RuntimeError("render failed")

    with pytest.raises(RuntimeError):
        log_sync.subscribe(broken)

    log_sync.append(make_log("A", DAY_1))

    assert len(calls) == 1


def test_refresh_failure_reaches_error_callback():
    class FlakyLogSync(InMemoryLogSync):
        broken = False

        def _load_all(self):
            if self.broken:
                raise PersistenceError("read failed")
            return super()._load_all()

    log_sync = FlakyLogSync()
    recorder = Recorder()
    log_sync.subscribe(recorder, recorder.on_error)

    log_sync.broken = True
    log_sync.append(make_log("A", DAY_1))

    assert len(recorder.errors) == 1
    assert isinstance(recorder.errors[0], PersistenceError)
    assert len(recorder.pushes) == 1


def test_sort_logs_puts_undated_last():
    logs = [make_log("Undated", None), make_log("Old", DAY_1), make_log("New", DAY_3)]
    assert [log.name for log in sort_logs(logs)] == ["New", "Old", "Undated"]


def test_sort_logs_mixes_naive_and_aware():
    naive = make_log("Naive", datetime(2025, 11, 29, 9, 0))
    aware = make_log("Aware", DAY_1)
    assert [log.name for log in sort_logs([aware, naive])] == ["Naive", "Aware"]


# ========== WorkoutLog helpers ==========


def test_duration_minutes_rounds():
    log = make_log("A", DAY_1, minutes=0).model_copy(
        update={"end_time": DAY_1 + timedelta(minutes=44, seconds=30)}
    )
    assert log.duration_minutes == 45

    log = log.model_copy(update={"end_time": DAY_1 + timedelta(minutes=44, seconds=29)})
    assert log.duration_minutes == 44


def test_duration_minutes_without_end():
    assert make_log("A", None).duration_minutes is None


def test_summary():
    assert make_log("Push Day", DAY_3, minutes=52).summary() == (
        "Push Day - 2025-11-30 - 52 min - body weight 170"
    )


def test_record_round_trip_keeps_timestamps_native():
    log = make_log("A", DAY_1)
    record = log.to_record()

    assert "id" not in record
    assert record["start_time"] is DAY_1
    assert record["status"] == "completed"
    assert WorkoutLog.from_record("abc", record) == log.model_copy(update={"id": "abc"})


def test_log_is_immutable():
    log = make_log("A", DAY_1)
    with pytest.raises(Exception):
        log.name = "B"
    with pytest.raises(Exception):
        log.exercises[0].logged_sets[0].reps = 1


# ========== HistoryFeed ==========


def test_history_feed_tracks_latest(log_sync):
    feed = HistoryFeed(log_sync)
    feed.open()
    assert feed.is_open
    assert feed.logs == []

    log_sync.append(make_log("A", DAY_1))
    log_sync.append(make_log("B", DAY_2))

    assert [log.name for log in feed.logs] == ["B", "A"]
    assert feed.degraded is False
    assert feed.updated_at is not None


def test_history_feed_close_unsubscribes(log_sync):
    feed = HistoryFeed(log_sync)
    feed.open()
    feed.close()

    log_sync.append(make_log("A", DAY_1))

    assert feed.logs == []
    assert feed.is_open is False


def test_history_feed_degrades_on_subscribe_failure():
    class UnreachableLogSync(InMemoryLogSync):
        def subscribe(self, callback, on_error=None) -> Subscription:
            raise PersistenceError("connection refused")

    feed = HistoryFeed(UnreachableLogSync())
    feed.open()

    assert feed.degraded is True
    assert "connection refused" in feed.notice
    assert feed.logs == []
    assert feed.is_open is False


def test_history_feed_recovers_after_push(log_sync):
    feed = HistoryFeed(log_sync)
    feed.open()
    feed._on_error(PersistenceError("blip"))
    assert feed.degraded

    log_sync.append(make_log("A", DAY_1))

    assert feed.degraded is False
    assert [log.name for log in feed.logs] == ["A"]
