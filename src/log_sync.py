"""Append-only workout history and its live subscription feed."""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from errors import PersistenceError
from typedefs import WorkoutLog, as_utc

logger = logging.getLogger(__name__)

LogsCallback = Callable[[List[WorkoutLog]], None]
ErrorCallback = Callable[[PersistenceError], None]

_NO_START = datetime.min.replace(tzinfo=UTC)


def sort_logs(logs: List[WorkoutLog]) -> List[WorkoutLog]:
    """Order logs most recent ``start_time`` first; undated logs go last."""
    return sorted(
        logs,
        key=lambda log: as_utc(log.start_time) if log.start_time else _NO_START,
        reverse=True,
    )


class Subscription:
    """Handle for a live history feed.

    Must be released with ``unsubscribe()`` once the owner stops observing;
    it is never released automatically.
    """

    def __init__(self, cancel: Callable[[], None]):
        self._cancel: Optional[Callable[[], None]] = cancel

    @property
    def active(self) -> bool:
        return self._cancel is not None

    def unsubscribe(self) -> None:
        if self._cancel is None:
            return
        cancel, self._cancel = self._cancel, None
        cancel()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class LogSync(ABC):
    """Durable, append-only store of finished workouts."""

    @abstractmethod
    def append(self, log: WorkoutLog) -> WorkoutLog:
        """Store ``log`` and return it with its store-assigned ID.

        Raises:
            PersistenceError: If the record could not be stored
        """

    @abstractmethod
    def subscribe(
        self, callback: LogsCallback, on_error: Optional[ErrorCallback] = None
    ) -> Subscription:
        """Push the full, ordered history to ``callback`` now and on every change."""


class PushingLogSync(LogSync):
    """Log store without native live queries.

    Subscribers are notified by the store itself after each append.
    Subclasses provide ``_insert`` and ``_load_all``.
    """

    def __init__(self):
        self._subscribers: Dict[int, tuple[LogsCallback, Optional[ErrorCallback]]] = {}
        self._next_key = 0

    @abstractmethod
    def _insert(self, log: WorkoutLog) -> str:
        """Persist ``log`` and return its new ID."""

    @abstractmethod
    def _load_all(self) -> List[WorkoutLog]:
        """Read every stored log."""

    def append(self, log: WorkoutLog) -> WorkoutLog:
        log_id = self._insert(log)
        stored = log.model_copy(update={"id": log_id})
        logger.info("Appended workout log %s (%s)", log_id, log.name)
        self._publish()
        return stored

    def subscribe(
        self, callback: LogsCallback, on_error: Optional[ErrorCallback] = None
    ) -> Subscription:
        logs = sort_logs(self._load_all())
        # Only a callback that accepted the initial push gets registered
        callback(logs)
        key = self._next_key
        self._next_key += 1
        self._subscribers[key] = (callback, on_error)
        return Subscription(lambda: self._subscribers.pop(key, None))

    def _publish(self) -> None:
        if not self._subscribers:
            return
        try:
            logs = sort_logs(self._load_all())
        except PersistenceError as e:
            logger.error("Failed to refresh workout history: %s", e)
            for _, on_error in list(self._subscribers.values()):
                if on_error is not None:
                    on_error(e)
            return

        for callback, _ in list(self._subscribers.values()):
            try:
                callback(list(logs))
            except Exception:
                logger.exception("Workout history subscriber failed")


class InMemoryLogSync(PushingLogSync):
    """Process-local log store, used by default and in tests."""

    def __init__(self):
        super().__init__()
        self._records: Dict[str, dict] = {}

    def _insert(self, log: WorkoutLog) -> str:
        log_id = uuid4().hex
        self._records[log_id] = log.to_record()
        return log_id

    def _load_all(self) -> List[WorkoutLog]:
        return [
            WorkoutLog.from_record(log_id, record)
            for log_id, record in self._records.items()
        ]

    @property
    def record_count(self) -> int:
        return len(self._records)


class HistoryFeed:
    """Latest pushed history plus a degraded notice when the feed fails.

    Lets the presentation layer keep showing the last known history when
    the subscription errors instead of crashing.
    """

    def __init__(self, log_sync: LogSync):
        self._log_sync = log_sync
        self._subscription: Optional[Subscription] = None
        self.logs: List[WorkoutLog] = []
        self.notice: Optional[str] = None
        self.updated_at: Optional[datetime] = None

    @property
    def degraded(self) -> bool:
        return self.notice is not None

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def open(self) -> None:
        if self.is_open:
            return
        try:
            self._subscription = self._log_sync.subscribe(
                self._on_logs, self._on_error
            )
        except PersistenceError as e:
            self._on_error(e)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_logs(self, logs: List[WorkoutLog]) -> None:
        self.logs = logs
        self.notice = None
        self.updated_at = datetime.now(UTC)

    def _on_error(self, error: PersistenceError) -> None:
        logger.warning("Workout history feed degraded: %s", error)
        self.notice = f"Workout history may be out of date: {error}"
