"""Workout session state machine.

A session moves IDLE -> ACTIVE -> (COMPLETED | DISCARDED) and the
controller returns to IDLE once it is released. Only one session can be
active at a time; every operation invoked outside its valid state raises
``InvalidStateError``, including ``discard()`` while idle.
"""

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Callable, Optional

from errors import ConflictError, InvalidStateError, PersistenceError
from log_sync import LogSync
from rest_timer import RestTimer
from typedefs import (
    ActiveSession,
    LogExercise,
    LoggedSet,
    LogSet,
    SessionExercise,
    SessionStatus,
    WorkoutLog,
    WorkoutTemplate,
)

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


def utcnow() -> datetime:
    return datetime.now(UTC)


def build_session(template: WorkoutTemplate, start_time: datetime) -> ActiveSession:
    """Create a fresh session from a template snapshot.

    Each exercise is seeded with ``target_sets`` empty placeholder sets (at
    least one). Nothing in the session aliases the template.
    """
    return ActiveSession(
        template_id=template.id,
        name=template.name,
        start_time=start_time,
        body_weight=None,
        notes="",
        exercises=[
            SessionExercise(
                id=exercise.id,
                name=exercise.name,
                target_sets=exercise.target_sets,
                target_reps=exercise.target_reps,
                target_weight=exercise.target_weight,
                logged_sets=[LoggedSet() for _ in range(max(exercise.target_sets, 1))],
            )
            for exercise in template.exercises
        ],
    )


def build_log(
    session: ActiveSession,
    end_time: datetime,
    body_weight: Optional[float] = None,
    notes: str = "",
) -> WorkoutLog:
    """Freeze a session into a log record holding only completed sets."""
    return WorkoutLog(
        template_id=session.template_id,
        name=session.name,
        start_time=session.start_time,
        end_time=end_time,
        body_weight=body_weight,
        notes=notes,
        status=SessionStatus.COMPLETED,
        exercises=tuple(
            LogExercise(
                id=exercise.id,
                name=exercise.name,
                target_sets=exercise.target_sets,
                target_reps=exercise.target_reps,
                target_weight=exercise.target_weight,
                logged_sets=tuple(
                    LogSet(reps=s.reps, weight=s.weight, completed=True)
                    for s in exercise.logged_sets
                    if s.completed
                ),
            )
            for exercise in session.exercises
        ),
    )


class SessionController:
    """Owns the single active session and coordinates the rest timer.

    Args:
        log_sync: Store that finished sessions are appended to
        timer: Rest timer stopped when a session ends
        clock: Returns the current time (injectable for tests)
    """

    def __init__(
        self,
        log_sync: LogSync,
        timer: RestTimer,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._log_sync = log_sync
        self._timer = timer
        self._clock = clock
        self._session: Optional[ActiveSession] = None

    @property
    def state(self) -> SessionState:
        if self._session is None:
            return SessionState.IDLE
        return SessionState.ACTIVE

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def current_session(self) -> ActiveSession:
        """Return the live session for in-place mutation by the set logger.

        Raises:
            InvalidStateError: If no session is active
        """
        if self._session is None:
            raise InvalidStateError("No workout session in progress")
        return self._session

    def snapshot(self) -> Optional[ActiveSession]:
        """Deep copy of the active session, or None when idle."""
        if self._session is None:
            return None
        return self._session.model_copy(deep=True)

    def start(self, template: WorkoutTemplate) -> ActiveSession:
        """Begin a session from ``template``.

        Raises:
            ConflictError: If a session is already in progress
        """
        if self._session is not None:
            raise ConflictError("Workout session already in progress")

        self._session = build_session(template, self._clock())
        logger.info(
            "Started workout session '%s' from template %s",
            template.name,
            template.id,
        )
        return self.snapshot()

    def set_body_weight(self, body_weight: Optional[float]) -> ActiveSession:
        session = self.current_session()
        session.body_weight = body_weight
        return self.snapshot()

    def set_notes(self, notes: str) -> ActiveSession:
        session = self.current_session()
        session.notes = notes
        return self.snapshot()

    def discard(self) -> None:
        """Drop the active session without persisting anything.

        Raises:
            InvalidStateError: If no session is active
        """
        session = self.current_session()
        session.status = SessionStatus.DISCARDED
        self._session = None
        self._timer.stop()
        logger.info("Discarded workout session '%s'", session.name)

    def finish(
        self, body_weight: Optional[float] = None, notes: Optional[str] = None
    ) -> WorkoutLog:
        """Persist the active session as a workout log and release it.

        Blank ``body_weight``/``notes`` fall back to the values already on
        the session. If the append fails the session stays active with
        everything entered so far, so ``finish()`` can simply be retried.

        Returns:
            The stored log, including its store-assigned ID

        Raises:
            InvalidStateError: If no session is active
            PersistenceError: If the log store rejects the append
        """
        session = self.current_session()

        if body_weight is not None:
            session.body_weight = body_weight
        if notes is not None and notes.strip():
            session.notes = notes

        log = build_log(
            session,
            end_time=self._clock(),
            body_weight=session.body_weight,
            notes=session.notes,
        )

        try:
            stored = self._log_sync.append(log)
        except PersistenceError as e:
            logger.error("Failed to save workout session '%s': %s", session.name, e)
            raise

        session.status = SessionStatus.COMPLETED
        self._session = None
        self._timer.stop()
        logger.info("Finished workout session '%s' as log %s", session.name, stored.id)
        return stored
