"""Assembly of the session engine and its storage backends."""

import logging
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional

from log_sync import HistoryFeed, InMemoryLogSync, LogSync
from rest_timer import RestTimer, Scheduler, loop_scheduler
from session_controller import SessionController, utcnow
from set_logger import SetLogger
from settings import Settings, get_settings
from templates import InMemoryTemplateProvider, TemplateProvider
from typedefs import ActiveSession

logger = logging.getLogger(__name__)


class WorkoutEngine:
    """One rest timer, session controller, set logger and history feed.

    Args:
        templates: Where sessions get their templates from
        log_sync: Where finished sessions are appended
        settings: Rest duration and set logging policy
        scheduler: Runs rest timer countdowns (None: tick manually)
        clock: Current time for session timestamps
    """

    def __init__(
        self,
        templates: TemplateProvider,
        log_sync: LogSync,
        settings: Optional[Settings] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        if settings is None:
            settings = Settings()
        self.templates = templates
        self.log_sync = log_sync
        self.timer = RestTimer(settings.rest_timer_seconds, scheduler=scheduler)
        self.controller = SessionController(log_sync, self.timer, clock=clock)
        self.set_logger = SetLogger(
            self.controller,
            self.timer,
            require_both_values=settings.require_reps_and_weight,
        )
        self.history = HistoryFeed(log_sync)

    def start_from_template(self, template_id: str) -> ActiveSession:
        """Look up a template and start a session from it."""
        template = self.templates.get(template_id)
        return self.controller.start(template)

    def open(self) -> None:
        self.history.open()

    def close(self) -> None:
        self.history.close()
        if self.timer.running:
            self.timer.stop()


def build_engine(
    settings: Optional[Settings] = None, scheduler: Optional[Scheduler] = None
) -> WorkoutEngine:
    """Build an engine wired to the backend named in ``settings``."""
    if settings is None:
        settings = get_settings()

    if settings.store_backend == "sql":
        from database import SessionLocal, init_db
        from sql_backend import SqlLogSync, SqlTemplateProvider

        init_db()
        templates = SqlTemplateProvider(SessionLocal)
        log_sync = SqlLogSync(SessionLocal)
    elif settings.store_backend == "firestore":
        from firebase_config import get_firestore_client
        from firestore_backend import (
            LOGS_COLLECTION,
            TEMPLATES_COLLECTION,
            FirestoreLogSync,
            FirestoreTemplateProvider,
            user_collection_path,
        )

        client = get_firestore_client()
        app_id, user_id = settings.firebase_app_id, settings.workout_user_id
        templates = FirestoreTemplateProvider(
            client, user_collection_path(app_id, user_id, TEMPLATES_COLLECTION)
        )
        log_sync = FirestoreLogSync(
            client, user_collection_path(app_id, user_id, LOGS_COLLECTION)
        )
    else:
        templates = InMemoryTemplateProvider()
        log_sync = InMemoryLogSync()

    logger.info("Workout engine using %s store", settings.store_backend)
    return WorkoutEngine(templates, log_sync, settings=settings, scheduler=scheduler)


@lru_cache(maxsize=1)
def get_engine() -> WorkoutEngine:
    """Dependency function that returns the process-wide engine.

    Rest timer countdowns run as tasks on the server's event loop.
    """
    return build_engine(scheduler=loop_scheduler)
