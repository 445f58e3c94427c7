"""Firestore-backed template provider and log store.

Collections live under ``artifacts/{app_id}/users/{user_id}/``:
``workouts`` for templates and ``workoutLogs`` for history.
"""

import logging
from typing import List, Optional

from google.api_core import exceptions as google_exceptions
from pydantic import ValidationError

from errors import PersistenceError, TemplateNotFoundError
from log_sync import ErrorCallback, LogsCallback, LogSync, Subscription, sort_logs
from templates import TemplateProvider, sort_templates
from typedefs import WorkoutLog, WorkoutTemplate

logger = logging.getLogger(__name__)

TEMPLATES_COLLECTION = "workouts"
LOGS_COLLECTION = "workoutLogs"


def user_collection_path(app_id: str, user_id: str, collection: str) -> str:
    return f"artifacts/{app_id}/users/{user_id}/{collection}"


class FirestoreTemplateProvider(TemplateProvider):
    def __init__(self, client, collection_path: str):
        self._collection = client.collection(collection_path)

    def list(self) -> List[WorkoutTemplate]:
        try:
            docs = list(self._collection.stream())
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"Failed to list templates: {e}") from e

        templates = []
        for doc in docs:
            try:
                templates.append(
                    WorkoutTemplate.model_validate({**doc.to_dict(), "id": doc.id})
                )
            except ValidationError as e:
                logger.warning("Skipping malformed template %s: %s", doc.id, e)
        return sort_templates(templates)

    def get(self, template_id: str) -> WorkoutTemplate:
        try:
            doc = self._collection.document(template_id).get()
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"Failed to load template: {e}") from e

        if not doc.exists:
            raise TemplateNotFoundError(template_id)
        try:
            return WorkoutTemplate.model_validate({**doc.to_dict(), "id": doc.id})
        except ValidationError as e:
            raise PersistenceError(f"Malformed template {doc.id}: {e}") from e


class FirestoreLogSync(LogSync):
    """Workout logs in a Firestore collection.

    Appends use ``add`` so Firestore assigns the document ID. Subscriptions
    are Firestore watches; their callbacks arrive on the watch thread.
    """

    def __init__(self, client, collection_path: str):
        self._collection = client.collection(collection_path)

    def append(self, log: WorkoutLog) -> WorkoutLog:
        try:
            _, doc_ref = self._collection.add(log.to_record())
        except google_exceptions.GoogleAPIError as e:
            logger.exception("Firestore rejected workout log '%s'", log.name)
            raise PersistenceError(f"Failed to save workout log: {e}") from e

        logger.info("Appended workout log %s (%s)", doc_ref.id, log.name)
        return log.model_copy(update={"id": doc_ref.id})

    def subscribe(
        self, callback: LogsCallback, on_error: Optional[ErrorCallback] = None
    ) -> Subscription:
        def on_snapshot(docs, changes, read_time):
            try:
                logs = [WorkoutLog.from_record(doc.id, doc.to_dict()) for doc in docs]
            except ValidationError as e:
                error = PersistenceError(f"Malformed workout log in history: {e}")
                if on_error is not None:
                    on_error(error)
                else:
                    logger.error("%s", error)
                return
            callback(sort_logs(logs))

        try:
            watch = self._collection.on_snapshot(on_snapshot)
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"Failed to watch workout logs: {e}") from e
        return Subscription(watch.unsubscribe)
