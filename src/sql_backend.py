"""SQLAlchemy-backed template provider and log store."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from errors import PersistenceError, TemplateNotFoundError
from log_sync import PushingLogSync
from models import TemplateDB, WorkoutLogDB
from templates import TemplateProvider, sort_templates
from typedefs import WorkoutLog, WorkoutTemplate, as_utc

logger = logging.getLogger(__name__)


def _utc_or_none(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; stored values are UTC
    return as_utc(value) if value is not None else None


def template_from_db(db_template: TemplateDB) -> WorkoutTemplate:
    return WorkoutTemplate(
        id=str(db_template.id),
        name=db_template.name,
        exercises=db_template.exercises or [],
    )


def log_from_db(db_log: WorkoutLogDB) -> WorkoutLog:
    return WorkoutLog(
        id=str(db_log.id),
        template_id=db_log.template_id,
        name=db_log.name,
        start_time=_utc_or_none(db_log.start_time),
        end_time=_utc_or_none(db_log.end_time),
        body_weight=db_log.body_weight,
        notes=db_log.notes or "",
        status=db_log.status,
        exercises=db_log.exercises or [],
    )


def log_to_db(log: WorkoutLog) -> WorkoutLogDB:
    record = log.to_record()
    return WorkoutLogDB(
        template_id=record["template_id"],
        name=record["name"],
        start_time=record["start_time"],
        end_time=record["end_time"],
        body_weight=record["body_weight"],
        notes=record["notes"],
        status=record["status"],
        exercises=record["exercises"],
    )


class SqlTemplateProvider(TemplateProvider):
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def list(self) -> List[WorkoutTemplate]:
        db: Session = self._session_factory()
        try:
            rows = db.query(TemplateDB).all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list templates: {e}") from e
        finally:
            db.close()

        templates = []
        for row in rows:
            try:
                templates.append(template_from_db(row))
            except ValidationError as e:
                logger.warning("Skipping malformed template %s: %s", row.id, e)
        return sort_templates(templates)

    def get(self, template_id: str) -> WorkoutTemplate:
        try:
            key = UUID(template_id)
        except ValueError:
            raise TemplateNotFoundError(template_id) from None

        db: Session = self._session_factory()
        try:
            db_template = db.query(TemplateDB).filter(TemplateDB.id == key).first()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load template: {e}") from e
        finally:
            db.close()

        if not db_template:
            raise TemplateNotFoundError(template_id)
        try:
            return template_from_db(db_template)
        except ValidationError as e:
            raise PersistenceError(f"Malformed template {template_id}: {e}") from e


def seed_templates(session_factory: sessionmaker, templates: Iterable[dict]) -> int:
    """Insert ``templates`` whose names are not already stored.

    Each template is a dict with ``name`` and ``exercises``.

    Returns:
        Number of templates inserted
    """
    db: Session = session_factory()
    try:
        existing = {name for (name,) in db.query(TemplateDB.name).all()}
        new = [
            TemplateDB(name=t["name"], exercises=t.get("exercises", []))
            for t in templates
            if t["name"] not in existing
        ]
        db.add_all(new)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to seed templates: {e}") from e
    finally:
        db.close()

    logger.info("Seeded %d workout templates", len(new))
    return len(new)


class SqlLogSync(PushingLogSync):
    """Workout logs in a relational table.

    The database has no live query, so subscribers are refreshed after each
    committed append made through this store.
    """

    def __init__(self, session_factory: sessionmaker):
        super().__init__()
        self._session_factory = session_factory

    def _insert(self, log: WorkoutLog) -> str:
        db: Session = self._session_factory()
        try:
            db_log = log_to_db(log)
            db.add(db_log)
            db.commit()
            db.refresh(db_log)
            return str(db_log.id)
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to save workout log: {e}") from e
        finally:
            db.close()

    def _load_all(self) -> List[WorkoutLog]:
        db: Session = self._session_factory()
        try:
            rows = db.query(WorkoutLogDB).order_by(WorkoutLogDB.start_time.desc()).all()
            return [log_from_db(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load workout logs: {e}") from e
        finally:
            db.close()
