"""SQLAlchemy database models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, Float, String, Text, Uuid

from database import Base


def _now() -> datetime:
    return datetime.now(UTC)


class TemplateDB(Base):
    """Database model for workout templates.

    Templates are reusable workout definitions. Sessions copy what they
    need at start time, so later edits never reach a running session.
    """

    __tablename__ = "templates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    exercises = Column(JSON, nullable=False, default=list)  # List of exercise dicts
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    def __repr__(self):
        return f"<TemplateDB(id={self.id}, name={self.name})>"


class WorkoutLogDB(Base):
    """Database model for finished workout sessions.

    Rows are append-only. ``template_id`` is informational only (no foreign
    key), so deleting a template never cascades into history.
    """

    __tablename__ = "workout_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    template_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=True, index=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    body_weight = Column(Float, nullable=True)
    notes = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False)
    exercises = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    def __repr__(self):
        return f"<WorkoutLogDB(id={self.id}, name={self.name})>"
