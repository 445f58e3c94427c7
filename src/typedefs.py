import math
from datetime import UTC, datetime
from enum import Enum
from typing import List, Literal, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator

# Set inputs are passed through as typed: numbers, free text or blank.
SetValue = int | float | str | None

SetField = Literal["reps", "weight"]


def is_blank(value: SetValue) -> bool:
    """Return True for values a user has not filled in."""
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DISCARDED = "discarded"


class TemplateExercise(BaseModel):
    """Exercise within a template with its prescribed volume.

    ``target_sets`` only seeds how many empty sets a new session starts
    with; it never limits how many sets get logged.
    """

    id: str
    name: str
    target_sets: int = Field(
        gt=0, validation_alias=AliasChoices("target_sets", "targetSets")
    )
    target_reps: int = Field(
        gt=0, validation_alias=AliasChoices("target_reps", "targetReps")
    )
    target_weight: float | None = Field(  # Unit-agnostic
        default=None, validation_alias=AliasChoices("target_weight", "targetWeight")
    )

    class Config:
        frozen = True

    @field_validator("target_weight", mode="before")
    @classmethod
    def blank_weight_is_none(cls, value):
        # Template editors store an untouched weight as ""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class WorkoutTemplate(BaseModel):
    id: str | None = None  # None until persisted
    name: str = Field(min_length=1)
    exercises: Tuple[TemplateExercise, ...] = ()

    class Config:
        frozen = True


class LoggedSet(BaseModel):
    """A single set within a session exercise."""

    reps: SetValue = None
    weight: SetValue = None
    completed: bool = False


class SessionExercise(BaseModel):
    """Exercise in an active session with performance tracking.

    Carries the template prescription (target sets/reps/weight) alongside
    the sets the user is logging.
    """

    id: str
    name: str
    target_sets: int
    target_reps: int
    target_weight: float | None = None
    logged_sets: List[LoggedSet]


class ActiveSession(BaseModel):
    template_id: str | None  # Informational reference, not ownership
    name: str
    start_time: datetime
    body_weight: float | None = None
    notes: str = ""
    exercises: List[SessionExercise]
    status: SessionStatus = SessionStatus.ACTIVE


class LogSet(BaseModel):
    reps: SetValue = None
    weight: SetValue = None
    completed: bool = True

    class Config:
        frozen = True


class LogExercise(BaseModel):
    id: str
    name: str
    target_sets: int
    target_reps: int
    target_weight: float | None = None
    logged_sets: Tuple[LogSet, ...] = ()

    class Config:
        frozen = True


class WorkoutLog(BaseModel):
    """Immutable history record of a finished session.

    ``id`` is assigned by the log store when the record is appended.
    Only completed sets are ever part of a log.
    """

    id: str | None = None
    template_id: str | None = None
    name: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    body_weight: float | None = None
    notes: str = ""
    exercises: Tuple[LogExercise, ...] = ()
    status: SessionStatus = SessionStatus.COMPLETED

    class Config:
        frozen = True

    @property
    def duration_minutes(self) -> int | None:
        """Whole minutes between start and end, rounded half up."""
        if self.start_time is None or self.end_time is None:
            return None
        elapsed = as_utc(self.end_time) - as_utc(self.start_time)
        return math.floor(elapsed.total_seconds() / 60 + 0.5)

    def summary(self) -> str:
        """One-line description for history listings."""
        parts = [self.name]
        if self.start_time is not None:
            parts.append(self.start_time.date().isoformat())
        duration = self.duration_minutes
        if duration is not None:
            parts.append(f"{duration} min")
        if self.body_weight is not None:
            parts.append(f"body weight {self.body_weight:g}")
        return " - ".join(parts)

    def to_record(self) -> dict:
        """Flatten into a store record; timestamps stay native datetimes."""
        record = self.model_dump(mode="json", exclude={"id", "start_time", "end_time"})
        record["start_time"] = self.start_time
        record["end_time"] = self.end_time
        return record

    @classmethod
    def from_record(cls, log_id: str, record: dict) -> "WorkoutLog":
        return cls.model_validate({**record, "id": log_id})


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class TimerSnapshot(BaseModel):
    running: bool
    paused: bool
    remaining_seconds: int
    display: str
