"""REST API endpoints for the active workout session and rest timer.

Endpoints are ``async`` so every engine call runs on the event loop thread,
the same thread the rest timer ticks on.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from engine import WorkoutEngine, get_engine
from errors import (
    ConflictError,
    IncompleteSetError,
    InvalidStateError,
    PersistenceError,
    SetIndexError,
    TemplateNotFoundError,
    WorkoutEngineError,
)
from typedefs import ActiveSession, LoggedSet, SetField, SetValue, TimerSnapshot, WorkoutLog

router = APIRouter(prefix="/api/v1", tags=["session"])

ERROR_STATUS_CODES = {
    ConflictError: 409,
    InvalidStateError: 400,
    SetIndexError: 404,
    TemplateNotFoundError: 404,
    IncompleteSetError: 422,
    PersistenceError: 503,
}


def to_http_exception(error: WorkoutEngineError) -> HTTPException:
    """Map an engine error onto the matching HTTP status."""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


class StartSessionRequest(BaseModel):
    template_id: str


class FinishSessionRequest(BaseModel):
    """Final inputs; blank values fall back to what the session holds."""

    body_weight: Optional[float] = None
    notes: Optional[str] = None


class BodyWeightRequest(BaseModel):
    body_weight: Optional[float] = None


class NotesRequest(BaseModel):
    notes: str = ""


class SetFieldUpdateRequest(BaseModel):
    field: SetField
    value: SetValue = None


class LogSetRequest(BaseModel):
    """Optional values written into the set before it is logged."""

    reps: SetValue = None
    weight: SetValue = None


class AddSetResponse(BaseModel):
    set_index: int
    session: ActiveSession


class TimerStartRequest(BaseModel):
    duration_seconds: Optional[int] = Field(default=None, gt=0)


# ========== Session ==========


@router.get("/session", response_model=Optional[ActiveSession])
async def get_session(
    engine: WorkoutEngine = Depends(get_engine),
) -> Optional[ActiveSession]:
    """Get the session in progress, or null when idle."""
    return engine.controller.snapshot()


@router.post("/session/start", response_model=ActiveSession, status_code=201)
async def start_session(
    request: StartSessionRequest, engine: WorkoutEngine = Depends(get_engine)
) -> ActiveSession:
    """Start a session from a template.

    Raises:
        HTTPException: 404 if the template does not exist
        HTTPException: 409 if a session is already in progress
    """
    try:
        return engine.start_from_template(request.template_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e


@router.post("/session/discard", status_code=204)
async def discard_session(engine: WorkoutEngine = Depends(get_engine)) -> None:
    """End the session without saving it."""
    try:
        engine.controller.discard()
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e


@router.post("/session/finish", response_model=WorkoutLog)
async def finish_session(
    request: FinishSessionRequest = FinishSessionRequest(),
    engine: WorkoutEngine = Depends(get_engine),
) -> WorkoutLog:
    """Save the session to history and end it.

    On a 503 the session stays in progress and the request can be retried.
    The append runs on the event loop, so rest timer ticks wait for it.
    """
    try:
        return engine.controller.finish(
            body_weight=request.body_weight, notes=request.notes
        )
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e


@router.patch("/session/body-weight", response_model=ActiveSession)
async def update_body_weight(
    request: BodyWeightRequest, engine: WorkoutEngine = Depends(get_engine)
) -> ActiveSession:
    try:
        return engine.controller.set_body_weight(request.body_weight)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e


@router.patch("/session/notes", response_model=ActiveSession)
async def update_notes(
    request: NotesRequest, engine: WorkoutEngine = Depends(get_engine)
) -> ActiveSession:
    try:
        return engine.controller.set_notes(request.notes)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e


# ========== Sets ==========


@router.patch(
    "/session/exercises/{exercise_index}/sets/{set_index}", response_model=LoggedSet
)
async def update_set(
    exercise_index: int,
    set_index: int,
    request: SetFieldUpdateRequest,
    engine: WorkoutEngine = Depends(get_engine),
) -> LoggedSet:
    """Edit reps or weight on a set (completed sets stay completed)."""
    try:
        return engine.set_logger.update_set_field(
            exercise_index, set_index, request.field, request.value
        )
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e


@router.post(
    "/session/exercises/{exercise_index}/sets/{set_index}/log",
    response_model=LoggedSet,
)
async def log_set(
    exercise_index: int,
    set_index: int,
    request: LogSetRequest = LogSetRequest(),
    engine: WorkoutEngine = Depends(get_engine),
) -> LoggedSet:
    """Mark a set completed and start the rest timer."""
    try:
        return engine.set_logger.log_set(
            exercise_index, set_index, reps=request.reps, weight=request.weight
        )
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e


@router.post(
    "/session/exercises/{exercise_index}/sets",
    response_model=AddSetResponse,
    status_code=201,
)
async def add_set(
    exercise_index: int, engine: WorkoutEngine = Depends(get_engine)
) -> AddSetResponse:
    try:
        set_index = engine.set_logger.add_set(exercise_index)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return AddSetResponse(set_index=set_index, session=engine.controller.snapshot())


# ========== Rest timer ==========


@router.get("/timer", response_model=TimerSnapshot)
async def get_timer(engine: WorkoutEngine = Depends(get_engine)) -> TimerSnapshot:
    return engine.timer.snapshot()


@router.post("/timer/start", response_model=TimerSnapshot)
async def start_timer(
    request: TimerStartRequest = TimerStartRequest(),
    engine: WorkoutEngine = Depends(get_engine),
) -> TimerSnapshot:
    engine.timer.start(request.duration_seconds)
    return engine.timer.snapshot()


@router.post("/timer/pause", response_model=TimerSnapshot)
async def pause_timer(engine: WorkoutEngine = Depends(get_engine)) -> TimerSnapshot:
    try:
        engine.timer.pause()
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return engine.timer.snapshot()


@router.post("/timer/resume", response_model=TimerSnapshot)
async def resume_timer(engine: WorkoutEngine = Depends(get_engine)) -> TimerSnapshot:
    try:
        engine.timer.resume()
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return engine.timer.snapshot()


@router.post("/timer/stop", response_model=TimerSnapshot)
async def stop_timer(engine: WorkoutEngine = Depends(get_engine)) -> TimerSnapshot:
    engine.timer.stop()
    return engine.timer.snapshot()
