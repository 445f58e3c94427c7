"""REST API endpoint for the workout history feed."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from engine import WorkoutEngine, get_engine
from typedefs import WorkoutLog

router = APIRouter(prefix="/api/v1/history", tags=["history"])


class HistoryEntry(BaseModel):
    log: WorkoutLog
    duration_minutes: Optional[int]
    summary: str


class HistoryResponse(BaseModel):
    """Latest history pushed by the log store.

    ``degraded`` is set when the feed failed; ``logs`` then holds the last
    history that was received.
    """

    logs: List[HistoryEntry]
    degraded: bool
    notice: Optional[str] = None
    updated_at: Optional[datetime] = None


@router.get("", response_model=HistoryResponse)
async def get_history(engine: WorkoutEngine = Depends(get_engine)) -> HistoryResponse:
    """Finished workouts, most recent first."""
    feed = engine.history
    if not feed.is_open:
        feed.open()

    return HistoryResponse(
        logs=[
            HistoryEntry(
                log=log, duration_minutes=log.duration_minutes, summary=log.summary()
            )
            for log in feed.logs
        ],
        degraded=feed.degraded,
        notice=feed.notice,
        updated_at=feed.updated_at,
    )
