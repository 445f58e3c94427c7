"""REST API endpoints for reading workout templates."""

from typing import List

from fastapi import APIRouter, Depends

from engine import WorkoutEngine, get_engine
from errors import WorkoutEngineError
from sessions_api import to_http_exception
from typedefs import WorkoutTemplate

router = APIRouter(prefix="/api/v1/templates", tags=["templates"])


@router.get("/{template_id}", response_model=WorkoutTemplate)
def get_template(
    template_id: str, engine: WorkoutEngine = Depends(get_engine)
) -> WorkoutTemplate:
    """Get a specific template by ID.

    Args:
        template_id: ID of the template to retrieve
        engine: Workout engine

    Returns:
        WorkoutTemplate with its exercises

    Raises:
        HTTPException: 404 if template not found
    """
    try:
        return engine.templates.get(template_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e


@router.get("", response_model=List[WorkoutTemplate])
def list_templates(engine: WorkoutEngine = Depends(get_engine)) -> List[WorkoutTemplate]:
    """List all templates sorted by name."""
    try:
        return engine.templates.list()
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
