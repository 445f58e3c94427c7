"""Workout engine exceptions."""


class WorkoutEngineError(Exception):
    """Base exception for workout engine errors."""

    pass


class ConflictError(WorkoutEngineError):
    """Raised when a session is started while another is in progress."""

    pass


class InvalidStateError(WorkoutEngineError):
    """Raised when an operation is invoked outside its valid state."""

    pass


class SetIndexError(WorkoutEngineError, IndexError):
    """Raised when an exercise or set index is out of range."""

    def __init__(self, message: str, exercise_index: int, set_index: int | None = None):
        super().__init__(message)
        self.exercise_index = exercise_index
        self.set_index = set_index


class IncompleteSetError(WorkoutEngineError, ValueError):
    """Raised when a set is logged without the values it needs."""

    pass


class PersistenceError(WorkoutEngineError):
    """Raised when the log store fails to append or stream records."""

    pass


class TemplateNotFoundError(WorkoutEngineError, LookupError):
    """Raised when a template provider has no template with the given ID."""

    def __init__(self, template_id: str):
        super().__init__(f"Template '{template_id}' not found")
        self.template_id = template_id
