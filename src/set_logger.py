"""Set logging operations on the active session."""

import logging
from typing import get_args

from errors import IncompleteSetError, SetIndexError
from rest_timer import RestTimer
from session_controller import SessionController
from typedefs import LoggedSet, SessionExercise, SetField, SetValue, is_blank

logger = logging.getLogger(__name__)

SET_FIELDS = get_args(SetField)


class SetLogger:
    """Mutates the set records of the controller's active session.

    Holds no session state of its own; every call looks the session up on
    the controller, so calls made while idle raise ``InvalidStateError``.

    Args:
        controller: Owner of the active session
        timer: Rest timer (re)started whenever a set is logged
        require_both_values: When True, ``log_set`` needs reps AND weight.
            By default one of the two is enough.
    """

    def __init__(
        self,
        controller: SessionController,
        timer: RestTimer,
        require_both_values: bool = False,
    ):
        self._controller = controller
        self._timer = timer
        self.require_both_values = require_both_values

    def _get_exercise(self, exercise_index: int) -> SessionExercise:
        exercises = self._controller.current_session().exercises
        if not 0 <= exercise_index < len(exercises):
            raise SetIndexError(
                f"Exercise index {exercise_index} out of range", exercise_index
            )
        return exercises[exercise_index]

    def _get_set(self, exercise_index: int, set_index: int) -> LoggedSet:
        sets = self._get_exercise(exercise_index).logged_sets
        if not 0 <= set_index < len(sets):
            raise SetIndexError(
                f"Set index {set_index} out of range for exercise {exercise_index}",
                exercise_index,
                set_index,
            )
        return sets[set_index]

    def update_set_field(
        self, exercise_index: int, set_index: int, field: SetField, value: SetValue
    ) -> LoggedSet:
        """Write ``reps`` or ``weight`` on a set.

        Values are stored as given. Editing a completed set keeps it completed.
        """
        if field not in SET_FIELDS:
            raise ValueError(f"Unknown set field '{field}'")

        logged_set = self._get_set(exercise_index, set_index)
        setattr(logged_set, field, value)
        return logged_set.model_copy()

    def log_set(
        self,
        exercise_index: int,
        set_index: int,
        reps: SetValue = None,
        weight: SetValue = None,
    ) -> LoggedSet:
        """Mark a set completed and restart the rest timer.

        ``reps``/``weight``, when given, are written into the set first.
        Logging a set that is already completed changes nothing and leaves
        the timer alone.

        Raises:
            IncompleteSetError: If the values the policy requires are blank
        """
        logged_set = self._get_set(exercise_index, set_index)
        if logged_set.completed:
            logger.debug(
                "Set %s of exercise %s already logged", set_index, exercise_index
            )
            return logged_set.model_copy()

        new_reps = logged_set.reps if reps is None else reps
        new_weight = logged_set.weight if weight is None else weight

        if self.require_both_values:
            if is_blank(new_reps) or is_blank(new_weight):
                raise IncompleteSetError("Both reps and weight are required to log a set")
        elif is_blank(new_reps) and is_blank(new_weight):
            raise IncompleteSetError("Enter reps or weight before logging a set")

        logged_set.reps = new_reps
        logged_set.weight = new_weight
        logged_set.completed = True
        self._timer.start()
        return logged_set.model_copy()

    def add_set(self, exercise_index: int) -> int:
        """Append an empty set to an exercise and return its index."""
        exercise = self._get_exercise(exercise_index)
        exercise.logged_sets.append(LoggedSet())
        return len(exercise.logged_sets) - 1
