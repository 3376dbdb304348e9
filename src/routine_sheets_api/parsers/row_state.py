"""
Row State

Turns a stream of sheet rows into the group -> exercise -> set hierarchy.

Two small pieces, both free of any spreadsheet I/O:
- CarryForward fills blank muscle group / exercise / variant cells with the
  last value seen, the way a merged-looking column reads to a person.
- SheetAccumulator is an explicit state machine (NO_GROUP, IN_GROUP,
  IN_EXERCISE) driven by (group_changed, exercise_changed) per data row.
  Closing an exercise or group keeps it only when it holds data.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import Exercise, ExerciseSet, MuscleGroup

logger = logging.getLogger(__name__)


class RowState(str, Enum):
    NO_GROUP = "no_group"
    IN_GROUP = "in_group"
    IN_EXERCISE = "in_exercise"


# (state, group_changed, exercise_changed) -> actions run before the set is appended
TRANSITIONS: Dict[Tuple[RowState, bool, bool], Tuple[str, ...]] = {
    (RowState.NO_GROUP, True, True): ("open_group", "open_exercise"),
    (RowState.IN_GROUP, True, True): ("close_group", "open_group", "open_exercise"),
    (RowState.IN_GROUP, False, True): ("open_exercise",),
    (RowState.IN_EXERCISE, True, True): (
        "close_exercise", "close_group", "open_group", "open_exercise",
    ),
    (RowState.IN_EXERCISE, False, True): ("close_exercise", "open_exercise"),
    (RowState.IN_EXERCISE, False, False): (),
}


class CarryForward:
    """Remembers the last non-empty group, exercise and variant"""

    def __init__(self):
        self.group = ""
        self.exercise = ""
        self.variant = ""

    def resolve(self, group: str, exercise: str, variant: str) -> Tuple[str, str, str]:
        """
        Fill blanks from memory and remember the result.

        The variant is only inherited while the exercise name stays the same:
        a row that names a different exercise starts from its own variant
        cell, so a plain exercise following a variant one does not pick up
        that variant.
        """
        group = group or self.group
        if not exercise or exercise == self.exercise:
            exercise = exercise or self.exercise
            variant = variant or self.variant

        if group:
            self.group = group
        if exercise:
            self.exercise = exercise
            self.variant = variant
        return group, exercise, variant


class SheetAccumulator:
    """Accumulates data rows of one sheet into muscle groups"""

    def __init__(self):
        self.state = RowState.NO_GROUP
        self.groups: List[MuscleGroup] = []
        self._group: Optional[MuscleGroup] = None
        self._exercise: Optional[Exercise] = None

    @property
    def current_group(self) -> Optional[str]:
        return self._group.name if self._group else None

    @property
    def current_exercise(self) -> Optional[Tuple[str, str]]:
        return self._exercise.key if self._exercise else None

    def add_set(
        self,
        group: str,
        exercise: str,
        variant: str,
        weight: float,
        reps: str,
        rest: int,
        progress: float,
    ) -> bool:
        """
        Append one set, opening/closing groups and exercises as needed.

        Returns False when the row cannot be placed (no group or exercise name
        known yet); such rows are dropped.
        """
        if not group or not exercise:
            logger.debug(f"Dropping set without group/exercise ({group!r}, {exercise!r})")
            return False

        group_changed = group != self.current_group
        exercise_changed = group_changed or (exercise, variant) != self.current_exercise

        for action in TRANSITIONS[(self.state, group_changed, exercise_changed)]:
            if action == "close_exercise":
                self._close_exercise()
            elif action == "close_group":
                self._close_group()
            elif action == "open_group":
                self._group = MuscleGroup(name=group)
                self.state = RowState.IN_GROUP
            elif action == "open_exercise":
                self._exercise = Exercise(name=exercise, variant=variant)
                self.state = RowState.IN_EXERCISE

        self._exercise.sets.append(
            ExerciseSet(
                series=len(self._exercise.sets) + 1,
                weight=weight,
                reps=reps,
                rest=rest,
                progress=progress,
            )
        )
        return True

    def finish(self) -> List[MuscleGroup]:
        """Flush whatever is still open and return the non-empty groups"""
        if self.state == RowState.IN_EXERCISE:
            self._close_exercise()
        if self.state == RowState.IN_GROUP:
            self._close_group()
        return self.groups

    def _close_exercise(self):
        if self._exercise is not None and self._exercise.sets and self._group is not None:
            self._group.exercises.append(self._exercise)
        self._exercise = None
        self.state = RowState.IN_GROUP

    def _close_group(self):
        if self._group is not None and self._group.exercises:
            self.groups.append(self._group)
        self._group = None
        self.state = RowState.NO_GROUP
