"""
Session aggregate - an ordered list of exercises plus workout metadata.

Exercise order is load-bearing: it determines display numbering and group
adjacency, and it must match the order the server reconstructs from
creation order. Nothing in this model re-sorts exercises.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from domain.models.exercise import Exercise


class Session(BaseModel):
    """
    Aggregate root for one workout session of a client.

    The completion timestamp is present if and only if the session is
    completed; ``toggled_completion`` keeps both in step.
    """

    id: str = Field(..., min_length=1, description="Server-assigned session id")
    workout_name: str = Field(..., description="Workout name shown in lists")
    client_id: str = Field(..., min_length=1, description="Owning client id")
    exercises: List[Exercise] = Field(
        default_factory=list, description="Ordered exercises of this session"
    )
    is_completed: bool = Field(default=False)
    completed_date: Optional[datetime] = Field(
        default=None, description="Set iff is_completed is True"
    )
    session_number: Optional[int] = Field(
        default=None, ge=1, description="Ordinal used for list and report ordering"
    )

    @model_validator(mode="after")
    def validate_completion(self) -> "Session":
        """Completion timestamp and flag must agree."""
        if self.is_completed and self.completed_date is None:
            raise ValueError("completed session requires completed_date")
        if not self.is_completed and self.completed_date is not None:
            raise ValueError("completed_date set on a session that is not completed")
        return self

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def exercise_ids(self) -> List[str]:
        return [exercise.id for exercise in self.exercises]

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)

    # -------------------------------------------------------------------------
    # Domain Methods
    # -------------------------------------------------------------------------

    def toggled_completion(self, now: datetime) -> "Session":
        """
        Return a copy with the completion flag flipped.

        Args:
            now: Timestamp recorded when the session becomes complete.

        Returns:
            New Session; completed_date is ``now`` or cleared.
        """
        completed = not self.is_completed
        return self.model_copy(
            update={
                "is_completed": completed,
                "completed_date": now if completed else None,
            }
        )

    def with_exercises(self, exercises: Sequence[Exercise]) -> "Session":
        """Return a copy holding the given exercise objects, in order."""
        return self.model_copy(update={"exercises": list(exercises)})

    def index_of(self, exercise_id: str) -> Optional[int]:
        for index, exercise in enumerate(self.exercises):
            if exercise.id == exercise_id:
                return index
        return None

    def __str__(self) -> str:
        state = "done" if self.is_completed else "active"
        return f"{self.workout_name} ({len(self.exercises)} exercises, {state})"


def reattach_exercises(echoed: Session, local_exercises: Sequence[Exercise]) -> Session:
    """
    Re-attach locally held exercise objects to a server echo.

    The session-update endpoint may return exercises as bare id references.
    Each echoed exercise is replaced by the local object with the same id;
    ids the local copy does not know keep the echoed value. An echo with no
    exercises at all keeps the local list as-is.

    Args:
        echoed: Session decoded from the update response.
        local_exercises: Exercise objects held before the update.

    Returns:
        The echoed session carrying full exercise objects.
    """
    if not echoed.exercises:
        return echoed.with_exercises(local_exercises)

    by_id = {exercise.id: exercise for exercise in local_exercises}
    return echoed.with_exercises(
        [by_id.get(exercise.id, exercise) for exercise in echoed.exercises]
    )
