"""
Exercise value object for workout sessions.

An exercise is prescribed either by reps or by time, never both. The metric
is modelled as a tagged variant so the exclusivity lives in the type rather
than in two nullable fields.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

# Id carried by an exercise that has not been persisted yet
UNSAVED_ID = ""


class GroupType(str, Enum):
    """
    How a group of exercises is performed.

    - SUPERSET: two exercises back-to-back without rest
    - CIRCUIT: three or more exercises in sequence, repeated as rounds
    """

    SUPERSET = "superset"
    CIRCUIT = "circuit"


class Reps(BaseModel):
    """Rep-based prescription (e.g. 3 x 10)."""

    kind: Literal["reps"] = "reps"
    count: int = Field(default=0, ge=0, description="Reps per set")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.count} reps"


class Time(BaseModel):
    """Time-based prescription (e.g. 3 x 45s plank)."""

    kind: Literal["time"] = "time"
    seconds: int = Field(default=0, ge=0, description="Work time per set in seconds")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.seconds}s"


ExerciseMetric = Annotated[Union[Reps, Time], Field(discriminator="kind")]


class Exercise(BaseModel):
    """
    Value object representing one exercise within a session.

    Exercises are replaced wholesale on update (no partial patches), so the
    model is frozen; use ``model_copy(update=...)`` to derive a changed copy.

    Group membership is optional. ``group_id`` is present if and only if
    ``group_type`` is set.

    Examples:
        >>> Exercise(name="Bench Press", sets=4, metric=Reps(count=8), weight=60)
        >>> Exercise(name="Plank", sets=3, metric=Time(seconds=45))
        >>> Exercise(
        ...     name="Bicep Curl",
        ...     sets=3,
        ...     group_type=GroupType.SUPERSET,
        ...     group_id="g-1",
        ... )
    """

    id: str = Field(
        default=UNSAVED_ID,
        description="Server-assigned id. Empty until the first successful create.",
    )
    name: str = Field(default="", description="Exercise name as entered by the trainer")
    sets: int = Field(default=0, ge=0, description="Number of sets")
    metric: ExerciseMetric = Field(
        default_factory=Reps, description="Reps or time prescription"
    )
    weight: float = Field(default=0.0, ge=0, description="Working weight")
    group_type: Optional[GroupType] = Field(
        default=None, description="Superset/circuit membership, None when ungrouped"
    )
    group_id: Optional[str] = Field(
        default=None, description="Opaque id shared by every member of one group"
    )
    session_id: str = Field(default="", description="Owning session id")

    @model_validator(mode="after")
    def validate_group_membership(self) -> "Exercise":
        """group_id and group_type must be set together."""
        if (self.group_id is None) != (self.group_type is None):
            raise ValueError("group_id must be present if and only if group_type is set")
        if self.group_id == "":
            raise ValueError("group_id must not be empty")
        return self

    @property
    def is_new(self) -> bool:
        """True until the server has assigned an id."""
        return self.id == UNSAVED_ID

    @property
    def is_grouped(self) -> bool:
        return self.group_id is not None

    @property
    def is_timed(self) -> bool:
        return isinstance(self.metric, Time)

    @property
    def reps(self) -> int:
        """Rep count, 0 for time-based exercises."""
        return self.metric.count if isinstance(self.metric, Reps) else 0

    @property
    def time_seconds(self) -> Optional[int]:
        """Work time in seconds, None for rep-based exercises."""
        return self.metric.seconds if isinstance(self.metric, Time) else None

    def in_same_group(self, other: "Exercise") -> bool:
        """Check whether both exercises belong to the same group."""
        return (
            self.group_id is not None
            and self.group_id == other.group_id
            and self.group_type == other.group_type
        )

    def __str__(self) -> str:
        parts = [self.name or "(unnamed)"]
        if self.sets:
            parts.append(f"{self.sets}x{self.metric}")
        if self.weight:
            parts.append(f"@ {self.weight:g}")
        if self.group_type is not None:
            parts.append(f"[{self.group_type.value}]")
        return " ".join(parts)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Bench Press",
                    "sets": 4,
                    "metric": {"kind": "reps", "count": 8},
                    "weight": 60,
                },
                {
                    "name": "Plank",
                    "sets": 3,
                    "metric": {"kind": "time", "seconds": 45},
                    "group_type": "circuit",
                    "group_id": "c-1",
                },
            ]
        },
    }
