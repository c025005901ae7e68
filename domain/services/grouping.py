"""
Grouping resolver for session exercise lists.

Pure functions over an ordered sequence of exercises. A group (superset or
circuit) is a contiguous run of exercises sharing a group id; an ungrouped
exercise is a unit of its own. Display numbers count units, not exercises:

    [Row, Curl(g1), Pushdown(g1), Plank]  ->  [1, 2, 2, 3]

Nothing here mutates its input. Mutating helpers return new lists.
"""

import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set

from domain.models import Exercise, GroupType

# Initial member count of a freshly created group
GROUP_SIZES: Dict[GroupType, int] = {
    GroupType.SUPERSET: 2,
    GroupType.CIRCUIT: 3,
}


class GroupingError(ValueError):
    """Raised when an operation would break group structure or its precondition fails."""


@dataclass(frozen=True)
class GroupRun:
    """A contiguous unit: one group, or one ungrouped exercise."""

    start: int
    end: int  # inclusive
    display_number: int
    group_type: Optional[GroupType] = None
    group_id: Optional[str] = None

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    @property
    def is_group(self) -> bool:
        return self.group_id is not None


def _check_index(exercises: Sequence[Exercise], index: int) -> None:
    if not 0 <= index < len(exercises):
        raise IndexError(f"exercise index {index} out of range (0..{len(exercises) - 1})")


def is_first_in_group(exercises: Sequence[Exercise], index: int) -> bool:
    """
    Check whether the exercise at ``index`` opens a unit.

    True at index 0, for every ungrouped exercise, and wherever the group
    differs from the previous exercise's group.
    """
    _check_index(exercises, index)
    if index == 0:
        return True
    return not exercises[index].in_same_group(exercises[index - 1])


def is_last_in_group(exercises: Sequence[Exercise], index: int) -> bool:
    """
    Check whether the exercise at ``index`` closes a unit.

    True at the last index, for every ungrouped exercise, and wherever the
    next exercise belongs to a different group.
    """
    _check_index(exercises, index)
    if index == len(exercises) - 1:
        return True
    return not exercises[index].in_same_group(exercises[index + 1])


def compute_numbering(exercises: Sequence[Exercise]) -> List[int]:
    """
    Compute the display number of every exercise.

    The counter starts at 1 and advances once per unit. Each number depends
    only on the exercises before and at its own index.

    Args:
        exercises: Session exercises in order.

    Returns:
        One display number per exercise (empty for an empty session).
    """
    numbers: List[int] = []
    current = 0
    for index in range(len(exercises)):
        if is_first_in_group(exercises, index):
            current += 1
        numbers.append(current)
    return numbers


def display_number(exercises: Sequence[Exercise], index: int) -> int:
    """Display number of a single exercise, computed from its prefix only."""
    _check_index(exercises, index)
    return compute_numbering(exercises[: index + 1])[-1]


def group_runs(exercises: Sequence[Exercise]) -> List[GroupRun]:
    """Split the sequence into its units, in order."""
    runs: List[GroupRun] = []
    start = 0
    numbers = compute_numbering(exercises)
    for index, exercise in enumerate(exercises):
        if is_last_in_group(exercises, index):
            runs.append(
                GroupRun(
                    start=start,
                    end=index,
                    display_number=numbers[index],
                    group_type=exercise.group_type,
                    group_id=exercise.group_id,
                )
            )
            start = index + 1
    return runs


def count_group_headers(exercises: Sequence[Exercise]) -> int:
    """Number of grouped units, i.e. headers drawn above a superset or circuit."""
    return sum(1 for run in group_runs(exercises) if run.is_group)


def validate_grouping(exercises: Sequence[Exercise]) -> None:
    """
    Enforce group structure.

    Raises:
        GroupingError: If two exercises share a group id with different group
            types, or a group's members are not contiguous.
    """
    seen_types: Dict[str, GroupType] = {}
    closed: Set[str] = set()
    previous_id: Optional[str] = None

    for index, exercise in enumerate(exercises):
        group_id = exercise.group_id
        if group_id is not None:
            known_type = seen_types.setdefault(group_id, exercise.group_type)
            if known_type != exercise.group_type:
                raise GroupingError(
                    f"group {group_id!r} mixes {known_type.value} and "
                    f"{exercise.group_type.value} at index {index}"
                )
            if group_id in closed:
                raise GroupingError(f"group {group_id!r} is not contiguous (index {index})")
        if previous_id is not None and previous_id != group_id:
            closed.add(previous_id)
        previous_id = group_id


def new_group(
    group_type: GroupType,
    *,
    session_id: str = "",
    group_id: Optional[str] = None,
) -> List[Exercise]:
    """
    Build the placeholder members of a new group.

    Supersets start with two members, circuits with three.
    """
    group_id = group_id or str(uuid.uuid4())
    return [
        Exercise(group_type=group_type, group_id=group_id, session_id=session_id)
        for _ in range(GROUP_SIZES[group_type])
    ]


def append_to_circuit(
    exercises: Sequence[Exercise],
    after_index: int,
    new_exercise: Exercise,
) -> List[Exercise]:
    """
    Insert ``new_exercise`` right after ``after_index`` as a circuit member.

    The new exercise takes the anchor's group id and type, and the anchor's
    sets when it has none of its own.

    Raises:
        GroupingError: If the anchor is ungrouped or not part of a circuit.
    """
    _check_index(exercises, after_index)
    anchor = exercises[after_index]
    if anchor.group_id is None:
        raise GroupingError(f"exercise at index {after_index} is not in a group")
    if anchor.group_type != GroupType.CIRCUIT:
        raise GroupingError(
            f"only circuits can grow; index {after_index} is a {anchor.group_type.value}"
        )

    update = {"group_id": anchor.group_id, "group_type": anchor.group_type}
    if new_exercise.sets == 0:
        update["sets"] = anchor.sets
    if not new_exercise.session_id:
        update["session_id"] = anchor.session_id

    result = list(exercises)
    result.insert(after_index + 1, new_exercise.model_copy(update=update))
    return result


def remove_at(exercises: Sequence[Exercise], index: int) -> List[Exercise]:
    """Remove one exercise. Remaining group membership is left untouched."""
    _check_index(exercises, index)
    return [exercise for i, exercise in enumerate(exercises) if i != index]


def set_group_sets(exercises: Sequence[Exercise], index: int, sets: int) -> List[Exercise]:
    """
    Set the number of sets of the unit containing ``index``.

    Members of one group share their set count; an ungrouped exercise is
    updated alone.
    """
    _check_index(exercises, index)
    if sets < 0:
        raise ValueError("sets must be non-negative")
    for run in group_runs(exercises):
        if run.start <= index <= run.end:
            break
    return [
        exercise.model_copy(update={"sets": sets}) if run.start <= i <= run.end else exercise
        for i, exercise in enumerate(exercises)
    ]
