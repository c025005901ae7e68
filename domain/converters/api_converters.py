"""
Converters: REST API JSON <-> domain models.

The backend is a document store; documents carry their id in ``_id`` and
reference their owner by a bare id field (``client``, ``session``).

Exercise documents:
- _id, exerciseName, sets, reps, weight
- time: present (non-null) only for time-based exercises; reps is 0 then
- groupType ("superset" | "circuit") and groupId: optional. Stored documents
  may carry groupType without groupId; consecutive such documents of the same
  type form one group whose id is derived from its first member
- session: owning session id

Session documents:
- _id, workoutName, client, isCompleted
- completedDate: ISO-8601 string, "" or null when not completed. A session
  flagged completed without a readable date is read as not completed
- exercises: full exercise documents, or bare exercise ids
- sessionNumber: optional ordinal
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from domain.models import (
    Client,
    Exercise,
    GroupType,
    Meal,
    MealItem,
    Nutrition,
    Reps,
    Session,
    Time,
)

logger = logging.getLogger(__name__)


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; empty values mean no timestamp."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# =============================================================================
# Exercise
# =============================================================================


def derived_group_id(group_type: str, first_member_id: str) -> str:
    """Group id for stored members that carry a group type but no group id."""
    return f"{group_type}-{first_member_id}"


def exercise_from_api(
    data: Dict[str, Any], fallback_group_id: Optional[str] = None
) -> Exercise:
    """
    Convert an exercise document to a domain Exercise.

    Args:
        data: Exercise document.
        fallback_group_id: Group id to use when the document has a group type
            but no group id. Defaults to one derived from the document's id.

    Raises:
        KeyError: If the id is missing.
        pydantic.ValidationError: If field values violate the model.
    """
    exercise_id = data["_id"]
    time = data.get("time")
    metric = Time(seconds=time) if time is not None else Reps(count=data.get("reps") or 0)
    group_type = data.get("groupType")
    group_id = None
    if group_type:
        group_id = (
            data.get("groupId")
            or fallback_group_id
            or derived_group_id(group_type, exercise_id)
        )
    return Exercise(
        id=exercise_id,
        name=data.get("exerciseName") or "",
        sets=data.get("sets") or 0,
        metric=metric,
        weight=data.get("weight") or 0.0,
        group_type=GroupType(group_type) if group_type else None,
        group_id=group_id,
        session_id=data.get("session") or "",
    )


def exercises_from_api(
    entries: Sequence[Any], session_id: Optional[str] = None
) -> List[Exercise]:
    """
    Convert an ordered list of exercise documents.

    Bare string entries become placeholders for ``session_id``. Consecutive
    documents with the same group type and no group id share the id derived
    from the first of them.

    Raises:
        TypeError: If ``entries`` is not a list.
    """
    if not isinstance(entries, list):
        raise TypeError(f"Expected a list of exercises, got {type(entries).__name__}")

    exercises: List[Exercise] = []
    run_type: Optional[str] = None
    run_id: Optional[str] = None
    for entry in entries:
        if isinstance(entry, str):
            exercises.append(exercise_placeholder(entry, session_id or ""))
            run_type = run_id = None
            continue

        group_type = entry.get("groupType")
        if group_type and not entry.get("groupId"):
            if group_type != run_type:
                run_type = group_type
                run_id = derived_group_id(group_type, entry["_id"])
        else:
            run_type = run_id = None
        exercises.append(exercise_from_api(entry, fallback_group_id=run_id))
    return exercises


def exercise_placeholder(exercise_id: str, session_id: str) -> Exercise:
    """Stand-in for an exercise the server returned as a bare id."""
    return Exercise(id=exercise_id, session_id=session_id)


def exercise_to_api(exercise: Exercise, session_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Convert an Exercise to its create/replace request body.

    Args:
        exercise: Exercise to send.
        session_id: Owning session; defaults to ``exercise.session_id``.
    """
    payload: Dict[str, Any] = {
        "exerciseName": exercise.name,
        "sets": exercise.sets,
        "reps": exercise.reps,
        "weight": exercise.weight,
        "session": session_id or exercise.session_id,
    }
    if exercise.time_seconds is not None:
        payload["time"] = exercise.time_seconds
    if exercise.group_type is not None:
        payload["groupType"] = exercise.group_type.value
        payload["groupId"] = exercise.group_id
    return payload


# =============================================================================
# Session
# =============================================================================


def session_from_api(data: Dict[str, Any]) -> Session:
    """
    Convert a session document to a domain Session.

    Exercises may arrive expanded or as bare ids; bare ids become
    placeholders that the caller is expected to re-attach.
    """
    session_id = data["_id"]
    exercises = exercises_from_api(data.get("exercises") or [], session_id)

    is_completed = bool(data.get("isCompleted", False))
    completed_date = None
    if is_completed:
        try:
            completed_date = _parse_datetime(data.get("completedDate"))
        except ValueError:
            completed_date = None
        if completed_date is None:
            logger.warning(
                f"Session {session_id} is completed without a readable completedDate; "
                "reading it as not completed"
            )
            is_completed = False

    return Session(
        id=session_id,
        workout_name=data.get("workoutName") or "",
        client_id=data["client"],
        exercises=exercises,
        is_completed=is_completed,
        completed_date=completed_date,
        session_number=data.get("sessionNumber"),
    )


def session_create_payload(client_id: str, workout_name: str) -> Dict[str, Any]:
    """Request body for a new, empty, active session."""
    return {
        "workoutName": workout_name,
        "client": client_id,
        "isCompleted": False,
        "completedDate": None,
        "exercises": [],
    }


def session_update_payload(session: Session) -> Dict[str, Any]:
    """
    Reduced request body for a session update.

    Only the session's own fields and the exercise id list are sent; the
    nested exercise objects are never serialized here.
    """
    return {
        "workoutName": session.workout_name,
        "isCompleted": session.is_completed,
        "completedDate": _format_datetime(session.completed_date),
        "client": session.client_id,
        "exercises": session.exercise_ids,
    }


# =============================================================================
# Client
# =============================================================================


def client_from_api(data: Dict[str, Any]) -> Client:
    """Client listings use ``id``; single-client responses use ``_id``."""
    return Client(
        id=data["_id"] if "_id" in data else data["id"],
        name=data["name"],
        age=data.get("age") or 0,
        height=data.get("height") or 0.0,
        weight=data.get("weight") or 0.0,
        medical_history=data.get("medicalHistory") or "",
        goals=data.get("goals") or "",
        client_image=data.get("clientImage") or "",
        owner_id=data.get("user"),
    )


def client_to_api(client: Client) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": client.name,
        "age": client.age,
        "height": client.height,
        "weight": client.weight,
        "medicalHistory": client.medical_history,
        "goals": client.goals,
        "clientImage": client.client_image,
    }
    if client.owner_id:
        payload["user"] = client.owner_id
    return payload


# =============================================================================
# Nutrition
# =============================================================================


def nutrition_from_api(data: Dict[str, Any]) -> Nutrition:
    return Nutrition(
        id=data.get("_id") or "",
        client_id=data.get("client") or "",
        meals=[
            Meal(
                meal_name=meal["mealName"],
                items=[
                    MealItem(name=item["name"], quantity=str(item.get("quantity") or ""))
                    for item in meal.get("items") or []
                ],
            )
            for meal in data.get("meals") or []
        ],
    )


def meals_to_api(meals: Sequence[Meal]) -> List[Dict[str, Any]]:
    return [
        {
            "mealName": meal.meal_name,
            "items": [{"name": item.name, "quantity": item.quantity} for item in meal.items],
        }
        for meal in meals
    ]
