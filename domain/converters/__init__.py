"""
Domain converters between REST API documents and domain models.

All converters are pure functions with no side effects.

Examples:
    >>> from domain.converters import session_from_api, session_update_payload

    >>> session = session_from_api({"_id": "s1", "workoutName": "Legs", "client": "c1"})
    >>> body = session_update_payload(session)
"""

from domain.converters.api_converters import (
    client_from_api,
    client_to_api,
    derived_group_id,
    exercise_from_api,
    exercise_placeholder,
    exercise_to_api,
    exercises_from_api,
    meals_to_api,
    nutrition_from_api,
    session_create_payload,
    session_from_api,
    session_update_payload,
)

__all__ = [
    "client_from_api",
    "client_to_api",
    "derived_group_id",
    "exercise_from_api",
    "exercise_placeholder",
    "exercise_to_api",
    "exercises_from_api",
    "meals_to_api",
    "nutrition_from_api",
    "session_create_payload",
    "session_from_api",
    "session_update_payload",
]
