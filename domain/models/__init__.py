"""
Domain models for the training-session core.

This package contains pure domain models that are independent of
infrastructure concerns (network, storage, rendering).

These models represent the core business concepts:
- Session: The aggregate root holding an ordered list of exercises
- Exercise: A single exercise with sets, reps-or-time, weight and grouping
- Client: The person a trainer writes sessions for
- Nutrition: A client's meal plan

Usage:
    >>> from domain.models import Exercise, Reps, Session

    >>> session = Session(
    ...     id="s1",
    ...     workout_name="Upper Body",
    ...     client_id="c1",
    ...     exercises=[Exercise(id="e1", name="Row", sets=3, metric=Reps(count=10))],
    ... )
"""

from domain.models.client import Client, Meal, MealItem, Nutrition
from domain.models.exercise import (
    UNSAVED_ID,
    Exercise,
    ExerciseMetric,
    GroupType,
    Reps,
    Time,
)
from domain.models.session import Session, reattach_exercises

__all__ = [
    # Main entities
    "Session",
    "Exercise",
    "Client",
    "Nutrition",
    "Meal",
    "MealItem",
    # Exercise metric variant
    "ExerciseMetric",
    "Reps",
    "Time",
    # Enums and constants
    "GroupType",
    "UNSAVED_ID",
    # Helpers
    "reattach_exercises",
]
