"""
Domain layer for the training-session core.

This package contains pure domain models and services that are independent
of infrastructure concerns (network, storage, rendering).
"""

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

__all__ = [
    "Client",
    "Exercise",
    "GroupType",
    "Meal",
    "MealItem",
    "Nutrition",
    "Reps",
    "Session",
    "Time",
]
