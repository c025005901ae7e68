"""
Client and nutrition plan models.

A client owns zero or more sessions and at most one nutrition plan. Server
side, deleting a client cascades to its sessions and their exercises.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Client(BaseModel):
    """A personal-training client."""

    id: str = Field(default="", description="Server-assigned id, empty before create")
    name: str = Field(..., min_length=1)
    age: int = Field(default=0, ge=0)
    height: float = Field(default=0.0, ge=0)
    weight: float = Field(default=0.0, ge=0)
    medical_history: str = Field(default="")
    goals: str = Field(default="")
    client_image: str = Field(default="", description="Image URL")
    owner_id: Optional[str] = Field(default=None, description="Trainer who owns the client")


class MealItem(BaseModel):
    """One food item of a meal. Quantity is free text (e.g. '2 slices')."""

    name: str = Field(..., min_length=1)
    quantity: str = Field(default="")

    model_config = {"frozen": True}


class Meal(BaseModel):
    meal_name: str = Field(..., min_length=1)
    items: List[MealItem] = Field(default_factory=list)

    model_config = {"frozen": True}


class Nutrition(BaseModel):
    """
    Nutrition plan of a client.

    An empty id means the client has no stored plan yet.
    """

    id: str = Field(default="")
    client_id: str = Field(default="")
    meals: List[Meal] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.id and not self.meals
