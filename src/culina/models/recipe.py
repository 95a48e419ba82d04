"""
Recipe payload models.

The completion gateway is asked for a single JSON object with this shape.
Validation is lenient on presentation details (difficulty spelling,
numbers written with units like "450 kcal" or "4 personnes") and strict
only on what a usable recipe needs: a title and at least one step.
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Leading number, decimal point or comma; "1/2" and "2-3" are not numbers
_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:[.,]\d+)?)(?![\d/.,-])")


def _number_or_none(value: Any) -> Any:
    """Numeric value, the number a string starts with, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    match = _LEADING_NUMBER.match(str(value))
    if match is None:
        return None
    return float(match.group(1).replace(",", "."))


def _whole_number_or_none(value: Any) -> Any:
    number = _number_or_none(value)
    return None if number is None else int(round(number))


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class NutritionalInfo(BaseModel):
    """Per-serving nutrition estimate."""

    model_config = ConfigDict(extra="ignore")

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None

    @field_validator("calories", "protein", "carbs", "fat", mode="before")
    @classmethod
    def _numeric_or_none(cls, value: Any) -> Any:
        return _number_or_none(value)


class IngredientPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    quantity: float | None = None
    unit: str | None = None
    order_index: int | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _numeric_or_none(cls, value: Any) -> Any:
        # "to taste", "1/2", "" -> stored as null rather than failing the recipe
        return _number_or_none(value)


class StepPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    step_number: int | None = None
    instruction: str


class RecipePayload(BaseModel):
    """Structured recipe decoded from the model response."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str | None = None
    prep_time_minutes: int | None = None
    cook_time_minutes: int | None = None
    servings: int | None = None
    difficulty: Difficulty | None = None
    cuisine_type: str | None = None
    chef_tip: str | None = None
    nutritional_info: NutritionalInfo | None = None
    ingredients: list[IngredientPayload] = Field(default_factory=list)
    steps: list[StepPayload] = Field(min_length=1)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be empty")
        return value.strip()

    @field_validator("prep_time_minutes", "cook_time_minutes", "servings", mode="before")
    @classmethod
    def _whole_number_or_none(cls, value: Any) -> Any:
        return _whole_number_or_none(value)

    @field_validator("nutritional_info", mode="before")
    @classmethod
    def _nutrition_object_or_none(cls, value: Any) -> Any:
        # "environ 450 kcal par portion" and the like carry nothing we can store
        return value if isinstance(value, (dict, NutritionalInfo)) else None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            if value in {d.value for d in Difficulty}:
                return value
        if isinstance(value, Difficulty):
            return value
        return None

    @model_validator(mode="after")
    def _number_unnumbered_steps(self) -> "RecipePayload":
        # Only fills gaps; step numbers the model did send are kept verbatim
        for position, step in enumerate(self.steps, start=1):
            if step.step_number is None:
                step.step_number = position
        return self

    def header_row(self, user_id: str) -> dict[str, Any]:
        """Columns for the recipes table. AI output is always private."""
        return {
            "user_id": user_id,
            "title": self.title,
            "description": self.description,
            "prep_time_minutes": self.prep_time_minutes,
            "cook_time_minutes": self.cook_time_minutes,
            "servings": self.servings,
            "difficulty": self.difficulty.value if self.difficulty else None,
            "cuisine_type": self.cuisine_type,
            "chef_tip": self.chef_tip,
            "nutritional_info": (
                self.nutritional_info.model_dump() if self.nutritional_info else None
            ),
            "is_public": False,
        }
