"""Culina - Data models."""

from culina.models.account import DietaryConstraints, SubscriptionTier, UsageRecord
from culina.models.recipe import (
    Difficulty,
    IngredientPayload,
    NutritionalInfo,
    RecipePayload,
    StepPayload,
)

__all__ = [
    "DietaryConstraints",
    "Difficulty",
    "IngredientPayload",
    "NutritionalInfo",
    "RecipePayload",
    "StepPayload",
    "SubscriptionTier",
    "UsageRecord",
]
