"""
Persistence Writer.

Saves a generated recipe: the recipes row first, then its ingredients,
then its steps. The recipes row is what the caller needs (a navigable
id), so by default a failed ingredient or step insert is logged and
reported in the result but does not fail the write. With strict=True the
write is all-or-nothing: the recipe row is deleted again (children
cascade) and PersistenceError is raised.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from culina.db.adapter import DatabaseAdapter
from culina.errors import PersistenceError
from culina.models.recipe import RecipePayload

logger = logging.getLogger(__name__)


class ChildOutcome(str, Enum):
    """What happened to a recipe's ingredient or step rows."""

    OK = "ok"
    PARTIAL = "partial"  # store returned fewer rows than were sent
    FAILED = "failed"
    SKIPPED = "skipped"  # nothing to insert


@dataclass
class WriteResult:
    recipe_id: str
    ingredients: ChildOutcome
    steps: ChildOutcome

    @property
    def degraded(self) -> bool:
        return any(
            outcome in (ChildOutcome.PARTIAL, ChildOutcome.FAILED)
            for outcome in (self.ingredients, self.steps)
        )

    def warnings(self) -> list[str]:
        """Names of child collections that were not fully saved."""
        return [
            name
            for name, outcome in (("ingredients", self.ingredients), ("steps", self.steps))
            if outcome in (ChildOutcome.PARTIAL, ChildOutcome.FAILED)
        ]


class RecipeWriter:
    """Writes recipes, recipe_ingredients and recipe_steps rows."""

    def __init__(self, client: DatabaseAdapter, strict: bool = False):
        self._client = client
        self._strict = strict

    async def write(self, user_id: str, payload: RecipePayload) -> WriteResult:
        """
        Persist a recipe for a user.

        Raises:
            PersistenceError: the recipe row could not be inserted, or
                (strict mode) a child insert did not fully succeed
        """
        recipe_id = self._insert_header(user_id, payload)

        ingredients = self._insert_children(
            "recipe_ingredients",
            recipe_id,
            [
                {
                    "recipe_id": recipe_id,
                    "name": ing.name,
                    "quantity": ing.quantity,
                    "unit": ing.unit,
                    "order_index": ing.order_index,
                }
                for ing in payload.ingredients
            ],
        )
        steps = self._insert_children(
            "recipe_steps",
            recipe_id,
            [
                {
                    "recipe_id": recipe_id,
                    "step_number": step.step_number,
                    "instruction": step.instruction,
                }
                for step in payload.steps
            ],
        )

        result = WriteResult(recipe_id=recipe_id, ingredients=ingredients, steps=steps)

        if self._strict and result.degraded:
            missing = ", ".join(result.warnings())
            if self._rollback(recipe_id):
                raise PersistenceError(f"Recipe {recipe_id} incomplete ({missing}), rolled back")
            raise PersistenceError(
                f"Recipe {recipe_id} incomplete ({missing}) and left in place",
                recipe_id=recipe_id,
            )

        return result

    def _insert_header(self, user_id: str, payload: RecipePayload) -> str:
        try:
            result = self._client.table("recipes").insert(payload.header_row(user_id)).execute()
        except Exception as e:
            logger.error(f"Recipe insert failed for user {user_id}: {e}")
            raise PersistenceError("Failed to save recipe") from e

        if not result.data:
            logger.error(f"Recipe insert returned no row for user {user_id}")
            raise PersistenceError("Failed to save recipe")

        return str(result.data[0]["id"])

    def _insert_children(self, table: str, recipe_id: str, rows: list[dict[str, Any]]) -> ChildOutcome:
        if not rows:
            return ChildOutcome.SKIPPED

        try:
            result = self._client.table(table).insert(rows).execute()
        except Exception as e:
            logger.error(f"{table} insert failed for recipe {recipe_id}: {e}")
            return ChildOutcome.FAILED

        inserted = len(result.data or [])
        if inserted < len(rows):
            logger.error(f"{table}: only {inserted}/{len(rows)} rows saved for recipe {recipe_id}")
            return ChildOutcome.PARTIAL

        return ChildOutcome.OK

    def _rollback(self, recipe_id: str) -> bool:
        try:
            self._client.table("recipes").delete().eq("id", recipe_id).execute()
        except Exception as e:
            logger.error(f"Failed to roll back recipe {recipe_id}, dangling incomplete recipe: {e}")
            return False
        return True
