"""
Preference Resolver.

Reads a user's dietary restrictions and allergies from user_preferences.
A missing row, or a failed lookup, means no constraints.
"""

import logging

from culina.db.adapter import DatabaseAdapter
from culina.models.account import DietaryConstraints

logger = logging.getLogger(__name__)


def _labels(value) -> list[str]:
    """Clean a TEXT[] column: drop blanks and duplicates, keep order."""
    if not value:
        return []
    seen: list[str] = []
    for item in value:
        label = str(item).strip()
        if label and label not in seen:
            seen.append(label)
    return seen


class PreferenceResolver:
    """Dietary constraints lookup for prompt building."""

    def __init__(self, client: DatabaseAdapter):
        self._client = client

    async def resolve(self, user_id: str) -> DietaryConstraints:
        try:
            result = (
                self._client.table("user_preferences")
                .select("dietary_restrictions, allergies")
                .eq("user_id", user_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.warning(f"Preferences lookup failed for {user_id}, continuing without: {e}")
            return DietaryConstraints()

        row = result.data if result is not None else None
        if not row:
            return DietaryConstraints()

        return DietaryConstraints(
            restrictions=_labels(row.get("dietary_restrictions")),
            allergies=_labels(row.get("allergies")),
        )
