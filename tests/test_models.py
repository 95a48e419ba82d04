"""Tests for recipe payload models."""

import pytest
from pydantic import ValidationError

from culina.models import Difficulty, IngredientPayload, RecipePayload, UsageRecord
from culina.models.account import DietaryConstraints


class TestIngredientQuantity:
    """Quantities are numeric or null; never fail the recipe."""

    def test_numbers_kept(self):
        assert IngredientPayload(name="flour", quantity=200).quantity == 200
        assert IngredientPayload(name="milk", quantity=0.5).quantity == 0.5

    def test_numeric_strings_parsed(self):
        assert IngredientPayload(name="flour", quantity="250").quantity == 250.0
        assert IngredientPayload(name="oil", quantity="1,5").quantity == 1.5

    def test_non_numeric_becomes_null(self):
        assert IngredientPayload(name="salt", quantity="to taste").quantity is None
        assert IngredientPayload(name="pepper", quantity="").quantity is None
        assert IngredientPayload(name="herbs", quantity=True).quantity is None

    @pytest.mark.parametrize("raw,expected", [("200g", 200), ("2 pièces", 2), ("0,5 l", 0.5)])
    def test_leading_number_kept(self, raw, expected):
        assert IngredientPayload(name="x", quantity=raw).quantity == expected

    @pytest.mark.parametrize("raw", ["1/2", "2-3", "une pincée"])
    def test_fractions_and_ranges_become_null(self, raw):
        assert IngredientPayload(name="x", quantity=raw).quantity is None

    def test_missing_quantity(self):
        assert IngredientPayload(name="salt").quantity is None


class TestRecipePayload:

    def test_requires_title(self):
        with pytest.raises(ValidationError):
            RecipePayload.model_validate({"steps": [{"step_number": 1, "instruction": "x"}]})

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            RecipePayload.model_validate(
                {"title": "   ", "steps": [{"step_number": 1, "instruction": "x"}]}
            )

    def test_requires_at_least_one_step(self):
        with pytest.raises(ValidationError):
            RecipePayload.model_validate({"title": "Soup", "steps": []})
        with pytest.raises(ValidationError):
            RecipePayload.model_validate({"title": "Soup"})

    def test_difficulty_normalized(self):
        steps = [{"step_number": 1, "instruction": "Cook"}]
        assert RecipePayload.model_validate(
            {"title": "A", "difficulty": "Easy", "steps": steps}
        ).difficulty == Difficulty.EASY
        assert RecipePayload.model_validate(
            {"title": "A", "difficulty": " HARD ", "steps": steps}
        ).difficulty == Difficulty.HARD

    def test_unknown_difficulty_dropped(self):
        payload = RecipePayload.model_validate(
            {"title": "A", "difficulty": "facile", "steps": [{"step_number": 1, "instruction": "Cook"}]}
        )
        assert payload.difficulty is None

    def test_missing_step_numbers_filled_by_position(self):
        payload = RecipePayload.model_validate(
            {
                "title": "A",
                "steps": [
                    {"instruction": "first"},
                    {"step_number": 7, "instruction": "second"},
                    {"instruction": "third"},
                ],
            }
        )
        assert [s.step_number for s in payload.steps] == [1, 7, 3]

    def test_extra_fields_ignored(self):
        payload = RecipePayload.model_validate(
            {"title": "A", "tags": ["x"], "steps": [{"step_number": 1, "instruction": "Cook"}]}
        )
        assert not hasattr(payload, "tags")

    def test_header_row_is_private(self, sample_recipe_payload):
        sample_recipe_payload["is_public"] = True
        row = RecipePayload.model_validate(sample_recipe_payload).header_row("user-1")
        assert row["is_public"] is False
        assert row["user_id"] == "user-1"
        assert row["difficulty"] == "easy"
        assert row["nutritional_info"] == {"calories": 220, "protein": 5, "carbs": 30, "fat": 9}
        assert "ingredients" not in row
        assert "steps" not in row


class TestAccountModels:

    def test_usage_record_remaining(self):
        record = UsageRecord(user_id="u", month="2026-10", generation_count=3, monthly_limit=5)
        assert record.remaining == 2
        assert record.can_generate

    def test_usage_record_at_limit(self):
        record = UsageRecord(user_id="u", month="2026-10", generation_count=5, monthly_limit=5)
        assert record.remaining == 0
        assert not record.can_generate

    def test_usage_record_over_limit_never_negative(self):
        record = UsageRecord(user_id="u", month="2026-10", generation_count=7, monthly_limit=5)
        assert record.remaining == 0

    def test_constraints_empty(self):
        assert DietaryConstraints().is_empty
        assert not DietaryConstraints(allergies=["nuts"]).is_empty
