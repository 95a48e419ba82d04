"""
Response Extractor.

Turns the raw completion text into a RecipePayload. Models sometimes wrap
the JSON in a markdown code fence despite being told not to; the fence
markers below are stripped before decoding.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from culina.errors import InvalidRecipeError, MalformedOutputError
from culina.models.recipe import RecipePayload

logger = logging.getLogger(__name__)

# First match wins; longer markers must come before their prefixes.
LEADING_FENCES: tuple[str, ...] = ("```json", "```JSON", "```")
TRAILING_FENCES: tuple[str, ...] = ("```",)


def strip_fences(raw_text: str) -> str:
    """Remove at most one leading and one trailing fence marker."""
    text = raw_text.strip()

    for marker in LEADING_FENCES:
        if text.startswith(marker):
            text = text[len(marker):]
            break

    for marker in TRAILING_FENCES:
        if text.endswith(marker):
            text = text[: -len(marker)]
            break

    return text.strip()


def decode_payload(raw_text: str) -> dict[str, Any]:
    """
    Strip fences and decode a single JSON object.

    Raises:
        MalformedOutputError: not JSON, or JSON that is not an object
    """
    cleaned = strip_fences(raw_text or "")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI response: {raw_text!r}")
        raise MalformedOutputError("Invalid AI response format", raw_text=raw_text) from e

    if not isinstance(data, dict):
        logger.error(f"AI response is not a JSON object: {raw_text!r}")
        raise MalformedOutputError("Invalid AI response format", raw_text=raw_text)

    return data


def extract_recipe(raw_text: str) -> RecipePayload:
    """
    Decode the completion text into a recipe.

    Raises:
        MalformedOutputError: the text is not a JSON object
        InvalidRecipeError: the object lacks a title or steps, or has
            fields of the wrong type
    """
    data = decode_payload(raw_text)

    try:
        return RecipePayload.model_validate(data)
    except ValidationError as e:
        logger.error(f"AI recipe failed validation ({e.error_count()} errors): {raw_text!r}")
        raise InvalidRecipeError(f"Invalid recipe in AI response: {e}", raw_text=raw_text) from e
