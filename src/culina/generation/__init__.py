"""Culina - AI recipe generation pipeline."""

from culina.generation.extractor import extract_recipe, strip_fences
from culina.generation.pipeline import GenerationPipeline, GenerationResult, Stage
from culina.generation.writer import ChildOutcome, RecipeWriter, WriteResult

__all__ = [
    "ChildOutcome",
    "GenerationPipeline",
    "GenerationResult",
    "RecipeWriter",
    "Stage",
    "WriteResult",
    "extract_recipe",
    "strip_fences",
]
