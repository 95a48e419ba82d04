"""Culina - Prompt templates."""

from culina.prompts.recipe import (
    PROMPTS,
    PromptTemplate,
    build_messages,
    build_system_prompt,
    get_template,
)

__all__ = ["PROMPTS", "PromptTemplate", "build_messages", "build_system_prompt", "get_template"]
