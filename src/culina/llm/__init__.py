"""Culina - Completion gateway access."""

from culina.llm.client import CompletionClient

__all__ = ["CompletionClient"]
