"""
Culina - Configuration and settings.

Settings is built once per process at the edges (CLI, web app) and handed
to the pipeline components through their constructors.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Culina settings.

    Values come from the environment or a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase (service role: the pipeline writes on behalf of the user)
    supabase_url: str
    supabase_service_role_key: str

    # Completion gateway (OpenAI-compatible chat completions endpoint)
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1"
    ai_gateway_api_key: str
    ai_model: str = "google/gemini-2.5-flash"
    completion_timeout_seconds: float = 60.0
    completion_max_retries: int = 2  # SDK retries with backoff on connection errors, 429 and 5xx

    # Freemium limits
    free_monthly_limit: int = 5
    pro_monthly_limit: int = 999999
    pro_max_saved_recipes: int = 999999

    # Pipeline behaviour
    atomic_quota: bool = True  # reserve_generation RPC instead of check-then-record
    strict_persistence: bool = False  # all-or-nothing recipe + children

    # Application
    culina_locale: Literal["fr", "en"] = "fr"
    culina_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # CULINA_LOG_PROMPTS=1 - log prompts and raw completions to local files (dev only)
    culina_log_prompts: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

