"""
Recipe generation pipeline.

One invocation per request, strictly linear:

    START -> QUOTA_CHECKED -> PREFERENCES_RESOLVED -> PROMPT_BUILT
          -> COMPLETION_RECEIVED -> PAYLOAD_EXTRACTED -> PERSISTED
          -> USAGE_RECORDED -> DONE

Any failure ends the run in FAILED. QUOTA_EXCEEDED is its own terminal
outcome, reachable only from the quota gate, and has no side effects.

Usage is counted only once the recipe row exists. In atomic mode the slot
is reserved at the gate and handed back if the run fails before that
point; otherwise it is recorded after persistence, and a failure to
record never turns a saved recipe into an error.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from culina.config import Settings
from culina.db.adapter import DatabaseAdapter
from culina.errors import CulinaError, InvalidRequestError, QuotaExceededError
from culina.generation.extractor import extract_recipe
from culina.generation.writer import RecipeWriter, WriteResult
from culina.llm.client import CompletionClient
from culina.preferences import PreferenceResolver
from culina.prompts.recipe import build_system_prompt, get_template
from culina.quota.ledger import QuotaLedger

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    START = "start"
    QUOTA_CHECKED = "quota_checked"
    PREFERENCES_RESOLVED = "preferences_resolved"
    PROMPT_BUILT = "prompt_built"
    COMPLETION_RECEIVED = "completion_received"
    PAYLOAD_EXTRACTED = "payload_extracted"
    PERSISTED = "persisted"
    USAGE_RECORDED = "usage_recorded"
    DONE = "done"
    QUOTA_EXCEEDED = "quota_exceeded"
    FAILED = "failed"


@dataclass
class GenerationResult:
    """Outcome of one pipeline run."""

    stage: Stage
    recipe_id: str | None = None
    write: WriteResult | None = None
    error: CulinaError | None = None
    failed_after: Stage | None = None  # last stage completed before a failure
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.stage == Stage.DONE

    @property
    def quota_exceeded(self) -> bool:
        return self.stage == Stage.QUOTA_EXCEEDED

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error else None


class GenerationPipeline:
    """Sequences quota, preferences, prompt, completion, extraction and persistence."""

    def __init__(
        self,
        settings: Settings,
        ledger: QuotaLedger,
        preferences: PreferenceResolver,
        completion: CompletionClient,
        writer: RecipeWriter,
    ):
        self._settings = settings
        self._ledger = ledger
        self._preferences = preferences
        self._completion = completion
        self._writer = writer
        self._template = get_template(settings.culina_locale)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: DatabaseAdapter,
        completion: CompletionClient | None = None,
    ) -> "GenerationPipeline":
        """Wire the default collaborators around one database client."""
        return cls(
            settings=settings,
            ledger=QuotaLedger(client, settings),
            preferences=PreferenceResolver(client),
            completion=completion or CompletionClient(settings),
            writer=RecipeWriter(client, strict=settings.strict_persistence),
        )

    async def run(self, prompt: str | None, user_id: str | None) -> GenerationResult:
        """Generate and save one recipe. Never raises for pipeline failures."""
        if not prompt or not prompt.strip() or not user_id:
            return self._failed(Stage.START, InvalidRequestError("Missing prompt or userId"))

        atomic = self._settings.atomic_quota
        month = self._ledger.month()
        stage = Stage.START

        try:
            allowed = (
                await self._ledger.reserve(user_id, month)
                if atomic
                else await self._ledger.check_quota(user_id)
            )
        except CulinaError as e:
            return self._failed(stage, e)

        if not allowed:
            logger.info(f"Generation quota exceeded for user {user_id}")
            return GenerationResult(
                stage=Stage.QUOTA_EXCEEDED,
                error=QuotaExceededError("Monthly generation quota exceeded"),
            )
        stage = Stage.QUOTA_CHECKED

        try:
            constraints = await self._preferences.resolve(user_id)
            stage = Stage.PREFERENCES_RESOLVED

            system_prompt = build_system_prompt(
                self._template.persona,
                constraints.restrictions,
                constraints.allergies,
                self._template.schema_instruction,
                restrictions_label=self._template.restrictions_label,
                allergies_label=self._template.allergies_label,
            )
            stage = Stage.PROMPT_BUILT

            raw_text = await self._completion.complete(system_prompt, prompt.strip())
            stage = Stage.COMPLETION_RECEIVED

            payload = extract_recipe(raw_text)
            stage = Stage.PAYLOAD_EXTRACTED

            write = await self._writer.write(user_id, payload)
            stage = Stage.PERSISTED
        except CulinaError as e:
            if atomic:
                await self._ledger.release(user_id, month)
            return self._failed(stage, e)
        except Exception as e:
            logger.exception(f"Unexpected error generating recipe for {user_id}: {e}")
            if atomic:
                await self._ledger.release(user_id, month)
            return self._failed(stage, CulinaError("Unexpected error during generation"))
        except BaseException:
            # Cancelled or interrupted: the slot goes back, the interruption propagates
            logger.warning(f"Generation for {user_id} interrupted after {stage.value}")
            if atomic:
                await self._ledger.release(user_id, month)
            raise

        if not atomic:
            try:
                await self._ledger.record_usage(user_id)
            except Exception as e:
                logger.error(f"Failed to record usage for {user_id}: {e}")
        stage = Stage.USAGE_RECORDED

        if write.degraded:
            logger.warning(f"Recipe {write.recipe_id} saved without: {', '.join(write.warnings())}")

        logger.info(f"Recipe {write.recipe_id} generated for user {user_id}")
        return GenerationResult(
            stage=Stage.DONE,
            recipe_id=write.recipe_id,
            write=write,
            warnings=write.warnings(),
        )

    def _failed(self, after: Stage, error: CulinaError) -> GenerationResult:
        logger.error(f"Recipe generation failed after {after.value}: [{error.code}] {error}")
        return GenerationResult(
            stage=Stage.FAILED,
            # a strict write that could not be undone still names its recipe row
            recipe_id=getattr(error, "recipe_id", None),
            error=error,
            failed_after=after,
        )
