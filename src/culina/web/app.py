"""
Culina Web API - FastAPI application.

POST /generate-recipe is the AI generation entry point the app calls;
/usage and /subscription/upgrade back the quota display and paywall.
"""

import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from culina import __version__
from culina.config import Settings, get_settings
from culina.db.adapter import DatabaseAdapter
from culina.db.client import get_service_client
from culina.generation.pipeline import GenerationPipeline, GenerationResult
from culina.messages import get_message
from culina.quota.ledger import QuotaLedger
from culina.subscription import SubscriptionService

logger = logging.getLogger(__name__)

app = FastAPI(title="Culina", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.on_event("startup")
async def startup_event():
    """Configure logging and report configuration on startup."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    logger.info("Culina starting up...")
    logger.info(f"  Model: {settings.ai_model} via {settings.ai_gateway_url}")
    logger.info(f"  Atomic quota: {settings.atomic_quota}, strict persistence: {settings.strict_persistence}")


# =============================================================================
# Dependencies
# =============================================================================

_pipeline: GenerationPipeline | None = None


def get_app_settings() -> Settings:
    return get_settings()


def get_db(settings: Settings = Depends(get_app_settings)) -> DatabaseAdapter:
    return get_service_client(settings)


def get_pipeline(
    settings: Settings = Depends(get_app_settings),
    client: DatabaseAdapter = Depends(get_db),
) -> GenerationPipeline:
    """One pipeline per process (it holds the completion HTTP client)."""
    global _pipeline
    if _pipeline is None:
        _pipeline = GenerationPipeline.from_settings(settings, client)
    return _pipeline


def get_ledger(
    settings: Settings = Depends(get_app_settings),
    client: DatabaseAdapter = Depends(get_db),
) -> QuotaLedger:
    return QuotaLedger(client, settings)


def get_subscriptions(
    settings: Settings = Depends(get_app_settings),
    client: DatabaseAdapter = Depends(get_db),
) -> SubscriptionService:
    return SubscriptionService(client, settings)


# =============================================================================
# Models
# =============================================================================


class GenerateRequest(BaseModel):
    """Generation request. Both fields are checked by the pipeline, not here."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = None
    user_id: str | None = Field(default=None, alias="userId")


class UpgradeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")


class UsageResponse(BaseModel):
    month: str
    generationCount: int
    monthlyLimit: int
    remaining: int


# =============================================================================
# Endpoints
# =============================================================================


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": __version__}


def _generation_response(result: GenerationResult, locale: str) -> JSONResponse:
    """Map a pipeline outcome onto the response shapes the app expects."""
    if result.success:
        body: dict = {"success": True, "recipeId": result.recipe_id}
        if result.warnings:
            body["warnings"] = result.warnings
            body["message"] = get_message("degraded", locale)
        return JSONResponse(status_code=200, content=body)

    if result.quota_exceeded:
        return JSONResponse(
            status_code=403,
            content={"error": get_message("quota_exceeded", locale), "code": result.error_code},
        )

    if result.error_code == "invalid_request":
        return JSONResponse(
            status_code=400,
            content={"error": get_message("invalid_request", locale), "code": result.error_code},
        )

    return JSONResponse(
        status_code=500,
        content={"error": get_message("generic", locale), "code": result.error_code},
    )


@app.post("/generate-recipe")
async def generate_recipe(
    req: GenerateRequest,
    settings: Settings = Depends(get_app_settings),
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Generate a recipe with AI and save it as a private recipe."""
    logger.info(f"Generation request from user {req.user_id}")
    result = await pipeline.run(req.prompt, req.user_id)
    return _generation_response(result, settings.culina_locale)


@app.get("/usage/{user_id}", response_model=UsageResponse)
async def get_usage(user_id: str, ledger: QuotaLedger = Depends(get_ledger)) -> UsageResponse:
    """Current month's AI generation usage."""
    try:
        record = await ledger.usage_summary(user_id)
    except Exception as e:
        logger.exception(f"Failed to load usage for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load usage")

    return UsageResponse(
        month=record.month,
        generationCount=record.generation_count,
        monthlyLimit=record.monthly_limit,
        remaining=record.remaining,
    )


@app.post("/subscription/upgrade")
async def upgrade_subscription(
    req: UpgradeRequest,
    subscriptions: SubscriptionService = Depends(get_subscriptions),
):
    """Switch a user to Pro and lift this month's generation limit."""
    try:
        await subscriptions.upgrade_to_pro(req.user_id)
    except Exception as e:
        logger.exception(f"Upgrade failed for {req.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to upgrade subscription")

    return {"success": True, "tier": "pro"}
