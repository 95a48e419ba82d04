"""
Subscription tiers.

Reads user_subscription to size a month's generation allowance, and
applies the Pro upgrade (tier, saved-recipe cap, current month's limit).
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from culina.config import Settings
from culina.db.adapter import DatabaseAdapter
from culina.models.account import SubscriptionTier

logger = logging.getLogger(__name__)


def current_month(now: datetime | None = None) -> str:
    """Calendar month key, UTC, as YYYY-MM."""
    return (now or datetime.now(UTC)).strftime("%Y-%m")


class SubscriptionService:
    """Tier lookups and upgrades against user_subscription."""

    def __init__(
        self,
        client: DatabaseAdapter,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ):
        self._client = client
        self._settings = settings
        self._clock = clock or (lambda: datetime.now(UTC))

    async def get_tier(self, user_id: str) -> SubscriptionTier:
        """Current tier. Users without a subscription row are on the free tier."""
        result = (
            self._client.table("user_subscription")
            .select("subscription_tier")
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        row = result.data if result is not None else None
        if row and row.get("subscription_tier") == SubscriptionTier.PRO.value:
            return SubscriptionTier.PRO
        return SubscriptionTier.FREE

    def monthly_limit_for(self, tier: SubscriptionTier) -> int:
        if tier == SubscriptionTier.PRO:
            return self._settings.pro_monthly_limit
        return self._settings.free_monthly_limit

    async def upgrade_to_pro(self, user_id: str) -> None:
        """
        Move a user to the Pro tier.

        Also raises the current month's generation limit; this is the only
        case where a month's snapshotted limit changes after creation.
        """
        self._client.table("user_subscription").upsert(
            {
                "user_id": user_id,
                "subscription_tier": SubscriptionTier.PRO.value,
                "max_saved_recipes": self._settings.pro_max_saved_recipes,
            },
            on_conflict="user_id",
        ).execute()

        month = current_month(self._clock())
        self._client.table("user_ai_usage").upsert(
            {
                "user_id": user_id,
                "month": month,
                "monthly_limit": self._settings.pro_monthly_limit,
            },
            on_conflict="user_id,month",
        ).execute()

        logger.info(f"User {user_id} upgraded to pro (limit raised for {month})")
