"""
Quota Ledger.

Counts AI generations per user per calendar month (user_ai_usage) and
gates new ones against the month's limit.

Two ways to gate:
- check_quota() + record_usage(): two round trips. Concurrent requests
  from one user can all pass the check before any of them records, so
  the count can overshoot the limit.
- reserve() + release(): one atomic conditional increment in the
  database (reserve_generation), given back if the request fails before
  the recipe is saved.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from culina.config import Settings
from culina.db.adapter import DatabaseAdapter
from culina.errors import QuotaCheckError
from culina.models.account import SubscriptionTier, UsageRecord
from culina.subscription import SubscriptionService, current_month

logger = logging.getLogger(__name__)

USAGE_TABLE = "user_ai_usage"


class QuotaLedger:
    """Monthly generation allowance per user."""

    def __init__(
        self,
        client: DatabaseAdapter,
        settings: Settings,
        subscriptions: SubscriptionService | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._client = client
        self._settings = settings
        self._clock = clock or (lambda: datetime.now(UTC))
        self._subscriptions = subscriptions or SubscriptionService(client, settings, self._clock)

    def month(self) -> str:
        return current_month(self._clock())

    async def get_usage(self, user_id: str) -> UsageRecord | None:
        """Current month's usage record, or None if the user has not generated yet."""
        month = self.month()
        result = (
            self._client.table(USAGE_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .eq("month", month)
            .maybe_single()
            .execute()
        )
        row = result.data if result is not None else None
        if not row:
            return None
        return UsageRecord(
            user_id=user_id,
            month=month,
            generation_count=row.get("generation_count") or 0,
            monthly_limit=row.get("monthly_limit") or 0,
        )

    async def check_quota(self, user_id: str) -> bool:
        """
        True iff the user may generate now.

        A missing record means nothing used yet this month.

        Raises:
            QuotaCheckError: the usage lookup itself failed
        """
        try:
            record = await self.get_usage(user_id)
        except Exception as e:
            logger.error(f"Error checking quota for {user_id}: {e}")
            raise QuotaCheckError("Failed to check generation quota") from e

        return record is None or record.can_generate

    async def record_usage(self, user_id: str) -> None:
        """
        Count one generation.

        Increments the current month's record, or creates it with
        count = 1 and a limit taken from the user's tier right now.
        """
        existing = await self.get_usage(user_id)

        if existing is not None:
            (
                self._client.table(USAGE_TABLE)
                .update({"generation_count": existing.generation_count + 1})
                .eq("user_id", user_id)
                .eq("month", existing.month)
                .execute()
            )
            return

        limit = await self._limit_for_new_record(user_id)
        self._client.table(USAGE_TABLE).insert(
            {
                "user_id": user_id,
                "month": self.month(),
                "generation_count": 1,
                "monthly_limit": limit,
            }
        ).execute()

    async def reserve(self, user_id: str, month: str | None = None) -> bool:
        """
        Atomically take one generation slot if the limit allows.

        Pass the same month to release() so a run that crosses a month
        boundary gives back the slot it took.

        Returns False when the month's allowance is used up.

        Raises:
            QuotaCheckError: the reservation call failed
        """
        try:
            result = self._client.rpc(
                "reserve_generation",
                {
                    "p_user_id": user_id,
                    "p_month": month or self.month(),
                    "p_free_limit": self._settings.free_monthly_limit,
                    "p_pro_limit": self._settings.pro_monthly_limit,
                },
            ).execute()
        except Exception as e:
            logger.error(f"Error reserving generation for {user_id}: {e}")
            raise QuotaCheckError("Failed to check generation quota") from e

        return bool(result.data)

    async def release(self, user_id: str, month: str | None = None) -> None:
        """Give back a reserved slot. Failures are logged, never raised."""
        try:
            self._client.rpc(
                "release_generation",
                {"p_user_id": user_id, "p_month": month or self.month()},
            ).execute()
        except Exception as e:
            logger.error(f"Failed to release generation slot for {user_id}: {e}")

    async def usage_summary(self, user_id: str) -> UsageRecord:
        """Usage for reporting. Users with no record yet get their tier's full allowance."""
        record = await self.get_usage(user_id)
        if record is not None:
            return record
        return UsageRecord(
            user_id=user_id,
            month=self.month(),
            generation_count=0,
            monthly_limit=await self._limit_for_new_record(user_id),
        )

    async def _limit_for_new_record(self, user_id: str) -> int:
        try:
            tier = await self._subscriptions.get_tier(user_id)
        except Exception as e:
            logger.warning(f"Subscription lookup failed for {user_id}, using free tier: {e}")
            tier = SubscriptionTier.FREE
        return self._subscriptions.monthly_limit_for(tier)
