"""Per-user records the pipeline reads or maintains."""

from dataclasses import dataclass, field
from enum import Enum


class SubscriptionTier(str, Enum):
    """Freemium tier stored in user_subscription.subscription_tier."""

    FREE = "free"
    PRO = "pro"


@dataclass
class DietaryConstraints:
    """A user's dietary restrictions and allergies (free-text labels)."""

    restrictions: list[str] = field(default_factory=list)
    allergies: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.restrictions and not self.allergies


@dataclass
class UsageRecord:
    """Generation usage for one user in one calendar month (YYYY-MM)."""

    user_id: str
    month: str
    generation_count: int = 0
    monthly_limit: int = 0

    @property
    def remaining(self) -> int:
        return max(self.monthly_limit - self.generation_count, 0)

    @property
    def can_generate(self) -> bool:
        return self.generation_count < self.monthly_limit
