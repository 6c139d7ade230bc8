"""Domain models for usage quotas and subscriptions."""

from dataclasses import dataclass, replace
from datetime import date, datetime

FREE_DAILY_LIMIT = 1


@dataclass(frozen=True)
class UsageCounter:
    """Daily count of free-tier generations."""

    recommendations_used: int
    last_reset_date: date

    def for_day(self, today: date) -> "UsageCounter":
        """Return the counter as it stands on ``today``; stale days count as zero."""
        if self.last_reset_date == today:
            return self
        return replace(self, recommendations_used=0, last_reset_date=today)


@dataclass(frozen=True)
class SubscriptionState:
    """Mirror of the billing provider's view of the user."""

    subscribed: bool
    tier: str | None = None
    period_end: datetime | None = None

    @classmethod
    def free(cls) -> "SubscriptionState":
        """State used whenever the subscription cannot be confirmed."""
        return cls(subscribed=False)


def can_use_feature(subscription: SubscriptionState, usage: UsageCounter) -> bool:
    """Return True when the user may generate another recommendation."""
    if subscription.subscribed:
        return True
    return usage.recommendations_used < FREE_DAILY_LIMIT


def remaining_recommendations(
    subscription: SubscriptionState, usage: UsageCounter
) -> int | None:
    """Remaining free generations today, or None when unlimited."""
    if subscription.subscribed:
        return None
    return max(0, FREE_DAILY_LIMIT - usage.recommendations_used)
