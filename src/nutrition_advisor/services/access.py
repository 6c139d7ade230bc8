"""Subscription and quota context injected into the wizard and dashboard."""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from nutrition_advisor.domain.usage import (
    SubscriptionState,
    UsageCounter,
    can_use_feature,
    remaining_recommendations,
)
from nutrition_advisor.errors import PersistenceError
from nutrition_advisor.services.subscriptions import SubscriptionService
from nutrition_advisor.services.usage import UsageService

logger = logging.getLogger(__name__)


@dataclass
class AccessContext:
    """Per-session view of a user's subscription and daily usage.

    ``record_usage`` bumps the local count before the store confirms the
    write and reconciles with the stored counter afterwards. Between
    ``refresh`` calls the state may lag behind other sessions of the same
    user.
    """

    user_id: UUID
    access_token: str
    usage_service: UsageService
    subscription_service: SubscriptionService
    subscription: SubscriptionState = field(default_factory=SubscriptionState.free)
    usage: UsageCounter | None = None

    async def refresh(self) -> None:
        """Re-read subscription and usage from their authorities."""
        self.subscription = await self.subscription_service.check(self.access_token)
        try:
            self.usage = self.usage_service.load_usage(self.user_id)
        except PersistenceError:
            logger.warning(
                "Keeping cached usage after failed reload",
                extra={"user_id": str(self.user_id)},
            )

    def current_usage(self) -> UsageCounter:
        """Today's counter, with a stale day treated as zero."""
        today = self.usage_service.today()
        if self.usage is None:
            return UsageCounter(recommendations_used=0, last_reset_date=today)
        return self.usage.for_day(today)

    def can_use_feature(self) -> bool:
        """Return True when another generation is allowed."""
        return can_use_feature(self.subscription, self.current_usage())

    @property
    def remaining_recommendations(self) -> int | None:
        """Remaining free generations today, or None when unlimited."""
        return remaining_recommendations(self.subscription, self.current_usage())

    async def record_usage(self) -> UsageCounter:
        """Count one generation, optimistically first, then from the store."""
        current = self.current_usage()
        self.usage = UsageCounter(
            recommendations_used=current.recommendations_used + 1,
            last_reset_date=current.last_reset_date,
        )
        try:
            self.usage = self.usage_service.increment_usage(self.user_id)
        except PersistenceError:
            logger.warning(
                "Usage increment not confirmed; keeping optimistic count",
                extra={"user_id": str(self.user_id)},
            )
        self.subscription = await self.subscription_service.check(self.access_token)
        return self.usage
