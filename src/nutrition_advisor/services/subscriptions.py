"""Subscription status and billing redirects."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from nutrition_advisor.domain.usage import SubscriptionState
from nutrition_advisor.errors import BillingError, SubscriptionCheckError

logger = logging.getLogger(__name__)


class BillingClient(Protocol):
    """Interface for the billing edge functions."""

    async def check_subscription(self, access_token: str) -> dict[str, object]:
        """Return the raw subscription status payload."""

    async def create_checkout(self, access_token: str) -> dict[str, object]:
        """Return a payload with a checkout session URL."""

    async def customer_portal(self, access_token: str) -> dict[str, object]:
        """Return a payload with a billing portal URL."""


@dataclass
class SubscriptionService:
    """Reads subscription state and produces billing redirect URLs."""

    client: BillingClient

    async def check(self, access_token: str) -> SubscriptionState:
        """Return the subscription state, treating failures as the free tier."""
        try:
            payload = await self.client.check_subscription(access_token)
            return _parse_subscription(payload)
        except Exception as exc:
            error = SubscriptionCheckError("Could not confirm subscription status")
            logger.warning("%s: %s", error.message, exc)
            return SubscriptionState.free()

    async def checkout_url(self, access_token: str) -> str:
        """Return a checkout URL for upgrading."""
        return await self._redirect_url(
            self.client.create_checkout, access_token, "checkout session"
        )

    async def portal_url(self, access_token: str) -> str:
        """Return a billing portal URL for managing the subscription."""
        return await self._redirect_url(
            self.client.customer_portal, access_token, "customer portal"
        )

    async def _redirect_url(
        self,
        call: Callable[[str], Awaitable[dict[str, object]]],
        access_token: str,
        label: str,
    ) -> str:
        try:
            payload = await call(access_token)
        except Exception as exc:
            logger.exception("Billing call failed", extra={"target": label})
            raise BillingError(f"Failed to open {label}") from exc
        url = payload.get("url") if isinstance(payload, dict) else None
        if not url:
            raise BillingError(f"Failed to open {label}")
        return str(url)


def _parse_subscription(payload: dict[str, object]) -> SubscriptionState:
    end = payload.get("subscription_end")
    return SubscriptionState(
        subscribed=bool(payload.get("subscribed") or False),
        tier=str(payload["subscription_tier"])
        if payload.get("subscription_tier")
        else None,
        period_end=datetime.fromisoformat(str(end)) if end else None,
    )
