"""Supabase edge function client for billing."""

from dataclasses import dataclass

import httpx

from nutrition_advisor.services.subscriptions import BillingClient


@dataclass
class HttpxEdgeFunctionClient(BillingClient):
    """Calls billing edge functions on behalf of the signed-in user."""

    base_url: str
    anon_key: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, anon_key: str) -> "HttpxEdgeFunctionClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url, anon_key=anon_key, http_client=httpx.AsyncClient()
        )

    async def check_subscription(self, access_token: str) -> dict[str, object]:
        """Invoke the check-subscription function."""
        return await self._invoke("check-subscription", access_token)

    async def create_checkout(self, access_token: str) -> dict[str, object]:
        """Invoke the create-checkout function."""
        return await self._invoke("create-checkout", access_token)

    async def customer_portal(self, access_token: str) -> dict[str, object]:
        """Invoke the customer-portal function."""
        return await self._invoke("customer-portal", access_token)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _invoke(self, name: str, access_token: str) -> dict[str, object]:
        response = await self.http_client.post(
            f"{self.base_url}/{name}",
            headers={
                "Authorization": f"Bearer {access_token}",
                "apikey": self.anon_key,
            },
            json={},
            timeout=15,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise RuntimeError(f"Unexpected response from {name}")
        return payload
