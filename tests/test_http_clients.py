"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from nutrition_advisor.adapters.edge_function_client import HttpxEdgeFunctionClient
from nutrition_advisor.adapters.openai_text_client import OpenAITextClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = "# Plan") -> None:
        self.responses = _FakeResponses(output_text)


def _complete(client: OpenAITextClient) -> str:
    return asyncio.run(
        client.complete(
            model="gpt-4o-mini",
            instructions="Be helpful",
            prompt="Plan my meals",
            max_output_tokens=2000,
            temperature=0.7,
            store=False,
        )
    )


def test_openai_text_client_returns_output() -> None:
    fake = _FakeOpenAI()
    client = OpenAITextClient(client=fake)

    assert _complete(client) == "# Plan"
    assert fake.responses.last_payload == {
        "model": "gpt-4o-mini",
        "instructions": "Be helpful",
        "input": "Plan my meals",
        "max_output_tokens": 2000,
        "temperature": 0.7,
        "store": False,
    }


def test_openai_text_client_rejects_empty_output() -> None:
    client = OpenAITextClient(client=_FakeOpenAI(output_text=""))

    with pytest.raises(RuntimeError):
        _complete(client)


def test_edge_function_client_calls_functions() -> None:
    seen: list[tuple[str, str | None, str | None]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(
            (
                request.url.path,
                request.headers.get("Authorization"),
                request.headers.get("apikey"),
            )
        )
        assert json.loads(request.content.decode()) == {}
        if request.url.path.endswith("/check-subscription"):
            return httpx.Response(200, json={"subscribed": False})
        return httpx.Response(200, json={"url": "https://billing.example"})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxEdgeFunctionClient(
        base_url="https://example.supabase.co/functions/v1",
        anon_key="anon-key",
        http_client=async_client,
    )

    status = asyncio.run(client.check_subscription("user-token"))
    checkout = asyncio.run(client.create_checkout("user-token"))
    portal = asyncio.run(client.customer_portal("user-token"))

    assert status == {"subscribed": False}
    assert checkout["url"] == portal["url"] == "https://billing.example"
    assert [path for path, _, _ in seen] == [
        "/functions/v1/check-subscription",
        "/functions/v1/create-checkout",
        "/functions/v1/customer-portal",
    ]
    assert seen[0][1:] == ("Bearer user-token", "anon-key")


def test_edge_function_client_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxEdgeFunctionClient(
        base_url="https://example.supabase.co/functions/v1",
        anon_key="anon-key",
        http_client=async_client,
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.check_subscription("user-token"))
