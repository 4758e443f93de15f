from __future__ import annotations

import asyncio

import httpx

from personsync.adapters.http_resilience import (
    RateLimit,
    ResilienceConfig,
    ResilientClient,
    RetryPolicy,
)


def test_get_is_retried_on_server_errors() -> None:
    statuses = iter([503, 503, 200])
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        return httpx.Response(next(statuses), json=[])

    config = ResilienceConfig(
        name="test",
        base_url="https://directory.test/",
        retry=RetryPolicy(total=3, backoff_factor=0.0, backoff_jitter=0.0),
        ratelimit=RateLimit(max_calls=100, per_seconds=1.0),
        default_headers={"Authorization-Token": "token"},
    )

    async def scenario() -> httpx.Response:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await client.request("GET", "People")

    response = asyncio.run(scenario())

    assert response.status_code == 200
    assert calls == ["GET", "GET", "GET"]
