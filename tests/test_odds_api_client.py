"""Odds API client tests against a mocked transport."""

from __future__ import annotations

import httpx
import pytest

from parlaybook.data.odds_api_client import OddsApiClient
from parlaybook.exceptions import ProviderFetchError


def _client(handler) -> OddsApiClient:
    return OddsApiClient(
        "test-key",
        "https://odds.example/v4",
        retry_attempts=3,
        retry_wait=0,
        transport=httpx.MockTransport(handler),
    )


def test_missing_api_key_is_rejected() -> None:
    with pytest.raises(RuntimeError):
        OddsApiClient("")


@pytest.mark.asyncio
async def test_get_odds_sends_market_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": "evt1"}], headers={"x-requests-remaining": "487"})

    client = _client(handler)
    try:
        events = await client.get_odds("basketball_nba")
    finally:
        await client.close()

    assert events == [{"id": "evt1"}]
    assert seen[0].url.path == "/v4/sports/basketball_nba/odds"
    params = seen[0].url.params
    assert params["markets"] == "h2h,spreads,totals"
    assert params["oddsFormat"] == "american"
    assert params["apiKey"] == "test-key"
    assert client.remaining_requests == 487


@pytest.mark.asyncio
async def test_server_errors_are_retried() -> None:
    attempts = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        if attempts["n"] < 3:
            return httpx.Response(503)
        return httpx.Response(200, json=[])

    client = _client(handler)
    try:
        assert await client.get_scores("baseball_mlb", days_from=2) == []
    finally:
        await client.close()
    assert attempts["n"] == 3


@pytest.mark.asyncio
async def test_client_error_raises_typed_error_without_retry() -> None:
    attempts = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        return httpx.Response(401, json={"message": "bad key"})

    client = _client(handler)
    try:
        with pytest.raises(ProviderFetchError) as excinfo:
            await client.get_scores("baseball_mlb")
    finally:
        await client.close()
    assert attempts["n"] == 1
    assert excinfo.value.sport_key == "baseball_mlb"


@pytest.mark.asyncio
async def test_transport_failure_raises_after_retries() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(ProviderFetchError):
            await client.get_odds("basketball_nba")
    finally:
        await client.close()
