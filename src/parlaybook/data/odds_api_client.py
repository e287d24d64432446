"""Thin async client for The Odds API v4."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from parlaybook.exceptions import ProviderFetchError

BASE_URL = "https://api.the-odds-api.com/v4"
MARKETS = "h2h,spreads,totals"

logger = logging.getLogger(__name__)


def _retry_log(retry_state: RetryCallState) -> None:  # pragma: no cover - logging helper
    attempt = retry_state.attempt_number
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning("Odds API retry attempt %d due to %s", attempt, exception)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


class OddsApiClient:
    """Convenient wrapper for the odds and scores endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        *,
        regions: str = "us",
        timeout: float = 15.0,
        retry_attempts: int = 3,
        retry_wait: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise RuntimeError("ODDS_API_KEY is not configured.")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.regions = regions
        self.retry_attempts = retry_attempts
        self.retry_wait = retry_wait
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)
        self._remaining_requests: int | None = None

    async def __aenter__(self) -> "OddsApiClient":  # pragma: no cover - context sugar
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    @property
    def remaining_requests(self) -> int | None:
        """Requests left in the current billing period, per the last response."""
        return self._remaining_requests

    async def _request(self, sport_key: str, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        query = {"apiKey": self.api_key, **(params or {})}
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_fixed(self.retry_wait),
                retry=retry_if_exception(_is_retryable),
                after=_retry_log,
                reraise=True,
            ):
                with attempt:
                    response = await self._client.get(path, params=query)
                    response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ProviderFetchError(sport_key, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ProviderFetchError(sport_key, str(exc) or type(exc).__name__) from exc

        remaining = response.headers.get("x-requests-remaining")
        if remaining is not None:
            self._remaining_requests = int(float(remaining))
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderFetchError(sport_key, "response was not valid JSON") from exc
        if not isinstance(payload, list):
            raise ProviderFetchError(sport_key, f"unexpected payload type {type(payload).__name__}")
        return payload

    async def get_odds(self, sport_key: str) -> List[Dict[str, Any]]:
        """Return upcoming events with bookmaker lines for a sport."""

        params = {"regions": self.regions, "markets": MARKETS, "oddsFormat": "american"}
        return await self._request(sport_key, f"/sports/{sport_key}/odds", params)

    async def get_scores(self, sport_key: str, days_from: int = 2) -> List[Dict[str, Any]]:
        """Return live and recently completed events with scores."""

        return await self._request(sport_key, f"/sports/{sport_key}/scores", {"daysFrom": days_from})
