"""Odds board and final-score lookups backed by the provider and the cache."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from parlaybook.data.cache import CacheStore, Clock, OddsCache
from parlaybook.data.normalizer import normalize_feed, normalize_scores
from parlaybook.data.odds_api_client import OddsApiClient
from parlaybook.data.schemas import GameLines
from parlaybook.exceptions import ProviderFetchError
from parlaybook.parlays.types import FinalScore

logger = logging.getLogger(__name__)


@dataclass
class OddsBoard:
    sport_key: str
    games: list[GameLines]
    last_updated: datetime
    warning: str | None = None


@dataclass
class FinalsSnapshot:
    finals: dict[str, FinalScore] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


class OddsService:
    """Normalizes provider feeds and caches the normalized result per sport."""

    def __init__(
        self,
        client: OddsApiClient,
        store: CacheStore,
        *,
        scores_days_from: int = 2,
        clock: Clock | None = None,
    ) -> None:
        self.client = client
        self.scores_days_from = scores_days_from
        self.lines = OddsCache(store, self._fetch_lines, namespace="odds", clock=clock)
        self.scores = OddsCache(store, self._fetch_scores, namespace="scores", clock=clock)

    async def _fetch_lines(self, sport_key: str) -> list[dict[str, Any]]:
        events = await self.client.get_odds(sport_key)
        try:
            return [game.model_dump(mode="json") for game in normalize_feed(events, sport_key)]
        except (TypeError, ValueError) as exc:
            # pydantic ValidationError is a ValueError
            raise ProviderFetchError(sport_key, f"malformed odds payload: {exc}") from exc

    async def _fetch_scores(self, sport_key: str) -> list[dict[str, Any]]:
        events = await self.client.get_scores(sport_key, self.scores_days_from)
        try:
            return [final.to_document() for final in normalize_scores(events).values()]
        except (TypeError, ValueError) as exc:
            raise ProviderFetchError(sport_key, f"malformed scores payload: {exc}") from exc

    async def board(self, sport_key: str) -> OddsBoard:
        feed = await self.lines.get(sport_key)
        games = [GameLines.model_validate(game) for game in feed.games]
        return OddsBoard(sport_key, games, feed.last_updated, feed.warning)

    async def final_scores(self, sport_keys: Iterable[str]) -> FinalsSnapshot:
        """Collect final scores for every sport concurrently.

        A sport with no data at all is reported as a warning; only a total
        outage raises.
        """

        keys = list(dict.fromkeys(sport_keys))
        outcomes = await asyncio.gather(*(self.scores.get(key) for key in keys), return_exceptions=True)

        snapshot = FinalsSnapshot()
        failures: list[ProviderFetchError] = []
        for key, outcome in zip(keys, outcomes):
            if isinstance(outcome, ProviderFetchError):
                logger.error("No scores available for %s: %s", key, outcome)
                failures.append(outcome)
                snapshot.warnings.append(str(outcome))
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            if outcome.warning:
                snapshot.warnings.append(outcome.warning)
            for doc in outcome.games:
                final = FinalScore.from_document(doc)
                snapshot.finals[final.game_id] = final

        if keys and len(failures) == len(keys):
            raise failures[0]
        return snapshot
