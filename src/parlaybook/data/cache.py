"""Time-boxed cache of provider feeds with stale fallback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol

from parlaybook.exceptions import ProviderFetchError

logger = logging.getLogger(__name__)

ODDS_CACHE_TTL = timedelta(hours=1)

Fetcher = Callable[[str], Awaitable[list[dict[str, Any]]]]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    """Normalized game list for one key plus the time it was fetched (UTC)."""

    games: list[dict[str, Any]]
    fetched_at: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.fetched_at

    def all_completed(self) -> bool:
        return bool(self.games) and all(game.get("completed") is True for game in self.games)


class CacheStore(Protocol):
    def get(self, key: str) -> Optional[CacheEntry]: ...

    def set(self, key: str, games: list[dict[str, Any]], fetched_at: datetime) -> None: ...


class MemoryCacheStore:
    """In-process cache store."""

    def __init__(self) -> None:
        self._store: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._store.get(key)

    def set(self, key: str, games: list[dict[str, Any]], fetched_at: datetime) -> None:
        self._store[key] = CacheEntry(games=list(games), fetched_at=fetched_at)

    def clear(self) -> None:
        self._store.clear()


@dataclass
class CachedFeed:
    games: list[dict[str, Any]]
    last_updated: datetime
    stale: bool = False
    warning: str | None = None


class OddsCache:
    """Serve a per-sport feed from cache, refetching once it is an hour old.

    A stale entry is still served when every game in it is completed, and
    whenever a refetch fails. Only a miss with a failing fetch raises.
    Concurrent refetches are not coordinated; the last write wins.
    """

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        *,
        namespace: str,
        ttl: timedelta = ODDS_CACHE_TTL,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.namespace = namespace
        self.ttl = ttl
        self._clock = clock or utcnow

    def key(self, sport_key: str) -> str:
        return f"{self.namespace}:{sport_key}"

    def is_fresh(self, entry: CacheEntry, now: datetime) -> bool:
        return entry.age(now) < self.ttl

    async def get(self, sport_key: str) -> CachedFeed:
        key = self.key(sport_key)
        entry = await asyncio.to_thread(self.store.get, key)
        now = self._clock()

        if entry is not None:
            if self.is_fresh(entry, now):
                logger.debug("Serving fresh cache for %s", key)
                return CachedFeed(entry.games, entry.fetched_at)
            if entry.all_completed():
                logger.debug("Serving completed cache for %s", key)
                return CachedFeed(entry.games, entry.fetched_at, stale=True)

        try:
            games = await self.fetcher(sport_key)
        except ProviderFetchError as exc:
            if entry is None:
                raise
            logger.warning("Refetch failed for %s, serving cache from %s: %s", key, entry.fetched_at, exc)
            return CachedFeed(entry.games, entry.fetched_at, stale=True, warning=str(exc))

        fetched_at = self._clock()
        await asyncio.to_thread(self.store.set, key, games, fetched_at)
        logger.info("Cached %d games for %s", len(games), key)
        return CachedFeed(games, fetched_at)
