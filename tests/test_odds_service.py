"""Odds service tests: board normalization and cached fallbacks."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from parlaybook.data.cache import MemoryCacheStore
from parlaybook.data.service import OddsService
from parlaybook.exceptions import ProviderFetchError

T0 = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)

ODDS = [
    {
        "id": "evt1",
        "home_team": "Boston Celtics",
        "away_team": "Miami Heat",
        "bookmakers": [
            {
                "key": "draftkings",
                "markets": [{"key": "h2h", "outcomes": [{"name": "Boston Celtics", "price": -150}]}],
            }
        ],
    }
]


class FlakyClient:
    def __init__(self) -> None:
        self.fail = False
        self.odds_calls = 0

    async def get_odds(self, sport_key: str) -> list[dict]:
        self.odds_calls += 1
        if self.fail:
            raise ProviderFetchError(sport_key, "timed out")
        return ODDS

    async def get_scores(self, sport_key: str, days_from: int = 2) -> list[dict]:
        raise ProviderFetchError(sport_key, "timed out")


@pytest.mark.asyncio
async def test_board_normalizes_and_caches(cache_store) -> None:
    clock = {"now": T0}
    client = FlakyClient()
    service = OddsService(client, cache_store, clock=lambda: clock["now"])

    board = await service.board("basketball_nba")
    assert board.games[0].lines[0]["marketType"] == "moneyline"
    assert board.last_updated == T0
    assert board.warning is None

    clock["now"] = T0 + timedelta(minutes=30)
    await service.board("basketball_nba")
    assert client.odds_calls == 1


@pytest.mark.asyncio
async def test_board_serves_stale_with_banner_when_provider_fails() -> None:
    clock = {"now": T0}
    client = FlakyClient()
    service = OddsService(client, MemoryCacheStore(), clock=lambda: clock["now"])
    await service.board("basketball_nba")

    client.fail = True
    clock["now"] = T0 + timedelta(hours=3)
    board = await service.board("basketball_nba")
    assert board.warning and "timed out" in board.warning
    assert board.last_updated == T0
    assert board.games[0].id == "evt1"


@pytest.mark.asyncio
async def test_final_scores_without_any_data_raises() -> None:
    service = OddsService(FlakyClient(), MemoryCacheStore(), clock=lambda: T0)
    with pytest.raises(ProviderFetchError):
        await service.final_scores(["basketball_nba", "baseball_mlb"])


@pytest.mark.asyncio
async def test_final_scores_with_no_sports_is_empty() -> None:
    snapshot = await OddsService(FlakyClient(), MemoryCacheStore()).final_scores([])
    assert snapshot.finals == {}


class GarbledScoresClient(FlakyClient):
    async def get_scores(self, sport_key: str, days_from: int = 2) -> list[dict]:
        return [
            {
                "id": "evt1",
                "completed": True,
                "home_team": "Boston Celtics",
                "away_team": "Miami Heat",
                "scores": [{"name": "Boston Celtics", "score": "N/A"}],
            }
        ]


@pytest.mark.asyncio
async def test_malformed_scores_fall_back_to_stale_cache() -> None:
    store = MemoryCacheStore()
    cached = {"id": "evt1", "home_team": "Boston Celtics", "away_team": "Miami Heat", "completed": False, "scores": {}}
    store.set("scores:basketball_nba", [cached], T0)
    service = OddsService(GarbledScoresClient(), store, clock=lambda: T0 + timedelta(hours=2))

    snapshot = await service.final_scores(["basketball_nba"])

    assert not snapshot.finals["evt1"].completed
    assert snapshot.warnings and "malformed scores payload" in snapshot.warnings[0]


@pytest.mark.asyncio
async def test_malformed_odds_without_cache_is_a_fetch_error() -> None:
    class GarbledOddsClient(FlakyClient):
        async def get_odds(self, sport_key: str) -> list[dict]:
            return [{"id": "evt1", "bookmakers": []}]

    service = OddsService(GarbledOddsClient(), MemoryCacheStore(), clock=lambda: T0)
    with pytest.raises(ProviderFetchError, match="malformed odds payload"):
        await service.board("basketball_nba")
