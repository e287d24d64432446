"""Shared fixtures: in-memory database and slip builders."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from parlaybook.db.database import build_engine, build_session_factory, init_db
from parlaybook.db.repository import SlipRepository, SqlCacheStore
from parlaybook.parlays.types import Leg, Slip


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory) -> SlipRepository:
    return SlipRepository(session_factory)


@pytest.fixture
def cache_store(session_factory) -> SqlCacheStore:
    return SqlCacheStore(session_factory)


def make_leg(game_id: str | None = "evt1", team: str = "Boston Celtics", odds: int = 100) -> Leg:
    return Leg(
        game_id=game_id,
        game="Miami Heat vs Boston Celtics",
        market_type="moneyline",
        team=team,
        odds=odds,
        sport="basketball_nba",
    )


def make_slip(*legs: Leg, user_id: str = "u1", wager: float = 100.0, created_at: datetime | None = None) -> Slip:
    return Slip(
        user_id=user_id,
        user_name="Una",
        wager_amount=wager,
        bets=list(legs) or [make_leg()],
        created_at=created_at or datetime(2025, 1, 10, tzinfo=timezone.utc),
    )
