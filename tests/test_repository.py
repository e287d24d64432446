"""Slip repository and SQL cache store tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_leg, make_slip
from parlaybook.exceptions import SlipNotFoundError
from parlaybook.parlays.types import LegResult, SlipStatus


def test_create_and_get_round_trip(repository) -> None:
    created = repository.create(make_slip(make_leg(), make_leg("evt2", team="Over")))
    assert created.id
    loaded = repository.get(created.id)
    assert loaded.status is SlipStatus.PENDING
    assert [leg.game_id for leg in loaded.bets] == ["evt1", "evt2"]
    assert loaded.created_at.tzinfo is not None


def test_list_for_user_filters_by_status(repository) -> None:
    first = repository.create(make_slip())
    repository.create(make_slip())
    repository.create(make_slip(user_id="someone-else"))
    repository.update_status(first.id, SlipStatus.WIN)

    assert len(repository.list_for_user("u1")) == 2
    won = repository.list_for_user("u1", SlipStatus.WIN)
    assert [slip.id for slip in won] == [first.id]
    assert len(repository.list_all()) == 3
    assert len(repository.list_pending()) == 2


def test_apply_settlement_writes_everything_at_once(repository) -> None:
    slip = repository.create(make_slip())
    settled = replace(
        slip,
        bets=[replace(leg, result=LegResult.WIN) for leg in slip.bets],
        status=SlipStatus.WIN,
        payout=200.0,
    )
    assert repository.apply_settlement(settled) is True

    loaded = repository.get(slip.id)
    assert loaded.status is SlipStatus.WIN
    assert loaded.payout == 200.0
    assert loaded.bets[0].result is LegResult.WIN
    assert repository.list_pending() == []


def test_delete_and_missing_ids(repository) -> None:
    slip = repository.create(make_slip())
    repository.delete(slip.id)
    with pytest.raises(SlipNotFoundError):
        repository.get(slip.id)
    with pytest.raises(SlipNotFoundError):
        repository.update_status("nope", SlipStatus.LOSE)


def test_sql_cache_store_overwrites_and_keeps_utc(cache_store) -> None:
    t0 = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
    assert cache_store.get("scores:baseball_mlb") is None
    cache_store.set("scores:baseball_mlb", [{"id": "a"}], t0)
    cache_store.set("scores:baseball_mlb", [{"id": "b"}], t0 + timedelta(hours=1))

    entry = cache_store.get("scores:baseball_mlb")
    assert entry.games == [{"id": "b"}]
    assert entry.fetched_at == t0 + timedelta(hours=1)
    assert entry.fetched_at.tzinfo is not None


def test_stored_odds_are_normalized_on_load(repository) -> None:
    slip = repository.create(make_slip(make_leg(odds=0), make_leg("evt2", odds=-50)))
    loaded = repository.get(slip.id)
    assert [leg.odds for leg in loaded.bets] == [100, -100]


def test_apply_settlement_leaves_settled_rows_alone(repository) -> None:
    slip = repository.create(make_slip())
    repository.update_status(slip.id, SlipStatus.LOSE)
    settled = replace(
        slip,
        bets=[replace(leg, result=LegResult.WIN) for leg in slip.bets],
        status=SlipStatus.WIN,
        payout=200.0,
    )

    assert repository.apply_settlement(settled) is False
    loaded = repository.get(slip.id)
    assert loaded.status is SlipStatus.LOSE
    assert loaded.payout is None
    assert loaded.bets[0].result is None

    repository.delete(slip.id)
    with pytest.raises(SlipNotFoundError):
        repository.apply_settlement(settled)
