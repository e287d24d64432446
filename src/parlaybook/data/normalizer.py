"""Turn The Odds API feeds into leg templates and final scores."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from parlaybook.data.schemas import GameLines, OddsEventSchema, ScoreEventSchema
from parlaybook.parlays.types import FinalScore, Leg, MarketType, normalize_american_odds

logger = logging.getLogger(__name__)

MARKET_KEYS: dict[str, MarketType] = {
    "h2h": MarketType.MONEYLINE,
    "spreads": MarketType.SPREADS,
    "totals": MarketType.TOTALS,
}

TOTALS_SIDES = {"over": "Over", "under": "Under"}


def _totals_side(name: str) -> str | None:
    return TOTALS_SIDES.get(name.strip().lower())


def normalize_event(event: OddsEventSchema | dict[str, Any], sport_key: str) -> GameLines:
    if isinstance(event, dict):
        event = OddsEventSchema.model_validate(event)
    label = f"{event.away_team} vs {event.home_team}"
    start = event.commence_time.isoformat() if event.commence_time else None

    lines: list[dict[str, Any]] = []
    for book in event.bookmakers:
        for market in book.markets:
            market_type = MARKET_KEYS.get(market.key)
            if market_type is None:
                logger.debug("Skipping unsupported market %s for %s", market.key, event.id)
                continue
            for outcome in market.outcomes:
                team = outcome.name
                if market_type is MarketType.TOTALS:
                    team = _totals_side(outcome.name)
                    if team is None:
                        logger.debug("Skipping totals outcome %r for %s", outcome.name, event.id)
                        continue
                leg = Leg(
                    game_id=event.id,
                    game=label,
                    market_type=market_type.value,
                    team=team,
                    odds=normalize_american_odds(outcome.price),
                    point=None if market_type is MarketType.MONEYLINE else outcome.point,
                    sport=sport_key,
                    start_time=start,
                )
                doc = leg.to_document()
                doc["bookmaker"] = book.key
                lines.append(doc)

    return GameLines(
        id=event.id,
        sport_key=sport_key,
        home_team=event.home_team,
        away_team=event.away_team,
        commence_time=event.commence_time,
        bookmakers=[book.key for book in event.bookmakers],
        lines=lines,
    )


def normalize_feed(events: Iterable[OddsEventSchema | dict[str, Any]], sport_key: str) -> list[GameLines]:
    return [normalize_event(event, sport_key) for event in events]


def _parse_score(value: str | int | None) -> int:
    if value is None or value == "":
        return 0
    return int(value)


def normalize_scores(events: Iterable[ScoreEventSchema | dict[str, Any]]) -> dict[str, FinalScore]:
    """Key final scores by game id, matching score entries by team name."""

    finals: dict[str, FinalScore] = {}
    for event in events:
        if isinstance(event, dict):
            event = ScoreEventSchema.model_validate(event)
        scores = {entry.name: _parse_score(entry.score) for entry in event.scores or []}
        finals[event.id] = FinalScore(
            game_id=event.id,
            home_team=event.home_team,
            away_team=event.away_team,
            completed=event.completed,
            scores=scores,
        )
    return finals
