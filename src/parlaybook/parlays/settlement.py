"""Grade individual legs against completed-game final scores."""

from __future__ import annotations

from parlaybook.exceptions import (
    GameNotCompletedError,
    MalformedLegError,
    UnknownMarketError,
    UnknownSelectionError,
)
from parlaybook.parlays.types import FinalScore, Leg, LegResult, MarketType

OVER = "over"
UNDER = "under"


def _market(leg: Leg) -> MarketType:
    try:
        return MarketType(leg.market_type)
    except ValueError as exc:
        raise UnknownMarketError(f"Unrecognized market type {leg.market_type!r}") from exc


def _require_point(leg: Leg) -> float:
    if leg.point is None:
        raise MalformedLegError(f"{leg.market_type} leg on {leg.game!r} has no point")
    return leg.point


def _side_scores(leg: Leg, final: FinalScore) -> tuple[int, int]:
    """Return (selected team score, opponent score)."""

    home = final.score_for(final.home_team)
    away = final.score_for(final.away_team)
    if leg.team == final.home_team:
        return home, away
    if leg.team == final.away_team:
        return away, home
    raise UnknownSelectionError(
        f"{leg.team!r} is not playing in {final.away_team} vs {final.home_team}"
    )


def is_leg_winning(leg: Leg, final: FinalScore) -> bool:
    """Decide whether ``leg`` won, given the final score of its game.

    Ties and results landing exactly on the line are losses; there is no
    push handling.
    """

    if not final.completed:
        raise GameNotCompletedError(f"Game {final.game_id} is not completed")

    market = _market(leg)

    if market is MarketType.MONEYLINE:
        team_score, opp_score = _side_scores(leg, final)
        return team_score > opp_score

    if market is MarketType.SPREADS:
        point = _require_point(leg)
        team_score, opp_score = _side_scores(leg, final)
        return team_score + point > opp_score

    point = _require_point(leg)
    total = final.score_for(final.home_team) + final.score_for(final.away_team)
    side = leg.team.strip().lower()
    if side == OVER:
        return total > point
    if side == UNDER:
        return total < point
    raise UnknownSelectionError(f"Totals leg must pick Over or Under, got {leg.team!r}")


def grade_leg(leg: Leg, final: FinalScore) -> LegResult:
    return LegResult.WIN if is_leg_winning(leg, final) else LegResult.LOSE
