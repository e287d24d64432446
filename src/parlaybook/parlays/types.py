"""Dataclasses for legs, slips and final scores."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

MIN_ODDS_MAGNITUDE = 100


def normalize_american_odds(price: float) -> int:
    """Round a price to valid American odds.

    Sportsbooks never quote between -99 and +99, so 0 becomes +100 and any
    smaller magnitude is clamped to 100 keeping its sign.
    """

    odds = int(round(price))
    if odds == 0:
        return MIN_ODDS_MAGNITUDE
    if abs(odds) < MIN_ODDS_MAGNITUDE:
        return MIN_ODDS_MAGNITUDE if odds > 0 else -MIN_ODDS_MAGNITUDE
    return odds


class MarketType(str, Enum):
    MONEYLINE = "moneyline"
    SPREADS = "spreads"
    TOTALS = "totals"


class LegResult(str, Enum):
    WIN = "win"
    LOSE = "lose"


class SlipStatus(str, Enum):
    PENDING = "pending"
    WIN = "win"
    LOSE = "lose"


@dataclass
class Leg:
    """One selection within a slip.

    ``market_type`` is kept as the raw stored string so that legs with an
    unrecognized market can still be loaded and reported at settlement.
    """

    game_id: str | None
    game: str
    market_type: str
    team: str
    odds: int
    point: float | None = None
    sport: str | None = None
    start_time: str | None = None
    result: LegResult | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Leg:
        result = doc.get("result")
        return cls(
            game_id=doc.get("gameId"),
            game=doc.get("game", ""),
            market_type=doc.get("marketType", ""),
            team=doc.get("team", ""),
            odds=normalize_american_odds(doc.get("odds") or 0),
            point=doc.get("point"),
            sport=doc.get("sport"),
            start_time=doc.get("startTime"),
            result=LegResult(result) if result else None,
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "gameId": self.game_id,
            "game": self.game,
            "marketType": self.market_type,
            "team": self.team,
            "point": self.point,
            "odds": self.odds,
            "sport": self.sport,
            "startTime": self.start_time,
        }
        if self.result is not None:
            doc["result"] = self.result.value
        return doc


@dataclass
class Slip:
    """A parlay: one or more legs wagered together as a unit."""

    user_id: str
    user_name: str
    wager_amount: float
    bets: list[Leg] = field(default_factory=list)
    status: SlipStatus = SlipStatus.PENDING
    created_at: datetime | None = None
    payout: float | None = None
    id: str | None = None

    @property
    def is_settled(self) -> bool:
        return self.status is not SlipStatus.PENDING


@dataclass
class FinalScore:
    """Settlement input for one game, as reported by the scores feed."""

    game_id: str
    home_team: str
    away_team: str
    completed: bool
    scores: dict[str, int] = field(default_factory=dict)

    def score_for(self, team: str) -> int:
        # The feed omits entries for some teams; that reads as zero.
        return self.scores.get(team, 0)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> FinalScore:
        return cls(
            game_id=doc["id"],
            home_team=doc["home_team"],
            away_team=doc["away_team"],
            completed=bool(doc.get("completed")),
            scores={team: int(score) for team, score in (doc.get("scores") or {}).items()},
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.game_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "completed": self.completed,
            "scores": dict(self.scores),
        }
