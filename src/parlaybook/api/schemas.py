"""Pydantic schemas for the ParlayBook API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from parlaybook.parlays.types import Leg, LegResult, MarketType, Slip, SlipStatus, normalize_american_odds


class LegPayload(BaseModel):
    game_id: str = Field(min_length=1)
    game: str
    market_type: MarketType
    team: str = Field(min_length=1)
    odds: int
    point: float | None = None
    sport: str | None = None
    start_time: str | None = None

    @field_validator("odds")
    @classmethod
    def _normalize_odds(cls, value: int) -> int:
        return normalize_american_odds(value)

    def to_leg(self) -> Leg:
        return Leg(
            game_id=self.game_id,
            game=self.game,
            market_type=self.market_type.value,
            team=self.team,
            odds=self.odds,
            point=None if self.market_type is MarketType.MONEYLINE else self.point,
            sport=self.sport,
            start_time=self.start_time,
        )


class QuoteRequest(BaseModel):
    wager_amount: float = Field(gt=0)
    bets: list[LegPayload] = Field(default_factory=list)


class QuoteResponse(BaseModel):
    leg_count: int
    wager_amount: float
    decimal_odds: float
    potential_profit: float
    total_payout: float


class SubmitSlipRequest(BaseModel):
    user_id: str = Field(min_length=1)
    user_name: str = ""
    wager_amount: float = Field(gt=0)
    bets: list[LegPayload] = Field(min_length=1)


class LegResponse(BaseModel):
    game_id: str | None
    game: str
    market_type: str
    team: str
    odds: int
    point: float | None = None
    sport: str | None = None
    start_time: str | None = None
    result: LegResult | None = None


class SlipResponse(BaseModel):
    id: str | None
    user_id: str
    user_name: str
    wager_amount: float
    bets: list[LegResponse]
    status: SlipStatus
    created_at: datetime | None = None
    payout: float | None = None
    potential_profit: float | None = None

    @classmethod
    def from_slip(cls, slip: Slip, potential_profit: float | None = None) -> SlipResponse:
        return cls(
            id=slip.id,
            user_id=slip.user_id,
            user_name=slip.user_name,
            wager_amount=slip.wager_amount,
            bets=[
                LegResponse(
                    game_id=leg.game_id,
                    game=leg.game,
                    market_type=leg.market_type,
                    team=leg.team,
                    odds=leg.odds,
                    point=leg.point,
                    sport=leg.sport,
                    start_time=leg.start_time,
                    result=leg.result,
                )
                for leg in slip.bets
            ],
            status=slip.status,
            created_at=slip.created_at,
            payout=slip.payout,
            potential_profit=potential_profit,
        )


class StatusUpdateRequest(BaseModel):
    status: SlipStatus


class GameLinesResponse(BaseModel):
    id: str
    sport_key: str
    home_team: str
    away_team: str
    commence_time: datetime | None = None
    bookmakers: list[str] = Field(default_factory=list)
    lines: list[dict[str, Any]] = Field(default_factory=list)


class OddsBoardResponse(BaseModel):
    sport_key: str
    games: list[GameLinesResponse]
    last_updated: datetime
    warning: str | None = None


class NetPointResponse(BaseModel):
    slip_id: str | None
    created_at: datetime | None
    change: float
    total: float


class PerformanceResponse(BaseModel):
    user_id: str
    wins: int
    losses: int
    pending: int
    win_rate: float
    total_wagered: float
    total_returned: float
    net: float
    series: list[NetPointResponse]


class SettlementResponse(BaseModel):
    checked: int
    settled: int
    won: int
    lost: int
    still_pending: int
    malformed_legs: int
    integrity_errors: int
    skipped: int = 0
    failed: int = 0
    warnings: list[str]
