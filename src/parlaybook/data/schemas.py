"""Pydantic schemas for The Odds API responses and normalized boards."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OutcomeSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    price: float
    point: float | None = None


class MarketSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    outcomes: list[OutcomeSchema] = Field(default_factory=list)


class BookmakerSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    title: str = ""
    markets: list[MarketSchema] = Field(default_factory=list)


class OddsEventSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    sport_key: str | None = None
    commence_time: datetime | None = None
    home_team: str
    away_team: str
    bookmakers: list[BookmakerSchema] = Field(default_factory=list)


class TeamScoreSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    score: str | int | None = None


class ScoreEventSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    sport_key: str | None = None
    commence_time: datetime | None = None
    completed: bool = False
    home_team: str
    away_team: str
    scores: list[TeamScoreSchema] | None = None


class GameLines(BaseModel):
    """One game on the odds board with every bettable line as a leg document."""

    id: str
    sport_key: str
    home_team: str
    away_team: str
    commence_time: datetime | None = None
    bookmakers: list[str] = Field(default_factory=list)
    lines: list[dict[str, Any]] = Field(default_factory=list)
