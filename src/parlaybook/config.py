"""Environment-driven configuration helpers for ParlayBook."""

from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SPORTS = ["basketball_nba", "americanfootball_nfl", "baseball_mlb"]


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: AnyUrl | str = Field(default="sqlite:///./parlaybook.db")

    odds_api_key: str = Field(default="", validation_alias="ODDS_API_KEY")
    odds_api_base_url: str = Field(default="https://api.the-odds-api.com/v4")
    odds_regions: str = Field(default="us")
    sports: list[str] = Field(default_factory=lambda: list(DEFAULT_SPORTS))
    scores_days_from: int = Field(default=2, ge=1, le=3)

    request_timeout_seconds: float = Field(default=15.0, gt=0)
    request_retry_attempts: int = Field(default=3, ge=1, le=10)
    request_retry_wait_seconds: float = Field(default=1.0, ge=0)

    log_level: str = Field(default="INFO")

    parlaybook_api_key: str = Field(default="", validation_alias="PARLAYBOOK_API_KEY")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def get_odds_api_key() -> str:
    """Return The Odds API key or raise a helpful error."""

    key = os.getenv("ODDS_API_KEY") or get_settings().odds_api_key
    if not key:
        raise RuntimeError(
            "ODDS_API_KEY is not configured. "
            "Set it in .env for local dev or as a deployment secret."
        )
    return key


def get_api_access_key() -> str:
    key = os.getenv("PARLAYBOOK_API_KEY") or get_settings().parlaybook_api_key
    if not key:
        raise RuntimeError(
            "PARLAYBOOK_API_KEY is not configured. Set it in your environment or deployment secrets."
        )
    return key


def configure_logging(level: str | None = None) -> None:
    """Attach a single stdout handler to the root logger."""

    root = logging.getLogger()
    root.setLevel((level or get_settings().log_level).upper())
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
