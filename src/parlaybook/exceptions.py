"""Exception hierarchy shared across ParlayBook components."""

from __future__ import annotations


class ParlayBookError(Exception):
    """Base class for all ParlayBook errors."""


class ProviderFetchError(ParlayBookError):
    """The odds/scores provider could not be reached or returned an error."""

    def __init__(self, sport_key: str, detail: str) -> None:
        super().__init__(f"Failed to fetch {sport_key}: {detail}")
        self.sport_key = sport_key
        self.detail = detail


class InvalidOddsError(ParlayBookError, ValueError):
    """American odds outside the valid price domain."""


class SettlementError(ParlayBookError):
    """A leg could not be graded against a final score."""


class GameNotCompletedError(SettlementError):
    pass


class UnknownMarketError(SettlementError):
    """Leg market type is not one of moneyline, spreads or totals."""


class MalformedLegError(SettlementError):
    """Leg is missing a field required to grade it."""


class UnknownSelectionError(SettlementError):
    """Leg selection does not name a side of the graded game."""


class SlipNotFoundError(ParlayBookError, LookupError):
    def __init__(self, slip_id: str) -> None:
        super().__init__(f"Slip {slip_id} not found")
        self.slip_id = slip_id
