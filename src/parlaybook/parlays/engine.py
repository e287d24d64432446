"""Parlay odds and payout math."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from parlaybook.exceptions import InvalidOddsError
from parlaybook.parlays.types import Leg, Slip, SlipStatus


def american_to_decimal(odds: int) -> float:
    if odds == 0:
        raise InvalidOddsError("American odds cannot be 0")
    return 1 + (odds / 100) if odds > 0 else 1 + (100 / abs(odds))


def combined_decimal_odds(legs: Iterable[Leg]) -> float:
    """Multiply leg decimal odds together; no legs means no parlay (1.0)."""

    decimal = 1.0
    for leg in legs:
        decimal *= american_to_decimal(leg.odds)
    return decimal


def potential_profit(wager_amount: float, legs: Iterable[Leg]) -> float:
    """Winnings exclusive of the returned stake."""

    return wager_amount * (combined_decimal_odds(legs) - 1)


def total_payout(wager_amount: float, legs: Iterable[Leg]) -> float:
    """Stake plus profit, paid out when every leg wins."""

    return wager_amount * combined_decimal_odds(legs)


@dataclass
class ParlayQuote:
    leg_count: int
    wager_amount: float
    decimal_odds: float
    potential_profit: float
    total_payout: float


def quote_parlay(wager_amount: float, legs: Iterable[Leg]) -> ParlayQuote:
    legs = list(legs)
    decimal = combined_decimal_odds(legs)
    return ParlayQuote(
        leg_count=len(legs),
        wager_amount=wager_amount,
        decimal_odds=decimal,
        potential_profit=wager_amount * (decimal - 1),
        total_payout=wager_amount * decimal,
    )


def settled_payout(slip: Slip) -> float | None:
    """Amount returned to the bettor for a settled slip, ``None`` while pending."""

    if slip.status is SlipStatus.WIN:
        return total_payout(slip.wager_amount, slip.bets)
    if slip.status is SlipStatus.LOSE:
        return 0.0
    return None
