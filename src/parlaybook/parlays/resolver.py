"""Slip-level settlement: grade every leg, then settle all-or-nothing."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from parlaybook.exceptions import MalformedLegError, SettlementError
from parlaybook.parlays.engine import total_payout
from parlaybook.parlays.settlement import grade_leg
from parlaybook.parlays.types import FinalScore, Leg, LegResult, Slip, SlipStatus

logger = logging.getLogger(__name__)

MALFORMED = "malformed"
INTEGRITY = "integrity"


@dataclass
class LegIssue:
    index: int
    kind: str
    detail: str


@dataclass
class Resolution:
    """Outcome of evaluating one slip against a finals snapshot.

    ``slip`` carries the settled slip when ``fully_resolved`` and the
    untouched input otherwise. ``leg_results`` holds whatever could be graded,
    including partial results that were not applied.
    """

    slip: Slip
    fully_resolved: bool
    leg_results: list[LegResult | None] = field(default_factory=list)
    issues: list[LegIssue] = field(default_factory=list)


def evaluate_slip(slip: Slip, finals: Mapping[str, FinalScore]) -> Resolution:
    results: list[LegResult | None] = []
    issues: list[LegIssue] = []

    for index, leg in enumerate(slip.bets):
        if not leg.game_id:
            logger.warning("Slip %s leg %d has no gameId; leaving slip pending", slip.id, index)
            issues.append(LegIssue(index, MALFORMED, "missing gameId"))
            results.append(None)
            continue

        final = finals.get(leg.game_id)
        if final is None or not final.completed:
            results.append(None)
            continue

        try:
            results.append(grade_leg(leg, final))
        except MalformedLegError as exc:
            logger.warning("Slip %s leg %d is malformed: %s", slip.id, index, exc)
            issues.append(LegIssue(index, MALFORMED, str(exc)))
            results.append(None)
        except SettlementError as exc:
            logger.error("Slip %s leg %d failed integrity check: %s", slip.id, index, exc)
            issues.append(LegIssue(index, INTEGRITY, str(exc)))
            results.append(None)

    if not results or any(result is None for result in results):
        return Resolution(slip=slip, fully_resolved=False, leg_results=results, issues=issues)

    legs: list[Leg] = [replace(leg, result=result) for leg, result in zip(slip.bets, results)]
    won = all(result is LegResult.WIN for result in results)
    settled = replace(
        slip,
        bets=legs,
        status=SlipStatus.WIN if won else SlipStatus.LOSE,
        payout=total_payout(slip.wager_amount, legs) if won else 0.0,
    )
    return Resolution(slip=settled, fully_resolved=True, leg_results=results, issues=issues)


def resolve_slip(slip: Slip, finals: Mapping[str, FinalScore]) -> Slip:
    """Return ``slip`` settled against ``finals``, or unchanged if any leg is undecided."""

    return evaluate_slip(slip, finals).slip
