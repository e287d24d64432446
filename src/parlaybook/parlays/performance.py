"""Win/loss record and running net for a bettor's slips."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from parlaybook.parlays.engine import settled_payout
from parlaybook.parlays.types import Slip, SlipStatus


@dataclass
class NetPoint:
    slip_id: str | None
    created_at: datetime | None
    change: float
    total: float


@dataclass
class PerformanceSummary:
    wins: int = 0
    losses: int = 0
    pending: int = 0
    total_wagered: float = 0.0
    total_returned: float = 0.0
    series: list[NetPoint] = field(default_factory=list)

    @property
    def net(self) -> float:
        return self.total_returned - self.total_wagered

    @property
    def win_rate(self) -> float:
        settled = self.wins + self.losses
        return self.wins / settled if settled else 0.0


def summarize(slips: Iterable[Slip]) -> PerformanceSummary:
    """Aggregate settled slips; a win nets payout minus stake, a loss the stake."""

    summary = PerformanceSummary()
    settled: list[Slip] = []
    for slip in slips:
        if slip.status is SlipStatus.PENDING:
            summary.pending += 1
            continue
        settled.append(slip)

    settled.sort(key=lambda s: s.created_at.timestamp() if s.created_at else float("-inf"))
    running = 0.0
    for slip in settled:
        returned = settled_payout(slip) or 0.0
        if slip.status is SlipStatus.WIN:
            summary.wins += 1
        else:
            summary.losses += 1
        summary.total_wagered += slip.wager_amount
        summary.total_returned += returned
        change = returned - slip.wager_amount
        running += change
        summary.series.append(NetPoint(slip.id, slip.created_at, change, running))
    return summary
