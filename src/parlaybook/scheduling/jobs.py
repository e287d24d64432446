"""Scheduling entry points."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from parlaybook.config import configure_logging, get_odds_api_key, get_settings
from parlaybook.data.odds_api_client import OddsApiClient
from parlaybook.data.service import OddsService
from parlaybook.db.database import build_engine, build_session_factory, init_db
from parlaybook.db.repository import SlipRepository, SqlCacheStore
from parlaybook.exceptions import ParlayBookError, ProviderFetchError, SlipNotFoundError
from parlaybook.parlays.resolver import INTEGRITY, MALFORMED, evaluate_slip
from parlaybook.parlays.types import SlipStatus

logger = logging.getLogger(__name__)


@dataclass
class SettlementSummary:
    checked: int = 0
    settled: int = 0
    won: int = 0
    lost: int = 0
    still_pending: int = 0
    malformed_legs: int = 0
    integrity_errors: int = 0
    skipped: int = 0
    failed: int = 0
    warnings: list[str] = field(default_factory=list)


async def run_settlement(
    repository: SlipRepository,
    odds_service: OddsService,
    sport_keys: Iterable[str] = (),
) -> SettlementSummary:
    """Settle every pending slip whose legs all have completed games."""

    pending = await asyncio.to_thread(repository.list_pending)
    sports = list(dict.fromkeys([*sport_keys, *(leg.sport for slip in pending for leg in slip.bets if leg.sport)]))

    summary = SettlementSummary(checked=len(pending))
    if not pending:
        logger.info("No pending slips to settle.")
        return summary

    snapshot = await odds_service.final_scores(sports)
    summary.warnings.extend(snapshot.warnings)

    for slip in pending:
        try:
            resolution = evaluate_slip(slip, snapshot.finals)
        except ParlayBookError:
            logger.exception("Could not evaluate slip %s", slip.id)
            summary.failed += 1
            continue
        summary.malformed_legs += sum(1 for issue in resolution.issues if issue.kind == MALFORMED)
        summary.integrity_errors += sum(1 for issue in resolution.issues if issue.kind == INTEGRITY)
        if not resolution.fully_resolved:
            summary.still_pending += 1
            continue
        try:
            written = await asyncio.to_thread(repository.apply_settlement, resolution.slip)
        except SlipNotFoundError:
            logger.warning("Slip %s was deleted before it could be settled", slip.id)
            written = False
        if not written:
            summary.skipped += 1
            continue
        summary.settled += 1
        if resolution.slip.status is SlipStatus.WIN:
            summary.won += 1
        else:
            summary.lost += 1

    logger.info(
        "Settlement pass: %d checked, %d settled (%d won, %d lost), %d pending, %d skipped, %d failed",
        summary.checked,
        summary.settled,
        summary.won,
        summary.lost,
        summary.still_pending,
        summary.skipped,
        summary.failed,
    )
    if summary.malformed_legs or summary.integrity_errors:
        logger.warning(
            "%d malformed legs and %d integrity errors need operator attention",
            summary.malformed_legs,
            summary.integrity_errors,
        )
    return summary


async def _run_once() -> SettlementSummary:
    settings = get_settings()
    engine = build_engine(str(settings.database_url))
    init_db(engine)
    session_factory = build_session_factory(engine)
    client = OddsApiClient(
        get_odds_api_key(),
        settings.odds_api_base_url,
        regions=settings.odds_regions,
        timeout=settings.request_timeout_seconds,
        retry_attempts=settings.request_retry_attempts,
        retry_wait=settings.request_retry_wait_seconds,
    )
    try:
        service = OddsService(client, SqlCacheStore(session_factory), scores_days_from=settings.scores_days_from)
        return await run_settlement(SlipRepository(session_factory), service, settings.sports)
    finally:
        await client.close()
        engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Settle pending bet slips against final scores.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run.")
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        asyncio.run(_run_once())
    except ProviderFetchError as exc:
        logger.error("Settlement aborted, no scores available: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
