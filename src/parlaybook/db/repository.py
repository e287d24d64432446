"""Slip and odds-cache persistence on top of SQLAlchemy sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from parlaybook.data.cache import CacheEntry
from parlaybook.db.database import session_scope
from parlaybook.db.models import OddsCacheRecord, SlipRecord
from parlaybook.exceptions import SlipNotFoundError
from parlaybook.parlays.types import Leg, Slip, SlipStatus

logger = logging.getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_slip(record: SlipRecord) -> Slip:
    return Slip(
        id=record.id,
        user_id=record.user_id,
        user_name=record.user_name,
        wager_amount=record.wager_amount,
        bets=[Leg.from_document(doc) for doc in record.bets or []],
        status=SlipStatus(record.status),
        created_at=_as_utc(record.created_at),
        payout=record.payout,
    )


class SlipRepository:
    """The ``bets`` collection: one row per slip."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def create(self, slip: Slip) -> Slip:
        with session_scope(self.session_factory) as session:
            record = SlipRecord(
                user_id=slip.user_id,
                user_name=slip.user_name,
                wager_amount=slip.wager_amount,
                bets=[leg.to_document() for leg in slip.bets],
                status=slip.status.value,
                payout=slip.payout,
            )
            if slip.created_at is not None:
                record.created_at = slip.created_at
            session.add(record)
            session.flush()
            return _to_slip(record)

    def get(self, slip_id: str) -> Slip:
        with session_scope(self.session_factory) as session:
            record = session.get(SlipRecord, slip_id)
            if record is None:
                raise SlipNotFoundError(slip_id)
            return _to_slip(record)

    def list_for_user(self, user_id: str, status: SlipStatus | None = None) -> list[Slip]:
        stmt = select(SlipRecord).where(SlipRecord.user_id == user_id)
        if status is not None:
            stmt = stmt.where(SlipRecord.status == status.value)
        stmt = stmt.order_by(SlipRecord.created_at.desc())
        with session_scope(self.session_factory) as session:
            return [_to_slip(record) for record in session.scalars(stmt)]

    def list_all(self) -> list[Slip]:
        stmt = select(SlipRecord).order_by(SlipRecord.created_at.desc())
        with session_scope(self.session_factory) as session:
            return [_to_slip(record) for record in session.scalars(stmt)]

    def list_pending(self) -> list[Slip]:
        stmt = select(SlipRecord).where(SlipRecord.status == SlipStatus.PENDING.value)
        with session_scope(self.session_factory) as session:
            return [_to_slip(record) for record in session.scalars(stmt)]

    def apply_settlement(self, slip: Slip) -> bool:
        """Write leg results, status and payout for a settled slip in one commit.

        Only a row that is still pending is written; returns ``False`` when the
        stored slip was already settled (for example by an admin edit).
        """

        if slip.id is None:
            raise ValueError("Cannot settle a slip that was never stored")
        stmt = (
            update(SlipRecord)
            .where(SlipRecord.id == slip.id, SlipRecord.status == SlipStatus.PENDING.value)
            .values(bets=[leg.to_document() for leg in slip.bets], status=slip.status.value, payout=slip.payout)
        )
        with session_scope(self.session_factory) as session:
            if session.execute(stmt).rowcount == 0:
                record = session.get(SlipRecord, slip.id)
                if record is None:
                    raise SlipNotFoundError(slip.id)
                logger.info("Slip %s is already %s, not settling", slip.id, record.status)
                return False
        logger.info("Settled slip %s as %s", slip.id, slip.status.value)
        return True

    def update_status(self, slip_id: str, status: SlipStatus) -> Slip:
        with session_scope(self.session_factory) as session:
            record = session.get(SlipRecord, slip_id)
            if record is None:
                raise SlipNotFoundError(slip_id)
            record.status = status.value
            session.flush()
            return _to_slip(record)

    def delete(self, slip_id: str) -> None:
        with session_scope(self.session_factory) as session:
            record = session.get(SlipRecord, slip_id)
            if record is None:
                raise SlipNotFoundError(slip_id)
            session.delete(record)


class SqlCacheStore:
    """Cache store keeping one ``odds_cache`` row per key."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[CacheEntry]:
        with session_scope(self.session_factory) as session:
            record = session.get(OddsCacheRecord, key)
            if record is None:
                return None
            return CacheEntry(games=list(record.games or []), fetched_at=_as_utc(record.fetched_at))

    def set(self, key: str, games: list[dict[str, Any]], fetched_at: datetime) -> None:
        with session_scope(self.session_factory) as session:
            record = session.get(OddsCacheRecord, key) or OddsCacheRecord(cache_key=key)
            record.games = list(games)
            record.fetched_at = fetched_at
            session.add(record)
