"""FastAPI backend for ParlayBook."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware

from parlaybook import __version__
from parlaybook.api.schemas import (
    GameLinesResponse,
    NetPointResponse,
    OddsBoardResponse,
    PerformanceResponse,
    QuoteRequest,
    QuoteResponse,
    SettlementResponse,
    SlipResponse,
    StatusUpdateRequest,
    SubmitSlipRequest,
)
from parlaybook.config import Settings, get_api_access_key, get_odds_api_key, get_settings
from parlaybook.data.odds_api_client import OddsApiClient
from parlaybook.data.service import OddsService
from parlaybook.db.database import build_engine, build_session_factory, init_db
from parlaybook.db.repository import SlipRepository, SqlCacheStore
from parlaybook.exceptions import InvalidOddsError, ProviderFetchError, SlipNotFoundError
from parlaybook.parlays.engine import potential_profit, quote_parlay
from parlaybook.parlays.performance import summarize
from parlaybook.parlays.types import Slip, SlipStatus
from parlaybook.scheduling.jobs import run_settlement

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything the routes need, built once per application."""

    repository: SlipRepository
    odds_service: OddsService
    sport_keys: list[str] = field(default_factory=list)
    api_key: str | None = None
    client: OddsApiClient | None = None


def build_context(settings: Settings) -> AppContext:
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
    service = OddsService(client, SqlCacheStore(session_factory), scores_days_from=settings.scores_days_from)
    return AppContext(
        repository=SlipRepository(session_factory),
        odds_service=service,
        sport_keys=list(settings.sports),
        client=client,
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context


ContextDep = Annotated[AppContext, Depends(get_context)]


def require_api_key(
    context: ContextDep,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    expected = context.api_key or get_api_access_key()
    if not x_api_key or x_api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


APIKeyDep = Annotated[None, Depends(require_api_key)]
StatusQuery = Annotated[SlipStatus | None, Query(alias="status")]


def create_app(context: AppContext | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = app.state.context is None
        if owned:
            app.state.context = build_context(get_settings())
        try:
            yield
        finally:
            if owned and app.state.context.client is not None:
                await app.state.context.client.close()

    app = FastAPI(
        title="ParlayBook API",
        version=__version__,
        description="Sportsbook odds, parlay slips and settlement.",
        lifespan=lifespan,
    )
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/odds/{sport_key}", response_model=OddsBoardResponse)
    async def odds_board(sport_key: str, ctx: ContextDep) -> OddsBoardResponse:
        try:
            board = await ctx.odds_service.board(sport_key)
        except ProviderFetchError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return OddsBoardResponse(
            sport_key=board.sport_key,
            games=[GameLinesResponse(**game.model_dump()) for game in board.games],
            last_updated=board.last_updated,
            warning=board.warning,
        )

    @app.post("/parlays/quote", response_model=QuoteResponse)
    def quote(payload: QuoteRequest) -> QuoteResponse:
        try:
            result = quote_parlay(payload.wager_amount, [leg.to_leg() for leg in payload.bets])
        except InvalidOddsError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return QuoteResponse(
            leg_count=result.leg_count,
            wager_amount=result.wager_amount,
            decimal_odds=result.decimal_odds,
            potential_profit=result.potential_profit,
            total_payout=result.total_payout,
        )

    @app.post("/slips", response_model=SlipResponse, status_code=status.HTTP_201_CREATED)
    def submit_slip(payload: SubmitSlipRequest, ctx: ContextDep) -> SlipResponse:
        legs = [leg.to_leg() for leg in payload.bets]
        slip = ctx.repository.create(
            Slip(
                user_id=payload.user_id,
                user_name=payload.user_name,
                wager_amount=payload.wager_amount,
                bets=legs,
                status=SlipStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )
        )
        logger.info("Slip %s submitted by %s with %d legs", slip.id, slip.user_id, len(legs))
        return SlipResponse.from_slip(slip, potential_profit(slip.wager_amount, slip.bets))

    @app.get("/slips", response_model=list[SlipResponse])
    def list_slips(user_id: str, ctx: ContextDep, slip_status: StatusQuery = None) -> list[SlipResponse]:
        slips = ctx.repository.list_for_user(user_id, slip_status)
        return [SlipResponse.from_slip(slip) for slip in slips]

    @app.get("/users/{user_id}/performance", response_model=PerformanceResponse)
    def performance(user_id: str, ctx: ContextDep) -> PerformanceResponse:
        summary = summarize(ctx.repository.list_for_user(user_id))
        return PerformanceResponse(
            user_id=user_id,
            wins=summary.wins,
            losses=summary.losses,
            pending=summary.pending,
            win_rate=summary.win_rate,
            total_wagered=summary.total_wagered,
            total_returned=summary.total_returned,
            net=summary.net,
            series=[
                NetPointResponse(slip_id=p.slip_id, created_at=p.created_at, change=p.change, total=p.total)
                for p in summary.series
            ],
        )

    @app.get("/admin/slips", response_model=list[SlipResponse])
    def admin_list_slips(_: APIKeyDep, ctx: ContextDep) -> list[SlipResponse]:
        return [SlipResponse.from_slip(slip) for slip in ctx.repository.list_all()]

    @app.patch("/admin/slips/{slip_id}", response_model=SlipResponse)
    def admin_update_status(
        slip_id: str,
        payload: StatusUpdateRequest,
        _: APIKeyDep,
        ctx: ContextDep,
    ) -> SlipResponse:
        try:
            slip = ctx.repository.update_status(slip_id, payload.status)
        except SlipNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return SlipResponse.from_slip(slip)

    @app.delete("/admin/slips/{slip_id}", status_code=status.HTTP_204_NO_CONTENT)
    def admin_delete_slip(slip_id: str, _: APIKeyDep, ctx: ContextDep) -> None:
        try:
            ctx.repository.delete(slip_id)
        except SlipNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.post("/admin/settle", response_model=SettlementResponse)
    async def admin_settle(_: APIKeyDep, ctx: ContextDep) -> SettlementResponse:
        try:
            summary = await run_settlement(ctx.repository, ctx.odds_service, ctx.sport_keys)
        except ProviderFetchError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return SettlementResponse(
            checked=summary.checked,
            settled=summary.settled,
            won=summary.won,
            lost=summary.lost,
            still_pending=summary.still_pending,
            malformed_legs=summary.malformed_legs,
            integrity_errors=summary.integrity_errors,
            skipped=summary.skipped,
            failed=summary.failed,
            warnings=summary.warnings,
        )

    return app
