"""FastAPI backend for BetLedger."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import asdict
from datetime import date
from typing import Annotated, Any

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from betledger import __version__
from betledger.api.schemas import (
    AllocationRequest,
    AllocationResponse,
    BookmakerBalanceResponse,
    BookmakerCreate,
    BookmakerUpdate,
    FreeSpinCreate,
    LayHedgeRequest,
    LayHedgeResponse,
    SettleRequest,
    StatsResponse,
    SummaryResponse,
    TimelinePoint,
)
from betledger.bets.attribution import attribute, attribute_all
from betledger.bets.errors import (
    BookmakerInUseError,
    InvalidTransitionError,
    RecordNotFoundError,
    SettlementInconsistencyError,
)
from betledger.bets.hedging import solve_lay
from betledger.bets.ledger import (
    ALL,
    BetFilters,
    aggregate,
    portfolio_summary,
    profit_timeline,
    status_breakdown,
)
from betledger.bets.surebet_math import allocate_stakes
from betledger.bets.types import FreeSpinBonus, parse_bet
from betledger.config import get_api_access_key
from betledger.db import store
from betledger.db.database import get_session

logger = logging.getLogger(__name__)

app = FastAPI(
    title="BetLedger API",
    version=__version__,
    description="Bet settlement, portfolio statistics and bookmaker balances.",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db() -> Iterator[Session]:
    with get_session() as db:
        yield db


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    expected = get_api_access_key()
    if not x_api_key or x_api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


SessionDep = Annotated[Session, Depends(get_db)]
APIKeyDep = Annotated[None, Depends(require_api_key)]
SportQuery = Annotated[str, Query()]
ResultQuery = Annotated[str, Query(pattern="^(all|pending|won|lost)$")]
DateQuery = Annotated[date | None, Query()]


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, RecordNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (BookmakerInUseError, InvalidTransitionError, IntegrityError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = 422
    logger.info("Request failed with %s: %s", code, exc)
    detail = str(exc.orig) if isinstance(exc, IntegrityError) else str(exc)
    return HTTPException(status_code=code, detail=detail)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, Any]:
    return {"name": "betledger", "version": __version__}


@app.get("/bets")
def list_bets(_: APIKeyDep, session: SessionDep) -> list[dict[str, Any]]:
    return [bet.model_dump(mode="json") for bet in store.load_bets(session)]


@app.post("/bets", status_code=status.HTTP_201_CREATED)
def create_bet(
    payload: Annotated[dict[str, Any], Body()],
    _: APIKeyDep,
    session: SessionDep,
) -> dict[str, Any]:
    try:
        bet = store.add_bet(session, parse_bet(payload))
    except (ValidationError, RecordNotFoundError, IntegrityError) as exc:
        raise _http_error(exc) from exc
    return bet.model_dump(mode="json")


@app.post("/bets/{bet_id}/settle")
def settle_bet(
    bet_id: str,
    payload: SettleRequest,
    _: APIKeyDep,
    session: SessionDep,
) -> dict[str, Any]:
    try:
        bet = store.settle_bet(session, bet_id, payload.status, payload.winning_leg_index)
    except (
        ValidationError,
        RecordNotFoundError,
        InvalidTransitionError,
        SettlementInconsistencyError,
    ) as exc:
        raise _http_error(exc) from exc
    return bet.model_dump(mode="json")


@app.get("/stats", response_model=StatsResponse)
def stats(
    _: APIKeyDep,
    session: SessionDep,
    sport: SportQuery = ALL,
    result: ResultQuery = ALL,
    date_from: DateQuery = None,
    date_to: DateQuery = None,
) -> StatsResponse:
    filters = BetFilters(sport=sport, result=result, date_from=date_from, date_to=date_to)
    try:
        ledger = aggregate(store.load_bets(session), filters)
    except SettlementInconsistencyError as exc:
        raise _http_error(exc) from exc
    return StatsResponse(**asdict(ledger))


@app.get("/timeline", response_model=list[TimelinePoint])
def timeline(_: APIKeyDep, session: SessionDep) -> list[TimelinePoint]:
    try:
        points = profit_timeline(store.load_bets(session))
    except SettlementInconsistencyError as exc:
        raise _http_error(exc) from exc
    return [TimelinePoint(day=day, profit=profit) for day, profit in points]


@app.get("/summary", response_model=SummaryResponse)
def summary(_: APIKeyDep, session: SessionDep) -> SummaryResponse:
    bets = store.load_bets(session)
    try:
        totals = portfolio_summary(
            bets, store.list_bookmakers(session), store.load_free_spins(session)
        )
    except SettlementInconsistencyError as exc:
        raise _http_error(exc) from exc
    return SummaryResponse(**asdict(totals), status_counts=status_breakdown(bets))


@app.get("/bookmakers", response_model=list[BookmakerBalanceResponse])
def list_bookmakers(_: APIKeyDep, session: SessionDep) -> list[BookmakerBalanceResponse]:
    try:
        balances = attribute_all(
            store.list_bookmakers(session),
            store.load_bets(session),
            store.load_free_spins(session),
        )
    except SettlementInconsistencyError as exc:
        raise _http_error(exc) from exc
    return [BookmakerBalanceResponse(**asdict(balance)) for balance in balances]


@app.post(
    "/bookmakers",
    response_model=BookmakerBalanceResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_bookmaker(
    payload: BookmakerCreate,
    _: APIKeyDep,
    session: SessionDep,
) -> BookmakerBalanceResponse:
    try:
        bookmaker = store.add_bookmaker(session, payload.name, payload.initial_bankroll)
    except IntegrityError as exc:
        raise _http_error(exc) from exc
    return BookmakerBalanceResponse(**asdict(attribute(bookmaker, [])))


@app.patch("/bookmakers/{bookmaker_id}", response_model=BookmakerBalanceResponse)
def update_bookmaker(
    bookmaker_id: str,
    payload: BookmakerUpdate,
    _: APIKeyDep,
    session: SessionDep,
) -> BookmakerBalanceResponse:
    try:
        bookmaker = store.update_bookmaker(
            session, bookmaker_id, payload.name, payload.initial_bankroll
        )
        balance = attribute(bookmaker, store.load_bets(session), store.load_free_spins(session))
    except (RecordNotFoundError, IntegrityError, SettlementInconsistencyError) as exc:
        raise _http_error(exc) from exc
    return BookmakerBalanceResponse(**asdict(balance))


@app.delete("/bookmakers/{bookmaker_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bookmaker(bookmaker_id: str, _: APIKeyDep, session: SessionDep) -> None:
    try:
        store.delete_bookmaker(session, bookmaker_id)
    except (RecordNotFoundError, BookmakerInUseError) as exc:
        raise _http_error(exc) from exc


@app.post("/bookmakers/{bookmaker_id}/free-spins", status_code=status.HTTP_201_CREATED)
def add_free_spin(
    bookmaker_id: str,
    payload: FreeSpinCreate,
    _: APIKeyDep,
    session: SessionDep,
) -> dict[str, Any]:
    bonus = FreeSpinBonus(bookmaker_id=bookmaker_id, won_amount=payload.won_amount, date=payload.date)
    try:
        saved = store.add_free_spin(session, bonus)
    except RecordNotFoundError as exc:
        raise _http_error(exc) from exc
    return saved.model_dump(mode="json")


@app.post("/tools/lay-hedge", response_model=LayHedgeResponse)
def lay_hedge(payload: LayHedgeRequest, _: APIKeyDep) -> LayHedgeResponse:
    hedge = solve_lay(
        payload.back_odds,
        payload.back_stake,
        payload.lay_odds,
        payload.commission_pct,
        payload.is_freebet,
    )
    return LayHedgeResponse(**asdict(hedge))


@app.post("/tools/surebet-allocation", response_model=AllocationResponse)
def surebet_allocation(payload: AllocationRequest, _: APIKeyDep) -> AllocationResponse:
    plan = allocate_stakes(
        payload.odds,
        payload.total,
        fees=payload.fees,
        min_stakes=payload.min_stakes,
        max_stakes=payload.max_stakes,
        skip_surebet_check=payload.skip_surebet_check,
    )
    return AllocationResponse(
        ok=plan.ok,
        reason=plan.reason,
        implied_sum=plan.implied_sum,
        is_surebet=plan.is_surebet,
        stakes=plan.stakes,
        total_invested=plan.total_invested,
        net_returns=plan.net_returns,
        min_return=plan.min_return,
        profit=plan.profit,
        roi=plan.roi,
    )
