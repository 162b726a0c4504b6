"""Pydantic schemas for the BetLedger API."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


class SettleRequest(BaseModel):
    status: Literal["won", "lost"]
    winning_leg_index: int | None = Field(default=None, ge=0)


class BookmakerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    initial_bankroll: float = Field(default=0.0, ge=0)


class BookmakerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    initial_bankroll: float | None = Field(default=None, ge=0)


class FreeSpinCreate(BaseModel):
    won_amount: float = 0.0
    date: datetime | None = None


class BookmakerBalanceResponse(BaseModel):
    bookmaker_id: str
    name: str
    initial_bankroll: float
    profit: float
    current_balance: float
    settled_bets: int


class StatsResponse(BaseModel):
    total_bets: int
    wins: int
    losses: int
    total_stake: float
    total_profit: float
    win_rate: float
    roi: float


class TimelinePoint(BaseModel):
    day: date
    profit: float


class SummaryResponse(BaseModel):
    total_initial_bankroll: float
    all_time_profit: float
    current_bankroll: float
    status_counts: dict[str, int]


class LayHedgeRequest(BaseModel):
    back_odds: float
    back_stake: float
    lay_odds: float
    commission_pct: float | None = None
    is_freebet: bool = False


class LayHedgeResponse(BaseModel):
    lay_stake: float
    liability: float
    profit_if_back_wins: float
    profit_if_lay_wins: float


class AllocationRequest(BaseModel):
    odds: list[float] = Field(min_length=2)
    total: float = Field(gt=0)
    fees: list[float | None] | None = None
    min_stakes: list[float | None] | None = None
    max_stakes: list[float | None] | None = None
    skip_surebet_check: bool = False


class AllocationResponse(BaseModel):
    ok: bool
    reason: str = ""
    implied_sum: float
    is_surebet: bool
    stakes: list[float]
    total_invested: float
    net_returns: list[float]
    min_return: float
    profit: float
    roi: float
