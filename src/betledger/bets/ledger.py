"""Portfolio statistics over a collection of bets."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from betledger.bets.settlement import capital_at_risk, settle
from betledger.bets.types import BetStatus, Bookmaker, FreeSpinBonus, SingleBet, SurebetBet

ALL = "all"

BetRecord = SingleBet | SurebetBet


@dataclass(frozen=True)
class BetFilters:
    sport: str = ALL
    result: BetStatus | str = ALL
    date_from: date | None = None
    date_to: date | None = None


@dataclass(frozen=True)
class LedgerStats:
    total_bets: int
    wins: int
    losses: int
    total_stake: float
    total_profit: float
    win_rate: float
    roi: float


@dataclass(frozen=True)
class PortfolioSummary:
    total_initial_bankroll: float
    all_time_profit: float
    current_bankroll: float


def _day_bounds(bet_date: datetime, filters: BetFilters) -> tuple[datetime | None, datetime | None]:
    tz = bet_date.tzinfo
    start = datetime.combine(filters.date_from, time.min, tzinfo=tz) if filters.date_from else None
    end = datetime.combine(filters.date_to, time.max, tzinfo=tz) if filters.date_to else None
    return start, end


def matches(bet: BetRecord, filters: BetFilters) -> bool:
    if filters.sport != ALL and bet.sport != filters.sport:
        return False
    if filters.result != ALL and bet.status != BetStatus(filters.result):
        return False
    start, end = _day_bounds(bet.date, filters)
    if start is not None and bet.date < start:
        return False
    if end is not None and bet.date > end:
        return False
    return True


def filter_bets(bets: Iterable[BetRecord], filters: BetFilters | None = None) -> list[BetRecord]:
    """Apply sport, result and inclusive date-range filters."""

    if filters is None:
        return list(bets)
    return [bet for bet in bets if matches(bet, filters)]


def aggregate(bets: Iterable[BetRecord], filters: BetFilters | None = None) -> LedgerStats:
    """Fold settled bets into counts, staked capital, profit, win rate and ROI."""

    counted = [bet for bet in filter_bets(bets, filters) if bet.is_settled]
    total = len(counted)
    wins = sum(1 for bet in counted if bet.status is BetStatus.WON)
    total_stake = sum(capital_at_risk(bet) for bet in counted)
    total_profit = sum(settle(bet) for bet in counted)
    return LedgerStats(
        total_bets=total,
        wins=wins,
        losses=total - wins,
        total_stake=total_stake,
        total_profit=total_profit,
        win_rate=(wins / total) * 100 if total else 0.0,
        roi=(total_profit / total_stake) * 100 if total_stake else 0.0,
    )


def _chronological_key(bet: BetRecord) -> datetime:
    """Sort key on a naive UTC instant; naive dates are taken as UTC."""

    if bet.date.tzinfo is None:
        return bet.date
    return bet.date.astimezone(timezone.utc).replace(tzinfo=None)


def profit_timeline(bets: Iterable[BetRecord]) -> list[tuple[date, float]]:
    """Cumulative realized profit at the end of each day with settled bets."""

    settled = sorted((bet for bet in bets if bet.is_settled), key=_chronological_key)
    daily: dict[date, float] = {}
    cumulative = 0.0
    for bet in settled:
        cumulative += settle(bet)
        daily[bet.date.date()] = cumulative
    return list(daily.items())


def status_breakdown(bets: Iterable[BetRecord]) -> dict[str, int]:
    counts = Counter(bet.status.value for bet in bets)
    return {status.value: counts.get(status.value, 0) for status in BetStatus}


def portfolio_summary(
    bets: Sequence[BetRecord],
    bookmakers: Iterable[Bookmaker],
    free_spins: Iterable[FreeSpinBonus] = (),
) -> PortfolioSummary:
    initial = sum(bookmaker.initial_bankroll for bookmaker in bookmakers)
    profit = sum(settle(bet) for bet in bets if bet.is_settled)
    profit += sum(bonus.won_amount for bonus in free_spins)
    return PortfolioSummary(
        total_initial_bankroll=initial,
        all_time_profit=profit,
        current_bankroll=initial + profit,
    )
