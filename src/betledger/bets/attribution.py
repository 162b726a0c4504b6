"""Per-bookmaker profit and balance attribution."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from betledger.bets.settlement import leg_capital, leg_payout, resolve_winning_leg, settle
from betledger.bets.types import Bookmaker, FreeSpinBonus, SingleBet, SurebetBet


@dataclass(frozen=True)
class BookmakerBalance:
    bookmaker_id: str
    name: str
    initial_bankroll: float
    profit: float
    current_balance: float
    settled_bets: int = 0


def involves_bookmaker(bet: SingleBet | SurebetBet, bookmaker_id: str) -> bool:
    return bookmaker_id in bet.bookmaker_ids()


def bets_for_bookmaker(
    bookmaker_id: str, bets: Iterable[SingleBet | SurebetBet]
) -> list[SingleBet | SurebetBet]:
    return [bet for bet in bets if involves_bookmaker(bet, bookmaker_id)]


def attributed_profit(bet: SingleBet | SurebetBet, bookmaker_id: str) -> float:
    """Share of a settled bet's profit that lands at one bookmaker.

    Every leg staked at the bookmaker costs its capital; the winning leg, if
    it was placed there, also brings in its payout.
    """

    if not bet.is_settled or not involves_bookmaker(bet, bookmaker_id):
        return 0.0
    if isinstance(bet, SingleBet):
        return settle(bet)

    winner = resolve_winning_leg(bet)
    profit = 0.0
    for idx, leg in enumerate(bet.sub_bets):
        if leg.bookmaker_id != bookmaker_id:
            continue
        if idx == winner:
            profit += leg_payout(leg)
        profit -= leg_capital(leg)
    return profit


def attribute(
    bookmaker: Bookmaker,
    bets: Iterable[SingleBet | SurebetBet],
    free_spins: Iterable[FreeSpinBonus] = (),
) -> BookmakerBalance:
    """Derive a bookmaker's profit and current balance from the ledger."""

    relevant = [bet for bet in bets_for_bookmaker(bookmaker.id, bets) if bet.is_settled]
    profit = sum(attributed_profit(bet, bookmaker.id) for bet in relevant)
    profit += sum(bonus.won_amount for bonus in free_spins if bonus.bookmaker_id == bookmaker.id)
    return BookmakerBalance(
        bookmaker_id=bookmaker.id,
        name=bookmaker.name,
        initial_bankroll=bookmaker.initial_bankroll,
        profit=profit,
        current_balance=bookmaker.initial_bankroll + profit,
        settled_bets=len(relevant),
    )


def attribute_all(
    bookmakers: Iterable[Bookmaker],
    bets: Sequence[SingleBet | SurebetBet],
    free_spins: Sequence[FreeSpinBonus] = (),
) -> list[BookmakerBalance]:
    return [attribute(bookmaker, bets, free_spins) for bookmaker in bookmakers]
