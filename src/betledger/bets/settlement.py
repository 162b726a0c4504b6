"""Per-bet profit and the shared winning-leg resolver."""

from __future__ import annotations

import logging

from betledger.bets.errors import SettlementInconsistencyError
from betledger.bets.types import BetStatus, Leg, SingleBet, SurebetBet

logger = logging.getLogger(__name__)


def leg_payout(leg: Leg) -> float:
    """Amount returned by a leg that wins; freebet stakes are not returned."""

    if leg.is_freebet:
        return leg.stake * (leg.odds - 1)
    return leg.stake * leg.odds


def leg_capital(leg: Leg) -> float:
    return 0.0 if leg.is_freebet else leg.stake


def capital_at_risk(bet: SingleBet | SurebetBet) -> float:
    if isinstance(bet, SingleBet):
        return bet.stake
    return sum(leg_capital(leg) for leg in bet.sub_bets)


def leg_outcomes(bet: SurebetBet) -> list[float]:
    """Position profit for each leg, assuming that leg is the one that pays."""

    at_risk = capital_at_risk(bet)
    return [leg_payout(leg) - at_risk for leg in bet.sub_bets]


def resolve_winning_leg(bet: SurebetBet) -> int | None:
    """Return the index of the paying leg of a won position.

    An explicit ``winning_leg_index`` is trusted as recorded. Otherwise the
    candidates are the legs whose payout exceeds the capital at risk. With
    several candidates the one closest to ``guaranteed_profit`` is chosen, or
    the smallest outcome when no target was stored; ties go to the first leg.
    """

    if bet.status is not BetStatus.WON:
        return None
    if bet.winning_leg_index is not None:
        return bet.winning_leg_index

    outcomes = leg_outcomes(bet)
    candidates = [idx for idx, outcome in enumerate(outcomes) if outcome > 0]
    if not candidates:
        raise SettlementInconsistencyError(
            bet.id,
            "marked won but no leg pays out more than the capital at risk",
        )
    if len(candidates) == 1:
        return candidates[0]

    if bet.guaranteed_profit is not None:
        target = bet.guaranteed_profit
        chosen = min(candidates, key=lambda idx: abs(outcomes[idx] - target))
    else:
        chosen = min(candidates, key=lambda idx: outcomes[idx])
    logger.debug(
        "Bet %s: inferred winning leg %d among %d candidates",
        bet.id,
        chosen,
        len(candidates),
    )
    return chosen


def settle(bet: SingleBet | SurebetBet) -> float:
    """Realized profit (negative for a loss) of one bet; pending bets yield 0."""

    if bet.status is BetStatus.PENDING:
        return 0.0

    if isinstance(bet, SingleBet):
        if bet.status is BetStatus.WON:
            return bet.stake * bet.odds - bet.stake
        return -bet.stake

    if bet.status is BetStatus.LOST:
        return -capital_at_risk(bet)
    # a won position needs a leg that covers the capital at risk
    winner = resolve_winning_leg(bet)
    if bet.winning_leg_index is None and bet.guaranteed_profit is not None:
        return bet.guaranteed_profit
    return leg_outcomes(bet)[winner]
