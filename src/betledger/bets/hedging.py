"""Back/lay hedge sizing against an exchange with commission."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from betledger.config import get_settings


@dataclass(frozen=True)
class LayHedge:
    lay_stake: float = 0.0
    liability: float = 0.0
    profit_if_back_wins: float = 0.0
    profit_if_lay_wins: float = 0.0


ZERO_HEDGE = LayHedge()


def _as_float(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def solve_lay(
    back_odds: Any,
    back_stake: Any,
    lay_odds: Any,
    commission_pct: Any = None,
    is_freebet: bool = False,
) -> LayHedge:
    """Size the lay stake that covers a back bet.

    Degenerate input (non-numeric, non-positive odds or stake, negative
    commission, or lay odds no greater than the commission) yields an
    all-zero hedge.
    """

    settings = get_settings()
    if commission_pct is None:
        commission_pct = settings.default_lay_commission_pct
    b_odds = _as_float(back_odds)
    b_stake = _as_float(back_stake)
    l_odds = _as_float(lay_odds)
    pct = _as_float(commission_pct)
    if b_odds is None or b_stake is None or l_odds is None or pct is None:
        return ZERO_HEDGE
    if b_odds <= 0 or b_stake <= 0 or l_odds <= 0 or pct < 0:
        return ZERO_HEDGE

    commission = pct / 100
    divisor = l_odds - commission
    if divisor <= settings.lay_divisor_epsilon:
        return ZERO_HEDGE

    # freebet stake is not returned with the winnings
    back_profit = b_stake * (b_odds - 1) if is_freebet else b_stake * b_odds - b_stake
    lay_stake = (back_profit + b_stake) / divisor
    liability = lay_stake * (l_odds - 1)
    return LayHedge(
        lay_stake=lay_stake,
        liability=liability,
        profit_if_back_wins=back_profit - liability,
        profit_if_lay_wins=lay_stake * (1 - commission) - b_stake,
    )
