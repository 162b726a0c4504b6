"""Arbitrage checks and stake planning for multi-leg positions."""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field

from betledger.bets.settlement import leg_capital, leg_payout
from betledger.bets.types import Leg
from betledger.config import get_settings

CENT = 0.01


def round2(value: float) -> float:
    return round(value, 2)


@dataclass
class StakeAllocation:
    ok: bool
    reason: str = ""
    implied_sum: float = 0.0
    is_surebet: bool = False
    odds: list[float] = field(default_factory=list)
    stakes: list[float] = field(default_factory=list)
    total_invested: float = 0.0
    gross_returns: list[float] = field(default_factory=list)
    net_returns: list[float] = field(default_factory=list)
    min_return: float = 0.0
    profit: float = 0.0
    roi: float = 0.0


@dataclass(frozen=True)
class PositionProfile:
    total_stake: float
    guaranteed_profit: float
    profit_percentage: float


@dataclass(frozen=True)
class CoverageResult:
    all_covered: bool
    uncovered: list[str]


def check_surebet(odds: Sequence[float]) -> tuple[float, bool]:
    """Return the implied probability sum and whether it leaves an arbitrage."""

    if not odds or any(o <= 0 for o in odds):
        raise ValueError("odds must be a non-empty sequence of positive numbers")
    implied_sum = sum(1 / o for o in odds)
    return implied_sum, implied_sum < 1


def _pad(values: Sequence[float | None] | None, size: int) -> list[float | None]:
    values = list(values or [])
    return (values + [None] * size)[:size]


class _Planner:
    """Cent-level stake search shared by the allocation steps."""

    def __init__(
        self,
        odds: Sequence[float],
        total: float,
        fees: Sequence[float | None] | None,
        min_stakes: Sequence[float | None] | None,
        max_stakes: Sequence[float | None] | None,
    ) -> None:
        size = len(odds)
        self.odds = list(odds)
        self.total = total
        self.fee_fracs = [(fee or 0.0) / 100 for fee in _pad(fees, size)]
        self.mins = _pad(min_stakes, size)
        self.maxs = _pad(max_stakes, size)

    def within_limits(self, idx: int, stake: float) -> bool:
        low, high = self.mins[idx], self.maxs[idx]
        if low is not None and stake < low:
            return False
        if high is not None and stake > high:
            return False
        return True

    def gross_returns(self, stakes: Sequence[float]) -> list[float]:
        return [round2(stake * odd) for stake, odd in zip(stakes, self.odds)]

    def net_returns(self, stakes: Sequence[float]) -> list[float]:
        return [
            round2(gross * (1 - fee))
            for gross, fee in zip(self.gross_returns(stakes), self.fee_fracs)
        ]

    def profit(self, stakes: Sequence[float]) -> float:
        return round2(min(self.net_returns(stakes)) - sum(stakes))

    def apply_limits(self, stakes: list[float]) -> list[float]:
        """Clamp stakes to their limits and spread the gap over the unclamped legs."""

        adjusted = list(stakes)
        for _ in range(50):
            changed = False
            for idx, stake in enumerate(adjusted):
                low, high = self.mins[idx], self.maxs[idx]
                if low is not None and stake < low:
                    adjusted[idx] = low
                    changed = True
                elif high is not None and stake > high:
                    adjusted[idx] = high
                    changed = True
            gap = self.total - sum(adjusted)
            if abs(gap) < 1e-9:
                if not changed:
                    break
                continue
            if gap > 0:
                free = [
                    idx
                    for idx, stake in enumerate(adjusted)
                    if self.maxs[idx] is None or stake < self.maxs[idx]
                ]
            else:
                free = [
                    idx
                    for idx, stake in enumerate(adjusted)
                    if self.mins[idx] is None or stake > self.mins[idx]
                ]
            free_sum = sum(adjusted[idx] for idx in free)
            if free_sum <= 0:
                break
            factor = (free_sum + gap) / free_sum
            for idx in free:
                adjusted[idx] *= factor
        return adjusted

    def rebalance(self, stakes: list[float]) -> list[float]:
        """Move single cents until the rounded stakes add up to the total."""

        diff = round2(self.total - sum(stakes))
        step = CENT if diff > 0 else -CENT
        guard = 0
        while abs(diff) >= CENT and guard < 1000:
            guard += 1
            best_idx, best_score = None, float("-inf")
            for idx in range(len(stakes)):
                trial = round2(stakes[idx] + step)
                if trial < CENT or not self.within_limits(idx, trial):
                    continue
                candidate = list(stakes)
                candidate[idx] = trial
                score = min(self.net_returns(candidate))
                if score > best_score:
                    best_idx, best_score = idx, score
            if best_idx is None:
                break
            stakes[best_idx] = round2(stakes[best_idx] + step)
            diff = round2(self.total - sum(stakes))
        return stakes

    def improve(self, stakes: list[float], max_iterations: int) -> list[float]:
        """Shift cents between pairs of legs while the worst-case profit rises."""

        best, best_profit = list(stakes), self.profit(stakes)
        for _ in range(max_iterations):
            improved = False
            for i in range(len(best)):
                for j in range(len(best)):
                    if i == j:
                        continue
                    trial = list(best)
                    trial[i] = round2(trial[i] + CENT)
                    trial[j] = round2(trial[j] - CENT)
                    if trial[i] < CENT or trial[j] < CENT:
                        continue
                    if not (self.within_limits(i, trial[i]) and self.within_limits(j, trial[j])):
                        continue
                    trial_profit = self.profit(trial)
                    if trial_profit > best_profit:
                        best, best_profit = trial, trial_profit
                        improved = True
                        break
                if improved:
                    break
            if not improved:
                break
        return best


def allocate_stakes(
    odds: Sequence[float],
    total: float,
    fees: Sequence[float | None] | None = None,
    min_stakes: Sequence[float | None] | None = None,
    max_stakes: Sequence[float | None] | None = None,
    max_iterations: int = 500,
    skip_surebet_check: bool = False,
) -> StakeAllocation:
    """Split ``total`` across the legs so every outcome returns about the same.

    ``fees`` are per-leg percentages deducted from gross returns. Stakes are
    rounded to cents, then nudged so they add up to ``total`` and the
    worst-case net return is as high as the cent grid allows.
    """

    if len(odds) < 2:
        return StakeAllocation(ok=False, reason="at least two legs are required")
    if any(o <= 0 for o in odds):
        return StakeAllocation(ok=False, reason="odds must be positive")
    if total <= 0:
        return StakeAllocation(ok=False, reason="total stake must be positive")

    implied_sum, is_surebet = check_surebet(odds)
    if not is_surebet and not skip_surebet_check:
        return StakeAllocation(
            ok=False,
            reason=f"not a surebet (S={implied_sum:.6f} >= 1)",
            implied_sum=implied_sum,
            odds=list(odds),
        )

    planner = _Planner(odds, total, fees, min_stakes, max_stakes)
    raw = planner.apply_limits([(total / o) / implied_sum for o in odds])
    stakes = planner.rebalance([round2(stake) for stake in raw])
    stakes = planner.improve(stakes, max_iterations)

    invested = round2(sum(stakes))
    net = planner.net_returns(stakes)
    profit = planner.profit(stakes)
    return StakeAllocation(
        ok=True,
        implied_sum=round(implied_sum, 6),
        is_surebet=is_surebet,
        odds=list(odds),
        stakes=stakes,
        total_invested=invested,
        gross_returns=planner.gross_returns(stakes),
        net_returns=net,
        min_return=min(net),
        profit=profit,
        roi=round2(profit / invested * 100) if invested else 0.0,
    )


def position_profile(legs: Sequence[Leg]) -> PositionProfile:
    """Capital at risk and worst-case profit of a planned position."""

    if len(legs) < 2:
        return PositionProfile(0.0, 0.0, 0.0)
    total_stake = sum(leg_capital(leg) for leg in legs)
    if total_stake <= 0 and not any(leg.is_freebet for leg in legs):
        return PositionProfile(total_stake, 0.0, 0.0)
    guaranteed = min(leg_payout(leg) - total_stake for leg in legs)
    percentage = (guaranteed / total_stake) * 100 if total_stake > 0 else 0.0
    return PositionProfile(total_stake, guaranteed, percentage)


def total_for_profit(odds: Sequence[float], desired_profit: float) -> float:
    """Total outlay needed for ``desired_profit``; 0 when there is no arbitrage."""

    implied_sum, is_surebet = check_surebet(odds)
    if not is_surebet:
        return 0.0
    return round2(desired_profit / ((1 / implied_sum) - 1))


def theoretical_roi(odds: Sequence[float]) -> float:
    implied_sum, is_surebet = check_surebet(odds)
    if not is_surebet:
        return 0.0
    return round2(((1 / implied_sum) - 1) * 100)


def has_significant_odds_change(
    old_odds: Sequence[float],
    new_odds: Sequence[float],
    threshold: float | None = None,
) -> bool:
    if threshold is None:
        threshold = get_settings().odds_change_threshold
    if len(old_odds) != len(new_odds):
        return True
    return any(abs(old - new) / old > threshold for old, new in zip(old_odds, new_odds))


def check_coverage(
    scenarios: Sequence[str], markets: Mapping[str, Collection[str]]
) -> CoverageResult:
    """List the scenarios no market in the position pays out on."""

    uncovered = [
        scenario
        for scenario in scenarios
        if not any(scenario in covers for covers in markets.values())
    ]
    return CoverageResult(all_covered=not uncovered, uncovered=uncovered)
