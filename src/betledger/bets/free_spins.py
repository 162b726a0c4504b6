"""Expected value of a casino free-spin bonus after rollover and tax."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FreeSpinsEstimate:
    nominal: float
    expected_gross: float
    wagering_volume: float
    rollover_cost: float
    net_before_tax: float
    net_after_tax: float
    yield_pct: float

    @property
    def positive(self) -> bool:
        return self.net_after_tax >= 0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def estimate_free_spins(
    spins: int,
    spin_value: float,
    rtp_pct: float = 96.0,
    rollover: float = 0.0,
    contribution_pct: float = 100.0,
    tax_rate_pct: float = 0.0,
) -> FreeSpinsEstimate:
    """Estimate what a batch of free spins is worth once wagering is cleared.

    ``rollover`` is the multiple of winnings that must be wagered (at least
    1x is assumed) and ``contribution_pct`` the share of each wager that
    counts toward it.
    """

    nominal = max(0, spins) * max(0.0, spin_value)
    rtp = _clamp(rtp_pct, 0.0, 100.0) / 100
    rollover_factor = max(1.0, rollover)
    contribution = max(0.01, contribution_pct / 100)
    tax = _clamp(tax_rate_pct, 0.0, 100.0) / 100

    expected_gross = nominal * rtp
    wagering_volume = expected_gross * rollover_factor / contribution
    rollover_cost = wagering_volume * (1 - rtp)
    net_before_tax = expected_gross - rollover_cost
    net_after_tax = net_before_tax * (1 - tax)
    if nominal > 0:
        yield_pct = (net_after_tax / nominal) * 100
    else:
        yield_pct = 100.0 if net_after_tax > 0 else 0.0
    return FreeSpinsEstimate(
        nominal=nominal,
        expected_gross=expected_gross,
        wagering_volume=wagering_volume,
        rollover_cost=rollover_cost,
        net_before_tax=net_before_tax,
        net_after_tax=net_after_tax,
        yield_pct=yield_pct,
    )
