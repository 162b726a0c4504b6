"""Hedge stake solver tests."""

from __future__ import annotations

import math
from types import SimpleNamespace

import pytest

from betledger.bets import hedging


def test_back_lay_hedge_matches_formulas() -> None:
    hedge = hedging.solve_lay(2.5, 10, 2.55, 4.5, is_freebet=False)
    lay_stake = 25 / (2.55 - 0.045)
    assert hedge.lay_stake == pytest.approx(lay_stake)
    assert hedge.lay_stake == pytest.approx(9.98, abs=0.01)
    assert hedge.liability == pytest.approx(lay_stake * 1.55)
    assert hedge.profit_if_back_wins == pytest.approx(15 - lay_stake * 1.55)
    assert hedge.profit_if_lay_wins == pytest.approx(lay_stake * 0.955 - 10)
    assert hedge.profit_if_back_wins == pytest.approx(hedge.profit_if_lay_wins, abs=0.01)


def test_freebet_back_profit_excludes_stake() -> None:
    hedge = hedging.solve_lay(5.0, 20, 5.2, 2.0, is_freebet=True)
    back_profit = 20 * 4.0
    assert hedge.lay_stake == pytest.approx((back_profit + 20) / 5.18)
    assert hedge.profit_if_back_wins == pytest.approx(back_profit - hedge.liability)


@pytest.mark.parametrize(
    "args",
    [
        (0, 10, 2.55, 4.5),
        (2.5, 0, 2.55, 4.5),
        (2.5, -5, 2.55, 4.5),
        (2.5, 10, 0, 4.5),
        ("abc", 10, 2.55, 4.5),
        (2.5, None, 2.55, 4.5),
        (float("nan"), 10, 2.55, 4.5),
        (2.5, 10, float("inf"), 4.5),
        (2.5, 10, 2.55, -1),
    ],
)
def test_degenerate_input_returns_zero_hedge(args: tuple) -> None:
    hedge = hedging.solve_lay(*args)
    assert hedge == hedging.LayHedge()
    assert not any(math.isnan(value) for value in vars(hedge).values())


def test_lay_odds_equal_to_commission_is_guarded() -> None:
    assert hedging.solve_lay(2.5, 10, 0.05, 5.0) == hedging.ZERO_HEDGE
    assert hedging.solve_lay(2.5, 10, 0.04, 5.0) == hedging.ZERO_HEDGE


def test_numeric_strings_are_accepted() -> None:
    assert hedging.solve_lay("2.5", "10", "2.55", "4.5") == hedging.solve_lay(2.5, 10, 2.55, 4.5)


def test_default_commission_comes_from_settings(monkeypatch) -> None:
    settings = SimpleNamespace(default_lay_commission_pct=0.0, lay_divisor_epsilon=1e-9)
    monkeypatch.setattr(hedging, "get_settings", lambda: settings)
    hedge = hedging.solve_lay(2.0, 10, 2.0)
    assert hedge.lay_stake == pytest.approx(10.0)
    assert hedge.profit_if_back_wins == pytest.approx(0.0)
    assert hedge.profit_if_lay_wins == pytest.approx(0.0)
