"""Bookmaker attribution tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from betledger.bets import attribution
from betledger.bets.settlement import settle
from betledger.bets.types import BetStatus, Bookmaker, FreeSpinBonus, Leg, SingleBet, SurebetBet

ALPHA = Bookmaker(id="bk-a", name="Alpha", initial_bankroll=1000)
BETA = Bookmaker(id="bk-b", name="Beta", initial_bankroll=400)
GAMMA = Bookmaker(id="bk-c", name="Gamma", initial_bankroll=0)


def _single(bookmaker_id: str, stake: float, odds: float, status: BetStatus) -> SingleBet:
    return SingleBet(
        id=f"{bookmaker_id}-{stake}-{status.value}",
        event="Derby",
        stake=stake,
        odds=odds,
        status=status,
        date=datetime(2024, 5, 1, 19, 0),
        bookmaker_id=bookmaker_id,
    )


def _surebet(status: BetStatus, winning_leg_index: int | None = None) -> SurebetBet:
    return SurebetBet(
        id="sb",
        event="Cup final",
        status=status,
        date=datetime(2024, 5, 2, 21, 0),
        sub_bets=[
            Leg(bookmaker_id="bk-a", stake=100, odds=1.25),
            Leg(bookmaker_id="bk-b", stake=30, odds=5.0),
            Leg(bookmaker_id="bk-c", stake=20, odds=6.0, is_freebet=True),
        ],
        winning_leg_index=winning_leg_index,
    )


def test_won_single_bet_raises_house_balance() -> None:
    balance = attribution.attribute(ALPHA, [_single("bk-a", 100, 2.0, BetStatus.WON)])
    assert balance.profit == pytest.approx(100)
    assert balance.current_balance == pytest.approx(1100)
    assert balance.settled_bets == 1


def test_pending_and_foreign_bets_are_ignored() -> None:
    bets = [
        _single("bk-a", 100, 2.0, BetStatus.PENDING),
        _single("bk-b", 80, 2.0, BetStatus.LOST),
    ]
    balance = attribution.attribute(ALPHA, bets)
    assert balance.profit == 0
    assert balance.current_balance == 1000


def test_bets_for_bookmaker_matches_by_id() -> None:
    bets = [_single("bk-b", 80, 2.0, BetStatus.LOST), _surebet(BetStatus.PENDING)]
    assert [bet.id for bet in attribution.bets_for_bookmaker("bk-c", bets)] == ["sb"]
    renamed = ALPHA.model_copy(update={"name": "Alpha Renamed"})
    assert attribution.attribute(renamed, [_single("bk-a", 10, 3.0, BetStatus.WON)]).profit == 20


def test_surebet_winning_leg_pays_its_house() -> None:
    bet = _surebet(BetStatus.WON, winning_leg_index=1)
    assert attribution.attributed_profit(bet, "bk-a") == pytest.approx(-100)
    assert attribution.attributed_profit(bet, "bk-b") == pytest.approx(150 - 30)
    assert attribution.attributed_profit(bet, "bk-c") == 0


def test_surebet_attribution_sums_to_settlement() -> None:
    for index in (0, 1, 2):
        bet = _surebet(BetStatus.WON, winning_leg_index=index)
        total = sum(attribution.attributed_profit(bet, house.id) for house in (ALPHA, BETA, GAMMA))
        assert total == pytest.approx(settle(bet))


def test_inferred_winner_used_for_attribution() -> None:
    bet = _surebet(BetStatus.WON)
    # outcomes per leg: -5, 20, -30
    assert attribution.attributed_profit(bet, "bk-b") == pytest.approx(120)
    assert attribution.attributed_profit(bet, "bk-a") == pytest.approx(-100)


def test_lost_surebet_costs_each_house_its_capital() -> None:
    bet = _surebet(BetStatus.LOST)
    balances = attribution.attribute_all([ALPHA, BETA, GAMMA], [bet])
    assert [balance.profit for balance in balances] == pytest.approx([-100, -30, 0])
    assert sum(balance.profit for balance in balances) == pytest.approx(settle(bet))


def test_free_spin_winnings_credit_matching_house() -> None:
    bonuses = [
        FreeSpinBonus(bookmaker_id="bk-b", won_amount=15),
        FreeSpinBonus(bookmaker_id="bk-a", won_amount=99),
        FreeSpinBonus(bookmaker_id="bk-b"),
    ]
    balance = attribution.attribute(BETA, [], bonuses)
    assert balance.profit == 15
    assert balance.current_balance == 415
