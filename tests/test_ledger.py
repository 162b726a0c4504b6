"""Ledger aggregation tests."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from betledger.bets import ledger
from betledger.bets.types import (
    BetStatus,
    Bookmaker,
    FreeSpinBonus,
    Leg,
    SingleBet,
    SurebetBet,
    parse_bets,
)


def _single(
    bet_id: str,
    stake: float,
    odds: float,
    status: BetStatus,
    when: datetime,
    sport: str = "football",
) -> SingleBet:
    return SingleBet(
        id=bet_id,
        event=f"Event {bet_id}",
        sport=sport,
        stake=stake,
        odds=odds,
        status=status,
        date=when,
        bookmaker_id="bk-a",
    )


def _sample_bets() -> list[SingleBet | SurebetBet]:
    return [
        _single("1", 100, 2.0, BetStatus.WON, datetime(2024, 1, 1, 12, 0)),
        _single("2", 50, 3.0, BetStatus.LOST, datetime(2024, 1, 2, 15, 30), sport="tennis"),
        _single("3", 40, 1.5, BetStatus.PENDING, datetime(2024, 1, 3, 9, 0)),
        SurebetBet(
            id="4",
            event="Final",
            sport="tennis",
            status=BetStatus.WON,
            date=datetime(2024, 1, 3, 23, 0),
            sub_bets=[
                Leg(bookmaker_id="bk-a", stake=70, odds=3.0),
                Leg(bookmaker_id="bk-b", stake=60, odds=3.5),
                Leg(bookmaker_id="bk-c", stake=25, odds=4.0, is_freebet=True),
            ],
            guaranteed_profit=80.0,
        ),
    ]


def test_aggregate_empty_is_all_zero() -> None:
    stats = ledger.aggregate([])
    assert stats == ledger.LedgerStats(
        total_bets=0, wins=0, losses=0, total_stake=0, total_profit=0, win_rate=0, roi=0
    )


def test_aggregate_counts_only_settled_bets() -> None:
    stats = ledger.aggregate(_sample_bets())
    assert stats.total_bets == 3
    assert stats.wins == 2
    assert stats.losses == 1
    assert stats.total_stake == pytest.approx(100 + 50 + 130)
    assert stats.total_profit == pytest.approx(100 - 50 + 80)
    assert stats.win_rate == pytest.approx(200 / 3)
    assert stats.roi == pytest.approx(130 / 280 * 100)


def test_aggregate_is_idempotent() -> None:
    bets = _sample_bets()
    filters = ledger.BetFilters(sport="tennis")
    assert ledger.aggregate(bets, filters) == ledger.aggregate(bets, filters)


def test_pending_only_collection_has_no_denominators() -> None:
    bets = [_single("p", 10, 2.0, BetStatus.PENDING, datetime(2024, 1, 1))]
    stats = ledger.aggregate(bets)
    assert stats.total_bets == 0
    assert stats.win_rate == 0
    assert stats.roi == 0


def test_filter_by_sport_and_result() -> None:
    bets = _sample_bets()
    tennis = ledger.filter_bets(bets, ledger.BetFilters(sport="tennis"))
    assert [bet.id for bet in tennis] == ["2", "4"]
    won = ledger.filter_bets(bets, ledger.BetFilters(result="won"))
    assert [bet.id for bet in won] == ["1", "4"]
    lost_tennis = ledger.aggregate(bets, ledger.BetFilters(sport="tennis", result=BetStatus.LOST))
    assert lost_tennis.total_profit == -50


def test_date_range_includes_whole_end_day() -> None:
    bets = _sample_bets()
    filters = ledger.BetFilters(date_from=date(2024, 1, 2), date_to=date(2024, 1, 3))
    assert [bet.id for bet in ledger.filter_bets(bets, filters)] == ["2", "3", "4"]
    only_first = ledger.BetFilters(date_to=date(2024, 1, 1))
    assert [bet.id for bet in ledger.filter_bets(bets, only_first)] == ["1"]


def test_profit_timeline_keeps_last_value_per_day() -> None:
    bets = _sample_bets() + [
        _single("5", 20, 2.5, BetStatus.WON, datetime(2024, 1, 1, 20, 0)),
    ]
    points = ledger.profit_timeline(bets)
    assert [day for day, _ in points] == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
    assert [profit for _, profit in points] == pytest.approx([130.0, 80.0, 160.0])


def _raw_single(bet_id: str, stake: float, status: str, placed: str) -> dict[str, object]:
    return {
        "id": bet_id,
        "type": "single",
        "event": "Derby",
        "stake": stake,
        "odds": 2.0,
        "status": status,
        "date": placed,
        "bookmakerId": "bk-a",
    }


def test_profit_timeline_orders_naive_and_aware_dates() -> None:
    raw = [
        _raw_single("n", 100, "won", "2024-01-01T10:00:00"),
        _raw_single("z1", 50, "lost", "2024-01-01T08:00:00Z"),
        _raw_single("z2", 50, "lost", "2024-01-02T09:00:00Z"),
    ]
    points = ledger.profit_timeline(parse_bets(raw))
    assert [day for day, _ in points] == [date(2024, 1, 1), date(2024, 1, 2)]
    assert [profit for _, profit in points] == pytest.approx([50.0, 0.0])


def test_status_breakdown_lists_every_status() -> None:
    assert ledger.status_breakdown(_sample_bets()) == {"pending": 1, "won": 2, "lost": 1}
    assert ledger.status_breakdown([]) == {"pending": 0, "won": 0, "lost": 0}


def test_portfolio_summary_adds_free_spin_winnings() -> None:
    bookmakers = [
        Bookmaker(id="bk-a", name="Alpha", initial_bankroll=500),
        Bookmaker(id="bk-b", name="Beta", initial_bankroll=300),
    ]
    bonuses = [FreeSpinBonus(bookmaker_id="bk-b", won_amount=12.5)]
    summary = ledger.portfolio_summary(_sample_bets(), bookmakers, bonuses)
    assert summary.total_initial_bankroll == 800
    assert summary.all_time_profit == pytest.approx(142.5)
    assert summary.current_bankroll == pytest.approx(942.5)
