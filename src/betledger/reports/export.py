"""Spreadsheet export of the bet ledger and bookmaker balances."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from betledger.bets.attribution import attribute_all
from betledger.bets.settlement import capital_at_risk, settle
from betledger.bets.types import Bookmaker, FreeSpinBonus, SingleBet, SurebetBet

logger = logging.getLogger(__name__)

BET_COLUMNS = [
    "date",
    "sport",
    "event",
    "type",
    "selection",
    "bookmakers",
    "total_stake",
    "odds",
    "status",
    "profit",
    "notes",
]
TYPE_LABELS = {"single": "Single", "surebet": "Surebet", "pa_surebet": "P.A. Surebet"}


def _bet_row(bet: SingleBet | SurebetBet, names: Mapping[str, str]) -> dict[str, object]:
    if isinstance(bet, SingleBet):
        selection = bet.selection or bet.market
        houses = names.get(bet.bookmaker_id, bet.bookmaker_id)
        odds: float | None = bet.odds
    else:
        selection = " | ".join(
            f"{names.get(leg.bookmaker_id, leg.bookmaker_id)}: {leg.market}" for leg in bet.sub_bets
        )
        houses = ", ".join(names.get(leg.bookmaker_id, leg.bookmaker_id) for leg in bet.sub_bets)
        odds = None
    return {
        "date": bet.date.date(),
        "sport": bet.sport,
        "event": bet.event,
        "type": TYPE_LABELS[bet.type],
        "selection": selection,
        "bookmakers": houses,
        "total_stake": capital_at_risk(bet),
        "odds": odds,
        "status": bet.status.value,
        "profit": settle(bet) if bet.is_settled else None,
        "notes": bet.notes or "",
    }


def bets_frame(
    bets: Iterable[SingleBet | SurebetBet], bookmakers: Iterable[Bookmaker] = ()
) -> pd.DataFrame:
    names = {bookmaker.id: bookmaker.name for bookmaker in bookmakers}
    rows = [_bet_row(bet, names) for bet in bets]
    return pd.DataFrame(rows, columns=BET_COLUMNS)


def bookmakers_frame(
    bookmakers: Iterable[Bookmaker],
    bets: Sequence[SingleBet | SurebetBet],
    free_spins: Sequence[FreeSpinBonus] = (),
) -> pd.DataFrame:
    balances = attribute_all(bookmakers, bets, free_spins)
    frame = pd.DataFrame([asdict(balance) for balance in balances])
    if frame.empty:
        return pd.DataFrame(columns=["name", "initial_bankroll", "profit", "current_balance"])
    return frame[["name", "initial_bankroll", "profit", "current_balance"]]


def export_workbook(
    path: Path | str,
    bets: Sequence[SingleBet | SurebetBet],
    bookmakers: Sequence[Bookmaker],
    free_spins: Sequence[FreeSpinBonus] = (),
) -> Path:
    """Write a two-sheet workbook: the bets and the bookmaker balances."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        bets_frame(bets, bookmakers).to_excel(writer, sheet_name="Bets", index=False)
        bookmakers_frame(bookmakers, bets, free_spins).to_excel(
            writer, sheet_name="Bookmakers", index=False
        )
    logger.info("Exported %d bets and %d bookmakers to %s", len(bets), len(bookmakers), path)
    return path


def main() -> None:  # pragma: no cover - CLI convenience
    from betledger.config import get_settings
    from betledger.db import store
    from betledger.db.database import get_session, init_db

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--output",
        type=Path,
        default=get_settings().export_path,
        help="Destination .xlsx file.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    init_db()
    with get_session() as session:
        bets = store.load_bets(session)
        bookmakers = store.list_bookmakers(session)
        free_spins = store.load_free_spins(session)
    output = export_workbook(args.output, bets, bookmakers, free_spins)
    print(f"Ledger written to {output}")


if __name__ == "__main__":  # pragma: no cover
    main()
