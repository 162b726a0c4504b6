"""Exceptions raised by the ledger core and the store."""

from __future__ import annotations


class LedgerError(ValueError):
    """Base class for data-quality problems in bet records."""


class SettlementInconsistencyError(LedgerError):
    """A won multi-leg bet has no leg whose payout covers the capital at risk."""

    def __init__(self, bet_id: str, message: str) -> None:
        super().__init__(f"Bet {bet_id}: {message}")
        self.bet_id = bet_id


class InvalidTransitionError(LedgerError):
    """Status change outside the pending -> won/lost lifecycle."""


class BookmakerInUseError(LedgerError):
    """Bookmaker still referenced by at least one bet."""


class RecordNotFoundError(LookupError):
    """No bet or bookmaker with the requested id."""
