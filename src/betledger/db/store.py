"""Repository functions translating between ORM rows and ledger records."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from betledger.bets.errors import BookmakerInUseError, InvalidTransitionError, RecordNotFoundError
from betledger.bets.settlement import settle
from betledger.bets.types import (
    BetStatus,
    Bookmaker,
    FreeSpinBonus,
    Leg,
    SingleBet,
    SurebetBet,
)
from betledger.db.models import Bet as BetModel
from betledger.db.models import BetLeg as BetLegModel
from betledger.db.models import Bookmaker as BookmakerModel
from betledger.db.models import FreeSpin as FreeSpinModel

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _to_bookmaker(row: BookmakerModel) -> Bookmaker:
    return Bookmaker(id=row.id, name=row.name, initial_bankroll=row.initial_bankroll)


def _to_bet(row: BetModel) -> SingleBet | SurebetBet:
    common = {
        "id": row.id,
        "event": row.event,
        "sport": row.sport,
        "status": BetStatus(row.status),
        "date": row.placed_at,
        "notes": row.notes,
    }
    if row.type == "single":
        return SingleBet(
            **common,
            market=row.market or "",
            selection=row.selection or "",
            stake=row.stake,
            odds=row.odds,
            bookmaker_id=row.bookmaker_id,
        )
    return SurebetBet(
        **common,
        type=row.type,
        sub_bets=[
            Leg(
                bookmaker_id=leg.bookmaker_id,
                stake=leg.stake,
                odds=leg.odds,
                is_freebet=leg.is_freebet,
                market=leg.market,
            )
            for leg in row.legs
        ],
        guaranteed_profit=row.guaranteed_profit,
        winning_leg_index=row.winning_leg_index,
    )


def _get_bookmaker_row(session: Session, bookmaker_id: str) -> BookmakerModel:
    row = session.get(BookmakerModel, bookmaker_id)
    if row is None:
        raise RecordNotFoundError(f"Unknown bookmaker {bookmaker_id}")
    return row


def _get_bet_row(session: Session, bet_id: str) -> BetModel:
    row = session.get(BetModel, bet_id)
    if row is None:
        raise RecordNotFoundError(f"Unknown bet {bet_id}")
    return row


def add_bookmaker(session: Session, name: str, initial_bankroll: float = 0.0) -> Bookmaker:
    bookmaker = Bookmaker(id=_new_id(), name=name, initial_bankroll=initial_bankroll)
    session.add(
        BookmakerModel(
            id=bookmaker.id,
            name=bookmaker.name,
            initial_bankroll=bookmaker.initial_bankroll,
        )
    )
    session.flush()
    logger.info("Added bookmaker %s (%s)", bookmaker.name, bookmaker.id)
    return bookmaker


def list_bookmakers(session: Session) -> list[Bookmaker]:
    rows = session.execute(select(BookmakerModel).order_by(BookmakerModel.name)).scalars()
    return [_to_bookmaker(row) for row in rows]


def update_bookmaker(
    session: Session,
    bookmaker_id: str,
    name: str | None = None,
    initial_bankroll: float | None = None,
) -> Bookmaker:
    """Rename or re-fund a bookmaker; bets keep pointing at the same id."""

    row = _get_bookmaker_row(session, bookmaker_id)
    changes = {"name": name, "initial_bankroll": initial_bankroll}
    updated = Bookmaker.model_validate(
        {
            **_to_bookmaker(row).model_dump(),
            **{key: value for key, value in changes.items() if value is not None},
        }
    )
    row.name = updated.name
    row.initial_bankroll = updated.initial_bankroll
    session.flush()
    return updated


def delete_bookmaker(session: Session, bookmaker_id: str) -> None:
    """Remove a bookmaker that no bet, leg or bonus references."""

    row = _get_bookmaker_row(session, bookmaker_id)
    stmt = (
        select(BetModel.id)
        .outerjoin(BetLegModel, BetLegModel.bet_id == BetModel.id)
        .where(
            or_(
                BetModel.bookmaker_id == bookmaker_id,
                BetLegModel.bookmaker_id == bookmaker_id,
            )
        )
        .limit(1)
    )
    in_use = session.execute(stmt).first() is not None
    if not in_use:
        in_use = (
            session.execute(
                select(FreeSpinModel.id).where(FreeSpinModel.bookmaker_id == bookmaker_id).limit(1)
            ).first()
            is not None
        )
    if in_use:
        logger.warning("Refusing to delete bookmaker %s: records still reference it", row.name)
        raise BookmakerInUseError(f"Bookmaker {row.name} still has associated bets")
    session.delete(row)
    session.flush()


def add_bet(session: Session, bet: SingleBet | SurebetBet) -> SingleBet | SurebetBet:
    """Persist a new bet, checking that every referenced bookmaker exists."""

    for bookmaker_id in bet.bookmaker_ids():
        _get_bookmaker_row(session, bookmaker_id)

    row = BetModel(
        id=bet.id,
        type=bet.type,
        event=bet.event,
        sport=bet.sport,
        status=bet.status.value,
        placed_at=bet.date,
        notes=bet.notes,
    )
    if isinstance(bet, SingleBet):
        row.market = bet.market
        row.selection = bet.selection
        row.stake = bet.stake
        row.odds = bet.odds
        row.bookmaker_id = bet.bookmaker_id
    else:
        row.guaranteed_profit = bet.guaranteed_profit
        row.winning_leg_index = bet.winning_leg_index
        row.legs = [
            BetLegModel(
                leg_order=order,
                bookmaker_id=leg.bookmaker_id,
                stake=leg.stake,
                odds=leg.odds,
                is_freebet=leg.is_freebet,
                market=leg.market,
            )
            for order, leg in enumerate(bet.sub_bets)
        ]
    session.add(row)
    session.flush()
    logger.info("Added %s bet %s", bet.type, bet.id)
    return bet


def get_bet(session: Session, bet_id: str) -> SingleBet | SurebetBet:
    return _to_bet(_get_bet_row(session, bet_id))


def load_bets(session: Session) -> list[SingleBet | SurebetBet]:
    stmt = (
        select(BetModel)
        .options(selectinload(BetModel.legs))
        .order_by(BetModel.placed_at.asc(), BetModel.created_at.asc())
    )
    return [_to_bet(row) for row in session.execute(stmt).scalars()]


def settle_bet(
    session: Session,
    bet_id: str,
    status: BetStatus | str,
    winning_leg_index: int | None = None,
) -> SingleBet | SurebetBet:
    """Move a pending bet to won or lost; settled bets are final."""

    status = BetStatus(status)
    row = _get_bet_row(session, bet_id)
    current = BetStatus(row.status)
    if current is not BetStatus.PENDING or status is BetStatus.PENDING:
        logger.warning("Rejected transition %s -> %s for bet %s", current.value, status.value, bet_id)
        raise InvalidTransitionError(
            f"Bet {bet_id} cannot move from {current.value} to {status.value}"
        )
    if winning_leg_index is not None:
        if row.type == "single":
            raise InvalidTransitionError("Single bets have no legs to mark as winning")
        if status is not BetStatus.WON:
            raise InvalidTransitionError("Only a won position has a winning leg")

    updates: dict[str, object] = {"status": status}
    if winning_leg_index is not None:
        updates["winning_leg_index"] = winning_leg_index
    current_bet = _to_bet(row)
    settled = type(current_bet).model_validate({**current_bet.model_dump(), **updates})
    # surfaces SettlementInconsistencyError before anything is written
    settle(settled)
    row.status = status.value
    row.winning_leg_index = settled.winning_leg_index if isinstance(settled, SurebetBet) else None
    session.flush()
    logger.info("Settled bet %s as %s", bet_id, status.value)
    return settled


def add_free_spin(session: Session, bonus: FreeSpinBonus) -> FreeSpinBonus:
    _get_bookmaker_row(session, bonus.bookmaker_id)
    bonus_id = bonus.id or _new_id()
    session.add(
        FreeSpinModel(
            id=bonus_id,
            bookmaker_id=bonus.bookmaker_id,
            won_amount=bonus.won_amount,
            awarded_at=bonus.date,
        )
    )
    session.flush()
    return bonus.model_copy(update={"id": bonus_id})


def load_free_spins(session: Session) -> list[FreeSpinBonus]:
    rows = session.execute(select(FreeSpinModel)).scalars()
    return [
        FreeSpinBonus(
            id=row.id,
            bookmaker_id=row.bookmaker_id,
            won_amount=row.won_amount,
            date=row.awarded_at,
        )
        for row in rows
    ]
