"""ORM models for BetLedger."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base declarative class."""


class Bookmaker(Base):
    """Betting house holding a dedicated bankroll."""

    __tablename__ = "bookmakers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    initial_bankroll: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Bet(Base):
    """A single bet or a surebet position; legs hold the surebet wagers."""

    __tablename__ = "bets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    event: Mapped[str] = mapped_column(String(255), nullable=False)
    sport: Mapped[str] = mapped_column(String(64), nullable=False, default="other")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    placed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(2048))

    market: Mapped[str | None] = mapped_column(String(128))
    selection: Mapped[str | None] = mapped_column(String(255))
    stake: Mapped[float | None] = mapped_column(Float)
    odds: Mapped[float | None] = mapped_column(Float)
    bookmaker_id: Mapped[str | None] = mapped_column(ForeignKey("bookmakers.id"))

    guaranteed_profit: Mapped[float | None] = mapped_column(Float)
    winning_leg_index: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    legs: Mapped[list[BetLeg]] = relationship(
        back_populates="bet",
        cascade="all, delete-orphan",
        order_by="BetLeg.leg_order",
    )


class BetLeg(Base):
    """One wager of a surebet position."""

    __tablename__ = "bet_legs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bet_id: Mapped[str] = mapped_column(ForeignKey("bets.id"), nullable=False)
    leg_order: Mapped[int] = mapped_column(Integer, default=0)
    bookmaker_id: Mapped[str] = mapped_column(ForeignKey("bookmakers.id"), nullable=False)
    stake: Mapped[float] = mapped_column(Float, nullable=False)
    odds: Mapped[float] = mapped_column(Float, nullable=False)
    is_freebet: Mapped[bool] = mapped_column(Boolean, default=False)
    market: Mapped[str] = mapped_column(String(128), default="")

    bet: Mapped[Bet] = relationship(back_populates="legs")


class FreeSpin(Base):
    """Winnings from a free-spin promotion credited to one bookmaker."""

    __tablename__ = "free_spins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    bookmaker_id: Mapped[str] = mapped_column(ForeignKey("bookmakers.id"), nullable=False)
    won_amount: Mapped[float] = mapped_column(Float, default=0.0)
    awarded_at: Mapped[datetime | None] = mapped_column(DateTime)
