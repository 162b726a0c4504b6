"""Pydantic records for bets, legs, bookmakers and bonus winnings."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel


class BetStatus(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"


SETTLED_STATUSES = frozenset({BetStatus.WON, BetStatus.LOST})


class Record(BaseModel):
    """Immutable record accepting snake_case or camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Leg(Record):
    """One wager inside a surebet position."""

    bookmaker_id: str
    stake: float = Field(gt=0)
    odds: float = Field(ge=1.0)
    is_freebet: bool = False
    market: str = ""


class _BetBase(Record):
    id: str
    event: str
    sport: str = "other"
    status: BetStatus = BetStatus.PENDING
    date: datetime
    notes: str | None = None

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES


class SingleBet(_BetBase):
    type: Literal["single"] = "single"
    market: str = ""
    selection: str = ""
    stake: float = Field(gt=0)
    odds: float = Field(ge=1.0)
    bookmaker_id: str

    def bookmaker_ids(self) -> set[str]:
        return {self.bookmaker_id}


class SurebetBet(_BetBase):
    """Multi-leg arbitrage position; exactly one leg pays out when won."""

    type: Literal["surebet", "pa_surebet"] = "surebet"
    sub_bets: list[Leg] = Field(min_length=1)
    guaranteed_profit: float | None = None
    winning_leg_index: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_winning_leg(self) -> SurebetBet:
        if self.winning_leg_index is not None and self.winning_leg_index >= len(self.sub_bets):
            raise ValueError(
                f"winning_leg_index {self.winning_leg_index} out of range for "
                f"{len(self.sub_bets)} legs"
            )
        return self

    @property
    def total_stake(self) -> float:
        """Capital at risk, always derived from the legs."""

        return sum(leg.stake for leg in self.sub_bets if not leg.is_freebet)

    def bookmaker_ids(self) -> set[str]:
        return {leg.bookmaker_id for leg in self.sub_bets}


Bet = Annotated[Union[SingleBet, SurebetBet], Field(discriminator="type")]

_BETS_ADAPTER: TypeAdapter[list[Bet]] = TypeAdapter(list[Bet])
_BET_ADAPTER: TypeAdapter[Bet] = TypeAdapter(Bet)


class Bookmaker(Record):
    id: str
    name: str
    initial_bankroll: float = Field(default=0.0, ge=0)


class FreeSpinBonus(Record):
    """Flat winnings from a casino free-spin promotion at one bookmaker."""

    bookmaker_id: str
    won_amount: float = 0.0
    id: str | None = None
    date: datetime | None = None


def parse_bet(raw: Mapping[str, Any]) -> SingleBet | SurebetBet:
    return _BET_ADAPTER.validate_python(raw)


def parse_bets(raw: Iterable[Mapping[str, Any]]) -> list[SingleBet | SurebetBet]:
    """Validate raw store documents into typed bets."""

    return _BETS_ADAPTER.validate_python(list(raw))
