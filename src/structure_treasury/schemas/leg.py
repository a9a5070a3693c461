"""Leg schemas - one instrument position inside a structure.

Legs form a tagged union on ``kind`` so that every kind carries exactly the
price fields that make sense for it:

- CALL / PUT: strike, premium, expiration
- STOCK: entry_price (expiration defaults to a far-future sentinel)
- FUTURE: spot_price, premium, expiration
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# Stock legs have no expiration; this date stands in when none is given
STOCK_EXPIRATION_SENTINEL = date(9999, 12, 31)


class LegKind(str, Enum):
    """Instrument kind of a leg."""
    CALL = "CALL"
    PUT = "PUT"
    STOCK = "STOCK"
    FUTURE = "FUTURE"


class LegSide(str, Enum):
    """Position side of a leg."""
    LONG = "LONG"
    SHORT = "SHORT"


def _new_leg_id() -> str:
    return str(uuid.uuid4())


class _LegBase(BaseModel):
    """Fields shared by every leg kind."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    id: str = Field(default_factory=_new_leg_id, description="Stable leg identity")
    side: LegSide
    symbol: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    custom_margin_percent: Decimal | None = Field(None, ge=0)

    @property
    def is_long(self) -> bool:
        return self.side == LegSide.LONG

    @property
    def is_short(self) -> bool:
        return self.side == LegSide.SHORT

    @property
    def is_option(self) -> bool:
        return self.kind in (LegKind.CALL, LegKind.PUT)


class _OptionLeg(_LegBase):
    strike: Decimal = Field(..., gt=0)
    premium: Decimal = Field(..., ge=0)
    expiration: date


class CallLeg(_OptionLeg):
    """Call option leg."""

    kind: Literal["CALL"] = "CALL"


class PutLeg(_OptionLeg):
    """Put option leg."""

    kind: Literal["PUT"] = "PUT"


class StockLeg(_LegBase):
    """Stock leg."""

    kind: Literal["STOCK"] = "STOCK"
    entry_price: Decimal = Field(..., gt=0)
    expiration: date = STOCK_EXPIRATION_SENTINEL


class FutureLeg(_LegBase):
    """Futures leg."""

    kind: Literal["FUTURE"] = "FUTURE"
    spot_price: Decimal = Field(..., gt=0)
    premium: Decimal = Field(default=Decimal("0"), ge=0)
    expiration: date


Leg = Annotated[
    Union[CallLeg, PutLeg, StockLeg, FutureLeg],
    Field(discriminator="kind"),
]

_legs_adapter: TypeAdapter[list[Leg]] = TypeAdapter(list[Leg])


def parse_legs(raw: list[dict[str, Any]] | None) -> list[Leg]:
    """Parse stored JSON leg dicts into typed legs.

    Raises:
        pydantic.ValidationError: If a leg is malformed
    """
    return _legs_adapter.validate_python(raw or [])


def dump_legs(legs: list[Leg]) -> list[dict[str, Any]]:
    """Serialize typed legs into JSON-safe dicts for storage."""
    return _legs_adapter.dump_python(legs, mode="json")


def leg_expiration(leg: Leg) -> date | None:
    """Expiration that counts for the structure (options and futures only)."""
    if leg.kind == LegKind.STOCK:
        return None
    return leg.expiration
