"""Schemas for rolls."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from structure_treasury.schemas.cash_flow import CashFlowEntryResponse
from structure_treasury.schemas.leg import Leg
from structure_treasury.schemas.treasury import TreasurySnapshot


class RollPosition(BaseModel):
    """A roll to apply: pre-roll legs and their replacements, matched by leg id."""

    structure_id: str = Field(..., description="Structure being rolled")
    original_legs: list[Leg] = Field(..., description="Snapshot of the legs being rolled")
    new_legs: list[Leg] = Field(..., description="New terms, keyed by the same leg ids")
    exit_prices: dict[str, Decimal] = Field(
        default_factory=dict, description="Exit price per rolled leg id, for realized profit"
    )
    roll_cost: Decimal = Field(Decimal("0"), description="Brokerage and repurchase costs")
    reason: str | None = Field(None, description="Why the roll was made")
    notes: str | None = None


class RollResponse(BaseModel):
    """Roll history record."""

    id: int
    structure_id: str
    original_legs: list[Leg]
    new_legs: list[Leg]
    roll_cost: Decimal
    realized_profit: Decimal
    reason: str | None
    notes: str | None
    status: str
    rolled_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RollList(BaseModel):
    """Response containing roll history."""

    rolls: list[RollResponse] = Field(..., description="Rolls, oldest first")
    total: int = Field(..., description="Total number of rolls")


class RollExecutionResponse(BaseModel):
    """Response from executing a roll."""

    structure_id: str
    roll: RollResponse
    snapshot: TreasurySnapshot
    entries: list[CashFlowEntryResponse] = Field(default_factory=list)
