"""Schemas for cash flow entries."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from structure_treasury.models.cash_flow_entry import EntryType


class ManualEntryCreate(BaseModel):
    """Request to add a manual ledger entry."""

    type: EntryType = Field(EntryType.DEPOSIT, description="Entry type")
    description: str = Field(..., description="Entry description")
    amount: Decimal = Field(..., description="Amount; sign is normalised for deposits and withdrawals")
    entry_date: date | None = Field(None, description="Entry date, defaults to today")


class CashFlowEntryResponse(BaseModel):
    """Cash flow entry data."""

    id: int
    date: date
    type: str
    description: str
    amount: Decimal
    balance: Decimal
    related_structure_id: str | None
    related_roll_id: int | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CashFlowEntryList(BaseModel):
    """Response containing list of ledger entries."""

    entries: list[CashFlowEntryResponse] = Field(..., description="Entries in creation order")
    total: int = Field(..., description="Total number of entries")
