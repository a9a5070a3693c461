"""Schemas for execution records attached to a structure."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class OperationCreate(BaseModel):
    """One execution record in an upload."""

    kind: str = Field(..., min_length=1, description="Instrument kind, e.g. CALL or STOCK")
    symbol: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    result: Decimal = Decimal("0")
    status: str = "OPEN"
    entry_date: date
    exit_date: date | None = None


class OperationResponse(BaseModel):
    """Stored execution record."""

    id: int
    structure_id: str | None
    kind: str
    symbol: str
    quantity: int
    price: Decimal
    result: Decimal
    status: str
    entry_date: date
    exit_date: date | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OperationList(BaseModel):
    """Response containing a structure's execution records."""

    operations: list[OperationResponse] = Field(..., description="List of operations")
    total: int = Field(..., description="Total number of operations")
