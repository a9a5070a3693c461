"""Schemas for custody assets."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from structure_treasury.models.custody_asset import AssetKind


class AssetCreate(BaseModel):
    """Request to register a custody asset manually."""

    symbol: str = Field(..., min_length=1)
    name: str | None = None
    kind: AssetKind = AssetKind.STOCK
    quantity: int = Field(..., ge=0)
    average_price: Decimal = Field(..., ge=0)
    market_price: Decimal | None = Field(None, ge=0, description="Defaults to the average price")
    guarantee_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    used_as_guarantee: bool = False


class AssetUpdate(BaseModel):
    """Partial update of a custody asset."""

    name: str | None = None
    quantity: int | None = Field(None, ge=0)
    average_price: Decimal | None = Field(None, ge=0)
    market_price: Decimal | None = Field(None, ge=0)
    guarantee_percent: Decimal | None = Field(None, ge=0, le=100)
    used_as_guarantee: bool | None = None


class AssetResponse(BaseModel):
    """Custody asset data."""

    id: int
    symbol: str
    name: str | None
    kind: str
    quantity: int
    average_price: Decimal
    market_price: Decimal
    guarantee_percent: Decimal
    used_as_guarantee: bool
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AssetList(BaseModel):
    """Response containing list of custody assets."""

    assets: list[AssetResponse] = Field(..., description="List of assets")
    total: int = Field(..., description="Total number of assets")
