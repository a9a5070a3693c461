"""Schemas for structures."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from structure_treasury.schemas.cash_flow import CashFlowEntryResponse
from structure_treasury.schemas.leg import Leg
from structure_treasury.schemas.treasury import ActivationCheck, ActivationOutcome, TreasurySnapshot


class StructureDraft(BaseModel):
    """Structure as assembled by the caller, before or at activation."""

    id: str | None = Field(None, description="Existing structure id, omitted for new drafts")
    name: str = Field(..., description="Structure name")
    underlying: str | None = Field(None, description="Main underlying symbol")
    legs: list[Leg] = Field(default_factory=list, description="Ordered legs")


class StructureResponse(BaseModel):
    """Structure data."""

    id: str
    name: str
    underlying: str | None
    legs: list[Leg]
    net_premium: Decimal
    assembly_cost: Decimal
    expiration: date | None
    status: str
    activated_at: datetime | None
    closed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StructureList(BaseModel):
    """Response containing list of structures."""

    structures: list[StructureResponse] = Field(..., description="List of structures")
    total: int = Field(..., description="Total number of structures")


class StructureCloseResponse(BaseModel):
    """Response from closing a structure."""

    structure: StructureResponse
    snapshot: TreasurySnapshot


class ActivationResponse(BaseModel):
    """Response from an activation request."""

    outcome: ActivationOutcome
    structure: StructureResponse | None = None
    check: ActivationCheck | None = None
    snapshot: TreasurySnapshot
    entries: list[CashFlowEntryResponse] = Field(default_factory=list)
