"""Schemas for treasury snapshots and activation checks."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class TreasurySnapshot(BaseModel):
    """Point-in-time view of a user's cash, custody and guarantee figures."""

    ledger_balance: Decimal = Field(..., description="Latest running balance, may be negative")
    free_cash: Decimal = Field(..., description="max(0, ledger_balance)")
    custody_value: Decimal = Field(..., description="Sum of quantity * market price over custody")
    custody_guarantee: Decimal = Field(..., description="Guarantee released by pledged custody assets")
    guarantee_used: Decimal = Field(..., description="Margin required by active structures")
    guarantee_available_raw: Decimal = Field(..., description="Unfloored available guarantee")
    guarantee_available: Decimal = Field(..., description="Available guarantee floored at zero")
    active_structures: int = Field(..., description="Number of active structures")


class Gate(str, Enum):
    """Activation gates."""
    CASH = "CASH"
    GUARANTEE = "GUARANTEE"


class FinancialWarning(BaseModel):
    """A tripped soft gate. The caller may force activation after confirming."""

    gate: Gate
    message: str
    available: Decimal = Field(..., description="Free cash or available guarantee")
    required: Decimal = Field(..., description="Structure cash impact or guarantee required")
    resulting: Decimal = Field(..., description="New balance or guarantee deficit")


class ActivationCheck(BaseModel):
    """Outcome of evaluating both gates against a snapshot."""

    cash_impact: Decimal = Field(..., description="Sum of leg cash impacts")
    assembly_cost: Decimal
    new_balance: Decimal
    required_guarantee: Decimal
    guarantee_deficit: Decimal = Field(..., description="required - available, floored at zero")
    warnings: list[FinancialWarning] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.warnings


class ActivationOutcome(str, Enum):
    """Result of an activation request."""
    ACTIVATED = "ACTIVATED"
    NEEDS_CONFIRMATION = "NEEDS_CONFIRMATION"
    ALREADY_ACTIVE = "ALREADY_ACTIVE"
