"""Pydantic schemas for engine inputs, outputs and API validation."""

from structure_treasury.schemas.cash_flow import (
    CashFlowEntryList,
    CashFlowEntryResponse,
    ManualEntryCreate,
)
from structure_treasury.schemas.custody import (
    AssetCreate,
    AssetList,
    AssetResponse,
    AssetUpdate,
)
from structure_treasury.schemas.leg import (
    CallLeg,
    FutureLeg,
    Leg,
    LegKind,
    LegSide,
    PutLeg,
    StockLeg,
)
from structure_treasury.schemas.operation import (
    OperationCreate,
    OperationList,
    OperationResponse,
)
from structure_treasury.schemas.roll import (
    RollExecutionResponse,
    RollList,
    RollPosition,
    RollResponse,
)
from structure_treasury.schemas.structure import (
    ActivationResponse,
    StructureCloseResponse,
    StructureDraft,
    StructureList,
    StructureResponse,
)
from structure_treasury.schemas.treasury import (
    ActivationCheck,
    ActivationOutcome,
    FinancialWarning,
    Gate,
    TreasurySnapshot,
)

__all__ = [
    "Leg",
    "LegKind",
    "LegSide",
    "CallLeg",
    "PutLeg",
    "StockLeg",
    "FutureLeg",
    "StructureDraft",
    "StructureResponse",
    "StructureList",
    "TreasurySnapshot",
    "Gate",
    "FinancialWarning",
    "ActivationCheck",
    "ActivationOutcome",
    "ManualEntryCreate",
    "CashFlowEntryResponse",
    "CashFlowEntryList",
    "AssetCreate",
    "AssetUpdate",
    "AssetResponse",
    "AssetList",
    "RollPosition",
    "RollResponse",
    "RollList",
    "RollExecutionResponse",
    "ActivationResponse",
    "StructureCloseResponse",
    "OperationCreate",
    "OperationResponse",
    "OperationList",
]
