"""SQLAlchemy database models."""

from structure_treasury.models.cash_flow_entry import CashFlowEntry, EntryType
from structure_treasury.models.custody_asset import AssetKind, CustodyAsset
from structure_treasury.models.operation import Operation
from structure_treasury.models.roll_record import RollRecord, RollStatus
from structure_treasury.models.structure import Structure, StructureStatus

__all__ = [
    "Structure",
    "StructureStatus",
    "CashFlowEntry",
    "EntryType",
    "CustodyAsset",
    "AssetKind",
    "RollRecord",
    "RollStatus",
    "Operation",
]
