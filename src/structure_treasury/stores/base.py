"""Store protocols injected into the engine services.

Every query is scoped by ``user_id``; the engine assumes a single writer per
user and never locks rows itself.
"""

from typing import Protocol

from structure_treasury.models.cash_flow_entry import CashFlowEntry
from structure_treasury.models.custody_asset import CustodyAsset
from structure_treasury.models.operation import Operation
from structure_treasury.models.roll_record import RollRecord
from structure_treasury.models.structure import Structure


class LedgerStore(Protocol):
    """Cash flow ledger persistence."""

    async def list_entries(self, user_id: str) -> list[CashFlowEntry]:
        """All entries of a user in creation order."""
        ...

    async def last_entry(self, user_id: str) -> CashFlowEntry | None:
        """Most recently created entry of a user."""
        ...

    async def insert_entry(self, entry: CashFlowEntry) -> CashFlowEntry:
        ...

    async def update_entry(self, entry: CashFlowEntry) -> CashFlowEntry:
        ...

    async def delete_entry(self, entry: CashFlowEntry) -> None:
        ...

    async def get_entry(self, user_id: str, entry_id: int) -> CashFlowEntry | None:
        ...

    async def entries_for_structure(self, user_id: str, structure_id: str) -> list[CashFlowEntry]:
        ...

    async def delete_entries_for_structure(self, user_id: str, structure_id: str) -> int:
        """Delete every entry tied to a structure, returning how many were removed."""
        ...


class TreasuryStore(Protocol):
    """Structures, custody, roll history and operations persistence."""

    async def get_structure(self, user_id: str, structure_id: str) -> Structure | None:
        ...

    async def list_structures(self, user_id: str, status: str | None = None) -> list[Structure]:
        ...

    async def insert_structure(self, structure: Structure) -> Structure:
        ...

    async def update_structure(self, structure: Structure) -> Structure:
        ...

    async def delete_structure(self, structure: Structure) -> None:
        ...

    async def get_asset(self, user_id: str, asset_id: int) -> CustodyAsset | None:
        ...

    async def get_asset_by_symbol(self, user_id: str, symbol: str) -> CustodyAsset | None:
        ...

    async def list_assets(self, user_id: str) -> list[CustodyAsset]:
        ...

    async def insert_asset(self, asset: CustodyAsset) -> CustodyAsset:
        ...

    async def update_asset(self, asset: CustodyAsset) -> CustodyAsset:
        ...

    async def delete_asset(self, asset: CustodyAsset) -> None:
        ...

    async def save_custody(
        self, structure: Structure, asset: CustodyAsset, remove_asset: bool = False
    ) -> CustodyAsset | None:
        """Persist an asset change and the structure's custody movements in one write."""
        ...

    async def insert_roll(self, roll: RollRecord) -> RollRecord:
        ...

    async def get_roll(self, user_id: str, roll_id: int) -> RollRecord | None:
        ...

    async def list_rolls(self, user_id: str, structure_id: str | None = None) -> list[RollRecord]:
        ...

    async def delete_roll(self, roll: RollRecord) -> None:
        ...

    async def list_operations(self, user_id: str, structure_id: str) -> list[Operation]:
        ...

    async def replace_operations(
        self, user_id: str, structure_id: str, operations: list[Operation]
    ) -> list[Operation]:
        """Swap a structure's execution records for a new set."""
        ...

    async def delete_operations_for_structure(self, user_id: str, structure_id: str) -> int:
        ...
