"""SQLAlchemy implementation of the ledger and treasury stores.

Each write is committed on its own, so a failure midway through a multi-step
engine action leaves the earlier rows in place.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from structure_treasury.core.exceptions import PersistenceError
from structure_treasury.models.cash_flow_entry import CashFlowEntry
from structure_treasury.models.custody_asset import CustodyAsset
from structure_treasury.models.operation import Operation
from structure_treasury.models.roll_record import RollRecord
from structure_treasury.models.structure import Structure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _SessionStore:
    """Shared session handling for the SQLAlchemy stores."""

    def __init__(self, session: AsyncSession):
        """Initialize store.

        Args:
            session: Database session
        """
        self.session = session

    async def _run(self, action: str, op: Callable[[], Awaitable[T]]) -> T:
        """Run a store operation, translating database errors.

        Args:
            action: Short description used in logs
            op: Coroutine factory performing the work

        Returns:
            Whatever the operation returns

        Raises:
            PersistenceError: If the database rejects the operation
        """
        try:
            return await op()
        except SQLAlchemyError as e:
            logger.error(f"Store operation failed ({action}): {e}")
            await self.session.rollback()
            raise PersistenceError(f"Store operation failed: {action}") from e

    async def _add(self, action: str, obj: T) -> T:
        async def op():
            self.session.add(obj)
            await self.session.commit()
            await self.session.refresh(obj)
            return obj

        return await self._run(action, op)

    async def _remove(self, action: str, obj) -> None:
        async def op():
            await self.session.delete(obj)
            await self.session.commit()

        await self._run(action, op)


class SqlAlchemyLedgerStore(_SessionStore):
    """Cash flow ledger backed by the cash_flow_entries table."""

    async def list_entries(self, user_id: str) -> list[CashFlowEntry]:
        async def op():
            stmt = (
                select(CashFlowEntry)
                .where(CashFlowEntry.user_id == user_id)
                .order_by(CashFlowEntry.id)
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        return await self._run("list entries", op)

    async def last_entry(self, user_id: str) -> CashFlowEntry | None:
        async def op():
            stmt = (
                select(CashFlowEntry)
                .where(CashFlowEntry.user_id == user_id)
                .order_by(CashFlowEntry.id.desc())
                .limit(1)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

        return await self._run("last entry", op)

    async def get_entry(self, user_id: str, entry_id: int) -> CashFlowEntry | None:
        async def op():
            stmt = select(CashFlowEntry).where(
                and_(CashFlowEntry.user_id == user_id, CashFlowEntry.id == entry_id)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

        return await self._run("get entry", op)

    async def insert_entry(self, entry: CashFlowEntry) -> CashFlowEntry:
        return await self._add("insert entry", entry)

    async def update_entry(self, entry: CashFlowEntry) -> CashFlowEntry:
        return await self._add("update entry", entry)

    async def delete_entry(self, entry: CashFlowEntry) -> None:
        await self._remove("delete entry", entry)

    async def entries_for_structure(self, user_id: str, structure_id: str) -> list[CashFlowEntry]:
        async def op():
            stmt = (
                select(CashFlowEntry)
                .where(
                    and_(
                        CashFlowEntry.user_id == user_id,
                        CashFlowEntry.related_structure_id == structure_id,
                    )
                )
                .order_by(CashFlowEntry.id)
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        return await self._run("entries for structure", op)

    async def delete_entries_for_structure(self, user_id: str, structure_id: str) -> int:
        async def op():
            stmt = delete(CashFlowEntry).where(
                and_(
                    CashFlowEntry.user_id == user_id,
                    CashFlowEntry.related_structure_id == structure_id,
                )
            )
            result = await self.session.execute(stmt)
            await self.session.commit()
            return result.rowcount or 0

        return await self._run("delete entries for structure", op)


class SqlAlchemyTreasuryStore(_SessionStore):
    """Structures, custody assets, rolls and operations."""

    # Structures

    async def get_structure(self, user_id: str, structure_id: str) -> Structure | None:
        async def op():
            stmt = select(Structure).where(
                and_(Structure.user_id == user_id, Structure.id == structure_id)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

        return await self._run("get structure", op)

    async def list_structures(self, user_id: str, status: str | None = None) -> list[Structure]:
        async def op():
            stmt = select(Structure).where(Structure.user_id == user_id)
            if status:
                stmt = stmt.where(Structure.status == status)
            stmt = stmt.order_by(Structure.created_at)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        return await self._run("list structures", op)

    async def insert_structure(self, structure: Structure) -> Structure:
        return await self._add("insert structure", structure)

    async def update_structure(self, structure: Structure) -> Structure:
        return await self._add("update structure", structure)

    async def delete_structure(self, structure: Structure) -> None:
        await self._remove("delete structure", structure)

    # Custody assets

    async def get_asset(self, user_id: str, asset_id: int) -> CustodyAsset | None:
        async def op():
            stmt = select(CustodyAsset).where(
                and_(CustodyAsset.user_id == user_id, CustodyAsset.id == asset_id)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

        return await self._run("get asset", op)

    async def get_asset_by_symbol(self, user_id: str, symbol: str) -> CustodyAsset | None:
        async def op():
            stmt = select(CustodyAsset).where(
                and_(CustodyAsset.user_id == user_id, CustodyAsset.symbol == symbol)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

        return await self._run("get asset by symbol", op)

    async def list_assets(self, user_id: str) -> list[CustodyAsset]:
        async def op():
            stmt = (
                select(CustodyAsset)
                .where(CustodyAsset.user_id == user_id)
                .order_by(CustodyAsset.symbol)
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        return await self._run("list assets", op)

    async def insert_asset(self, asset: CustodyAsset) -> CustodyAsset:
        return await self._add("insert asset", asset)

    async def update_asset(self, asset: CustodyAsset) -> CustodyAsset:
        return await self._add("update asset", asset)

    async def delete_asset(self, asset: CustodyAsset) -> None:
        await self._remove("delete asset", asset)

    async def save_custody(
        self, structure: Structure, asset: CustodyAsset, remove_asset: bool = False
    ) -> CustodyAsset | None:
        """Write an asset change together with the structure's custody movements.

        Both rows are committed at once so a movement is recorded if and only
        if its asset change was applied.

        Returns:
            The saved asset, or None when it was removed
        """
        async def op():
            if remove_asset:
                await self.session.delete(asset)
            else:
                self.session.add(asset)
            self.session.add(structure)
            await self.session.commit()
            await self.session.refresh(structure)
            if remove_asset:
                return None
            await self.session.refresh(asset)
            return asset

        return await self._run("save custody", op)

    # Roll history

    async def insert_roll(self, roll: RollRecord) -> RollRecord:
        return await self._add("insert roll", roll)

    async def get_roll(self, user_id: str, roll_id: int) -> RollRecord | None:
        async def op():
            stmt = select(RollRecord).where(
                and_(RollRecord.user_id == user_id, RollRecord.id == roll_id)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

        return await self._run("get roll", op)

    async def list_rolls(self, user_id: str, structure_id: str | None = None) -> list[RollRecord]:
        async def op():
            stmt = select(RollRecord).where(RollRecord.user_id == user_id)
            if structure_id:
                stmt = stmt.where(RollRecord.structure_id == structure_id)
            stmt = stmt.order_by(RollRecord.id)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        return await self._run("list rolls", op)

    async def delete_roll(self, roll: RollRecord) -> None:
        await self._remove("delete roll", roll)

    # Operations

    async def delete_operations_for_structure(self, user_id: str, structure_id: str) -> int:
        async def op():
            stmt = delete(Operation).where(
                and_(Operation.user_id == user_id, Operation.structure_id == structure_id)
            )
            result = await self.session.execute(stmt)
            await self.session.commit()
            return result.rowcount or 0

        return await self._run("delete operations", op)

    async def list_operations(self, user_id: str, structure_id: str) -> list[Operation]:
        async def op():
            stmt = (
                select(Operation)
                .where(and_(Operation.user_id == user_id, Operation.structure_id == structure_id))
                .order_by(Operation.id)
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        return await self._run("list operations", op)

    async def replace_operations(
        self, user_id: str, structure_id: str, operations: list[Operation]
    ) -> list[Operation]:
        async def op():
            await self.session.execute(
                delete(Operation).where(
                    and_(Operation.user_id == user_id, Operation.structure_id == structure_id)
                )
            )
            self.session.add_all(operations)
            await self.session.commit()
            for operation in operations:
                await self.session.refresh(operation)
            return operations

        return await self._run("replace operations", op)
