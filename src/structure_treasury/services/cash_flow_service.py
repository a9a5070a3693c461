"""Cash Flow Service - manual ledger entries and orphan detection."""

import logging
from datetime import date
from decimal import Decimal

from structure_treasury.core.exceptions import NotFoundError, ValidationError
from structure_treasury.models.cash_flow_entry import CashFlowEntry, EntryType
from structure_treasury.services.ledger_poster import LedgerPoster
from structure_treasury.stores.base import LedgerStore, TreasuryStore

logger = logging.getLogger(__name__)


def normalize_amount(entry_type: EntryType, amount: Decimal) -> Decimal:
    """Apply the sign convention of manual entries.

    Withdrawals are always negative and deposits always positive; other
    types keep the sign they were given.
    """
    if entry_type == EntryType.WITHDRAWAL:
        return -abs(amount)
    if entry_type == EntryType.DEPOSIT:
        return abs(amount)
    return amount


class CashFlowService:
    """Service for browsing and hand-editing a user's cash flow ledger."""

    def __init__(self, ledger: LedgerStore, treasury: TreasuryStore):
        """Initialize cash flow service.

        Args:
            ledger: Cash flow ledger store
            treasury: Treasury store, used to resolve structure links
        """
        self.ledger = ledger
        self.treasury = treasury
        self.poster = LedgerPoster(ledger)

    async def list_entries(self, user_id: str) -> list[CashFlowEntry]:
        """All entries in creation order."""
        return await self.ledger.list_entries(user_id)

    async def add_manual_entry(
        self,
        user_id: str,
        entry_type: EntryType,
        description: str,
        amount: Decimal,
        entry_date: date | None = None,
    ) -> CashFlowEntry:
        """Append a manual entry (deposit, withdrawal, tax, ...).

        Args:
            user_id: Ledger owner
            entry_type: Entry type
            description: Entry description
            amount: Amount; sign normalised for deposits and withdrawals
            entry_date: Entry date (defaults to today)

        Returns:
            Posted entry

        Raises:
            ValidationError: If the description is empty or the amount is zero
        """
        if not description or not description.strip():
            raise ValidationError("Entry description is required")
        if amount == 0:
            raise ValidationError("Entry amount must not be zero")

        return await self.poster.post_entry(
            user_id,
            entry_type,
            normalize_amount(entry_type, amount),
            description.strip(),
            entry_date=entry_date,
        )

    async def find_orphaned_entries(self, user_id: str) -> list[CashFlowEntry]:
        """Entries whose related structure no longer exists.

        These are left behind by partially failed operations and may be
        deleted by hand.
        """
        entries = await self.ledger.list_entries(user_id)
        live_ids = {s.id for s in await self.treasury.list_structures(user_id)}
        orphans = [
            entry for entry in entries
            if entry.related_structure_id is not None and entry.related_structure_id not in live_ids
        ]
        if orphans:
            logger.warning(f"Found {len(orphans)} orphaned ledger entries for user {user_id}")
        return orphans

    async def delete_manual_entry(self, user_id: str, entry_id: int) -> None:
        """Delete a manual or orphaned entry and re-thread balances.

        Raises:
            NotFoundError: If the entry does not exist
            ValidationError: If the entry belongs to a live structure
        """
        entry = await self.ledger.get_entry(user_id, entry_id)
        if entry is None:
            raise NotFoundError(f"Ledger entry {entry_id} not found")

        if entry.related_structure_id is not None:
            structure = await self.treasury.get_structure(user_id, entry.related_structure_id)
            if structure is not None:
                raise ValidationError(
                    "Entry is linked to a structure and cannot be deleted directly; "
                    "delete the structure instead"
                )
            logger.info(f"Deleting orphaned entry {entry_id} (structure {entry.related_structure_id})")

        await self.ledger.delete_entry(entry)
        await self.poster.rebalance(user_id)
