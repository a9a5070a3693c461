"""Treasury snapshot builder - current cash, custody and guarantee figures."""

import logging
from collections.abc import Iterable
from decimal import Decimal

from structure_treasury.models.cash_flow_entry import CashFlowEntry
from structure_treasury.models.custody_asset import CustodyAsset
from structure_treasury.models.structure import Structure, StructureStatus
from structure_treasury.schemas.treasury import TreasurySnapshot
from structure_treasury.services.guarantee_calculator import GuaranteeCalculator
from structure_treasury.services.leg_valuation import ZERO
from structure_treasury.stores.base import LedgerStore, TreasuryStore

logger = logging.getLogger(__name__)


class TreasurySnapshotService:
    """Builds treasury snapshots from the ledger, custody and active structures.

    Snapshots are always rebuilt from fresh reads; nothing is cached between
    mutations.
    """

    def __init__(
        self,
        ledger: LedgerStore,
        treasury: TreasuryStore,
        calculator: GuaranteeCalculator | None = None,
    ):
        """Initialize snapshot service.

        Args:
            ledger: Cash flow ledger store
            treasury: Structures and custody store
            calculator: Guarantee calculator (defaults from settings)
        """
        self.ledger = ledger
        self.treasury = treasury
        self.calculator = calculator or GuaranteeCalculator()

    async def compute(self, user_id: str) -> TreasurySnapshot:
        """Compute a fresh snapshot for a user.

        Args:
            user_id: Owner of the ledger

        Returns:
            TreasurySnapshot
        """
        last = await self.ledger.last_entry(user_id)
        assets = await self.treasury.list_assets(user_id)
        active = await self.treasury.list_structures(user_id, status=StructureStatus.ACTIVE.value)

        snapshot = self.build(last, assets, active)
        logger.debug(
            f"Snapshot for {user_id}: free_cash={snapshot.free_cash} "
            f"guarantee_available={snapshot.guarantee_available_raw}"
        )
        return snapshot

    def build(
        self,
        last_entry: CashFlowEntry | None,
        assets: Iterable[CustodyAsset],
        active_structures: Iterable[Structure],
    ) -> TreasurySnapshot:
        """Assemble a snapshot from already loaded records.

        Args:
            last_entry: Most recent ledger entry, or None for an empty ledger
            assets: Custody assets
            active_structures: Structures with ACTIVE status

        Returns:
            TreasurySnapshot
        """
        assets = list(assets)
        active_structures = list(active_structures)

        ledger_balance = Decimal(last_entry.balance) if last_entry else ZERO
        free_cash = max(ZERO, ledger_balance)

        custody_value = sum((asset.market_value for asset in assets), ZERO)
        custody_guarantee = self.calculator.custody_guarantee(assets)
        guarantee_used = self.calculator.structures_guarantee(active_structures)

        available_raw = self.calculator.available_guarantee(assets, free_cash) - guarantee_used

        return TreasurySnapshot(
            ledger_balance=ledger_balance,
            free_cash=free_cash,
            custody_value=custody_value,
            custody_guarantee=custody_guarantee,
            guarantee_used=guarantee_used,
            guarantee_available_raw=available_raw,
            guarantee_available=max(ZERO, available_raw),
            active_structures=len(active_structures),
        )
