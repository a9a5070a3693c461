"""Structure Service - lifecycle operations over the treasury ledgers.

Every mutating call is one sequential unit of work: store writes are awaited
in order and there is no rollback coordinator. Each call returns a freshly
computed treasury snapshot and, when given, hands it to ``on_change``.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from decimal import Decimal

import pydantic

from structure_treasury.config import get_settings
from structure_treasury.core.exceptions import NotFoundError, ValidationError
from structure_treasury.models.cash_flow_entry import CashFlowEntry
from structure_treasury.models.operation import Operation
from structure_treasury.models.roll_record import RollRecord
from structure_treasury.models.structure import Structure, StructureStatus, utcnow
from structure_treasury.schemas.leg import Leg, dump_legs, parse_legs
from structure_treasury.schemas.operation import OperationCreate
from structure_treasury.schemas.roll import RollPosition
from structure_treasury.schemas.structure import StructureDraft
from structure_treasury.schemas.treasury import (
    ActivationCheck,
    ActivationOutcome,
    TreasurySnapshot,
)
from structure_treasury.services.activation_validator import ActivationValidator, require_activatable
from structure_treasury.services.custody_reconciler import CustodyReconciler
from structure_treasury.services.guarantee_calculator import GuaranteeCalculator
from structure_treasury.services.leg_valuation import assembly_cost, net_premium, structure_expiration
from structure_treasury.services.ledger_poster import LedgerPoster
from structure_treasury.services.roll_executor import RollExecutor
from structure_treasury.services.treasury_snapshot_service import TreasurySnapshotService
from structure_treasury.stores.base import LedgerStore, TreasuryStore

logger = logging.getLogger(__name__)

OnChange = Callable[[TreasurySnapshot], Awaitable[None] | None]


@dataclass
class ActivationResult:
    """Result of an activation request."""
    outcome: ActivationOutcome
    structure: Structure | None
    snapshot: TreasurySnapshot
    check: ActivationCheck | None = None
    entries: list[CashFlowEntry] = field(default_factory=list)


@dataclass
class RollResult:
    """Result of a roll."""
    structure: Structure
    roll: RollRecord
    snapshot: TreasurySnapshot


class StructureService:
    """Entry point for structure lifecycle and treasury reconciliation."""

    def __init__(
        self,
        ledger: LedgerStore,
        treasury: TreasuryStore,
        calculator: GuaranteeCalculator | None = None,
        validator: ActivationValidator | None = None,
        assembly_cost_per_leg: Decimal | None = None,
    ):
        """Initialize structure service.

        Args:
            ledger: Cash flow ledger store
            treasury: Structures, custody and roll store
            calculator: Guarantee calculator
            validator: Activation validator
            assembly_cost_per_leg: Fixed cost per leg
        """
        self.ledger = ledger
        self.treasury = treasury
        self.calculator = calculator or GuaranteeCalculator()
        self.assembly_cost_per_leg = (
            assembly_cost_per_leg
            if assembly_cost_per_leg is not None
            else get_settings().assembly_cost_per_leg
        )
        self.validator = validator or ActivationValidator(
            self.calculator, assembly_cost_per_leg=self.assembly_cost_per_leg
        )
        self.snapshots = TreasurySnapshotService(ledger, treasury, self.calculator)
        self.poster = LedgerPoster(ledger)
        self.custody = CustodyReconciler(treasury)
        self.rolls = RollExecutor(treasury)

    # Queries

    async def compute_treasury_snapshot(self, user_id: str) -> TreasurySnapshot:
        """Fresh treasury snapshot for a user."""
        return await self.snapshots.compute(user_id)

    def validate_activation(self, draft: StructureDraft, snapshot: TreasurySnapshot) -> ActivationCheck:
        """Evaluate the activation gates for a draft against a snapshot.

        Raises:
            ValidationError: If the draft has no name or no legs
        """
        return self.validator.validate(draft.name, list(draft.legs), snapshot)

    async def get_structure(self, user_id: str, structure_id: str) -> Structure:
        """Get a structure.

        Raises:
            NotFoundError: If the structure does not exist for the user
        """
        structure = await self.treasury.get_structure(user_id, structure_id)
        if structure is None:
            raise NotFoundError(f"Structure {structure_id} not found")
        return structure

    async def list_structures(self, user_id: str, status: StructureStatus | None = None) -> list[Structure]:
        """List a user's structures, optionally by status."""
        return await self.treasury.list_structures(user_id, status=status.value if status else None)

    def legs_of(self, structure: Structure) -> list[Leg]:
        """Typed legs of a stored structure.

        Raises:
            ValidationError: If the stored legs are malformed
        """
        try:
            return parse_legs(structure.legs)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Structure {structure.id} has invalid legs: {e}") from e

    # Drafts

    async def save_draft(self, draft: StructureDraft, user_id: str) -> Structure:
        """Create or update a DRAFTING structure.

        Args:
            draft: Structure draft
            user_id: Owner

        Returns:
            Stored structure

        Raises:
            ValidationError: If the name is empty or the structure is no longer a draft
        """
        if not draft.name or not draft.name.strip():
            raise ValidationError("Structure name is required")

        structure = None
        if draft.id:
            structure = await self.treasury.get_structure(user_id, draft.id)

        if structure is not None and structure.status != StructureStatus.DRAFTING.value:
            raise ValidationError(
                f"Structure {structure.id} is {structure.status}; only drafts can be edited"
            )

        legs = list(draft.legs)
        values = {
            "name": draft.name.strip(),
            "underlying": draft.underlying,
            "legs": dump_legs(legs),
            "net_premium": net_premium(legs),
            "assembly_cost": assembly_cost(legs, self.assembly_cost_per_leg),
            "expiration": structure_expiration(legs),
        }

        if structure is None:
            structure = Structure(user_id=user_id, status=StructureStatus.DRAFTING.value, **values)
            if draft.id:
                structure.id = draft.id
            structure = await self.treasury.insert_structure(structure)
            logger.info(f"Created draft structure {structure.id} for user {user_id}")
        else:
            for key, value in values.items():
                setattr(structure, key, value)
            structure = await self.treasury.update_structure(structure)
            logger.info(f"Updated draft structure {structure.id}")

        return structure

    # Lifecycle

    async def activate_structure(
        self,
        draft: StructureDraft,
        user_id: str,
        force: bool = False,
        on_change: OnChange | None = None,
    ) -> ActivationResult:
        """Move a structure from DRAFTING to ACTIVE.

        Ledger and custody effects happen exactly once per structure id;
        repeated calls return ALREADY_ACTIVE without side effects. A call that
        failed before the status change can be retried with the same id: only
        the ledger entries and custody movements still missing are applied.
        Tripped soft gates return NEEDS_CONFIRMATION unless ``force`` is set.

        Args:
            draft: Structure to activate (new or existing draft)
            user_id: Owner
            force: Proceed despite tripped soft gates
            on_change: Callback receiving the updated snapshot

        Returns:
            ActivationResult

        Raises:
            ValidationError: If the structure has no name or no legs
            PersistenceError: If a store write fails midway
        """
        require_activatable(draft.name, list(draft.legs))

        if draft.id:
            existing = await self.treasury.get_structure(user_id, draft.id)
            if existing is not None and existing.was_activated:
                logger.info(f"Structure {existing.id} already activated, nothing to do")
                snapshot = await self.snapshots.compute(user_id)
                return ActivationResult(ActivationOutcome.ALREADY_ACTIVE, existing, snapshot)

        snapshot = await self.snapshots.compute(user_id)
        check = self.validate_activation(draft, snapshot)

        if check.warnings and not force:
            return ActivationResult(ActivationOutcome.NEEDS_CONFIRMATION, None, snapshot, check)

        if check.warnings:
            logger.warning(f"Activating '{draft.name}' despite {len(check.warnings)} financial warnings")

        structure = await self.save_draft(draft, user_id)
        legs = self.legs_of(structure)

        entries = await self.poster.post_activation(
            user_id, structure.id, structure.name, legs, structure.assembly_cost
        )
        await self.custody.apply_activation(user_id, structure, legs)

        structure.status = StructureStatus.ACTIVE.value
        structure.activated_at = utcnow()
        structure = await self.treasury.update_structure(structure)
        logger.info(f"Activated structure {structure.id} with {len(entries)} ledger entries")

        snapshot = await self._changed(user_id, on_change)
        return ActivationResult(ActivationOutcome.ACTIVATED, structure, snapshot, check, entries)

    async def close_structure(
        self, structure_id: str, user_id: str, on_change: OnChange | None = None
    ) -> tuple[Structure, TreasurySnapshot]:
        """Move an ACTIVE structure to CLOSED.

        Raises:
            NotFoundError: If the structure does not exist
            ValidationError: If the structure is not active
        """
        structure = await self.get_structure(user_id, structure_id)
        if structure.status != StructureStatus.ACTIVE.value:
            raise ValidationError(f"Only active structures can be closed (status {structure.status})")

        structure.status = StructureStatus.CLOSED.value
        structure.closed_at = utcnow()
        structure = await self.treasury.update_structure(structure)
        logger.info(f"Closed structure {structure.id}")

        return structure, await self._changed(user_id, on_change)

    async def roll_structure(
        self, roll: RollPosition, user_id: str, on_change: OnChange | None = None
    ) -> RollResult:
        """Apply a roll to an active structure.

        Raises:
            NotFoundError: If the structure does not exist
            ValidationError: If the roll is invalid
        """
        structure, record = await self.rolls.execute(user_id, roll)
        snapshot = await self._changed(user_id, on_change)
        return RollResult(structure, record, snapshot)

    async def delete_structure(
        self, structure_id: str, user_id: str, on_change: OnChange | None = None
    ) -> TreasurySnapshot:
        """Delete a structure and its ledger and custody effects.

        Custody movements recorded at activation are reversed, the
        structure's ledger entries are removed and remaining balances
        re-threaded. Roll history is kept.

        Raises:
            NotFoundError: If the structure does not exist
            PersistenceError: If a store write fails midway
        """
        structure = await self.get_structure(user_id, structure_id)

        if structure.custody_movements:
            await self.custody.reverse_activation(user_id, structure)

        removed = await self.ledger.delete_entries_for_structure(user_id, structure_id)
        if removed:
            await self.poster.rebalance(user_id)

        await self.treasury.delete_operations_for_structure(user_id, structure_id)
        await self.treasury.delete_structure(structure)
        logger.info(f"Deleted structure {structure_id} ({removed} ledger entries removed)")

        return await self._changed(user_id, on_change)

    # Operations

    async def upload_operations(
        self, structure_id: str, operations: list[OperationCreate], user_id: str
    ) -> list[Operation]:
        """Replace a structure's execution records.

        Operations are informational: the structure's status, ledger and
        custody are left as they are.

        Args:
            structure_id: Owning structure
            operations: New execution records
            user_id: Owner

        Returns:
            Stored operations

        Raises:
            NotFoundError: If the structure does not exist
        """
        await self.get_structure(user_id, structure_id)
        records = [
            Operation(
                user_id=user_id,
                structure_id=structure_id,
                kind=op.kind.upper(),
                symbol=op.symbol.strip().upper(),
                quantity=op.quantity,
                price=op.price,
                result=op.result,
                status=op.status,
                entry_date=op.entry_date,
                exit_date=op.exit_date,
            )
            for op in operations
        ]
        stored = await self.treasury.replace_operations(user_id, structure_id, records)
        logger.info(f"Uploaded {len(stored)} operations for structure {structure_id}")
        return stored

    async def list_operations(self, structure_id: str, user_id: str) -> list[Operation]:
        """Execution records of a structure, in upload order.

        Raises:
            NotFoundError: If the structure does not exist
        """
        await self.get_structure(user_id, structure_id)
        return await self.treasury.list_operations(user_id, structure_id)

    # Roll history

    async def list_rolls(self, user_id: str, structure_id: str | None = None) -> list[RollRecord]:
        """Roll history, oldest first."""
        return await self.treasury.list_rolls(user_id, structure_id)

    async def delete_roll(self, roll_id: int, user_id: str) -> None:
        """Delete one roll history record on explicit request.

        Raises:
            NotFoundError: If the roll does not exist
        """
        roll = await self.treasury.get_roll(user_id, roll_id)
        if roll is None:
            raise NotFoundError(f"Roll {roll_id} not found")
        await self.treasury.delete_roll(roll)
        logger.info(f"Deleted roll #{roll_id}")

    async def _changed(self, user_id: str, on_change: OnChange | None) -> TreasurySnapshot:
        """Recompute the snapshot and notify the caller."""
        snapshot = await self.snapshots.compute(user_id)
        if on_change is not None:
            result = on_change(snapshot)
            if inspect.isawaitable(result):
                await result
        return snapshot
