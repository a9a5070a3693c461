"""Ledger Poster - appends consolidated cash flow entries.

Activation posts, in this fixed order:

1. STRUCTURE_COST for the assembly cost
2. One DEPOSIT/WITHDRAWAL per stock symbol with non-zero net impact
3. One STRUCTURE_PREMIUM for all option and futures legs, if non-zero

Amounts are rounded half-up to cents before posting so that stored balances
always equal the previous balance plus the stored amount. Each entry's
balance threads the running total from the user's latest entry.

Posting is keyed by structure id. A repeated call posts only the planned
entries that are not yet in the ledger, so an interrupted activation can be
completed without doubling the entries that already landed.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from structure_treasury.core.exceptions import ValidationError
from structure_treasury.models.cash_flow_entry import CashFlowEntry, EntryType
from structure_treasury.models.roll_record import RollRecord
from structure_treasury.schemas.leg import Leg, LegKind
from structure_treasury.services.leg_valuation import ZERO, cash_impact
from structure_treasury.stores.base import LedgerStore

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    """Round a money amount half-up to cents."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class PlannedEntry:
    """An entry to be posted, before balance threading."""
    type: EntryType
    description: str
    amount: Decimal


def plan_activation_entries(name: str, legs: Iterable[Leg], assembly_cost: Decimal) -> list[PlannedEntry]:
    """Build the consolidated entries for an activation.

    Args:
        name: Structure name, used in descriptions
        legs: Structure legs
        assembly_cost: Structure assembly cost

    Returns:
        Planned entries in posting order
    """
    planned = [
        PlannedEntry(
            type=EntryType.STRUCTURE_COST,
            description=f"Assembly cost - {name}",
            amount=-to_cents(assembly_cost),
        )
    ]

    # Stock legs netted per symbol, in order of first appearance
    stock_amounts: dict[str, Decimal] = {}
    stock_quantities: dict[str, int] = {}
    premium_total = ZERO

    for leg in legs:
        if leg.kind == LegKind.STOCK:
            stock_amounts[leg.symbol] = stock_amounts.get(leg.symbol, ZERO) + cash_impact(leg)
            signed_qty = leg.quantity if leg.is_long else -leg.quantity
            stock_quantities[leg.symbol] = stock_quantities.get(leg.symbol, 0) + signed_qty
        else:
            premium_total += cash_impact(leg)

    for symbol, raw_amount in stock_amounts.items():
        amount = to_cents(raw_amount)
        if amount == 0:
            continue
        action = "Net sell" if amount > 0 else "Net buy"
        net_qty = abs(stock_quantities[symbol])
        planned.append(
            PlannedEntry(
                type=EntryType.DEPOSIT if amount > 0 else EntryType.WITHDRAWAL,
                description=f"{action} {net_qty} {symbol} - {name}",
                amount=amount,
            )
        )

    premium_total = to_cents(premium_total)
    if premium_total != 0:
        label = "Premium received" if premium_total > 0 else "Premium paid"
        planned.append(
            PlannedEntry(
                type=EntryType.STRUCTURE_PREMIUM,
                description=f"{label} - {name}",
                amount=premium_total,
            )
        )

    return planned


class LedgerPoster:
    """Posts entries to a user's cash flow ledger."""

    def __init__(self, ledger: LedgerStore):
        """Initialize ledger poster.

        Args:
            ledger: Cash flow ledger store
        """
        self.ledger = ledger

    async def current_balance(self, user_id: str) -> Decimal:
        """Running balance after the user's latest entry."""
        last = await self.ledger.last_entry(user_id)
        return Decimal(last.balance) if last else ZERO

    async def post_activation(
        self,
        user_id: str,
        structure_id: str,
        name: str,
        legs: list[Leg],
        assembly_cost: Decimal,
        entry_date: date | None = None,
    ) -> list[CashFlowEntry]:
        """Post the consolidated activation entries for a structure.

        A store failure aborts the remaining postings; entries already written
        stay in place and a later call posts only the missing ones.

        Args:
            user_id: Ledger owner
            structure_id: Idempotency key
            name: Structure name
            legs: Structure legs
            assembly_cost: Structure assembly cost
            entry_date: Entry date (defaults to today)

        Returns:
            Entries posted by this call, empty if the structure was fully posted

        Raises:
            ValidationError: If the structure's existing entries do not match the plan
            PersistenceError: If a store operation fails
        """
        plan = plan_activation_entries(name, legs, assembly_cost)
        existing = await self.ledger.entries_for_structure(user_id, structure_id)

        if len(existing) > len(plan) or any(
            entry.type != planned.type.value or to_cents(entry.amount) != planned.amount
            for entry, planned in zip(existing, plan)
        ):
            raise ValidationError(
                f"Ledger entries for structure {structure_id} do not match its activation plan"
            )

        if len(existing) == len(plan):
            logger.info(f"Ledger already posted for structure {structure_id}, skipping")
            return []

        if existing:
            logger.warning(
                f"Completing partial posting for structure {structure_id}: "
                f"{len(existing)} of {len(plan)} entries present"
            )

        entry_date = entry_date or date.today()
        balance = await self.current_balance(user_id)
        posted: list[CashFlowEntry] = []

        for planned in plan[len(existing):]:
            balance += planned.amount
            entry = CashFlowEntry(
                user_id=user_id,
                date=entry_date,
                type=planned.type.value,
                description=planned.description,
                amount=planned.amount,
                balance=balance,
                related_structure_id=structure_id,
            )
            posted.append(await self.ledger.insert_entry(entry))
            logger.info(f"Posted {planned.type.value} {planned.amount} for structure {structure_id}")

        return posted

    async def post_entry(
        self,
        user_id: str,
        entry_type: EntryType,
        amount: Decimal,
        description: str,
        related_structure_id: str | None = None,
        related_roll_id: int | None = None,
        entry_date: date | None = None,
    ) -> CashFlowEntry:
        """Append a single entry at the end of the ledger.

        Args:
            user_id: Ledger owner
            entry_type: Entry type
            amount: Signed amount
            description: Entry description
            related_structure_id: Owning structure, if any
            related_roll_id: Originating roll, if any
            entry_date: Entry date (defaults to today)

        Returns:
            Posted entry
        """
        amount = to_cents(amount)
        balance = await self.current_balance(user_id) + amount
        entry = CashFlowEntry(
            user_id=user_id,
            date=entry_date or date.today(),
            type=entry_type.value,
            description=description,
            amount=amount,
            balance=balance,
            related_structure_id=related_structure_id,
            related_roll_id=related_roll_id,
        )
        entry = await self.ledger.insert_entry(entry)
        logger.info(f"Posted {entry_type.value} {amount} for user {user_id}")
        return entry

    async def post_roll_result(self, user_id: str, roll: RollRecord) -> list[CashFlowEntry]:
        """Post a roll's cost and realized profit.

        Not called by the roll executor; callers decide when a roll's result
        hits the ledger.

        Args:
            user_id: Ledger owner
            roll: Executed roll record

        Returns:
            Posted entries (zero amounts are skipped)
        """
        posted = []
        if roll.roll_cost:
            posted.append(
                await self.post_entry(
                    user_id,
                    EntryType.ROLL_COST,
                    -abs(Decimal(roll.roll_cost)),
                    f"Roll cost - roll #{roll.id}",
                    related_structure_id=roll.structure_id,
                    related_roll_id=roll.id,
                )
            )
        if roll.realized_profit:
            posted.append(
                await self.post_entry(
                    user_id,
                    EntryType.PROFIT,
                    Decimal(roll.realized_profit),
                    f"Realized result - roll #{roll.id}",
                    related_structure_id=roll.structure_id,
                    related_roll_id=roll.id,
                )
            )
        return posted

    async def rebalance(self, user_id: str) -> int:
        """Re-thread running balances after entries were removed.

        Amounts are never changed; only balances that no longer match
        ``previous balance + amount`` are rewritten.

        Args:
            user_id: Ledger owner

        Returns:
            Number of entries whose balance changed
        """
        balance = ZERO
        changed = 0
        for entry in await self.ledger.list_entries(user_id):
            balance += to_cents(entry.amount)
            if Decimal(entry.balance) != balance:
                entry.balance = balance
                await self.ledger.update_entry(entry)
                changed += 1

        if changed:
            logger.info(f"Re-threaded {changed} ledger balances for user {user_id}")
        return changed
