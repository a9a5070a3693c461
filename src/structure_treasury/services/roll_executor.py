"""Roll Executor - substitutes rolled legs inside an existing structure.

Legs are matched by id, never by position. Only the contract terms change:
symbol, strike or spot price, premium and expiration. Legs not named in the
roll are returned untouched. A roll never posts ledger entries or touches
custody; see LedgerPoster.post_roll_result for the caller-side seam.
"""

import logging
from decimal import Decimal

from structure_treasury.core.exceptions import NotFoundError, ValidationError
from structure_treasury.models.roll_record import RollRecord, RollStatus
from structure_treasury.models.structure import Structure, StructureStatus
from structure_treasury.schemas.leg import Leg, LegKind, dump_legs, parse_legs
from structure_treasury.schemas.roll import RollPosition
from structure_treasury.services.leg_valuation import ZERO, net_premium, structure_expiration
from structure_treasury.stores.base import TreasuryStore

logger = logging.getLogger(__name__)

# Fields a roll may replace, per leg kind
ROLLED_FIELDS: dict[str, tuple[str, ...]] = {
    LegKind.CALL.value: ("symbol", "strike", "premium", "expiration"),
    LegKind.PUT.value: ("symbol", "strike", "premium", "expiration"),
    LegKind.FUTURE.value: ("symbol", "spot_price", "premium", "expiration"),
    LegKind.STOCK.value: ("symbol", "expiration"),
}


def roll_leg(current: Leg, new: Leg) -> Leg:
    """Copy the rolled terms of ``new`` onto ``current``.

    Raises:
        ValidationError: If the legs are of different kinds
    """
    if current.kind != new.kind:
        raise ValidationError(
            f"Leg {current.id} is {current.kind} and cannot be rolled into {new.kind}"
        )
    fields = ROLLED_FIELDS[current.kind]
    return current.model_copy(update={name: getattr(new, name) for name in fields})


def apply_roll(legs: list[Leg], roll: RollPosition) -> list[Leg]:
    """Return the structure legs with the roll applied.

    Args:
        legs: Current structure legs
        roll: Roll to apply

    Returns:
        New leg list in the original order

    Raises:
        ValidationError: If the roll names legs outside the structure
    """
    current_ids = {leg.id for leg in legs}
    rolled_ids = {leg.id for leg in roll.original_legs}

    unknown = rolled_ids - current_ids
    if unknown:
        raise ValidationError(f"Legs not part of structure {roll.structure_id}: {sorted(unknown)}")

    new_by_id = {leg.id: leg for leg in roll.new_legs}
    stray = set(new_by_id) - rolled_ids
    if stray:
        raise ValidationError(f"New legs without a matching original leg: {sorted(stray)}")

    result = []
    for leg in legs:
        if leg.id in rolled_ids and leg.id in new_by_id:
            result.append(roll_leg(leg, new_by_id[leg.id]))
        else:
            result.append(leg)
    return result


def entry_reference_price(leg: Leg) -> Decimal:
    """Price a rolled leg was opened at."""
    if leg.kind == LegKind.STOCK:
        return leg.entry_price
    return leg.premium


def realized_profit(legs: list[Leg], roll: RollPosition) -> Decimal:
    """Profit realized by closing the rolled legs at their exit prices.

    LONG legs earn ``(exit - entry) * qty``, SHORT legs ``(entry - exit) * qty``.
    Legs without a positive exit price contribute nothing.
    """
    by_id = {leg.id: leg for leg in legs}
    profit = ZERO
    for original in roll.original_legs:
        leg = by_id.get(original.id)
        exit_price = roll.exit_prices.get(original.id)
        if leg is None or not exit_price or exit_price <= 0:
            continue
        entry = entry_reference_price(leg)
        if leg.is_long:
            profit += (exit_price - entry) * leg.quantity
        else:
            profit += (entry - exit_price) * leg.quantity
    return profit


class RollExecutor:
    """Applies rolls to stored structures and records roll history."""

    def __init__(self, treasury: TreasuryStore):
        """Initialize roll executor.

        Args:
            treasury: Treasury store
        """
        self.treasury = treasury

    async def execute(self, user_id: str, roll: RollPosition) -> tuple[Structure, RollRecord]:
        """Roll legs of an active structure in place.

        Args:
            user_id: Structure owner
            roll: Roll to apply

        Returns:
            (updated structure, roll record)

        Raises:
            NotFoundError: If the structure does not exist
            ValidationError: If the structure is not active or the roll is malformed
        """
        if not roll.original_legs:
            raise ValidationError("Roll must name at least one leg")

        structure = await self.treasury.get_structure(user_id, roll.structure_id)
        if structure is None:
            raise NotFoundError(f"Structure {roll.structure_id} not found")
        if structure.status != StructureStatus.ACTIVE.value:
            raise ValidationError(f"Only active structures can be rolled (status {structure.status})")

        legs = parse_legs(structure.legs)
        rolled = apply_roll(legs, roll)
        profit = realized_profit(legs, roll)

        structure.legs = dump_legs(rolled)
        structure.net_premium = net_premium(rolled)
        structure.expiration = structure_expiration(rolled)
        structure = await self.treasury.update_structure(structure)

        record = RollRecord(
            user_id=user_id,
            structure_id=structure.id,
            original_legs=dump_legs(list(roll.original_legs)),
            new_legs=dump_legs(list(roll.new_legs)),
            roll_cost=roll.roll_cost,
            realized_profit=profit,
            reason=roll.reason,
            notes=roll.notes,
            status=RollStatus.EXECUTED.value,
        )
        record = await self.treasury.insert_roll(record)

        logger.info(
            f"Rolled {len(roll.original_legs)} legs of structure {structure.id} "
            f"(roll #{record.id}, realized {profit})"
        )
        return structure, record
