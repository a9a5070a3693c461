"""Custody Reconciler - keeps custody holdings in step with activated legs.

Rules applied per leg on activation:

- STOCK LONG: buy into the symbol's asset (weighted-average price), creating
  it with the default stock guarantee when missing.
- STOCK SHORT: sell out of an existing asset, floor quantity at zero, keep the
  average price. No asset is created.
- CALL/PUT LONG: buy into the synthetic ``<symbol>_OPT`` asset over premium.
- FUTURE LONG: buy into the synthetic ``<symbol>_FUT`` asset over spot price.

Short options and futures never touch custody.

Every change made for a structure is recorded on the structure as a custody
movement keyed by leg id, written in the same commit as the asset. Legs with
a movement are skipped on a repeated activation, and deletion reverses the
recorded movements rather than the structure's current (possibly rolled) legs.
"""

import logging
from decimal import Decimal
from typing import Any

from structure_treasury.config import get_settings
from structure_treasury.models.custody_asset import AssetKind, CustodyAsset
from structure_treasury.models.structure import Structure
from structure_treasury.schemas.leg import Leg, LegKind, LegSide
from structure_treasury.stores.base import TreasuryStore

logger = logging.getLogger(__name__)

OPTION_SUFFIX = "_OPT"
FUTURE_SUFFIX = "_FUT"


def custody_symbol(symbol: str) -> str:
    """Canonical custody key for a ticker."""
    return symbol.strip().upper()


def weighted_average(
    quantity: int, average_price: Decimal, buy_quantity: int, buy_price: Decimal
) -> Decimal:
    """Weighted-average cost after buying into a holding.

    Args:
        quantity: Quantity held before the buy
        average_price: Average price before the buy
        buy_quantity: Quantity bought
        buy_price: Price paid

    Returns:
        New average price
    """
    total_quantity = quantity + buy_quantity
    if total_quantity <= 0:
        return average_price
    total_value = quantity * average_price + buy_quantity * buy_price
    return total_value / total_quantity


def custody_target(leg: Leg) -> tuple[str, AssetKind, Decimal] | None:
    """Custody symbol, asset kind and trade price a leg maps to.

    Returns:
        (symbol, kind, price) or None when the leg has no custody effect
    """
    symbol = custody_symbol(leg.symbol)
    if leg.kind == LegKind.STOCK:
        return symbol, AssetKind.STOCK, leg.entry_price
    if not leg.is_long:
        return None
    if leg.kind == LegKind.FUTURE:
        return f"{symbol}{FUTURE_SUFFIX}", AssetKind.FUTURE, leg.spot_price
    return f"{symbol}{OPTION_SUFFIX}", AssetKind.OPTION, leg.premium


class CustodyReconciler:
    """Creates, updates and removes custody assets for structure legs."""

    def __init__(self, treasury: TreasuryStore, stock_guarantee_percent: Decimal | None = None):
        """Initialize reconciler.

        Args:
            treasury: Treasury store
            stock_guarantee_percent: Guarantee % for newly created stock assets
        """
        self.treasury = treasury
        self.stock_guarantee_percent = (
            stock_guarantee_percent
            if stock_guarantee_percent is not None
            else get_settings().default_stock_guarantee_percent
        )

    async def apply_activation(
        self, user_id: str, structure: Structure, legs: list[Leg]
    ) -> list[CustodyAsset]:
        """Apply every leg of an activated structure to custody, once per leg.

        Args:
            user_id: Custody owner
            structure: Structure being activated; receives the movements
            legs: Structure legs

        Returns:
            Assets created or updated by this call
        """
        applied = {m["leg_id"] for m in structure.custody_movements or []}
        touched = []
        for leg in legs:
            if leg.id in applied:
                logger.info(f"Custody for leg {leg.id} of structure {structure.id} already applied")
                continue
            asset = await self.apply_leg(user_id, leg, structure)
            if asset is not None:
                touched.append(asset)
        return touched

    async def apply_leg(
        self, user_id: str, leg: Leg, structure: Structure | None = None
    ) -> CustodyAsset | None:
        """Apply one leg to custody.

        Args:
            user_id: Custody owner
            leg: Leg being activated
            structure: Owning structure; when given the change is recorded on it

        Returns:
            The asset created or updated, or None if custody is unaffected
        """
        target = custody_target(leg)
        if target is None:
            return None

        symbol, kind, price = target
        asset = await self.treasury.get_asset_by_symbol(user_id, symbol)

        if leg.is_long:
            if asset is None:
                asset = self._new_asset(user_id, symbol, kind, leg, price)
                logger.info(f"Creating custody asset {symbol} qty={leg.quantity} @ {price} for user {user_id}")
            else:
                self._buy(asset, leg.quantity, price)
        else:
            # Short stock: sell out of an existing holding only
            if asset is None:
                logger.debug(f"No custody asset for short {symbol}, nothing to sell")
                return None
            self._sell(asset, leg.quantity, price)

        if structure is None:
            if asset.id is None:
                return await self.treasury.insert_asset(asset)
            return await self.treasury.update_asset(asset)

        structure.custody_movements = [
            *(structure.custody_movements or []),
            movement(leg, symbol),
        ]
        return await self.treasury.save_custody(structure, asset)

    async def reverse_activation(self, user_id: str, structure: Structure) -> int:
        """Undo the custody effect of a structure's long legs.

        Quantities are decremented by each recorded long movement; assets that
        reach zero are removed. Average prices are left untouched. Each
        movement is dropped from the structure as it is reversed.

        Args:
            user_id: Custody owner
            structure: Structure being deleted

        Returns:
            Number of assets updated or removed
        """
        changed = 0
        remaining_movements = list(structure.custody_movements or [])

        for recorded in list(remaining_movements):
            remaining_movements.remove(recorded)
            if recorded["side"] != LegSide.LONG.value:
                continue

            symbol = recorded["symbol"]
            asset = await self.treasury.get_asset_by_symbol(user_id, symbol)
            if asset is None:
                logger.warning(f"Custody asset {symbol} missing while reversing leg {recorded['leg_id']}")
                continue

            remaining = asset.quantity - recorded["quantity"]
            structure.custody_movements = list(remaining_movements)
            if remaining <= 0:
                await self.treasury.save_custody(structure, asset, remove_asset=True)
                logger.info(f"Removed custody asset {symbol} for user {user_id}")
            else:
                asset.quantity = remaining
                await self.treasury.save_custody(structure, asset)
                logger.info(f"Reduced custody asset {symbol} to {remaining} for user {user_id}")
            changed += 1

        return changed

    def _new_asset(
        self, user_id: str, symbol: str, kind: AssetKind, leg: Leg, price: Decimal
    ) -> CustodyAsset:
        is_stock = kind == AssetKind.STOCK
        return CustodyAsset(
            user_id=user_id,
            symbol=symbol,
            name=f"{kind.value.title()} {leg.symbol}",
            kind=kind.value,
            quantity=leg.quantity,
            average_price=price,
            market_price=price,
            guarantee_percent=self.stock_guarantee_percent if is_stock else Decimal("0"),
            used_as_guarantee=is_stock,
        )

    def _buy(self, asset: CustodyAsset, quantity: int, price: Decimal) -> None:
        asset.average_price = weighted_average(
            asset.quantity, Decimal(asset.average_price), quantity, price
        )
        asset.quantity += quantity
        asset.market_price = price
        logger.info(f"Buying {quantity} {asset.symbol} @ {price}, avg now {asset.average_price}")

    def _sell(self, asset: CustodyAsset, quantity: int, price: Decimal) -> None:
        asset.quantity = max(0, asset.quantity - quantity)
        asset.market_price = price
        logger.info(f"Selling {quantity} {asset.symbol} @ {price}, qty now {asset.quantity}")


def movement(leg: Leg, symbol: str) -> dict[str, Any]:
    """Custody movement recorded on a structure for one leg."""
    side = leg.side.value if isinstance(leg.side, LegSide) else leg.side
    return {"leg_id": leg.id, "symbol": symbol, "side": side, "quantity": leg.quantity}
