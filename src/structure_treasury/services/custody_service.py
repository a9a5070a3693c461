"""Custody Service - manual management of custody assets."""

import logging

from structure_treasury.core.exceptions import NotFoundError, ValidationError
from structure_treasury.models.custody_asset import CustodyAsset
from structure_treasury.schemas.custody import AssetCreate, AssetUpdate
from structure_treasury.services.custody_reconciler import custody_symbol
from structure_treasury.stores.base import TreasuryStore

logger = logging.getLogger(__name__)


class CustodyService:
    """Service for listing and hand-editing custody assets."""

    def __init__(self, treasury: TreasuryStore):
        """Initialize custody service.

        Args:
            treasury: Treasury store
        """
        self.treasury = treasury

    async def list_assets(self, user_id: str) -> list[CustodyAsset]:
        """All custody assets of a user."""
        return await self.treasury.list_assets(user_id)

    async def get_asset(self, user_id: str, asset_id: int) -> CustodyAsset:
        """Get one asset.

        Raises:
            NotFoundError: If the asset does not exist
        """
        asset = await self.treasury.get_asset(user_id, asset_id)
        if asset is None:
            raise NotFoundError(f"Custody asset {asset_id} not found")
        return asset

    async def add_asset(self, user_id: str, data: AssetCreate) -> CustodyAsset:
        """Register an asset held outside any structure.

        Raises:
            ValidationError: If the symbol is already in custody
        """
        symbol = custody_symbol(data.symbol)
        if await self.treasury.get_asset_by_symbol(user_id, symbol):
            raise ValidationError(f"Asset {symbol} is already in custody")

        asset = CustodyAsset(
            user_id=user_id,
            symbol=symbol,
            name=data.name,
            kind=data.kind.value,
            quantity=data.quantity,
            average_price=data.average_price,
            market_price=data.market_price if data.market_price is not None else data.average_price,
            guarantee_percent=data.guarantee_percent,
            used_as_guarantee=data.used_as_guarantee,
        )
        asset = await self.treasury.insert_asset(asset)
        logger.info(f"Added custody asset {symbol} for user {user_id}")
        return asset

    async def update_asset(self, user_id: str, asset_id: int, data: AssetUpdate) -> CustodyAsset:
        """Apply a partial update, e.g. a new market price or guarantee flag.

        Raises:
            NotFoundError: If the asset does not exist
        """
        asset = await self.get_asset(user_id, asset_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(asset, key, value)
        asset = await self.treasury.update_asset(asset)
        logger.info(f"Updated custody asset {asset.symbol}")
        return asset

    async def delete_asset(self, user_id: str, asset_id: int) -> None:
        """Remove an asset from custody.

        Raises:
            NotFoundError: If the asset does not exist
        """
        asset = await self.get_asset(user_id, asset_id)
        await self.treasury.delete_asset(asset)
        logger.info(f"Deleted custody asset {asset.symbol}")
