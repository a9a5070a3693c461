"""API routes for custody assets."""

from fastapi import APIRouter, Depends, Response

from structure_treasury.api.deps import get_custody_service, get_user_id
from structure_treasury.schemas.custody import AssetCreate, AssetList, AssetResponse, AssetUpdate
from structure_treasury.services.custody_service import CustodyService

router = APIRouter(prefix="/custody", tags=["custody"])


@router.get("", response_model=AssetList)
async def list_assets(
    user_id: str = Depends(get_user_id),
    service: CustodyService = Depends(get_custody_service),
):
    """List custody assets."""
    assets = await service.list_assets(user_id)
    return AssetList(
        assets=[AssetResponse.model_validate(a) for a in assets],
        total=len(assets),
    )


@router.post("", response_model=AssetResponse, status_code=201)
async def add_asset(
    request: AssetCreate,
    user_id: str = Depends(get_user_id),
    service: CustodyService = Depends(get_custody_service),
):
    """Register an asset held outside any structure."""
    asset = await service.add_asset(user_id, request)
    return AssetResponse.model_validate(asset)


@router.patch("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: int,
    request: AssetUpdate,
    user_id: str = Depends(get_user_id),
    service: CustodyService = Depends(get_custody_service),
):
    """Update market price, quantity or guarantee settings of an asset."""
    asset = await service.update_asset(user_id, asset_id, request)
    return AssetResponse.model_validate(asset)


@router.delete("/{asset_id}", status_code=204)
async def delete_asset(
    asset_id: int,
    user_id: str = Depends(get_user_id),
    service: CustodyService = Depends(get_custody_service),
):
    """Remove an asset from custody."""
    await service.delete_asset(user_id, asset_id)
    return Response(status_code=204)
