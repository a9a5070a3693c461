"""API routes for treasury snapshots and activation checks."""

from fastapi import APIRouter, Depends

from structure_treasury.api.deps import get_structure_service, get_user_id
from structure_treasury.schemas.structure import StructureDraft
from structure_treasury.schemas.treasury import ActivationCheck, TreasurySnapshot
from structure_treasury.services.structure_service import StructureService

router = APIRouter(prefix="/treasury", tags=["treasury"])


@router.get("/snapshot", response_model=TreasurySnapshot)
async def get_snapshot(
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Current free cash, custody and guarantee figures."""
    return await service.compute_treasury_snapshot(user_id)


@router.post("/validate", response_model=ActivationCheck)
async def validate_activation(
    draft: StructureDraft,
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Evaluate the activation gates for a draft without activating it.

    Args:
        draft: Structure draft
        user_id: Authenticated user
        service: Structure service

    Returns:
        Gate results and warnings
    """
    snapshot = await service.compute_treasury_snapshot(user_id)
    return service.validate_activation(draft, snapshot)
