"""API routes for rolls and roll history."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from structure_treasury.api.deps import get_structure_service, get_user_id
from structure_treasury.schemas.cash_flow import CashFlowEntryResponse
from structure_treasury.schemas.roll import (
    RollExecutionResponse,
    RollList,
    RollPosition,
    RollResponse,
)
from structure_treasury.services.structure_service import StructureService

router = APIRouter(prefix="/rolls", tags=["rolls"])


@router.get("", response_model=RollList)
async def list_rolls(
    structure_id: Optional[str] = Query(None, description="Filter by structure"),
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Roll history, oldest first."""
    rolls = await service.list_rolls(user_id, structure_id)
    return RollList(
        rolls=[RollResponse.model_validate(r) for r in rolls],
        total=len(rolls),
    )


@router.post("", response_model=RollExecutionResponse, status_code=201)
async def execute_roll(
    roll: RollPosition,
    post_result: bool = Query(False, description="Post the roll cost and realized result to the ledger"),
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Roll legs of an active structure.

    The roll itself never touches the ledger. With ``post_result`` the
    roll's cost and realized result are posted afterwards as ROLL_COST and
    PROFIT entries.

    Args:
        roll: Original and new legs, matched by leg id
        post_result: Post the roll result to the ledger
        user_id: Authenticated user
        service: Structure service

    Returns:
        Roll record, updated snapshot and any posted entries
    """
    result = await service.roll_structure(roll, user_id)
    entries = []
    snapshot = result.snapshot
    if post_result:
        entries = await service.poster.post_roll_result(user_id, result.roll)
        snapshot = await service.compute_treasury_snapshot(user_id)

    return RollExecutionResponse(
        structure_id=result.structure.id,
        roll=RollResponse.model_validate(result.roll),
        snapshot=snapshot,
        entries=[CashFlowEntryResponse.model_validate(e) for e in entries],
    )


@router.delete("/{roll_id}", status_code=204)
async def delete_roll(
    roll_id: int,
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Delete a roll history record."""
    await service.delete_roll(roll_id, user_id)
    return Response(status_code=204)
