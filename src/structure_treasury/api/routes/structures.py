"""API routes for structures."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from structure_treasury.api.deps import get_structure_service, get_user_id
from structure_treasury.models.structure import StructureStatus
from structure_treasury.schemas.cash_flow import CashFlowEntryResponse
from structure_treasury.schemas.operation import OperationCreate, OperationList, OperationResponse
from structure_treasury.schemas.structure import (
    ActivationResponse,
    StructureCloseResponse,
    StructureDraft,
    StructureList,
    StructureResponse,
)
from structure_treasury.schemas.treasury import ActivationOutcome, TreasurySnapshot
from structure_treasury.services.structure_service import StructureService

router = APIRouter(prefix="/structures", tags=["structures"])


@router.get("", response_model=StructureList)
async def list_structures(
    status: Optional[StructureStatus] = Query(None, description="Filter by status"),
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """List the user's structures.

    Args:
        status: Optional status filter
        user_id: Authenticated user
        service: Structure service

    Returns:
        List of structures
    """
    structures = await service.list_structures(user_id, status)
    return StructureList(
        structures=[StructureResponse.model_validate(s) for s in structures],
        total=len(structures),
    )


@router.get("/{structure_id}", response_model=StructureResponse)
async def get_structure(
    structure_id: str,
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Get one structure."""
    structure = await service.get_structure(user_id, structure_id)
    return StructureResponse.model_validate(structure)


@router.post("", response_model=StructureResponse, status_code=201)
async def save_draft(
    draft: StructureDraft,
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Create or update a draft structure."""
    structure = await service.save_draft(draft, user_id)
    return StructureResponse.model_validate(structure)


@router.post("/activate", response_model=ActivationResponse)
async def activate_structure(
    draft: StructureDraft,
    force: bool = Query(False, description="Activate despite financial warnings"),
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Activate a structure.

    When a cash or guarantee gate trips and ``force`` is not set, responds
    with 409 and the warnings so the user can confirm.

    Args:
        draft: Structure to activate
        force: Proceed despite warnings
        user_id: Authenticated user
        service: Structure service

    Returns:
        Activation outcome with the updated snapshot
    """
    result = await service.activate_structure(draft, user_id, force=force)

    if result.outcome == ActivationOutcome.NEEDS_CONFIRMATION:
        raise HTTPException(
            status_code=409,
            detail={
                "outcome": result.outcome.value,
                "check": result.check.model_dump(mode="json"),
                "snapshot": result.snapshot.model_dump(mode="json"),
            },
        )

    return ActivationResponse(
        outcome=result.outcome,
        structure=StructureResponse.model_validate(result.structure) if result.structure else None,
        check=result.check,
        snapshot=result.snapshot,
        entries=[CashFlowEntryResponse.model_validate(e) for e in result.entries],
    )


@router.post("/{structure_id}/close", response_model=StructureCloseResponse)
async def close_structure(
    structure_id: str,
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Close an active structure."""
    structure, snapshot = await service.close_structure(structure_id, user_id)
    return StructureCloseResponse(
        structure=StructureResponse.model_validate(structure),
        snapshot=snapshot,
    )


@router.delete("/{structure_id}", response_model=TreasurySnapshot)
async def delete_structure(
    structure_id: str,
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Delete a structure with its ledger entries and custody effects."""
    return await service.delete_structure(structure_id, user_id)


@router.get("/{structure_id}/operations", response_model=OperationList)
async def list_operations(
    structure_id: str,
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """List a structure's execution records."""
    operations = await service.list_operations(structure_id, user_id)
    return OperationList(
        operations=[OperationResponse.model_validate(o) for o in operations],
        total=len(operations),
    )


@router.put("/{structure_id}/operations", response_model=OperationList)
async def upload_operations(
    structure_id: str,
    operations: list[OperationCreate],
    user_id: str = Depends(get_user_id),
    service: StructureService = Depends(get_structure_service),
):
    """Replace a structure's execution records.

    Args:
        structure_id: Owning structure
        operations: New execution records
        user_id: Authenticated user
        service: Structure service

    Returns:
        Stored execution records
    """
    stored = await service.upload_operations(structure_id, operations, user_id)
    return OperationList(
        operations=[OperationResponse.model_validate(o) for o in stored],
        total=len(stored),
    )
