"""API routes for the cash flow ledger."""

from fastapi import APIRouter, Depends, Response

from structure_treasury.api.deps import get_cash_flow_service, get_user_id
from structure_treasury.schemas.cash_flow import (
    CashFlowEntryList,
    CashFlowEntryResponse,
    ManualEntryCreate,
)
from structure_treasury.services.cash_flow_service import CashFlowService

router = APIRouter(prefix="/cash-flow", tags=["cash-flow"])


@router.get("", response_model=CashFlowEntryList)
async def list_entries(
    user_id: str = Depends(get_user_id),
    service: CashFlowService = Depends(get_cash_flow_service),
):
    """List ledger entries in creation order."""
    entries = await service.list_entries(user_id)
    return CashFlowEntryList(
        entries=[CashFlowEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.get("/orphans", response_model=CashFlowEntryList)
async def list_orphans(
    user_id: str = Depends(get_user_id),
    service: CashFlowService = Depends(get_cash_flow_service),
):
    """List entries whose structure no longer exists."""
    entries = await service.find_orphaned_entries(user_id)
    return CashFlowEntryList(
        entries=[CashFlowEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.post("", response_model=CashFlowEntryResponse, status_code=201)
async def add_entry(
    request: ManualEntryCreate,
    user_id: str = Depends(get_user_id),
    service: CashFlowService = Depends(get_cash_flow_service),
):
    """Add a manual entry such as a deposit or withdrawal."""
    entry = await service.add_manual_entry(
        user_id,
        request.type,
        request.description,
        request.amount,
        entry_date=request.entry_date,
    )
    return CashFlowEntryResponse.model_validate(entry)


@router.delete("/{entry_id}", status_code=204)
async def delete_entry(
    entry_id: int,
    user_id: str = Depends(get_user_id),
    service: CashFlowService = Depends(get_cash_flow_service),
):
    """Delete a manual or orphaned entry."""
    await service.delete_manual_entry(user_id, entry_id)
    return Response(status_code=204)
