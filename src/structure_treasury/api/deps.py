"""Shared FastAPI dependencies."""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from structure_treasury.config import get_settings
from structure_treasury.core.database import get_db
from structure_treasury.services.cash_flow_service import CashFlowService
from structure_treasury.services.custody_service import CustodyService
from structure_treasury.services.structure_service import StructureService
from structure_treasury.stores.sqlalchemy_store import SqlAlchemyLedgerStore, SqlAlchemyTreasuryStore


def get_user_id(request: Request) -> str:
    """Authenticated user id, supplied by the auth layer in a request header.

    Raises:
        HTTPException: If the header is missing
    """
    header = get_settings().user_header
    user_id = request.headers.get(header)
    if not user_id:
        raise HTTPException(status_code=401, detail=f"Missing {header} header")
    return user_id


def get_structure_service(session: AsyncSession = Depends(get_db)) -> StructureService:
    """Structure service bound to the request session."""
    return StructureService(SqlAlchemyLedgerStore(session), SqlAlchemyTreasuryStore(session))


def get_cash_flow_service(session: AsyncSession = Depends(get_db)) -> CashFlowService:
    """Cash flow service bound to the request session."""
    return CashFlowService(SqlAlchemyLedgerStore(session), SqlAlchemyTreasuryStore(session))


def get_custody_service(session: AsyncSession = Depends(get_db)) -> CustodyService:
    """Custody service bound to the request session."""
    return CustodyService(SqlAlchemyTreasuryStore(session))
