"""Pytest configuration and fixtures."""

import os

# Use SQLite for tests; must be set before the package reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import structure_treasury.models  # noqa: F401
from structure_treasury.core.database import Base, get_db
from structure_treasury.main import app
from structure_treasury.models.cash_flow_entry import CashFlowEntry, EntryType
from structure_treasury.schemas.leg import CallLeg, LegSide, StockLeg
from structure_treasury.services.structure_service import StructureService
from structure_treasury.stores.sqlalchemy_store import SqlAlchemyLedgerStore, SqlAlchemyTreasuryStore

# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

USER_ID = "user-1"


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh in-memory database and session for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def ledger_store(db_session: AsyncSession) -> SqlAlchemyLedgerStore:
    return SqlAlchemyLedgerStore(db_session)


@pytest.fixture
def treasury_store(db_session: AsyncSession) -> SqlAlchemyTreasuryStore:
    return SqlAlchemyTreasuryStore(db_session)


@pytest.fixture
def structure_service(ledger_store, treasury_store) -> StructureService:
    return StructureService(ledger_store, treasury_store)


@pytest.fixture
def deposit(ledger_store):
    """Seed the ledger with a deposit, returning the posted entry."""

    async def _deposit(amount: str, user_id: str = USER_ID) -> CashFlowEntry:
        last = await ledger_store.last_entry(user_id)
        balance = (Decimal(last.balance) if last else Decimal("0")) + Decimal(amount)
        entry = CashFlowEntry(
            user_id=user_id,
            date=date(2026, 1, 2),
            type=EntryType.DEPOSIT.value,
            description="Initial deposit",
            amount=Decimal(amount),
            balance=balance,
        )
        return await ledger_store.insert_entry(entry)

    return _deposit


@pytest.fixture
def covered_call_legs():
    """Short call strike 30 x100 @0.50 over long stock 100 @28."""
    return [
        CallLeg(
            id="short-call",
            side=LegSide.SHORT,
            symbol="ABCDJ30",
            quantity=100,
            strike=Decimal("30"),
            premium=Decimal("0.50"),
            expiration=date(2026, 10, 16),
        ),
        StockLeg(
            id="long-stock",
            side=LegSide.LONG,
            symbol="ABCD",
            quantity=100,
            entry_price=Decimal("28"),
        ),
    ]


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": USER_ID},
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
