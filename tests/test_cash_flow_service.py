"""Tests for manual ledger entries, orphan detection and custody editing."""

from decimal import Decimal

import pytest

from structure_treasury.core.exceptions import NotFoundError, ValidationError
from structure_treasury.models.cash_flow_entry import EntryType
from structure_treasury.schemas.custody import AssetCreate, AssetUpdate
from structure_treasury.schemas.structure import StructureDraft
from structure_treasury.services.cash_flow_service import CashFlowService, normalize_amount
from structure_treasury.services.custody_service import CustodyService
from structure_treasury.services.ledger_poster import LedgerPoster

USER_ID = "user-1"


@pytest.fixture
def cash_flow_service(ledger_store, treasury_store):
    return CashFlowService(ledger_store, treasury_store)


@pytest.fixture
def custody_service(treasury_store):
    return CustodyService(treasury_store)


def test_normalize_amount():
    assert normalize_amount(EntryType.WITHDRAWAL, Decimal("100")) == Decimal("-100")
    assert normalize_amount(EntryType.DEPOSIT, Decimal("-100")) == Decimal("100")
    assert normalize_amount(EntryType.TAX, Decimal("-3")) == Decimal("-3")


@pytest.mark.asyncio
async def test_manual_entries_thread_balance(cash_flow_service):
    await cash_flow_service.add_manual_entry(USER_ID, EntryType.DEPOSIT, "Wire in", Decimal("1000"))
    withdrawal = await cash_flow_service.add_manual_entry(
        USER_ID, EntryType.WITHDRAWAL, "Wire out", Decimal("300")
    )

    assert withdrawal.amount == Decimal("-300")
    assert withdrawal.balance == Decimal("700")
    assert withdrawal.related_structure_id is None


@pytest.mark.asyncio
@pytest.mark.parametrize("description,amount", [("", "10"), ("Fee", "0")])
async def test_manual_entry_validation(cash_flow_service, description, amount):
    with pytest.raises(ValidationError):
        await cash_flow_service.add_manual_entry(USER_ID, EntryType.BROKERAGE, description, Decimal(amount))


@pytest.mark.asyncio
async def test_orphaned_entries_can_be_deleted(cash_flow_service, ledger_store, covered_call_legs):
    """Entries of a structure that no longer exists are flagged and removable."""
    await cash_flow_service.add_manual_entry(USER_ID, EntryType.DEPOSIT, "Wire in", Decimal("2000"))
    await LedgerPoster(ledger_store).post_activation(
        USER_ID, "ghost", "Lost structure", covered_call_legs, Decimal("5")
    )
    await cash_flow_service.add_manual_entry(USER_ID, EntryType.DEPOSIT, "Wire in", Decimal("100"))

    orphans = await cash_flow_service.find_orphaned_entries(USER_ID)
    assert len(orphans) == 3
    assert {e.related_structure_id for e in orphans} == {"ghost"}

    for entry in orphans:
        await cash_flow_service.delete_manual_entry(USER_ID, entry.id)

    entries = await cash_flow_service.list_entries(USER_ID)
    assert [Decimal(e.balance) for e in entries] == [Decimal("2000"), Decimal("2100")]
    assert await cash_flow_service.find_orphaned_entries(USER_ID) == []


@pytest.mark.asyncio
async def test_structure_entries_cannot_be_deleted_directly(
    cash_flow_service, structure_service, deposit, covered_call_legs
):
    await deposit("2000")
    result = await structure_service.activate_structure(
        StructureDraft(name="Covered call", legs=covered_call_legs), USER_ID
    )

    assert await cash_flow_service.find_orphaned_entries(USER_ID) == []
    with pytest.raises(ValidationError):
        await cash_flow_service.delete_manual_entry(USER_ID, result.entries[0].id)


@pytest.mark.asyncio
async def test_delete_missing_entry(cash_flow_service):
    with pytest.raises(NotFoundError):
        await cash_flow_service.delete_manual_entry(USER_ID, 404)


@pytest.mark.asyncio
async def test_custody_asset_lifecycle(custody_service):
    asset = await custody_service.add_asset(
        USER_ID,
        AssetCreate(symbol="wxyz", quantity=100, average_price=Decimal("20"), guarantee_percent=Decimal("60")),
    )
    assert asset.symbol == "WXYZ"
    assert asset.market_price == Decimal("20")
    assert asset.used_as_guarantee is False

    with pytest.raises(ValidationError):
        await custody_service.add_asset(USER_ID, AssetCreate(symbol="WXYZ", quantity=1, average_price=Decimal("1")))

    updated = await custody_service.update_asset(
        USER_ID, asset.id, AssetUpdate(market_price=Decimal("25"), used_as_guarantee=True)
    )
    assert updated.market_price == Decimal("25")
    assert updated.guarantee_value == Decimal("1500")
    assert updated.average_price == Decimal("20")

    await custody_service.delete_asset(USER_ID, asset.id)
    assert await custody_service.list_assets(USER_ID) == []

    with pytest.raises(NotFoundError):
        await custody_service.get_asset(USER_ID, asset.id)
