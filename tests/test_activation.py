"""Tests for treasury snapshots and activation gates."""

from datetime import date
from decimal import Decimal

import pytest

from structure_treasury.core.exceptions import ValidationError
from structure_treasury.models.custody_asset import CustodyAsset
from structure_treasury.models.structure import Structure, StructureStatus
from structure_treasury.schemas.leg import CallLeg, LegSide, StockLeg, dump_legs
from structure_treasury.schemas.treasury import Gate, TreasurySnapshot
from structure_treasury.services.activation_validator import ActivationValidator
from structure_treasury.services.guarantee_calculator import GuaranteeCalculator
from structure_treasury.services.treasury_snapshot_service import TreasurySnapshotService

USER_ID = "user-1"


def make_validator() -> ActivationValidator:
    return ActivationValidator(
        GuaranteeCalculator(Decimal("15"), Decimal("100")),
        assembly_cost_per_leg=Decimal("2.50"),
        cash_tolerance=Decimal("1000"),
        guarantee_tolerance=Decimal("5000"),
    )


def make_snapshot(free_cash: str, guarantee_available: str) -> TreasurySnapshot:
    available = Decimal(guarantee_available)
    return TreasurySnapshot(
        ledger_balance=Decimal(free_cash),
        free_cash=max(Decimal("0"), Decimal(free_cash)),
        custody_value=Decimal("0"),
        custody_guarantee=Decimal("0"),
        guarantee_used=Decimal("0"),
        guarantee_available_raw=available,
        guarantee_available=max(Decimal("0"), available),
        active_structures=0,
    )


def test_covered_call_passes_cash_gate(covered_call_legs):
    """2000 free cash - 2755 = -755 stays within the -1000 tolerance."""
    check = make_validator().validate("Covered call", covered_call_legs, make_snapshot("2000", "2000"))

    assert check.cash_impact == Decimal("-2750")
    assert check.assembly_cost == Decimal("5.00")
    assert check.new_balance == Decimal("-755")
    assert check.required_guarantee == Decimal("450")
    assert check.guarantee_deficit == Decimal("0")
    assert check.passed


def test_cash_gate_trips_below_tolerance(covered_call_legs):
    """Free cash of 1000 leaves -1755, beyond the tolerance."""
    check = make_validator().validate("Covered call", covered_call_legs, make_snapshot("1000", "1000"))

    assert not check.passed
    assert [w.gate for w in check.warnings] == [Gate.CASH]
    warning = check.warnings[0]
    assert warning.resulting == Decimal("-1755")
    assert "Free cash too low" in warning.message


def test_cash_gate_boundary_is_inclusive(covered_call_legs):
    """A resulting balance of exactly -1000 still passes."""
    check = make_validator().validate("Covered call", covered_call_legs, make_snapshot("1755", "0"))
    assert check.new_balance == Decimal("-1000")
    assert check.passed


def test_guarantee_gate_uses_tolerance():
    """A short call requiring 9000 trips only when available < 4000."""
    legs = [
        CallLeg(
            side=LegSide.SHORT,
            symbol="ABCDJ60",
            quantity=1000,
            strike=Decimal("60"),
            premium=Decimal("1"),
            expiration=date(2026, 10, 16),
        )
    ]
    validator = make_validator()

    ok = validator.validate("Naked call", legs, make_snapshot("10000", "4000"))
    assert ok.required_guarantee == Decimal("9000")
    assert ok.guarantee_deficit == Decimal("5000")
    assert ok.passed

    tripped = validator.validate("Naked call", legs, make_snapshot("10000", "3999"))
    assert [w.gate for w in tripped.warnings] == [Gate.GUARANTEE]
    assert tripped.warnings[0].resulting == Decimal("5001")


def test_guarantee_gate_uses_unfloored_available():
    """Over-committed guarantee counts against the structure."""
    legs = [
        CallLeg(
            side=LegSide.SHORT,
            symbol="ABCDJ30",
            quantity=100,
            strike=Decimal("30"),
            premium=Decimal("0.50"),
            expiration=date(2026, 10, 16),
        )
    ]
    check = make_validator().validate("Call", legs, make_snapshot("10000", "-4600"))
    assert [w.gate for w in check.warnings] == [Gate.GUARANTEE]


@pytest.mark.parametrize("name", ["", "   ", None])
def test_empty_name_is_rejected(name, covered_call_legs):
    with pytest.raises(ValidationError):
        make_validator().validate(name, covered_call_legs, make_snapshot("0", "0"))


def test_no_legs_is_rejected():
    with pytest.raises(ValidationError):
        make_validator().validate("Empty", [], make_snapshot("0", "0"))


@pytest.mark.asyncio
async def test_snapshot_of_empty_user(ledger_store, treasury_store):
    """No entries, no custody, no structures: everything is zero."""
    snapshot = await TreasurySnapshotService(ledger_store, treasury_store).compute(USER_ID)

    assert snapshot.free_cash == 0
    assert snapshot.guarantee_available == 0
    assert snapshot.active_structures == 0


@pytest.mark.asyncio
async def test_snapshot_combines_ledger_custody_and_structures(
    ledger_store, treasury_store, deposit, covered_call_legs
):
    """available = pledged custody + free cash - active structure margin."""
    await deposit("3000")
    await treasury_store.insert_asset(
        CustodyAsset(
            user_id=USER_ID,
            symbol="WXYZ",
            kind="STOCK",
            quantity=100,
            average_price=Decimal("20"),
            market_price=Decimal("25"),
            guarantee_percent=Decimal("60"),
            used_as_guarantee=True,
        )
    )
    await treasury_store.insert_structure(
        Structure(
            user_id=USER_ID,
            name="Covered call",
            legs=dump_legs(covered_call_legs),
            status=StructureStatus.ACTIVE.value,
        )
    )
    await treasury_store.insert_structure(
        Structure(
            user_id=USER_ID,
            name="Still a draft",
            legs=dump_legs(covered_call_legs),
            status=StructureStatus.DRAFTING.value,
        )
    )

    snapshot = await TreasurySnapshotService(
        ledger_store, treasury_store, GuaranteeCalculator(Decimal("15"), Decimal("100"))
    ).compute(USER_ID)

    assert snapshot.free_cash == Decimal("3000")
    assert snapshot.custody_value == Decimal("2500")
    assert snapshot.custody_guarantee == Decimal("1500")
    assert snapshot.guarantee_used == Decimal("450")
    assert snapshot.guarantee_available == Decimal("4050")
    assert snapshot.active_structures == 1


@pytest.mark.asyncio
async def test_snapshot_floors_negative_balance(ledger_store, treasury_store, deposit):
    """A negative ledger balance counts as zero free cash."""
    await deposit("-250")
    snapshot = await TreasurySnapshotService(ledger_store, treasury_store).compute(USER_ID)

    assert snapshot.ledger_balance == Decimal("-250")
    assert snapshot.free_cash == 0
