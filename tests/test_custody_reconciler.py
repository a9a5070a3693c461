"""Tests for custody reconciliation."""

from datetime import date
from decimal import Decimal

import pytest

from structure_treasury.models.custody_asset import CustodyAsset
from structure_treasury.models.structure import Structure
from structure_treasury.schemas.leg import CallLeg, FutureLeg, LegSide, StockLeg
from structure_treasury.services.custody_reconciler import CustodyReconciler, weighted_average

USER_ID = "user-1"


def stock(side, quantity, price, symbol="ABCD"):
    return StockLeg(side=side, symbol=symbol, quantity=quantity, entry_price=Decimal(price))


@pytest.fixture
def reconciler(treasury_store):
    return CustodyReconciler(treasury_store, stock_guarantee_percent=Decimal("60"))


@pytest.fixture
async def structure(treasury_store):
    return await treasury_store.insert_structure(Structure(user_id=USER_ID, name="Holder", legs=[]))


def test_weighted_average():
    """(q0*p0 + q1*p1) / (q0 + q1)."""
    assert weighted_average(100, Decimal("28"), 100, Decimal("30")) == Decimal("29")
    assert weighted_average(0, Decimal("0"), 50, Decimal("12.5")) == Decimal("12.5")


@pytest.mark.asyncio
async def test_long_stock_creates_pledged_asset(reconciler, treasury_store):
    await reconciler.apply_leg(USER_ID, stock(LegSide.LONG, 100, "28"))

    asset = await treasury_store.get_asset_by_symbol(USER_ID, "ABCD")
    assert asset.quantity == 100
    assert asset.average_price == Decimal("28")
    assert asset.kind == "STOCK"
    assert asset.guarantee_percent == Decimal("60")
    assert asset.used_as_guarantee is True


@pytest.mark.asyncio
async def test_buying_into_holding_updates_weighted_average(reconciler, treasury_store):
    await reconciler.apply_leg(USER_ID, stock(LegSide.LONG, 100, "28"))
    await reconciler.apply_leg(USER_ID, stock(LegSide.LONG, 300, "32"))

    asset = await treasury_store.get_asset_by_symbol(USER_ID, "ABCD")
    assert asset.quantity == 400
    assert asset.average_price == Decimal("31")


@pytest.mark.asyncio
async def test_selling_keeps_average_and_floors_quantity(reconciler, treasury_store):
    await reconciler.apply_leg(USER_ID, stock(LegSide.LONG, 100, "28"))

    await reconciler.apply_leg(USER_ID, stock(LegSide.SHORT, 40, "35"))
    asset = await treasury_store.get_asset_by_symbol(USER_ID, "ABCD")
    assert asset.quantity == 60
    assert asset.average_price == Decimal("28")

    await reconciler.apply_leg(USER_ID, stock(LegSide.SHORT, 500, "35"))
    asset = await treasury_store.get_asset_by_symbol(USER_ID, "ABCD")
    assert asset.quantity == 0
    assert asset.average_price == Decimal("28")


@pytest.mark.asyncio
async def test_short_stock_without_holding_creates_nothing(reconciler, treasury_store):
    result = await reconciler.apply_leg(USER_ID, stock(LegSide.SHORT, 10, "35"))

    assert result is None
    assert await treasury_store.list_assets(USER_ID) == []


@pytest.mark.asyncio
async def test_long_option_and_future_use_synthetic_symbols(reconciler, treasury_store, structure):
    legs = [
        CallLeg(side=LegSide.LONG, symbol="ABCDJ30", quantity=100, strike=Decimal("30"),
                premium=Decimal("0.50"), expiration=date(2026, 10, 16)),
        FutureLeg(side=LegSide.LONG, symbol="WINZ26", quantity=2, spot_price=Decimal("120000"),
                  expiration=date(2026, 12, 16)),
        CallLeg(side=LegSide.SHORT, symbol="ABCDJ32", quantity=100, strike=Decimal("32"),
                premium=Decimal("0.20"), expiration=date(2026, 10, 16)),
    ]

    touched = await reconciler.apply_activation(USER_ID, structure, legs)

    assert sorted(a.symbol for a in touched) == ["ABCDJ30_OPT", "WINZ26_FUT"]
    option = await treasury_store.get_asset_by_symbol(USER_ID, "ABCDJ30_OPT")
    assert option.kind == "OPTION"
    assert option.average_price == Decimal("0.50")
    assert option.used_as_guarantee is False
    future = await treasury_store.get_asset_by_symbol(USER_ID, "WINZ26_FUT")
    assert future.average_price == Decimal("120000")


@pytest.mark.asyncio
async def test_reverse_activation_decrements_and_removes(reconciler, treasury_store, structure):
    await treasury_store.insert_asset(
        CustodyAsset(
            user_id=USER_ID,
            symbol="ABCD",
            kind="STOCK",
            quantity=200,
            average_price=Decimal("25"),
            market_price=Decimal("25"),
        )
    )
    legs = [
        stock(LegSide.LONG, 100, "28"),
        stock(LegSide.LONG, 10, "50", symbol="WXYZ"),
    ]
    await reconciler.apply_activation(USER_ID, structure, legs)

    changed = await reconciler.reverse_activation(USER_ID, structure)

    assert changed == 2
    remaining = await treasury_store.list_assets(USER_ID)
    assert [(a.symbol, a.quantity) for a in remaining] == [("ABCD", 200)]
    assert structure.custody_movements == []


@pytest.mark.asyncio
async def test_activation_records_movements_once(reconciler, treasury_store, structure):
    """Applying the same legs twice changes custody only once."""
    legs = [stock(LegSide.LONG, 100, "28"), stock(LegSide.SHORT, 10, "30", symbol="NONE")]

    await reconciler.apply_activation(USER_ID, structure, legs)
    touched = await reconciler.apply_activation(USER_ID, structure, legs)

    assert touched == []
    asset = await treasury_store.get_asset_by_symbol(USER_ID, "ABCD")
    assert asset.quantity == 100
    assert structure.custody_movements == [
        {"leg_id": legs[0].id, "symbol": "ABCD", "side": "LONG", "quantity": 100}
    ]


@pytest.mark.asyncio
async def test_reverse_uses_recorded_symbol(reconciler, treasury_store, structure):
    """Reversal follows what was applied, not the structure's current legs."""
    call = CallLeg(id="long-call", side=LegSide.LONG, symbol="ABCDJ30", quantity=100,
                   strike=Decimal("30"), premium=Decimal("0.50"), expiration=date(2026, 10, 16))
    await reconciler.apply_activation(USER_ID, structure, [call])

    structure.legs = [{"id": "long-call", "symbol": "ABCDK32"}]
    changed = await reconciler.reverse_activation(USER_ID, structure)

    assert changed == 1
    assert await treasury_store.get_asset_by_symbol(USER_ID, "ABCDJ30_OPT") is None


@pytest.mark.asyncio
async def test_leg_symbols_match_manual_assets_case_insensitively(reconciler, treasury_store, structure):
    await treasury_store.insert_asset(
        CustodyAsset(
            user_id=USER_ID,
            symbol="WXYZ",
            kind="STOCK",
            quantity=50,
            average_price=Decimal("10"),
            market_price=Decimal("10"),
        )
    )

    await reconciler.apply_activation(USER_ID, structure, [stock(LegSide.LONG, 50, "20", symbol=" wxyz ")])

    assets = await treasury_store.list_assets(USER_ID)
    assert [(a.symbol, a.quantity, a.average_price) for a in assets] == [("WXYZ", 100, Decimal("15"))]
