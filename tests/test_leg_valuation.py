"""Tests for leg valuation and the guarantee calculator."""

from datetime import date
from decimal import Decimal

import pytest

from structure_treasury.models.custody_asset import CustodyAsset
from structure_treasury.schemas.leg import (
    STOCK_EXPIRATION_SENTINEL,
    CallLeg,
    FutureLeg,
    LegSide,
    PutLeg,
    StockLeg,
    dump_legs,
    parse_legs,
)
from structure_treasury.services.guarantee_calculator import GuaranteeCalculator
from structure_treasury.services.leg_valuation import (
    assembly_cost,
    cash_impact,
    margin_required,
    net_premium,
    notional,
    structure_expiration,
    total_cash_impact,
)


def make_call(side=LegSide.SHORT, quantity=100, strike="30", premium="0.50", expiration=date(2026, 10, 16), **kwargs):
    return CallLeg(
        side=side,
        symbol="ABCDJ30",
        quantity=quantity,
        strike=Decimal(strike),
        premium=Decimal(premium),
        expiration=expiration,
        **kwargs,
    )


def make_stock(side=LegSide.LONG, quantity=100, entry_price="28", **kwargs):
    return StockLeg(side=side, symbol="ABCD", quantity=quantity, entry_price=Decimal(entry_price), **kwargs)


def test_cash_impact_signs():
    """Long legs pay, short legs receive."""
    assert cash_impact(make_call(side=LegSide.SHORT)) == Decimal("50")
    assert cash_impact(make_call(side=LegSide.LONG)) == Decimal("-50")
    assert cash_impact(make_stock(side=LegSide.LONG)) == Decimal("-2800")
    assert cash_impact(make_stock(side=LegSide.SHORT)) == Decimal("2800")


def test_future_cash_impact_uses_premium():
    """Futures move premium cash, not spot value."""
    leg = FutureLeg(
        side=LegSide.LONG,
        symbol="WINZ26",
        quantity=2,
        spot_price=Decimal("120000"),
        premium=Decimal("10"),
        expiration=date(2026, 12, 16),
    )
    assert cash_impact(leg) == Decimal("-20")
    assert notional(leg) == Decimal("240000")


def test_notional_per_kind():
    """Options use strike, stock uses entry price."""
    assert notional(make_call()) == Decimal("3000")
    assert notional(make_stock()) == Decimal("2800")


def test_margin_zero_for_long_legs():
    """Long legs never block guarantee."""
    assert margin_required(make_call(side=LegSide.LONG)) == 0
    assert margin_required(make_stock(side=LegSide.LONG)) == 0


def test_margin_defaults():
    """Short options block 15% of strike notional, short stock 100%."""
    assert margin_required(make_call()) == Decimal("450")
    assert margin_required(make_stock(side=LegSide.SHORT)) == Decimal("2800")


def test_margin_custom_percent_overrides_default():
    """A custom margin percent replaces the kind default."""
    leg = make_call(custom_margin_percent=Decimal("20"))
    assert margin_required(leg) == Decimal("600")


def test_short_future_margin_needs_custom_percent():
    """Futures have no default margin rule."""
    leg = FutureLeg(
        side=LegSide.SHORT,
        symbol="WINZ26",
        quantity=1,
        spot_price=Decimal("1000"),
        expiration=date(2026, 12, 16),
    )
    assert margin_required(leg) == 0
    assert margin_required(leg.model_copy(update={"custom_margin_percent": Decimal("10")})) == Decimal("100")


@pytest.mark.parametrize("field,values", [
    ("quantity", [1, 10, 100, 1000]),
    ("strike", [Decimal("5"), Decimal("30"), Decimal("31.5"), Decimal("200")]),
])
def test_margin_monotonic_on_short_option(field, values):
    """Raising quantity or strike on a short leg never lowers margin."""
    base = make_call()
    margins = [margin_required(base.model_copy(update={field: v})) for v in values]
    assert margins == sorted(margins)


def test_margin_monotonic_on_short_stock_entry_price():
    """Raising entry price on short stock never lowers margin."""
    base = make_stock(side=LegSide.SHORT)
    prices = [Decimal("1"), Decimal("28"), Decimal("28.01"), Decimal("90")]
    margins = [margin_required(base.model_copy(update={"entry_price": p})) for p in prices]
    assert margins == sorted(margins)


def test_structure_aggregates(covered_call_legs):
    """Covered call: impact -2750, premium +50, cost 5."""
    assert total_cash_impact(covered_call_legs) == Decimal("-2750")
    assert net_premium(covered_call_legs) == Decimal("50")
    assert assembly_cost(covered_call_legs, Decimal("2.50")) == Decimal("5.00")
    assert structure_expiration(covered_call_legs) == date(2026, 10, 16)


def test_stock_only_structure_has_no_expiration():
    """The stock sentinel never counts as an expiration."""
    leg = make_stock()
    assert leg.expiration == STOCK_EXPIRATION_SENTINEL
    assert structure_expiration([leg]) is None


def test_legs_round_trip_through_json(covered_call_legs):
    """Stored legs keep their kind, id and prices."""
    stored = dump_legs(covered_call_legs)
    assert stored[0]["kind"] == "CALL"
    assert stored[1]["kind"] == "STOCK"

    legs = parse_legs(stored)
    assert legs == covered_call_legs
    assert isinstance(legs[0], CallLeg)
    assert isinstance(legs[1], StockLeg)


def test_put_leg_is_option():
    leg = PutLeg(
        side=LegSide.LONG,
        symbol="ABCDV28",
        quantity=100,
        strike=Decimal("28"),
        premium=Decimal("0.40"),
        expiration=date(2026, 10, 16),
    )
    assert leg.is_option
    assert leg.is_long


def test_required_guarantee_sums_legs(covered_call_legs):
    """Only the short call blocks guarantee."""
    calculator = GuaranteeCalculator(Decimal("15"), Decimal("100"))
    assert calculator.required_guarantee(covered_call_legs) == Decimal("450")


def test_custody_guarantee_counts_pledged_assets_only():
    """Unpledged assets release no guarantee."""
    pledged = CustodyAsset(
        symbol="ABCD",
        quantity=100,
        market_price=Decimal("30"),
        guarantee_percent=Decimal("60"),
        used_as_guarantee=True,
    )
    free = CustodyAsset(
        symbol="WXYZ",
        quantity=100,
        market_price=Decimal("50"),
        guarantee_percent=Decimal("60"),
        used_as_guarantee=False,
    )
    calculator = GuaranteeCalculator(Decimal("15"), Decimal("100"))
    assert calculator.custody_guarantee([pledged, free]) == Decimal("1800")
    assert calculator.available_guarantee([pledged, free], Decimal("-500")) == Decimal("1800")
    assert calculator.available_guarantee([pledged], Decimal("200")) == Decimal("2000")
