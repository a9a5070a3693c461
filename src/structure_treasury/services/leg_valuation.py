"""Leg valuation - cash impact, notional and margin for one leg.

Pure functions, no side effects. Called for every leg whenever aggregate
figures are needed.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from structure_treasury.schemas.leg import Leg, LegKind, leg_expiration

ZERO = Decimal("0")

# Default margin percentages for short legs
DEFAULT_OPTION_MARGIN_PERCENT = Decimal("15")  # 15% of strike notional
DEFAULT_STOCK_MARGIN_PERCENT = Decimal("100")  # Full entry value


@dataclass(frozen=True)
class LegValuation:
    """Valuation of a single leg."""
    cash_impact: Decimal
    notional: Decimal
    margin_required: Decimal


def cash_impact(leg: Leg) -> Decimal:
    """Signed cash effect of opening the leg (negative = cash out).

    STOCK moves the entry value; options and futures move the premium.
    """
    if leg.kind == LegKind.STOCK:
        value = leg.entry_price * leg.quantity
    else:
        value = leg.premium * leg.quantity
    return -value if leg.is_long else value


def notional(leg: Leg) -> Decimal:
    """Reference value used for margin sizing."""
    if leg.kind == LegKind.STOCK:
        return leg.entry_price * leg.quantity
    if leg.kind == LegKind.FUTURE:
        return leg.spot_price * leg.quantity
    return leg.strike * leg.quantity


def default_margin_percent(
    kind: LegKind | str,
    option_margin_percent: Decimal = DEFAULT_OPTION_MARGIN_PERCENT,
    stock_margin_percent: Decimal = DEFAULT_STOCK_MARGIN_PERCENT,
) -> Decimal | None:
    """Default margin percent for a short leg of the given kind.

    Returns:
        The percent, or None for futures (no margin rule defined)
    """
    if kind in (LegKind.CALL, LegKind.PUT):
        return option_margin_percent
    if kind == LegKind.STOCK:
        return stock_margin_percent
    return None


def margin_required(
    leg: Leg,
    option_margin_percent: Decimal = DEFAULT_OPTION_MARGIN_PERCENT,
    stock_margin_percent: Decimal = DEFAULT_STOCK_MARGIN_PERCENT,
) -> Decimal:
    """Guarantee blocked by the leg.

    Zero for long legs. Short legs block ``notional * percent / 100`` where the
    percent is the leg's custom override or the kind default. Futures without
    a custom percent block nothing.
    """
    if not leg.is_short:
        return ZERO

    percent = leg.custom_margin_percent
    if percent is None:
        percent = default_margin_percent(leg.kind, option_margin_percent, stock_margin_percent)
    if percent is None:
        return ZERO

    return notional(leg) * percent / 100


def valuate(
    leg: Leg,
    option_margin_percent: Decimal = DEFAULT_OPTION_MARGIN_PERCENT,
    stock_margin_percent: Decimal = DEFAULT_STOCK_MARGIN_PERCENT,
) -> LegValuation:
    """Compute all figures for one leg."""
    return LegValuation(
        cash_impact=cash_impact(leg),
        notional=notional(leg),
        margin_required=margin_required(leg, option_margin_percent, stock_margin_percent),
    )


def premium_impact(leg: Leg) -> Decimal:
    """Signed premium contribution of a leg; stock legs carry no premium."""
    if leg.kind == LegKind.STOCK:
        return ZERO
    value = leg.premium * leg.quantity
    return -value if leg.is_long else value


def net_premium(legs: Iterable[Leg]) -> Decimal:
    """Signed sum of per-leg premium impact."""
    return sum((premium_impact(leg) for leg in legs), ZERO)


def total_cash_impact(legs: Iterable[Leg]) -> Decimal:
    """Sum of cash impacts over legs."""
    return sum((cash_impact(leg) for leg in legs), ZERO)


def assembly_cost(legs: list[Leg], cost_per_leg: Decimal) -> Decimal:
    """Fixed assembly cost: cost per leg times leg count."""
    return cost_per_leg * len(legs)


def structure_expiration(legs: Iterable[Leg]) -> date | None:
    """Earliest option or future expiration; None for stock-only structures."""
    dates = [d for d in (leg_expiration(leg) for leg in legs) if d is not None]
    return min(dates) if dates else None
