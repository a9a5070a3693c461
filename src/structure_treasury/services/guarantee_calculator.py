"""Margin & guarantee calculator - aggregates leg margins and pledged custody."""

from collections.abc import Iterable
from decimal import Decimal

from structure_treasury.config import get_settings
from structure_treasury.models.custody_asset import CustodyAsset
from structure_treasury.models.structure import Structure
from structure_treasury.schemas.leg import Leg, parse_legs
from structure_treasury.services.leg_valuation import ZERO, LegValuation, margin_required, valuate


class GuaranteeCalculator:
    """Calculates guarantee required by structures and available to a user.

    Guarantee figures returned here are never negative.
    """

    def __init__(
        self,
        option_margin_percent: Decimal | None = None,
        stock_margin_percent: Decimal | None = None,
    ):
        """Initialize calculator.

        Args:
            option_margin_percent: Default margin % for short options
            stock_margin_percent: Default margin % for short stock
        """
        settings = get_settings()
        self.option_margin_percent = (
            option_margin_percent
            if option_margin_percent is not None
            else settings.default_option_margin_percent
        )
        self.stock_margin_percent = (
            stock_margin_percent
            if stock_margin_percent is not None
            else settings.default_stock_margin_percent
        )

    def valuate(self, leg: Leg) -> LegValuation:
        """Valuate one leg with the configured margin defaults."""
        return valuate(leg, self.option_margin_percent, self.stock_margin_percent)

    def leg_margin(self, leg: Leg) -> Decimal:
        """Margin required by one leg."""
        return margin_required(leg, self.option_margin_percent, self.stock_margin_percent)

    def required_guarantee(self, legs: Iterable[Leg]) -> Decimal:
        """Sum of margin required over legs.

        Args:
            legs: Structure legs

        Returns:
            Guarantee required (zero when no leg is short)
        """
        return sum((self.leg_margin(leg) for leg in legs), ZERO)

    def structures_guarantee(self, structures: Iterable[Structure]) -> Decimal:
        """Guarantee required by a set of stored structures.

        Args:
            structures: Structure rows (usually the user's active ones)

        Returns:
            Total guarantee used
        """
        total = ZERO
        for structure in structures:
            total += self.required_guarantee(parse_legs(structure.legs))
        return total

    @staticmethod
    def custody_guarantee(assets: Iterable[CustodyAsset]) -> Decimal:
        """Guarantee released by pledged custody assets."""
        return sum((asset.guarantee_value for asset in assets), ZERO)

    def available_guarantee(self, assets: Iterable[CustodyAsset], free_cash: Decimal) -> Decimal:
        """Pledged custody guarantee plus free cash.

        Args:
            assets: User custody assets
            free_cash: Latest ledger balance (negative values count as zero)

        Returns:
            Guarantee available before subtracting what active structures use
        """
        return self.custody_guarantee(assets) + max(ZERO, free_cash)
