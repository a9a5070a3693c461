"""Activation validator - gates a structure's move into ACTIVE.

Two soft gates are evaluated against a fresh treasury snapshot:

1. Cash gate: ``free_cash + sum(cash_impact) - assembly_cost`` must not fall
   below ``-cash_tolerance``.
2. Guarantee gate: guarantee required must not exceed
   ``guarantee_available + guarantee_tolerance``.

Tripped gates produce FinancialWarning objects, never exceptions; the caller
decides whether to force activation. Only missing name or legs are hard
failures.
"""

import logging
from decimal import Decimal

from structure_treasury.config import get_settings
from structure_treasury.core.exceptions import ValidationError
from structure_treasury.schemas.leg import Leg
from structure_treasury.schemas.treasury import (
    ActivationCheck,
    FinancialWarning,
    Gate,
    TreasurySnapshot,
)
from structure_treasury.services.guarantee_calculator import GuaranteeCalculator
from structure_treasury.services.leg_valuation import ZERO, assembly_cost, total_cash_impact

logger = logging.getLogger(__name__)


def require_activatable(name: str | None, legs: list[Leg]) -> None:
    """Reject structures that can never be activated.

    Args:
        name: Structure name
        legs: Structure legs

    Raises:
        ValidationError: If the name is empty or there are no legs
    """
    if not name or not name.strip():
        raise ValidationError("Structure name is required")
    if not legs:
        raise ValidationError("Add at least one leg to the structure")


class ActivationValidator:
    """Evaluates the cash and guarantee gates for a structure."""

    def __init__(
        self,
        calculator: GuaranteeCalculator | None = None,
        assembly_cost_per_leg: Decimal | None = None,
        cash_tolerance: Decimal | None = None,
        guarantee_tolerance: Decimal | None = None,
    ):
        """Initialize validator.

        Args:
            calculator: Guarantee calculator
            assembly_cost_per_leg: Fixed cost per leg
            cash_tolerance: Allowed negative balance after activation
            guarantee_tolerance: Allowed guarantee shortfall
        """
        settings = get_settings()
        self.calculator = calculator or GuaranteeCalculator()
        self.assembly_cost_per_leg = (
            assembly_cost_per_leg if assembly_cost_per_leg is not None else settings.assembly_cost_per_leg
        )
        self.cash_tolerance = cash_tolerance if cash_tolerance is not None else settings.cash_tolerance
        self.guarantee_tolerance = (
            guarantee_tolerance if guarantee_tolerance is not None else settings.guarantee_tolerance
        )

    def validate(self, name: str | None, legs: list[Leg], snapshot: TreasurySnapshot) -> ActivationCheck:
        """Evaluate both gates.

        Args:
            name: Structure name
            legs: Structure legs
            snapshot: Fresh treasury snapshot

        Returns:
            ActivationCheck with any tripped gates as warnings

        Raises:
            ValidationError: If the structure cannot be activated at all
        """
        require_activatable(name, legs)

        impact = total_cash_impact(legs)
        cost = assembly_cost(legs, self.assembly_cost_per_leg)
        final_impact = impact - cost
        new_balance = snapshot.free_cash + final_impact

        required = self.calculator.required_guarantee(legs)
        available = snapshot.guarantee_available_raw
        deficit = max(ZERO, required - available)

        warnings: list[FinancialWarning] = []

        if new_balance < -self.cash_tolerance:
            warnings.append(
                FinancialWarning(
                    gate=Gate.CASH,
                    message=(
                        f"Free cash too low: free cash {snapshot.free_cash:.2f} | "
                        f"structure impact {final_impact:.2f} | "
                        f"resulting balance {new_balance:.2f}"
                    ),
                    available=snapshot.free_cash,
                    required=final_impact,
                    resulting=new_balance,
                )
            )

        if required > available + self.guarantee_tolerance:
            warnings.append(
                FinancialWarning(
                    gate=Gate.GUARANTEE,
                    message=(
                        f"Insufficient guarantee: available {available:.2f} | "
                        f"required {required:.2f} | "
                        f"deficit {deficit:.2f}"
                    ),
                    available=available,
                    required=required,
                    resulting=deficit,
                )
            )

        for warning in warnings:
            logger.warning(f"Activation gate {warning.gate.value} tripped for '{name}': {warning.message}")

        return ActivationCheck(
            cash_impact=impact,
            assembly_cost=cost,
            new_balance=new_balance,
            required_guarantee=required,
            guarantee_deficit=deficit,
            warnings=warnings,
        )
