"""Gross assembly and statutory deductions.

Only the pension contribution is pre-tax. The health and housing levies are
computed from gross pay but are taken after tax, so they never reduce
taxable income.
"""

from __future__ import annotations

from decimal import Decimal

from statutory_payroll.calculators.statutory import (
    HEALTH_LEVY_FLOOR,
    HEALTH_LEVY_RATE,
    HOUSING_LEVY_RATE,
    PENSION_RATE,
)
from statutory_payroll.calculators.types import ZERO, PayrollConfig, to_amount


def assemble_gross(basic_salary: Decimal, benefits: Decimal = ZERO) -> Decimal:
    """Gross pay is basic salary plus benefits.

    Raises:
        InvalidInputError: If either amount is negative or not a number
    """
    return to_amount(basic_salary, "basic_salary") + to_amount(benefits, "benefits")


def compute_pension(gross_salary: Decimal, config: PayrollConfig) -> Decimal:
    """Tiered pension contribution (employee portion).

    Earnings are capped at the upper limit first. Tier I covers pay up to the
    lower limit, Tier II the band between the limits, both at the same rate.
    """
    pensionable_pay = min(gross_salary, config.pension_upper_limit)
    tier_i = min(pensionable_pay, config.pension_lower_limit) * PENSION_RATE
    tier_ii = max(pensionable_pay - config.pension_lower_limit, ZERO) * PENSION_RATE
    return tier_i + tier_ii


def pension_cap(config: PayrollConfig) -> Decimal:
    """Largest possible contribution: Tier I cap plus Tier II cap."""
    tier_i_cap = config.pension_lower_limit * PENSION_RATE
    tier_ii_cap = (config.pension_upper_limit - config.pension_lower_limit) * PENSION_RATE
    return tier_i_cap + tier_ii_cap


def compute_health_levy(gross_salary: Decimal) -> Decimal:
    """Flat-rate health levy with a statutory monthly minimum."""
    return max(gross_salary * HEALTH_LEVY_RATE, HEALTH_LEVY_FLOOR)


def compute_housing_levy(gross_salary: Decimal) -> Decimal:
    """Proportional housing levy, no cap and no floor."""
    return gross_salary * HOUSING_LEVY_RATE


def resolve_taxable_income(gross_salary: Decimal, pension_contribution: Decimal) -> Decimal:
    """Gross pay less pre-tax deductions, floored at zero."""
    return max(ZERO, gross_salary - pension_contribution)
