"""Payroll calculation engine - gross-to-net pipeline.

Calculation pipeline (stable order per employee):
1) Assemble gross from basic salary and benefits
2) Pension contribution (tiered, capped)
3) Health levy (flat rate with floor)
4) Housing levy (flat rate)
5) Taxable income = gross - pension
6) Gross tax over the bracket table
7) Apply personal relief, net out deductions, then round once
"""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from statutory_payroll.calculators.deductions import (
    assemble_gross,
    compute_health_levy,
    compute_housing_levy,
    compute_pension,
    resolve_taxable_income,
)
from statutory_payroll.calculators.statutory import (
    PAYE_BRACKETS,
    PERSONAL_RELIEF,
    TRAINING_LEVY,
)
from statutory_payroll.calculators.tax_calculator import compute_gross_tax, validate_brackets
from statutory_payroll.calculators.types import (
    ZERO,
    PayrollConfig,
    PayrollInput,
    PayrollResult,
    TaxBracket,
)

logger = logging.getLogger(__name__)

WHOLE_UNIT = Decimal("1")


def aggregate(
    gross_tax: Decimal,
    personal_relief: Decimal,
    pension_contribution: Decimal,
    health_levy: Decimal,
    housing_levy: Decimal,
    gross_salary: Decimal,
) -> tuple[Decimal, Decimal]:
    """Return (income_tax, net_salary).

    Relief is not refundable, so income tax floors at zero. Net salary floors
    at zero as well: at very low pay the health levy floor alone can exceed
    gross.
    """
    income_tax = max(ZERO, gross_tax - personal_relief)
    net_salary = (
        gross_salary - income_tax - pension_contribution - health_levy - housing_levy
    )
    return income_tax, max(ZERO, net_salary)


def round_to_whole_unit(amount: Decimal) -> Decimal:
    """Round half up to the nearest whole currency unit."""
    return amount.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def round_result(result: PayrollResult) -> PayrollResult:
    """Round every monetary field independently."""
    return replace(
        result,
        **{f.name: round_to_whole_unit(getattr(result, f.name)) for f in fields(result)},
    )


class PayrollEngine:
    """Stateless statutory payroll calculator.

    The bracket table is validated once at construction; each ``calculate``
    call is an independent pure transformation and may run concurrently
    with others.
    """

    def __init__(self, brackets: Sequence[TaxBracket] = PAYE_BRACKETS):
        validate_brackets(brackets)
        self.brackets: tuple[TaxBracket, ...] = tuple(brackets)

    def calculate(self, payroll_input: PayrollInput) -> PayrollResult:
        """Calculate the gross-to-net breakdown for one employee."""
        config = payroll_input.config

        gross_salary = assemble_gross(payroll_input.basic_salary, payroll_input.benefits)
        pension = compute_pension(gross_salary, config)
        health_levy = compute_health_levy(gross_salary)
        housing_levy = compute_housing_levy(gross_salary)

        taxable_income = resolve_taxable_income(gross_salary, pension)
        gross_tax = compute_gross_tax(taxable_income, self.brackets)
        # Relief is reported as applied, never more than the tax it offsets
        personal_relief = min(PERSONAL_RELIEF, gross_tax)
        training_levy = TRAINING_LEVY if gross_salary > 0 else ZERO

        income_tax, net_salary = aggregate(
            gross_tax,
            personal_relief,
            pension,
            health_levy,
            housing_levy,
            gross_salary,
        )

        result = PayrollResult(
            gross_salary=gross_salary,
            benefits=payroll_input.benefits,
            pension_contribution=pension,
            taxable_income=taxable_income,
            gross_tax=gross_tax,
            personal_relief=personal_relief,
            income_tax=income_tax,
            health_levy=health_levy,
            housing_levy=housing_levy,
            training_levy=training_levy,
            net_salary=net_salary,
        )

        if config.round_to_whole_currency_unit:
            result = round_result(result)

        logger.debug("Calculated payroll: gross=%s net=%s", result.gross_salary, result.net_salary)
        return result


def calculate_payroll(
    basic_salary: Decimal,
    benefits: Decimal = ZERO,
    config: PayrollConfig | None = None,
    brackets: Sequence[TaxBracket] = PAYE_BRACKETS,
) -> PayrollResult:
    """Convenience wrapper: validate inputs and run the pipeline once."""
    payroll_input = PayrollInput(
        basic_salary=basic_salary,
        benefits=benefits,
        config=config if config is not None else PayrollConfig(),
    )
    return PayrollEngine(brackets).calculate(payroll_input)
