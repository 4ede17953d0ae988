"""Progressive income tax over a bracket table."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from statutory_payroll.calculators.types import ZERO, TaxBracket
from statutory_payroll.exceptions import InvalidBracketTableError


def validate_brackets(brackets: Sequence[TaxBracket]) -> None:
    """Check that a bracket table can be walked to completion.

    Rules:
    - at least one bracket
    - every finite width is positive
    - rates lie in [0, 1] and never decrease from one band to the next
    - only the final bracket is unbounded, and it must be

    Raises:
        InvalidBracketTableError: On the first rule violated
    """
    if not brackets:
        raise InvalidBracketTableError("Bracket table is empty")

    last_index = len(brackets) - 1
    previous_rate: Decimal | None = None

    for index, bracket in enumerate(brackets):
        if not isinstance(bracket, TaxBracket):
            raise InvalidBracketTableError(
                f"Bracket {index} is {type(bracket).__name__}, expected TaxBracket"
            )

        if not (ZERO <= bracket.rate <= 1):
            raise InvalidBracketTableError(
                f"Bracket {index} rate {bracket.rate} is outside [0, 1]"
            )
        if previous_rate is not None and bracket.rate < previous_rate:
            raise InvalidBracketTableError(
                f"Bracket {index} rate {bracket.rate} is lower than the "
                f"preceding rate {previous_rate}; brackets must be sorted ascending"
            )
        previous_rate = bracket.rate

        if bracket.is_unbounded:
            if index != last_index:
                raise InvalidBracketTableError(
                    f"Bracket {index} is unbounded but is not the final bracket"
                )
        else:
            if index == last_index:
                raise InvalidBracketTableError(
                    "Final bracket must be unbounded so top-rate income is taxed"
                )
            if bracket.width <= 0:
                raise InvalidBracketTableError(
                    f"Bracket {index} width {bracket.width} must be positive"
                )


def compute_gross_tax(taxable_income: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Walk the bands lowest first, taxing each slice at its marginal rate.

    No rounding happens here. Income equal to a band's upper edge is taxed
    entirely within that band (inclusive-lower, exclusive-upper).
    """
    if taxable_income <= 0:
        return ZERO

    total_tax = ZERO
    remaining = taxable_income

    for bracket in brackets:
        if bracket.is_unbounded:
            slice_amount = remaining
        else:
            slice_amount = min(remaining, bracket.width)

        total_tax += slice_amount * bracket.rate
        remaining -= slice_amount

        if remaining <= 0:
            break

    return total_tax
