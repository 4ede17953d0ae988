"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from typing import Any

from statutory_payroll.exceptions import InvalidBracketTableError, InvalidInputError

ZERO = Decimal("0")

# Pension limits in force from 2026-02-01
DEFAULT_PENSION_LOWER_LIMIT = Decimal("9000")
DEFAULT_PENSION_UPPER_LIMIT = Decimal("108000")


def to_amount(value: Any, name: str) -> Decimal:
    """Normalize a monetary value to a finite, non-negative Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from None

    if not amount.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if amount < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {amount}")
    return amount


def _to_bracket_decimal(value: Any, name: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidBracketTableError(f"Bracket {name} must be a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidBracketTableError(
            f"Bracket {name} must be a number, got {value!r}"
        ) from None
    if not amount.is_finite():
        raise InvalidBracketTableError(f"Bracket {name} must be finite, got {value!r}")
    return amount


@dataclass(frozen=True)
class PayrollConfig:
    """Per-run configuration supplied by the caller.

    Attributes:
        round_to_whole_currency_unit: Round every monetary output to the
            nearest whole unit after all arithmetic completes. Default True.
        pension_lower_limit: Earnings threshold separating pension Tier I
            from Tier II.
        pension_upper_limit: Ceiling above which no further pension
            contribution applies.
    """

    round_to_whole_currency_unit: bool = True
    pension_lower_limit: Decimal = DEFAULT_PENSION_LOWER_LIMIT
    pension_upper_limit: Decimal = DEFAULT_PENSION_UPPER_LIMIT

    def __post_init__(self) -> None:
        """Validate configuration."""
        lower = to_amount(self.pension_lower_limit, "pension_lower_limit")
        upper = to_amount(self.pension_upper_limit, "pension_upper_limit")
        if lower > upper:
            raise InvalidInputError(
                f"pension_lower_limit ({lower}) cannot exceed "
                f"pension_upper_limit ({upper})"
            )
        object.__setattr__(self, "pension_lower_limit", lower)
        object.__setattr__(self, "pension_upper_limit", upper)


@dataclass(frozen=True)
class PayrollInput:
    """Inputs for a single employee for a single pay period."""

    basic_salary: Decimal
    benefits: Decimal = ZERO
    config: PayrollConfig = field(default_factory=PayrollConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "basic_salary", to_amount(self.basic_salary, "basic_salary"))
        object.__setattr__(self, "benefits", to_amount(self.benefits, "benefits"))
        if not isinstance(self.config, PayrollConfig):
            raise InvalidInputError(
                f"config must be a PayrollConfig, got {type(self.config).__name__}"
            )


@dataclass(frozen=True)
class TaxBracket:
    """Tax band for progressive taxation.

    Bands are applied cumulatively from the lowest upward, so a band is
    described by its width rather than absolute thresholds.
    """

    width: Decimal | None  # None = unbounded
    rate: Decimal  # As decimal, e.g., 0.30 for 30%

    def __post_init__(self) -> None:
        # Ranges are checked by validate_brackets
        if self.width is not None:
            object.__setattr__(self, "width", _to_bracket_decimal(self.width, "width"))
        object.__setattr__(self, "rate", _to_bracket_decimal(self.rate, "rate"))

    @property
    def is_unbounded(self) -> bool:
        return self.width is None


@dataclass(frozen=True)
class PayrollResult:
    """Itemized gross-to-net breakdown for one employee and pay period.

    The training levy is employer-borne and reported for visibility only;
    it is not part of ``net_salary``.
    """

    gross_salary: Decimal
    benefits: Decimal
    pension_contribution: Decimal
    taxable_income: Decimal
    gross_tax: Decimal
    personal_relief: Decimal
    income_tax: Decimal
    health_levy: Decimal
    housing_levy: Decimal
    training_levy: Decimal
    net_salary: Decimal

    @property
    def total_deductions(self) -> Decimal:
        """Deductions netted out of gross pay."""
        return (
            self.income_tax
            + self.pension_contribution
            + self.health_levy
            + self.housing_levy
        )

    def to_canonical_dict(self) -> dict[str, str]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {f.name: str(getattr(self, f.name)) for f in fields(self)}
