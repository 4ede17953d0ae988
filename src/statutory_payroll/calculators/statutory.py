"""Statutory rates, tax bands and dated schedules.

Rates and the monthly relief are fixed by statute. Pension limits and tax
bands change periodically, so they are grouped into schedules keyed by
effective date. Callers resolve a schedule for the pay period explicitly;
nothing here reads the current date.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence

from statutory_payroll.calculators.types import PayrollConfig, TaxBracket
from statutory_payroll.exceptions import ScheduleNotFoundError

PENSION_RATE = Decimal("0.06")
HEALTH_LEVY_RATE = Decimal("0.0275")
HEALTH_LEVY_FLOOR = Decimal("300")
HOUSING_LEVY_RATE = Decimal("0.015")
PERSONAL_RELIEF = Decimal("2400")
TRAINING_LEVY = Decimal("50")  # Employer cost, reported only

# Monthly PAYE bands, lowest first. Cumulative edges: 24,000 / 32,333 /
# 500,000 / 800,000.
PAYE_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(width=Decimal("24000"), rate=Decimal("0.10")),
    TaxBracket(width=Decimal("8333"), rate=Decimal("0.25")),
    TaxBracket(width=Decimal("467667"), rate=Decimal("0.30")),
    TaxBracket(width=Decimal("300000"), rate=Decimal("0.325")),
    TaxBracket(width=None, rate=Decimal("0.35")),
)


@dataclass(frozen=True)
class StatutorySchedule:
    """A dated bundle of pension limits and tax bands."""

    code: str
    effective_start: date
    effective_end: date | None  # None = open-ended
    pension_lower_limit: Decimal
    pension_upper_limit: Decimal
    brackets: tuple[TaxBracket, ...] = PAYE_BRACKETS

    def covers(self, as_of_date: date) -> bool:
        if as_of_date < self.effective_start:
            return False
        return self.effective_end is None or as_of_date <= self.effective_end

    def payroll_config(self, round_to_whole_currency_unit: bool = True) -> PayrollConfig:
        """Build the engine configuration for this schedule."""
        return PayrollConfig(
            round_to_whole_currency_unit=round_to_whole_currency_unit,
            pension_lower_limit=self.pension_lower_limit,
            pension_upper_limit=self.pension_upper_limit,
        )


BUILTIN_SCHEDULES: tuple[StatutorySchedule, ...] = (
    StatutorySchedule(
        code="2025-02",
        effective_start=date(2025, 2, 1),
        effective_end=date(2026, 1, 31),
        pension_lower_limit=Decimal("8000"),
        pension_upper_limit=Decimal("72000"),
    ),
    StatutorySchedule(
        code="2026-02",
        effective_start=date(2026, 2, 1),
        effective_end=None,
        pension_lower_limit=Decimal("9000"),
        pension_upper_limit=Decimal("108000"),
    ),
)


def resolve_schedule(
    as_of_date: date,
    schedules: Sequence[StatutorySchedule] = BUILTIN_SCHEDULES,
) -> StatutorySchedule:
    """Return the schedule effective on ``as_of_date``.

    When ranges overlap the latest ``effective_start`` wins.

    Raises:
        ScheduleNotFoundError: If no schedule covers the date
    """
    candidates = [s for s in schedules if s.covers(as_of_date)]
    if not candidates:
        raise ScheduleNotFoundError(as_of_date)
    return max(candidates, key=lambda s: s.effective_start)
