"""Payroll calculation engine."""

from statutory_payroll.calculators.engine import PayrollEngine, calculate_payroll
from statutory_payroll.calculators.statutory import (
    BUILTIN_SCHEDULES,
    PAYE_BRACKETS,
    StatutorySchedule,
    resolve_schedule,
)
from statutory_payroll.calculators.types import (
    PayrollConfig,
    PayrollInput,
    PayrollResult,
    TaxBracket,
)

__all__ = [
    "PayrollEngine",
    "calculate_payroll",
    "BUILTIN_SCHEDULES",
    "PAYE_BRACKETS",
    "StatutorySchedule",
    "resolve_schedule",
    "PayrollConfig",
    "PayrollInput",
    "PayrollResult",
    "TaxBracket",
]
