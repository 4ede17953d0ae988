"""Payroll services."""

from statutory_payroll.services.pay_run_service import (
    EmployeePay,
    PayPeriod,
    PayRunCalculationResult,
    PayRunService,
)
from statutory_payroll.services.record_service import PayrollRecordService, TaxCard

__all__ = [
    "EmployeePay",
    "PayPeriod",
    "PayRunCalculationResult",
    "PayRunService",
    "PayrollRecordService",
    "TaxCard",
]
