"""Exception hierarchy for the statutory payroll engine and its services."""

from __future__ import annotations

from datetime import date


class PayrollError(Exception):
    """Base class for all payroll errors."""


class InvalidInputError(PayrollError, ValueError):
    """Raised for negative or non-finite amounts and malformed configuration."""


class InvalidBracketTableError(PayrollError, ValueError):
    """Raised when a tax bracket table cannot be walked safely."""


class ScheduleNotFoundError(PayrollError):
    """Raised when no statutory schedule covers the requested date."""

    def __init__(self, as_of_date: date):
        self.as_of_date = as_of_date
        super().__init__(f"No statutory schedule effective {as_of_date}")


class RecordNotFoundError(PayrollError):
    """Raised when a payroll record does not exist."""

    def __init__(self, record_id: object):
        self.record_id = record_id
        super().__init__(f"Payroll record {record_id} not found")


class DuplicateRecordError(PayrollError):
    """Raised when an active record already exists for an employee and period."""

    def __init__(self, employee_id: str, year: int, month: int):
        self.employee_id = employee_id
        self.year = year
        self.month = month
        super().__init__(
            f"Active payroll record already exists for employee {employee_id} "
            f"in {year}-{month:02d}"
        )


class RecordSupersededError(PayrollError):
    """Raised when amending a record that has already been superseded."""

    def __init__(self, record_id: object):
        self.record_id = record_id
        super().__init__(
            f"Payroll record {record_id} is superseded; amend the active record instead"
        )
