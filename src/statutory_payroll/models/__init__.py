"""ORM models."""

from statutory_payroll.models.base import Base, TimestampMixin
from statutory_payroll.models.payroll import RESULT_COLUMNS, PayrollRecord

__all__ = ["Base", "TimestampMixin", "PayrollRecord", "RESULT_COLUMNS"]
