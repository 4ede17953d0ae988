"""Payroll record model.

Records are append-only. The only permitted change to a stored row is the
``active -> superseded`` transition made when an amendment is inserted.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from statutory_payroll.models.base import Base, TimestampMixin

MONEY = Numeric(14, 4)

# PayrollResult fields persisted verbatim, in display order
RESULT_COLUMNS = (
    "gross_salary",
    "benefits",
    "pension_contribution",
    "taxable_income",
    "gross_tax",
    "personal_relief",
    "income_tax",
    "health_levy",
    "housing_levy",
    "training_levy",
    "net_salary",
)


class PayrollRecord(Base, TimestampMixin):
    """One employee's computed pay for one monthly period."""

    __tablename__ = "payroll_record"

    payroll_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    payroll_ref: Mapped[str] = mapped_column(String, nullable=False)
    period_year: Mapped[int] = mapped_column(Integer, nullable=False)
    period_month: Mapped[int] = mapped_column(Integer, nullable=False)
    schedule_code: Mapped[str] = mapped_column(String, nullable=False)

    basic_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    gross_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    benefits: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    pension_contribution: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    taxable_income: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    gross_tax: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    personal_relief: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    income_tax: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    health_levy: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    housing_levy: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    training_levy: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    calculation_id: Mapped[UUID] = mapped_column(nullable=False)
    engine_version: Mapped[str] = mapped_column(String, nullable=False)
    supersedes_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payroll_record.payroll_record_id"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'superseded')",
            name="payroll_record_status_check",
        ),
        CheckConstraint(
            "period_month BETWEEN 1 AND 12",
            name="payroll_record_month_check",
        ),
        Index(
            "payroll_record_active_period_unique",
            "employee_id",
            "period_year",
            "period_month",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )
    __mapper_args__ = {"eager_defaults": True}

    @property
    def is_active(self) -> bool:
        return self.status == "active"
