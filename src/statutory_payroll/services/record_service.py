"""Payroll record persistence, amendments and annual tax cards.

Stored results are never edited in place. An amendment inserts a new record
that points at the one it replaces and flips the old record to
``superseded``, so the full history stays auditable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from statutory_payroll.calculators.types import ZERO
from statutory_payroll.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    RecordSupersededError,
)
from statutory_payroll.models import RESULT_COLUMNS, PayrollRecord
from statutory_payroll.services.pay_run_service import (
    EmployeeCalculation,
    PayRunCalculationResult,
)

logger = logging.getLogger(__name__)

TAX_CARD_COLUMNS = (
    "gross_salary",
    "benefits",
    "pension_contribution",
    "taxable_income",
    "gross_tax",
    "personal_relief",
    "income_tax",
)


@dataclass
class TaxCardRow:
    """One month of an annual tax card, copied from the stored record."""

    month: int
    payroll_ref: str | None = None
    gross_salary: Decimal = ZERO
    benefits: Decimal = ZERO
    pension_contribution: Decimal = ZERO
    taxable_income: Decimal = ZERO
    gross_tax: Decimal = ZERO
    personal_relief: Decimal = ZERO
    income_tax: Decimal = ZERO


@dataclass
class TaxCard:
    """Annual per-employee summary of monthly tax figures."""

    employee_id: str
    year: int
    rows: list[TaxCardRow] = field(default_factory=list)

    @property
    def totals(self) -> dict[str, Decimal]:
        return {
            column: sum((getattr(row, column) for row in self.rows), ZERO)
            for column in TAX_CARD_COLUMNS
        }


def record_from_calculation(
    calculation: EmployeeCalculation,
    supersedes_id: UUID | None = None,
) -> PayrollRecord:
    """Build an unsaved record from an engine calculation."""
    result = calculation.result
    return PayrollRecord(
        employee_id=calculation.employee_id,
        payroll_ref=calculation.payroll_ref,
        period_year=calculation.period.year,
        period_month=calculation.period.month,
        schedule_code=calculation.schedule_code,
        basic_salary=calculation.basic_salary,
        calculation_id=calculation.calculation_id,
        engine_version=calculation.engine_version,
        supersedes_id=supersedes_id,
        status="active",
        **{column: getattr(result, column) for column in RESULT_COLUMNS},
    )


class PayrollRecordService:
    """Append-only store for computed payroll results."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_run(self, run: PayRunCalculationResult) -> list[PayrollRecord]:
        """Persist one record per successfully calculated employee.

        Raises:
            DuplicateRecordError: If an employee already has an active record
                for the period. Nothing from the run is saved in that case.
        """
        seen: set[str] = set()
        for calculation in run.calculations:
            if calculation.employee_id in seen:
                raise DuplicateRecordError(
                    calculation.employee_id, run.period.year, run.period.month
                )
            seen.add(calculation.employee_id)
            existing = await self._get_active(
                calculation.employee_id, run.period.year, run.period.month
            )
            if existing is not None:
                raise DuplicateRecordError(
                    calculation.employee_id, run.period.year, run.period.month
                )

        records = [record_from_calculation(c) for c in run.calculations]
        self.session.add_all(records)
        try:
            await self.session.flush()
        except IntegrityError:
            # A concurrent run committed between the check and the insert
            await self.session.rollback()
            raise await self._duplicate_error(run) from None

        logger.info(
            "Saved %d payroll records for %s", len(records), run.period.ref_fragment
        )
        return records

    async def _duplicate_error(self, run: PayRunCalculationResult) -> DuplicateRecordError:
        period = run.period
        for calculation in run.calculations:
            if await self._get_active(calculation.employee_id, period.year, period.month):
                return DuplicateRecordError(calculation.employee_id, period.year, period.month)
        first = run.calculations[0]
        return DuplicateRecordError(first.employee_id, period.year, period.month)

    async def _get_active(
        self, employee_id: str, year: int, month: int
    ) -> PayrollRecord | None:
        result = await self.session.execute(
            select(PayrollRecord).where(
                PayrollRecord.employee_id == employee_id,
                PayrollRecord.period_year == year,
                PayrollRecord.period_month == month,
                PayrollRecord.status == "active",
            )
        )
        return result.scalar_one_or_none()

    async def get_record(self, record_id: UUID) -> PayrollRecord:
        record = await self.session.get(PayrollRecord, record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def amend(
        self, record_id: UUID, calculation: EmployeeCalculation
    ) -> PayrollRecord:
        """Replace an active record with a fresh calculation.

        Raises:
            RecordNotFoundError: Unknown record
            RecordSupersededError: Record was already replaced
        """
        original = await self.get_record(record_id)
        if not original.is_active:
            raise RecordSupersededError(record_id)

        # Mark superseded first so the active-per-period index stays satisfied
        original.status = "superseded"
        await self.session.flush()

        amended = record_from_calculation(calculation, supersedes_id=original.payroll_record_id)
        self.session.add(amended)
        await self.session.flush()

        logger.info(
            "Amended payroll record %s -> %s (%s)",
            original.payroll_record_id,
            amended.payroll_record_id,
            amended.payroll_ref,
        )
        return amended

    async def list_records(
        self,
        employee_id: str | None = None,
        year: int | None = None,
        month: int | None = None,
        include_superseded: bool = False,
    ) -> list[PayrollRecord]:
        query = select(PayrollRecord)
        if employee_id is not None:
            query = query.where(PayrollRecord.employee_id == employee_id)
        if year is not None:
            query = query.where(PayrollRecord.period_year == year)
        if month is not None:
            query = query.where(PayrollRecord.period_month == month)
        if not include_superseded:
            query = query.where(PayrollRecord.status == "active")

        query = query.order_by(
            PayrollRecord.period_year,
            PayrollRecord.period_month,
            PayrollRecord.employee_id,
            PayrollRecord.created_at,
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def history(self, employee_id: str, year: int, month: int) -> list[PayrollRecord]:
        """Amendment chain for one employee and period, oldest first."""
        records = await self.list_records(
            employee_id=employee_id, year=year, month=month, include_superseded=True
        )
        by_predecessor = {r.supersedes_id: r for r in records if r.supersedes_id}
        roots = [r for r in records if r.supersedes_id is None]

        chain: list[PayrollRecord] = []
        for root in roots:
            current: PayrollRecord | None = root
            while current is not None:
                chain.append(current)
                current = by_predecessor.get(current.payroll_record_id)
        return chain

    async def tax_card(self, employee_id: str, year: int) -> TaxCard:
        """Build the annual tax card from active records."""
        records = await self.list_records(employee_id=employee_id, year=year)
        by_month = {r.period_month: r for r in records}

        card = TaxCard(employee_id=employee_id, year=year)
        for month in range(1, 13):
            record = by_month.get(month)
            if record is None:
                card.rows.append(TaxCardRow(month=month))
                continue
            card.rows.append(
                TaxCardRow(
                    month=month,
                    payroll_ref=record.payroll_ref,
                    **{column: record_value(record, column) for column in TAX_CARD_COLUMNS},
                )
            )
        return card


def record_value(record: PayrollRecord, column: str) -> Decimal:
    """Read a monetary column as Decimal regardless of driver."""
    value = getattr(record, column)
    return value if isinstance(value, Decimal) else Decimal(str(value))
