"""Payroll record persistence tests.

Records are append-only: amendments insert a new row and supersede the
old one, and each employee has at most one active record per period.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from statutory_payroll.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    RecordSupersededError,
)
from statutory_payroll.services.pay_run_service import EmployeePay, PayPeriod
from statutory_payroll.services.record_service import PayrollRecordService

pytestmark = pytest.mark.asyncio

MARCH_2026 = PayPeriod(2026, 3)


async def save(db_session, pay_run_service, period, *employees):
    run = pay_run_service.calculate_pay_run(list(employees), period)
    records = await PayrollRecordService(db_session).save_run(run)
    await db_session.commit()
    return records


class TestSaveRun:
    """Test saving calculated pay runs."""

    async def test_saves_one_record_per_employee(
        self, db_session: AsyncSession, pay_run_service
    ):
        records = await save(
            db_session,
            pay_run_service,
            MARCH_2026,
            EmployeePay("EMP001", Decimal("50000"), Decimal("5000")),
            EmployeePay("EMP002", Decimal("30000")),
        )

        assert len(records) == 2
        first = records[0]
        assert first.payroll_ref == "PAY-202603-EMP001"
        assert first.schedule_code == "2026-02"
        assert first.is_active
        assert first.supersedes_id is None
        assert first.net_salary == Decimal("41469")
        assert first.basic_salary == Decimal("50000")
        assert first.created_at is not None

    async def test_errored_employees_not_saved(self, db_session, pay_run_service):
        records = await save(
            db_session,
            pay_run_service,
            MARCH_2026,
            EmployeePay("EMP001", Decimal("50000")),
            EmployeePay("EMP-BAD", Decimal("-1")),
        )
        assert [r.employee_id for r in records] == ["EMP001"]

    async def test_duplicate_period_rejected(self, db_session, pay_run_service):
        await save(db_session, pay_run_service, MARCH_2026, EmployeePay("EMP001", Decimal("50000")))

        run = pay_run_service.calculate_pay_run(
            [EmployeePay("EMP001", Decimal("60000"))], MARCH_2026
        )
        with pytest.raises(DuplicateRecordError) as exc_info:
            await PayrollRecordService(db_session).save_run(run)
        assert exc_info.value.employee_id == "EMP001"

    async def test_duplicate_within_run_rejected(self, db_session, pay_run_service):
        run = pay_run_service.calculate_pay_run(
            [EmployeePay("EMP001", Decimal("1000")), EmployeePay("EMP001", Decimal("2000"))],
            MARCH_2026,
        )
        with pytest.raises(DuplicateRecordError):
            await PayrollRecordService(db_session).save_run(run)

    async def test_concurrent_insert_reported_as_duplicate(
        self, db_session, pay_run_service, monkeypatch
    ):
        """The unique index backs up the read-then-insert check."""
        await save(db_session, pay_run_service, MARCH_2026, EmployeePay("EMP001", Decimal("50000")))

        service = PayrollRecordService(db_session)
        lookup = service._get_active
        checks = []

        async def stale_lookup(employee_id, year, month):
            # The pre-insert check misses the row another run just committed
            checks.append(employee_id)
            if len(checks) == 1:
                return None
            return await lookup(employee_id, year, month)

        monkeypatch.setattr(service, "_get_active", stale_lookup)

        run = pay_run_service.calculate_pay_run(
            [EmployeePay("EMP001", Decimal("60000"))], MARCH_2026
        )
        with pytest.raises(DuplicateRecordError) as exc_info:
            await service.save_run(run)
        assert exc_info.value.employee_id == "EMP001"

        active = await service.list_records(employee_id="EMP001")
        assert len(active) == 1
        assert active[0].basic_salary == Decimal("50000")

    async def test_other_period_allowed(self, db_session, pay_run_service):
        await save(db_session, pay_run_service, MARCH_2026, EmployeePay("EMP001", Decimal("50000")))
        records = await save(
            db_session, pay_run_service, PayPeriod(2026, 4), EmployeePay("EMP001", Decimal("50000"))
        )
        assert records[0].payroll_ref == "PAY-202604-EMP001"


class TestAmend:
    """Test amendments and supersession."""

    async def test_amend_supersedes_original(self, db_session, pay_run_service):
        (original,) = await save(
            db_session, pay_run_service, MARCH_2026, EmployeePay("EMP001", Decimal("50000"))
        )
        service = PayrollRecordService(db_session)

        calculation = pay_run_service.calculate_employee(
            EmployeePay("EMP001", Decimal("50000"), Decimal("5000")), MARCH_2026
        )
        amended = await service.amend(original.payroll_record_id, calculation)
        await db_session.commit()

        assert amended.supersedes_id == original.payroll_record_id
        assert amended.is_active
        assert amended.net_salary == Decimal("41469")

        reloaded = await service.get_record(original.payroll_record_id)
        assert reloaded.status == "superseded"

        active = await service.list_records(employee_id="EMP001")
        assert [r.payroll_record_id for r in active] == [amended.payroll_record_id]

        everything = await service.list_records(employee_id="EMP001", include_superseded=True)
        assert len(everything) == 2

    async def test_history_is_oldest_first(self, db_session, pay_run_service):
        (first,) = await save(
            db_session, pay_run_service, MARCH_2026, EmployeePay("EMP001", Decimal("40000"))
        )
        service = PayrollRecordService(db_session)

        second = await service.amend(
            first.payroll_record_id,
            pay_run_service.calculate_employee(EmployeePay("EMP001", Decimal("45000")), MARCH_2026),
        )
        third = await service.amend(
            second.payroll_record_id,
            pay_run_service.calculate_employee(EmployeePay("EMP001", Decimal("50000")), MARCH_2026),
        )
        await db_session.commit()

        chain = await service.history("EMP001", 2026, 3)
        assert [r.payroll_record_id for r in chain] == [
            first.payroll_record_id,
            second.payroll_record_id,
            third.payroll_record_id,
        ]
        assert [r.status for r in chain] == ["superseded", "superseded", "active"]

    async def test_amend_superseded_rejected(self, db_session, pay_run_service):
        (original,) = await save(
            db_session, pay_run_service, MARCH_2026, EmployeePay("EMP001", Decimal("50000"))
        )
        service = PayrollRecordService(db_session)
        calculation = pay_run_service.calculate_employee(
            EmployeePay("EMP001", Decimal("51000")), MARCH_2026
        )
        await service.amend(original.payroll_record_id, calculation)
        await db_session.commit()

        with pytest.raises(RecordSupersededError):
            await service.amend(original.payroll_record_id, calculation)

    async def test_amend_unknown_record(self, db_session, pay_run_service):
        calculation = pay_run_service.calculate_employee(
            EmployeePay("EMP001", Decimal("51000")), MARCH_2026
        )
        with pytest.raises(RecordNotFoundError):
            await PayrollRecordService(db_session).amend(uuid4(), calculation)


class TestTaxCard:
    """Test annual tax cards."""

    async def test_twelve_rows_with_gaps_zeroed(self, db_session, pay_run_service):
        for month in (2, 3):
            await save(
                db_session,
                pay_run_service,
                PayPeriod(2026, month),
                EmployeePay("EMP001", Decimal("50000"), Decimal("5000")),
            )

        card = await PayrollRecordService(db_session).tax_card("EMP001", 2026)

        assert [row.month for row in card.rows] == list(range(1, 13))
        assert card.rows[0].payroll_ref is None
        assert card.rows[0].gross_salary == Decimal("0")
        assert card.rows[1].payroll_ref == "PAY-202602-EMP001"
        assert card.rows[1].income_tax == Decimal("7893")

        totals = card.totals
        assert totals["gross_salary"] == Decimal("110000")
        assert totals["pension_contribution"] == Decimal("6600")
        assert totals["income_tax"] == Decimal("15786")
        assert totals["personal_relief"] == Decimal("4800")

    async def test_tax_card_uses_amended_figures(self, db_session, pay_run_service):
        (original,) = await save(
            db_session, pay_run_service, MARCH_2026, EmployeePay("EMP001", Decimal("30000"))
        )
        service = PayrollRecordService(db_session)
        await service.amend(
            original.payroll_record_id,
            pay_run_service.calculate_employee(
                EmployeePay("EMP001", Decimal("50000"), Decimal("5000")), MARCH_2026
            ),
        )
        await db_session.commit()

        card = await service.tax_card("EMP001", 2026)
        assert card.totals["gross_salary"] == Decimal("55000")

    async def test_empty_year(self, db_session):
        card = await PayrollRecordService(db_session).tax_card("NOBODY", 2026)
        assert len(card.rows) == 12
        assert all(total == 0 for total in card.totals.values())
