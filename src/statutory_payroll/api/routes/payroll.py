"""Payroll API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from statutory_payroll.api.dependencies import DbSession, PayRunServiceDep
from statutory_payroll.api.schemas import (
    AmendRequest,
    EmployeeCalculationResponse,
    EmployeeErrorResponse,
    ErrorResponse,
    PayrollRecordListResponse,
    PayrollRecordResponse,
    PayRunRequest,
    PayRunResponse,
    PayRunTotals,
    PreviewRequest,
    TaxCardResponse,
)
from statutory_payroll.services.pay_run_service import EmployeePay, PayPeriod
from statutory_payroll.services.record_service import PayrollRecordService

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.post(
    "/preview",
    response_model=EmployeeCalculationResponse,
    responses={422: {"model": ErrorResponse}},
)
async def preview_payroll(
    service: PayRunServiceDep,
    payload: PreviewRequest,
) -> EmployeeCalculationResponse:
    """Calculate one employee's pay without saving anything."""
    calculation = service.calculate_employee(
        EmployeePay(payload.employee_id, payload.basic_salary, payload.benefits),
        PayPeriod(payload.year, payload.month),
        payload.round_to_whole_currency_unit,
    )
    return EmployeeCalculationResponse.from_calculation(calculation)


@router.post(
    "/runs",
    response_model=PayRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def run_payroll(
    db: DbSession,
    service: PayRunServiceDep,
    payload: PayRunRequest,
) -> PayRunResponse:
    """Calculate a pay run and persist every successful employee."""
    period = PayPeriod(payload.year, payload.month)
    run = service.calculate_pay_run(
        [EmployeePay(e.employee_id, e.basic_salary, e.benefits) for e in payload.employees],
        period,
        payload.round_to_whole_currency_unit,
    )

    records = await PayrollRecordService(db).save_run(run)
    await db.commit()

    return PayRunResponse(
        period=period.ref_fragment,
        calculations=[EmployeeCalculationResponse.from_calculation(c) for c in run.calculations],
        errors=[EmployeeErrorResponse(employee_id=e.employee_id, message=e.message) for e in run.errors],
        totals=PayRunTotals(
            total_gross=run.total_gross,
            total_net=run.total_net,
            total_income_tax=run.total_income_tax,
            total_pension=run.total_pension,
            total_health_levy=run.total_health_levy,
            total_housing_levy=run.total_housing_levy,
            employee_count=run.employee_count,
            error_count=run.error_count,
        ),
        record_ids=[r.payroll_record_id for r in records],
    )


@router.get("/records", response_model=PayrollRecordListResponse)
async def list_records(
    db: DbSession,
    employee_id: str | None = None,
    year: int | None = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
    include_superseded: bool = False,
) -> PayrollRecordListResponse:
    """List stored payroll records."""
    records = await PayrollRecordService(db).list_records(
        employee_id=employee_id,
        year=year,
        month=month,
        include_superseded=include_superseded,
    )
    return PayrollRecordListResponse(
        items=[PayrollRecordResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.post(
    "/records/{record_id}/amend",
    response_model=PayrollRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def amend_record(
    db: DbSession,
    service: PayRunServiceDep,
    record_id: Annotated[UUID, Path()],
    payload: AmendRequest,
) -> PayrollRecordResponse:
    """Recalculate a stored record with new inputs and supersede it."""
    records = PayrollRecordService(db)
    original = await records.get_record(record_id)

    calculation = service.calculate_employee(
        EmployeePay(original.employee_id, payload.basic_salary, payload.benefits),
        PayPeriod(original.period_year, original.period_month),
        payload.round_to_whole_currency_unit,
    )
    amended = await records.amend(record_id, calculation)
    await db.commit()
    return PayrollRecordResponse.model_validate(amended)


@router.get(
    "/tax-cards/{employee_id}/{year}",
    response_model=TaxCardResponse,
)
async def get_tax_card(
    db: DbSession,
    employee_id: Annotated[str, Path()],
    year: Annotated[int, Path()],
) -> TaxCardResponse:
    """Annual tax card for one employee."""
    card = await PayrollRecordService(db).tax_card(employee_id, year)
    return TaxCardResponse.from_tax_card(card)
