"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from statutory_payroll.calculators.types import PayrollResult
from statutory_payroll.services.pay_run_service import EmployeeCalculation
from statutory_payroll.services.record_service import TaxCard


# ============================================================================
# Requests
# ============================================================================


class EmployeePayRequest(BaseModel):
    """Pay inputs for one employee.

    Amounts are validated by the engine, so negative values surface as the
    same 422 error the engine raises.
    """

    employee_id: str = Field(min_length=1)
    basic_salary: Decimal
    benefits: Decimal = Decimal("0")


class PreviewRequest(EmployeePayRequest):
    """Schema for previewing one employee's pay without saving."""

    year: int
    month: int
    round_to_whole_currency_unit: bool | None = None


class PayRunRequest(BaseModel):
    """Schema for running payroll for a period."""

    year: int
    month: int
    employees: list[EmployeePayRequest]
    round_to_whole_currency_unit: bool | None = None


class AmendRequest(BaseModel):
    """New inputs for an amended record."""

    basic_salary: Decimal
    benefits: Decimal = Decimal("0")
    round_to_whole_currency_unit: bool | None = None


# ============================================================================
# Responses
# ============================================================================


class PayrollResultResponse(BaseModel):
    """Itemized gross-to-net breakdown."""

    model_config = ConfigDict(from_attributes=True)

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

    @classmethod
    def from_result(cls, result: PayrollResult) -> "PayrollResultResponse":
        return cls.model_validate(result)


class EmployeeCalculationResponse(BaseModel):
    """Calculation for one employee."""

    employee_id: str
    payroll_ref: str
    schedule_code: str
    calculation_id: UUID
    result: PayrollResultResponse

    @classmethod
    def from_calculation(cls, calc: EmployeeCalculation) -> "EmployeeCalculationResponse":
        return cls(
            employee_id=calc.employee_id,
            payroll_ref=calc.payroll_ref,
            schedule_code=calc.schedule_code,
            calculation_id=calc.calculation_id,
            result=PayrollResultResponse.from_result(calc.result),
        )


class EmployeeErrorResponse(BaseModel):
    """Blocking validation error for one employee."""

    employee_id: str
    message: str


class PayRunTotals(BaseModel):
    """Period totals over successfully calculated employees."""

    total_gross: Decimal
    total_net: Decimal
    total_income_tax: Decimal
    total_pension: Decimal
    total_health_levy: Decimal
    total_housing_levy: Decimal
    employee_count: int
    error_count: int


class PayRunResponse(BaseModel):
    """Schema for pay run response."""

    period: str
    calculations: list[EmployeeCalculationResponse]
    errors: list[EmployeeErrorResponse]
    totals: PayRunTotals
    record_ids: list[UUID]


class PayrollRecordResponse(BaseModel):
    """Schema for a stored payroll record."""

    model_config = ConfigDict(from_attributes=True)

    payroll_record_id: UUID
    employee_id: str
    payroll_ref: str
    period_year: int
    period_month: int
    schedule_code: str
    basic_salary: Decimal
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
    calculation_id: UUID
    engine_version: str
    supersedes_id: UUID | None = None
    status: str
    created_at: datetime | None = None


class PayrollRecordListResponse(BaseModel):
    """Schema for listing payroll records."""

    items: list[PayrollRecordResponse]
    total: int


class TaxCardRowResponse(BaseModel):
    """One month of a tax card."""

    model_config = ConfigDict(from_attributes=True)

    month: int
    payroll_ref: str | None = None
    gross_salary: Decimal
    benefits: Decimal
    pension_contribution: Decimal
    taxable_income: Decimal
    gross_tax: Decimal
    personal_relief: Decimal
    income_tax: Decimal


class TaxCardResponse(BaseModel):
    """Annual tax card."""

    employee_id: str
    year: int
    rows: list[TaxCardRowResponse]
    totals: dict[str, Decimal]

    @classmethod
    def from_tax_card(cls, card: TaxCard) -> "TaxCardResponse":
        return cls(
            employee_id=card.employee_id,
            year=card.year,
            rows=[TaxCardRowResponse.model_validate(row) for row in card.rows],
            totals=card.totals,
        )


class ErrorResponse(BaseModel):
    """Error payload."""

    detail: str
    code: str
