"""Pay run service - calls the engine once per employee for a pay period."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence
from uuid import UUID

from statutory_payroll.calculators.engine import PayrollEngine
from statutory_payroll.calculators.statutory import (
    BUILTIN_SCHEDULES,
    StatutorySchedule,
    resolve_schedule,
)
from statutory_payroll.calculators.types import ZERO, PayrollInput, PayrollResult
from statutory_payroll.config import Settings, get_settings
from statutory_payroll.exceptions import (
    InvalidBracketTableError,
    InvalidInputError,
    ScheduleNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayPeriod:
    """A monthly pay period."""

    year: int
    month: int  # 1-12

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise InvalidInputError(f"month must be 1-12, got {self.month}")
        if not 1 <= self.year <= date.max.year:
            raise InvalidInputError(
                f"year must be 1-{date.max.year}, got {self.year}"
            )

    @property
    def start_date(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def ref_fragment(self) -> str:
        return f"{self.year:04d}{self.month:02d}"


@dataclass(frozen=True)
class EmployeePay:
    """Pay inputs for one employee, as supplied by the roster."""

    employee_id: str
    basic_salary: Decimal
    benefits: Decimal = ZERO


@dataclass
class EmployeeCalculation:
    """Result of calculating pay for one employee."""

    employee_id: str
    period: PayPeriod
    basic_salary: Decimal
    schedule_code: str
    payroll_ref: str
    calculation_id: UUID
    inputs_fingerprint: str
    engine_version: str
    result: PayrollResult


@dataclass
class EmployeeError:
    """A blocking validation error for one employee."""

    employee_id: str
    message: str


@dataclass
class PayRunCalculationResult:
    """Result of calculating an entire pay run."""

    period: PayPeriod
    calculations: list[EmployeeCalculation] = field(default_factory=list)
    errors: list[EmployeeError] = field(default_factory=list)
    total_gross: Decimal = ZERO
    total_net: Decimal = ZERO
    total_income_tax: Decimal = ZERO
    total_pension: Decimal = ZERO
    total_health_levy: Decimal = ZERO
    total_housing_levy: Decimal = ZERO

    @property
    def employee_count(self) -> int:
        return len(self.calculations)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        return not self.errors

    def add(self, calculation: EmployeeCalculation) -> None:
        result = calculation.result
        self.calculations.append(calculation)
        self.total_gross += result.gross_salary
        self.total_net += result.net_salary
        self.total_income_tax += result.income_tax
        self.total_pension += result.pension_contribution
        self.total_health_levy += result.health_levy
        self.total_housing_levy += result.housing_levy


def build_payroll_ref(employee_id: str, period: PayPeriod) -> str:
    """Human-readable reference, e.g. PAY-202602-EMP0047."""
    return f"PAY-{period.ref_fragment}-{employee_id}"


class PayRunService:
    """Orchestrates engine calls for a pay period.

    Each employee is an independent calculation. An invalid employee record
    produces a blocking error for that employee only; it never yields a
    zeroed or partial result, and the rest of the run proceeds.
    """

    def __init__(
        self,
        engines: dict[str, PayrollEngine] | None = None,
        schedules: Sequence[StatutorySchedule] = BUILTIN_SCHEDULES,
        settings: Settings | None = None,
    ):
        self.schedules = tuple(schedules)
        self.settings = settings or get_settings()
        self._engines: dict[str, PayrollEngine] = dict(engines or {})

    def calculate_employee(
        self,
        employee: EmployeePay,
        period: PayPeriod,
        round_to_whole_currency_unit: bool | None = None,
    ) -> EmployeeCalculation:
        """Calculate pay for a single employee.

        Raises:
            InvalidInputError: Negative or malformed amounts
            InvalidBracketTableError: Schedule carries a broken bracket table
            ScheduleNotFoundError: No schedule covers the period
        """
        if round_to_whole_currency_unit is None:
            round_to_whole_currency_unit = self.settings.round_to_whole_currency_unit

        schedule = resolve_schedule(period.start_date, self.schedules)
        payroll_input = PayrollInput(
            basic_salary=employee.basic_salary,
            benefits=employee.benefits,
            config=schedule.payroll_config(round_to_whole_currency_unit),
        )
        result = self._engine_for(schedule).calculate(payroll_input)

        inputs_fingerprint = self._compute_inputs_fingerprint(
            payroll_input, schedule.code
        )
        calculation_id = self._generate_calculation_id(
            employee.employee_id, period, schedule.code, inputs_fingerprint
        )

        return EmployeeCalculation(
            employee_id=employee.employee_id,
            period=period,
            basic_salary=payroll_input.basic_salary,
            schedule_code=schedule.code,
            payroll_ref=build_payroll_ref(employee.employee_id, period),
            calculation_id=calculation_id,
            inputs_fingerprint=inputs_fingerprint,
            engine_version=self.settings.engine_version,
            result=result,
        )

    def calculate_pay_run(
        self,
        employees: Iterable[EmployeePay],
        period: PayPeriod,
        round_to_whole_currency_unit: bool | None = None,
    ) -> PayRunCalculationResult:
        """Calculate pay for every employee in the run."""
        run = PayRunCalculationResult(period=period)
        logger.info("Calculating pay run for %s", period.ref_fragment)

        for employee in employees:
            try:
                calculation = self.calculate_employee(
                    employee, period, round_to_whole_currency_unit
                )
            except (InvalidInputError, InvalidBracketTableError, ScheduleNotFoundError) as e:
                logger.warning(
                    "Employee %s blocked in pay run %s: %s",
                    employee.employee_id,
                    period.ref_fragment,
                    e,
                )
                run.errors.append(EmployeeError(employee.employee_id, str(e)))
                continue
            run.add(calculation)

        logger.info(
            "Pay run %s calculated: %d employees, %d errors, gross=%s net=%s",
            period.ref_fragment,
            run.employee_count,
            run.error_count,
            run.total_gross,
            run.total_net,
        )
        return run

    def _engine_for(self, schedule: StatutorySchedule) -> PayrollEngine:
        engine = self._engines.get(schedule.code)
        if engine is None:
            engine = PayrollEngine(schedule.brackets)
            self._engines[schedule.code] = engine
        return engine

    def _compute_inputs_fingerprint(
        self, payroll_input: PayrollInput, schedule_code: str
    ) -> str:
        """Compute fingerprint of all inputs used in calculation."""
        data = {
            "basic_salary": str(payroll_input.basic_salary),
            "benefits": str(payroll_input.benefits),
            "round": payroll_input.config.round_to_whole_currency_unit,
            "pension_lower_limit": str(payroll_input.config.pension_lower_limit),
            "pension_upper_limit": str(payroll_input.config.pension_upper_limit),
            "schedule_code": schedule_code,
        }
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    def _generate_calculation_id(
        self,
        employee_id: str,
        period: PayPeriod,
        schedule_code: str,
        inputs_fingerprint: str,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "employee_id": employee_id,
            "period": period.ref_fragment,
            "schedule_code": schedule_code,
            "engine_version": self.settings.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])
