"""Pytest fixtures for statutory payroll tests."""

from __future__ import annotations

from decimal import Decimal

import pytest

from statutory_payroll.calculators.engine import PayrollEngine
from statutory_payroll.calculators.types import PayrollConfig
from statutory_payroll.config import Settings
from statutory_payroll.services.pay_run_service import PayRunService


@pytest.fixture
def test_settings() -> Settings:
    """Settings that never touch the environment."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        engine_version="1.0.0",
        host="127.0.0.1",
        port=8000,
        debug=False,
        round_to_whole_currency_unit=True,
        log_level="INFO",
    )


@pytest.fixture
def engine() -> PayrollEngine:
    """Engine with the built-in PAYE bands."""
    return PayrollEngine()


@pytest.fixture
def default_config() -> PayrollConfig:
    """Limits from 2026-02-01, rounding on."""
    return PayrollConfig()


@pytest.fixture
def exact_config() -> PayrollConfig:
    """Limits from 2026-02-01, rounding off."""
    return PayrollConfig(round_to_whole_currency_unit=False)


@pytest.fixture
def legacy_config() -> PayrollConfig:
    """Limits in force 2025-02-01 to 2026-01-31."""
    return PayrollConfig(
        pension_lower_limit=Decimal("8000"),
        pension_upper_limit=Decimal("72000"),
    )


@pytest.fixture
def pay_run_service(test_settings: Settings) -> PayRunService:
    return PayRunService(settings=test_settings)
