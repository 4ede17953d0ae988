"""Property-based tests for engine invariants.

These tests use hypothesis to generate salaries, benefits and pension limits
and verify that the result invariants hold for every valid input.
"""

from __future__ import annotations

from decimal import Decimal

from hypothesis import given, settings, strategies as st

from statutory_payroll.calculators.deductions import pension_cap
from statutory_payroll.calculators.engine import PayrollEngine, round_to_whole_unit
from statutory_payroll.calculators.statutory import HEALTH_LEVY_FLOOR, HEALTH_LEVY_RATE
from statutory_payroll.calculators.types import PayrollConfig, PayrollInput

ENGINE = PayrollEngine()

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("5000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)

limits = st.tuples(
    st.integers(min_value=0, max_value=50000),
    st.integers(min_value=0, max_value=200000),
).map(lambda pair: (Decimal(min(pair)), Decimal(max(pair))))


def exact(lower: Decimal = Decimal("9000"), upper: Decimal = Decimal("108000")) -> PayrollConfig:
    return PayrollConfig(
        round_to_whole_currency_unit=False,
        pension_lower_limit=lower,
        pension_upper_limit=upper,
    )


@settings(max_examples=200)
@given(basic=amounts, benefits=amounts, bounds=limits, rounded=st.booleans())
def test_result_invariants(basic, benefits, bounds, rounded):
    lower, upper = bounds
    config = PayrollConfig(
        round_to_whole_currency_unit=rounded,
        pension_lower_limit=lower,
        pension_upper_limit=upper,
    )
    result = ENGINE.calculate(PayrollInput(basic, benefits, config))

    for name, value in result.to_canonical_dict().items():
        assert Decimal(value) >= 0, name

    assert result.net_salary <= result.gross_salary
    assert result.income_tax == max(Decimal("0"), result.gross_tax - result.personal_relief)
    assert result.health_levy >= HEALTH_LEVY_FLOOR
    cap = pension_cap(config)
    assert result.pension_contribution <= (round_to_whole_unit(cap) if rounded else cap)


@settings(max_examples=200)
@given(basic=amounts, benefits=amounts, bounds=limits)
def test_exact_identities(basic, benefits, bounds):
    """With rounding off the gross and taxable identities hold exactly."""
    result = ENGINE.calculate(PayrollInput(basic, benefits, exact(*bounds)))

    assert result.gross_salary == basic + benefits
    assert result.taxable_income == max(
        Decimal("0"), result.gross_salary - result.pension_contribution
    )
    expected_net = (
        result.gross_salary
        - result.income_tax
        - result.pension_contribution
        - result.housing_levy
        - result.health_levy
    )
    assert result.net_salary == max(Decimal("0"), expected_net)


@settings(max_examples=200)
@given(basic=amounts, raise_by=amounts, benefits=amounts, rounded=st.booleans())
def test_monotonic_in_basic_salary(basic, raise_by, benefits, rounded):
    config = PayrollConfig(round_to_whole_currency_unit=rounded)
    low = ENGINE.calculate(PayrollInput(basic, benefits, config))
    high = ENGINE.calculate(PayrollInput(basic + raise_by, benefits, config))

    assert high.pension_contribution >= low.pension_contribution
    assert high.health_levy >= low.health_levy
    assert high.housing_levy >= low.housing_levy
    assert high.gross_tax >= low.gross_tax


@given(gross=st.decimals(min_value=Decimal("0"), max_value=Decimal("10909.09"), places=2))
def test_health_levy_floor(gross):
    assert gross * HEALTH_LEVY_RATE < HEALTH_LEVY_FLOOR
    result = ENGINE.calculate(PayrollInput(gross, config=exact()))
    assert result.health_levy == HEALTH_LEVY_FLOOR


@given(extra=amounts)
def test_pension_flat_above_ceiling(extra):
    config = exact()
    at_ceiling = ENGINE.calculate(PayrollInput(Decimal("108000"), config=config))
    above = ENGINE.calculate(PayrollInput(Decimal("108000") + extra, config=config))
    assert above.pension_contribution == at_ceiling.pension_contribution == pension_cap(config)


@given(basic=amounts, benefits=amounts, rounded=st.booleans())
def test_idempotent(basic, benefits, rounded):
    payroll_input = PayrollInput(
        basic, benefits, PayrollConfig(round_to_whole_currency_unit=rounded)
    )
    first = ENGINE.calculate(payroll_input)
    second = ENGINE.calculate(payroll_input)
    assert first.to_canonical_dict() == second.to_canonical_dict()
