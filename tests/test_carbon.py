"""Unit tests for the credit calculator."""

import math

import pytest

from app.core.errors import InvalidInput, ValidationError
from app.handlers.carbon import compute_credit, credit_status
from app.models.credit import CreditStatus


@pytest.mark.parametrize("emission_value", [1000.5, 1001, 1500, 10_000])
def test_emission_above_limit_is_a_deficit(emission_value) -> None:
    result = compute_credit(emission_value, 1000)

    assert result.status == CreditStatus.DEFICIT
    assert result.credit_amount < 0


def test_emission_at_limit_is_neutral() -> None:
    result = compute_credit(1000, 1000)

    assert result.status == CreditStatus.NEUTRAL
    assert result.credit_amount == 0


@pytest.mark.parametrize("emission_value", [0, 1, 850, 999.99])
def test_emission_below_limit_earns_credit(emission_value) -> None:
    result = compute_credit(emission_value, 1000)

    assert result.status == CreditStatus.EARNED
    assert result.credit_amount > 0


def test_credit_is_tonnes_of_differential() -> None:
    result = compute_credit(850, 1000)

    assert result.credit_amount == pytest.approx(0.15)
    assert result.status == CreditStatus.EARNED


def test_deficit_amount() -> None:
    assert compute_credit(1250, 1000).credit_amount == pytest.approx(-0.25)


def test_compute_credit_is_deterministic() -> None:
    assert compute_credit(812.4, 1000) == compute_credit(812.4, 1000)


@pytest.mark.parametrize("bad", ["850", None, True, math.nan, math.inf, [850]])
def test_non_numeric_input_is_rejected(bad) -> None:
    with pytest.raises(InvalidInput):
        compute_credit(bad, 1000)
    with pytest.raises(InvalidInput):
        compute_credit(850, bad)


def test_invalid_input_is_a_validation_error() -> None:
    assert issubclass(InvalidInput, ValidationError)


def test_credit_status_sign() -> None:
    assert credit_status(0.0) == CreditStatus.NEUTRAL
    assert credit_status(-0.0) == CreditStatus.NEUTRAL
    assert credit_status(1e-9) == CreditStatus.EARNED
    assert credit_status(-1e-9) == CreditStatus.DEFICIT
