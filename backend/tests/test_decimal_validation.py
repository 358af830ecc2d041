"""
Testes da validação de valores DECIMAL(10,2)
"""
from decimal import Decimal

import pytest

from ecologic.services.decimal_validation import MAX_DECIMAL_VALUE, validate_decimal_value


@pytest.mark.parametrize("value", [None, ""])
def test_missing_value_is_none(value):
    assert validate_decimal_value(value) is None


@pytest.mark.parametrize("value", ["abc", float("nan"), float("inf"), True, object()])
def test_invalid_value_is_none(value):
    assert validate_decimal_value(value, "preco") is None


def test_rounds_half_up_to_cents():
    assert validate_decimal_value(Decimal("10.005")) == Decimal("10.01")
    assert validate_decimal_value(2.675) == Decimal("2.68")


def test_clamps_above_limit():
    assert validate_decimal_value(Decimal("100000000")) == MAX_DECIMAL_VALUE
    assert validate_decimal_value("-123456789") == -MAX_DECIMAL_VALUE


def test_limit_itself_is_kept():
    assert validate_decimal_value("99999999.99") == MAX_DECIMAL_VALUE


def test_brazilian_string():
    assert validate_decimal_value("R$ 1.234,56") == Decimal("1234.56")


def test_numeric_string():
    assert validate_decimal_value("12.5") == Decimal("12.50")


def test_logs_warning_when_clamping(caplog):
    with caplog.at_level("WARNING"):
        validate_decimal_value(Decimal("500000000"), "valor_qtd01")
    assert "valor_qtd01" in caplog.text
