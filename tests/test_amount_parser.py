"""Tests for amount parsing."""

from decimal import Decimal
import pytest

from moneta.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("R$ 123,45", Decimal("123.45")),
        ("-$123.45", Decimal("-123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("R$ 1.234.567,89", Decimal("1234567.89")),
        ("(50.00)", Decimal("-50.00")),
        ("1.000.000", Decimal("1000000")),
        ("€ 10", Decimal("10")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12a", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)
