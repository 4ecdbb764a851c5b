"""Tests for amount parsing and cent conversion."""

import pytest
from decimal import Decimal

from reconkit.utils.amount_parser import (
    cents_to_decimal,
    format_cents,
    parse_amount,
    parse_amount_to_cents,
    to_cents,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("$123.45", Decimal("123.45")),
        ("123,45 €", Decimal("123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("10,5", Decimal("10.5")),
        ("(50.00)", Decimal("-50.00")),
    ],
)
def test_parse_amount_formats(text, expected):
    """Test English and European amount formats."""
    assert parse_amount(text) == expected


def test_parse_amount_invalid():
    """Test unparseable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount("abc")
    with pytest.raises(ValueError):
        parse_amount("")


def test_to_cents_rounds_half_up_once():
    """Conversion to cents rounds half up."""
    assert to_cents(Decimal("0.125")) == 13
    assert to_cents(Decimal("-0.125")) == -13
    assert to_cents("4.95") == 495


def test_to_cents_rejects_bool():
    """Booleans are not amounts."""
    with pytest.raises(ValueError):
        to_cents(True)


def test_parse_amount_to_cents():
    """Test parsing straight into cents."""
    assert parse_amount_to_cents("150,00") == 15000
    assert parse_amount_to_cents("1.234,56") == 123456


def test_cents_to_decimal_and_format():
    """Cents come back as two-place decimals for display."""
    assert cents_to_decimal(14505) == Decimal("145.05")
    assert format_cents(123456) == "1,234.56"
    assert format_cents(-495) == "-4.95"
