"""Tests for the key normalizer."""

import pytest

from reconkit.utils.chunking import chunked
from reconkit.utils.normalize import (
    FieldKind,
    composite_key,
    is_valid_iban_format,
    is_valid_spanish_tax_id,
    normalize_key,
    spanish_tax_id_type,
    strip_accents,
)


class TestNormalizeKey:
    """Tests for normalize_key."""

    def test_iban_strips_whitespace_and_uppercases(self):
        assert normalize_key("es91 2100 0418 4502 0005 1332", FieldKind.IBAN) == "ES9121000418450200051332"

    def test_tax_id_strips_separators(self):
        assert normalize_key(" b-12.345.678 ", FieldKind.TAX_ID) == "B12345678"

    def test_name_trims_only(self):
        assert normalize_key("  Maria García ", FieldKind.NAME) == "Maria García"

    def test_name_key_folds_case_and_whitespace(self):
        assert normalize_key(" Quotes  Socis ", FieldKind.NAME_KEY) == "quotes-socis"

    def test_email_lowercases(self):
        assert normalize_key(" Maria@Example.ORG ", FieldKind.EMAIL) == "maria@example.org"

    def test_phone_groups_digits(self):
        assert normalize_key("+34 600-11-22-33", FieldKind.PHONE) == "346 001 122 33"
        assert normalize_key("600 11 22 33", FieldKind.PHONE) == "600 112 233"
        assert normalize_key("93.123.45.67", FieldKind.PHONE) == "93 123 45 67"

    def test_zip_pads_to_five_digits(self):
        assert normalize_key("8001", FieldKind.ZIP) == "08001"

    def test_kind_accepts_string_value(self):
        assert normalize_key("es00 1", "iban") == "ES001"

    @pytest.mark.parametrize("kind", list(FieldKind))
    def test_empty_values_are_none(self, kind):
        """Missing, blank and non-text values never raise."""
        assert normalize_key(None, kind) is None
        assert normalize_key("   ", kind) is None
        assert normalize_key(True, kind) is None

    def test_unknown_kind_falls_back_to_trim(self):
        assert normalize_key("  Value ", "something-else") == "Value"

    def test_same_identifier_written_differently_normalizes_equal(self):
        a = normalize_key("ES91 2100 0418 4502 0005 1332", FieldKind.IBAN)
        b = normalize_key("es9121000418450200051332", FieldKind.IBAN)
        assert a == b


def test_composite_key():
    """Composite keys need every part."""
    assert composite_key("income", "quotes") == "income:quotes"
    assert composite_key("income", None) is None
    assert composite_key("", "quotes") is None


def test_strip_accents():
    assert strip_accents("Raó Social Ingrés") == "Rao Social Ingres"


def test_iban_format():
    assert is_valid_iban_format("ES91 2100 0418 4502 0005 1332")
    assert not is_valid_iban_format("1234")
    assert not is_valid_iban_format("ES91-2100")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12345678Z", "DNI"),
        ("12345678-z", "DNI"),
        ("X1234567L", "NIE"),
        ("B12345674", "CIF"),
        ("12345678A", None),
        ("B12345678", None),
        ("hello", None),
    ],
)
def test_spanish_tax_id_type(value, expected):
    assert spanish_tax_id_type(value) == expected
    assert is_valid_spanish_tax_id(value) is (expected is not None)


def test_chunked_preserves_order():
    """Chunks are consecutive slices of the input."""
    items = list(range(120))
    chunks = chunked(items, 50)
    assert [len(chunk) for chunk in chunks] == [50, 50, 20]
    assert [item for chunk in chunks for item in chunk] == items
    assert chunked([], 50) == []


def test_chunked_rejects_non_positive_size():
    with pytest.raises(ValueError):
        chunked([1, 2], 0)
