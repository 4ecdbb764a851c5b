"""Tests for reading entity rows from CSV files."""

import pytest
from datetime import date

from reconkit.domain.entity_kinds import BANK_ACCOUNT, CATEGORY, CONTACT, EMPLOYEE
from reconkit.domain.errors import MissingColumnError, ValidationError
from reconkit.domain.row_reader import (
    parse_bool,
    parse_category_type,
    parse_entity_csv,
    parse_order,
    read_entity_rows,
)


class TestCellParsers:
    """Tests for typed cell parsers."""

    @pytest.mark.parametrize("value", ["Sí", "si", "YES", "1", "true", "x"])
    def test_true_values(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["No", "0", "false", "-"])
    def test_false_values(self, value):
        assert parse_bool(value) is False

    def test_unknown_bool(self):
        assert parse_bool("maybe") is None
        assert parse_bool(None) is None

    @pytest.mark.parametrize("value, expected", [("10", 10), ("10.0", 10), ("10,0", 10), (" 7 ", 7)])
    def test_order(self, value, expected):
        assert parse_order(value) == expected

    def test_invalid_order(self):
        assert parse_order("first") is None
        assert parse_order("") is None

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Ingrés", "income"),
            ("ingreso", "income"),
            ("income", "income"),
            ("Despesa", "expense"),
            ("gasto", "expense"),
            ("EXPENSE", "expense"),
            ("transfer", None),
        ],
    )
    def test_category_type(self, value, expected):
        assert parse_category_type(value) == expected


class TestReadEntityRows:
    """Tests for read_entity_rows against fixture files."""

    def test_bank_accounts(self, fixtures_dir):
        result = read_entity_rows(BANK_ACCOUNT, fixtures_dir / "bank_accounts.csv")
        assert result.errors == []
        assert [row.row_index for row in result.rows] == [2, 3, 4]
        main = result.rows[0]
        assert main.name == "Compte principal"
        assert main.get("iban") == "ES9121000418450200051332"
        assert main.get("is_default") is True
        assert main.get("is_active") is True
        assert result.rows[2].get("iban") is None
        assert result.rows[2].get("is_active") is None

    def test_contacts_semicolon_and_accented_headers(self, fixtures_dir):
        result = read_entity_rows(CONTACT, fixtures_dir / "contacts.csv")
        maria = result.rows[0]
        assert maria.name == "Maria García"
        assert maria.get("tax_id") == "12345678Z"
        assert maria.get("email") == "maria@example.org"
        assert maria.get("phone") == "600 112 233"
        assert maria.get("zip_code") == "08001"
        assert maria.get("contact_type") == "donant"
        assert any("Address" in warning for warning in result.warnings)

    def test_invalid_tax_id_is_kept_with_warning(self, fixtures_dir):
        result = read_entity_rows(CONTACT, fixtures_dir / "contacts.csv")
        tax_warnings = [w for w in result.warnings if "DNI, NIE or CIF" in w]
        assert tax_warnings == ["Row 3: Tax ID 'B-12345678' is not a valid DNI, NIE or CIF; kept as given."]
        assert result.rows[1].get("tax_id") == "B12345678"

    def test_categories(self, fixtures_dir):
        result = read_entity_rows(CATEGORY, fixtures_dir / "categories.csv")
        assert [(row.name, row.get("category_type"), row.get("order")) for row in result.rows] == [
            ("Donacions", "income", 10),
            ("Quotes socis", "income", 20),
            ("Lloguer", "expense", 10),
            ("Comissions bancàries", "expense", None),
        ]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_entity_rows(CONTACT, tmp_path / "nope.csv")


class TestParseEntityCsv:
    """Tests for parse_entity_csv edge cases."""

    def test_missing_required_column_blocks(self):
        with pytest.raises(MissingColumnError) as excinfo:
            parse_entity_csv(CATEGORY, "Nom,Ordre\nQuotes,1\n")
        assert excinfo.value.columns == ["Type"]

    def test_missing_identifier_column_warns(self):
        result = parse_entity_csv(EMPLOYEE, "Nom,Email\nAnna,anna@example.org\n")
        assert len(result.rows) == 1
        assert any("Tax ID" in w and "without update capability" in w for w in result.warnings)

    def test_empty_rows_are_skipped_and_rows_keep_file_numbers(self):
        text = "Nom,NIF\nAnna,12345678Z\n,\nJoan,X1234567L\n"
        result = parse_entity_csv(EMPLOYEE, text)
        assert [row.row_index for row in result.rows] == [2, 4]

    def test_invalid_iban_drops_row(self):
        text = "Nom,IBAN\nMain,ES91 2100 0418 4502 0005 1332\nBad,1234\n"
        result = parse_entity_csv(BANK_ACCOUNT, text)
        assert [row.name for row in result.rows] == ["Main"]
        assert result.errors == ["Row 3: invalid IBAN '1234'."]

    def test_unknown_category_type_drops_row(self):
        result = parse_entity_csv(CATEGORY, "Nom,Tipus\nQuotes,ingres\nAltres,transfer\n")
        assert len(result.rows) == 1
        assert result.errors[0].startswith("Row 3: invalid Type 'transfer'")

    def test_bad_date_and_order_degrade_to_warnings(self):
        result = parse_entity_csv(EMPLOYEE, "Nom,NIF,Data alta\nAnna,12345678Z,someday\n")
        assert result.rows[0].get("start_date") is None
        assert any(w.startswith("Row 2: invalid Start date") for w in result.warnings)

        result = parse_entity_csv(CATEGORY, "Nom,Tipus,Ordre\nQuotes,ingres,first\n")
        assert result.rows[0].get("order") is None
        assert any(w.startswith("Row 2: invalid Order") for w in result.warnings)

    def test_out_of_range_serial_date_is_a_warning(self):
        result = parse_entity_csv(EMPLOYEE, "Nom,NIF,Data alta\nAnna,12345678Z,99999999\n")
        assert result.rows[0].name == "Anna"
        assert result.rows[0].get("start_date") is None
        assert any(w.startswith("Row 2: invalid Start date") for w in result.warnings)

    def test_dates_are_parsed(self):
        result = parse_entity_csv(EMPLOYEE, "Nom,NIF,Data alta\nAnna,12345678Z,01/02/2024\n")
        assert result.rows[0].get("start_date") == date(2024, 2, 1)

    def test_bom_is_tolerated(self):
        result = parse_entity_csv(EMPLOYEE, "\ufeffNom,NIF\nAnna,12345678Z\n")
        assert result.rows[0].name == "Anna"

    def test_empty_text_rejected(self):
        with pytest.raises(ValidationError):
            parse_entity_csv(EMPLOYEE, "")
