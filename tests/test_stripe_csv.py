"""Tests for the processor charge export reader."""

import pytest
from datetime import date

from reconkit.domain.errors import MissingColumnError, ValidationError
from reconkit.domain.payouts import group_charges_by_transfer
from reconkit.domain.stripe_csv import parse_stripe_csv, read_stripe_csv

HEADER = "id,Created date (UTC),Amount,Fee,Customer Email,Status,Transfer,Amount Refunded\n"


def test_fixture_export(fixtures_dir):
    """Rows are read in cents with statuses filtered."""
    result = read_stripe_csv(fixtures_dir / "stripe_charges.csv")
    assert [row.id for row in result.rows] == ["ch_001", "ch_002", "ch_003", "ch_004"]
    first = result.rows[0]
    assert first.created_date == date(2024, 3, 10)
    assert first.amount_cents == 5000
    assert first.fee_cents == 165
    assert first.customer_email == "donor1@example.org"
    assert first.transfer == "po_A"
    assert first.description == "Donació campanya"
    assert result.rows[1].description is None
    assert result.rows[2].amount_refunded_cents == 3000
    assert result.warnings == ["1 charge excluded because their status is not succeeded or paid"]


def test_fixture_export_groups_to_known_totals(fixtures_dir):
    result = read_stripe_csv(fixtures_dir / "stripe_charges.csv")
    grouping = group_charges_by_transfer(result.rows)
    po_a = grouping.get("po_A")
    assert (po_a.gross_cents, po_a.fee_cents, po_a.net_cents) == (15000, 495, 14505)
    assert grouping.get("po_B").net_cents == 9650
    assert grouping.refund_warning.count == 1


def test_header_aliases_are_case_insensitive():
    text = (
        "ID,created (utc),amount,FEE,Email,status,transfer,Refunded\n"
        "ch_1,2024-01-05T10:00:00Z,10.00,0.50,a@example.org,succeeded,po_1,0\n"
    )
    result = parse_stripe_csv(text)
    assert result.rows[0].amount_cents == 1000
    assert result.rows[0].fee_cents == 50


def test_european_amounts():
    text = HEADER + 'ch_1,2024-01-05,"1.234,56","3,70",a@example.org,paid,po_1,"0,00"\n'
    row = parse_stripe_csv(text).rows[0]
    assert row.amount_cents == 123456
    assert row.fee_cents == 370
    assert row.amount_refunded_cents == 0


def test_empty_refunded_and_fee_are_zero():
    text = HEADER + "ch_1,2024-01-05,10.00,,a@example.org,paid,po_1,\n"
    row = parse_stripe_csv(text).rows[0]
    assert row.fee_cents == 0
    assert row.amount_refunded_cents == 0


def test_missing_columns_block():
    with pytest.raises(MissingColumnError) as excinfo:
        parse_stripe_csv("id,Amount,Fee\nch_1,10.00,0.50\n")
    assert "Transfer" in excinfo.value.columns
    assert "Status" in excinfo.value.columns


def test_header_only_has_no_charges():
    with pytest.raises(ValidationError, match="no charges"):
        parse_stripe_csv(HEADER)


def test_unreadable_amount():
    with pytest.raises(ValidationError, match="Row 2"):
        parse_stripe_csv(HEADER + "ch_1,2024-01-05,ten,0,a@example.org,paid,po_1,0\n")


def test_out_of_range_created_date():
    with pytest.raises(ValidationError, match="Row 2: invalid created date"):
        parse_stripe_csv(HEADER + "ch_1,99999999,10.00,0,a@example.org,paid,po_1,0\n")
