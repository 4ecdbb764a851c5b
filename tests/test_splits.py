"""Tests for split balancing and line validation."""

import pytest

from reconkit.domain.entities import SplitKind, SplitLine
from reconkit.domain.errors import ValidationError
from reconkit.domain.splits import (
    balance_split,
    calculate_split_delta_cents,
    is_split_balanced,
    validate_split_lines,
)


def test_balanced_split():
    assert calculate_split_delta_cents(10000, [6000, 4000]) == 0
    assert is_split_balanced(10000, [6000, 4000]) is True


def test_unbalanced_split_reports_delta():
    assert calculate_split_delta_cents(10000, [6000, 3999]) == 1
    assert is_split_balanced(10000, [6000, 3999]) is False
    assert calculate_split_delta_cents(10000, [6000, 4001]) == -1


def test_balance_split_result():
    balance = balance_split(10000, [6000, 3999])
    assert balance.parent_cents == 10000
    assert balance.total_cents == 9999
    assert balance.delta_cents == 1
    assert not balance.balanced


def test_no_tolerance_for_splits():
    """Even a one-cent difference is unbalanced."""
    assert not is_split_balanced(14505, [14504])


@pytest.mark.parametrize("bad", [100.0, "100", True])
def test_non_integer_amounts_rejected(bad):
    with pytest.raises(ValidationError):
        calculate_split_delta_cents(10000, [bad])
    with pytest.raises(ValidationError):
        calculate_split_delta_cents(bad, [100])


class TestValidateSplitLines:
    """Tests for validate_split_lines."""

    def test_valid_lines_are_cleaned(self):
        lines = validate_split_lines(
            [
                SplitLine(6000, SplitKind.DONATION, contact_id=1, note="  quota  "),
                SplitLine(4000, "non_donation", category_id=2, note="   "),
            ]
        )
        assert lines[0].note == "quota"
        assert lines[1].note is None
        assert lines[1].kind == SplitKind.NON_DONATION

    def test_needs_two_lines(self):
        with pytest.raises(ValidationError, match="at least 2"):
            validate_split_lines([SplitLine(100, SplitKind.DONATION, contact_id=1)])

    @pytest.mark.parametrize("amount", [0, -100])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValidationError, match="greater than zero"):
            validate_split_lines(
                [
                    SplitLine(amount, SplitKind.DONATION, contact_id=1),
                    SplitLine(100, SplitKind.DONATION, contact_id=1),
                ]
            )

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError, match="not valid"):
            validate_split_lines(
                [
                    SplitLine(100, "refund", contact_id=1),
                    SplitLine(100, SplitKind.DONATION, contact_id=1),
                ]
            )

    def test_fee_lines_cannot_be_entered(self):
        with pytest.raises(ValidationError):
            validate_split_lines(
                [
                    SplitLine(100, SplitKind.FEE, category_id=1),
                    SplitLine(100, SplitKind.DONATION, contact_id=1),
                ]
            )

    def test_donation_needs_contact(self):
        with pytest.raises(ValidationError, match="donor contact"):
            validate_split_lines(
                [
                    SplitLine(100, SplitKind.DONATION),
                    SplitLine(100, SplitKind.NON_DONATION, category_id=1),
                ]
            )

    def test_non_donation_needs_category(self):
        with pytest.raises(ValidationError, match="category"):
            validate_split_lines(
                [
                    SplitLine(100, SplitKind.DONATION, contact_id=1),
                    SplitLine(100, SplitKind.NON_DONATION),
                ]
            )
