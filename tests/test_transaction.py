"""Tests for transactions: service and commands."""

import pytest
from datetime import date

from reconkit.cli.main import cli
from reconkit.domain.errors import NotFoundError, ValidationError


class TestTransactionService:
    """Tests for TransactionService."""

    def test_create_and_get(self, transaction_service):
        txn_id = transaction_service.create_transaction(
            date=date(2024, 3, 15), amount_cents=14505, description="STRIPE PAYOUT", source="bank"
        )
        txn = transaction_service.get_transaction(txn_id)
        assert txn.amount_cents == 14505
        assert str(txn.amount) == "145.05"
        assert txn.source == "bank"
        assert not txn.is_split
        assert not txn.archived
        assert txn.parent_id is None

    def test_get_missing_returns_none(self, transaction_service):
        assert transaction_service.get_transaction(999) is None

    @pytest.mark.parametrize("amount", [145.05, "14505", True])
    def test_amount_must_be_integer_cents(self, transaction_service, amount):
        with pytest.raises(ValidationError):
            transaction_service.create_transaction(date=date(2024, 3, 15), amount_cents=amount)

    @pytest.mark.parametrize("field", ["bank_account_id", "category_id", "contact_id"])
    def test_references_must_exist(self, transaction_service, field):
        with pytest.raises(NotFoundError):
            transaction_service.create_transaction(
                date=date(2024, 3, 15), amount_cents=100, **{field: 5}
            )

    def test_list_filters(self, transaction_service, temp_db):
        account_id = temp_db.apply_entity_batch("bank_account", [{"name": "Main"}], [])[0]
        transaction_service.create_transaction(date=date(2024, 1, 10), amount_cents=100)
        transaction_service.create_transaction(
            date=date(2024, 2, 10), amount_cents=200, bank_account_id=account_id
        )
        transaction_service.create_transaction(date=date(2024, 3, 10), amount_cents=300)

        all_txns = transaction_service.list_transactions()
        assert [t.amount_cents for t in all_txns] == [300, 200, 100]

        february = transaction_service.list_transactions(
            start_date=date(2024, 2, 1), end_date=date(2024, 2, 29)
        )
        assert [t.amount_cents for t in february] == [200]

        by_account = transaction_service.list_transactions(bank_account_id=account_id)
        assert [t.amount_cents for t in by_account] == [200]

    def test_list_children_of_missing_parent(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.list_children(999)


def test_add_transaction_command(cli_runner, temp_db):
    """Test adding a transaction with a European amount."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "transaction",
            "add",
            "--date",
            "15/03/2024",
            "--amount",
            "1.234,56",
            "--description",
            "TRANSF SOCI",
        ],
    )

    assert result.exit_code == 0
    assert "Created transaction 1 (1,234.56)" in result.output


def test_add_transaction_invalid_amount(cli_runner, temp_db):
    """Test that an unreadable amount is rejected."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "transaction", "add", "--date", "2024-03-15", "--amount", "lots"],
    )

    assert result.exit_code == 1
    assert "Invalid amount" in result.output


def test_add_transaction_unknown_category(cli_runner, temp_db):
    """Test that a missing category is reported."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "transaction",
            "add",
            "--date",
            "2024-03-15",
            "--amount",
            "10",
            "--category",
            "9",
        ],
    )

    assert result.exit_code == 1
    assert "Category 9 not found" in result.output


def test_list_and_show_commands(cli_runner, temp_db, sample_deposit):
    """Test listing and showing a transaction."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "transaction", "list"])
    assert result.exit_code == 0
    assert "Found 1 transaction(s)" in result.output
    assert "STRIPE PAYOUT" in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "transaction", "show", str(sample_deposit)]
    )
    assert result.exit_code == 0
    assert "Amount: 145.05" in result.output
    assert "Split: no" in result.output


def test_show_missing_transaction(cli_runner, temp_db):
    """Test showing a transaction that does not exist."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "transaction", "show", "42"])
    assert result.exit_code == 1
    assert "Transaction 42 not found" in result.output
