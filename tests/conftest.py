"""Shared pytest fixtures for reconkit tests."""

import tempfile
import os
from datetime import date
from pathlib import Path
import pytest

from reconkit.database.factories import create_sqlite_database
from reconkit.domain.import_service import ImportService
from reconkit.domain.payout_service import PayoutService
from reconkit.domain.split_service import SplitService
from reconkit.domain.transaction import TransactionService
from reconkit.domain.entities import ExistingEntity, ParsedRow


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def import_service(temp_db):
    """Create an ImportService with a temporary database."""
    return ImportService(temp_db)


@pytest.fixture
def payout_service(temp_db):
    """Create a PayoutService with a temporary database."""
    return PayoutService(temp_db)


@pytest.fixture
def split_service(temp_db):
    """Create a SplitService with a temporary database."""
    return SplitService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_contacts(temp_db):
    """Store two donors and return their IDs by email."""
    ids = temp_db.apply_entity_batch(
        "contact",
        [
            {"name": "Donor One", "tax_id": "12345678Z", "email": "donor1@example.org"},
            {"name": "Donor Two", "tax_id": "87654321X", "email": "donor2@example.org"},
        ],
        [],
    )
    return {"donor1@example.org": ids[0], "donor2@example.org": ids[1]}


@pytest.fixture
def sample_categories(temp_db):
    """Store an income and an expense category and return their IDs."""
    ids = temp_db.apply_entity_batch(
        "category",
        [
            {"name": "Quotes", "category_type": "income", "order": 10},
            {"name": "Comissions", "category_type": "expense", "order": 20},
        ],
        [],
    )
    return {"income": ids[0], "expense": ids[1]}


@pytest.fixture
def sample_deposit(transaction_service):
    """Record a 145.05 bank deposit and return its ID."""
    return transaction_service.create_transaction(
        date=date(2024, 3, 15),
        amount_cents=14505,
        description="STRIPE PAYOUT",
        source="bank",
    )


@pytest.fixture
def make_row():
    """Build ParsedRow values with sequential row numbers."""

    def _make(kind, name, row_index=2, **fields):
        return ParsedRow(row_index=row_index, kind=kind, name=name, fields=fields)

    return _make


@pytest.fixture
def make_existing():
    """Build ExistingEntity snapshots."""

    def _make(kind, entity_id, name, **fields):
        return ExistingEntity(id=entity_id, kind=kind, name=name, fields=fields)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
