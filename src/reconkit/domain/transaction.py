"""Transaction domain service."""

from typing import Optional
from datetime import date
from reconkit.database.base import Database
from reconkit.domain.entities import Transaction as TransactionEntity
from reconkit.domain.errors import NotFoundError, ValidationError


class TransactionService:
    """Service for managing ledger transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        date: date,
        amount_cents: int,
        description: Optional[str] = None,
        bank_account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        contact_id: Optional[int] = None,
        source: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Args:
            date: Transaction date
            amount_cents: Signed amount in cents (deposits are positive)
            description: Optional description
            bank_account_id: Optional bank account ID
            category_id: Optional category ID
            contact_id: Optional contact ID
            source: Optional origin label (e.g. "bank", "manual")

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is not integer cents
            NotFoundError: If a referenced bank account, category or contact
                doesn't exist
        """
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
            raise ValidationError(f"Amount must be integer cents, got {amount_cents!r}")

        # Verify references
        for kind, entity_id in (
            ("bank_account", bank_account_id),
            ("category", category_id),
            ("contact", contact_id),
        ):
            if entity_id is not None and self.db.get_entity(kind, entity_id) is None:
                raise NotFoundError(f"{kind.replace('_', ' ').capitalize()} {entity_id} not found")

        return self.db.create_transaction(
            date=date,
            amount_cents=amount_cents,
            description=description,
            bank_account_id=bank_account_id,
            category_id=category_id,
            contact_id=contact_id,
            source=source,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        bank_account_id: Optional[int] = None,
    ) -> list[TransactionEntity]:
        """List live transactions with optional filters."""
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            bank_account_id=bank_account_id,
        )

    def list_children(self, parent_id: int, include_archived: bool = False) -> list[TransactionEntity]:
        """List the split or payout lines recorded under a transaction.

        Raises:
            NotFoundError: If the parent doesn't exist
        """
        if self.db.get_transaction(parent_id) is None:
            raise NotFoundError(f"Transaction {parent_id} not found")
        return self.db.list_transactions(parent_id=parent_id, include_archived=include_archived)
