"""Abstract database interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence
from datetime import date

if TYPE_CHECKING:
    # Annotation-only: a runtime import would cycle through domain/__init__.py
    from reconkit.domain.entities import ExistingEntity, SplitLine, Transaction


class Database(ABC):
    """Abstract database interface for reconkit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Entity operations
    @abstractmethod
    def list_entities(self, kind: str) -> list[ExistingEntity]:
        """Read a fresh snapshot of every stored entity of a kind."""
        pass

    @abstractmethod
    def get_entity(self, kind: str, entity_id: int) -> Optional[ExistingEntity]:
        """Get one entity of a kind by ID."""
        pass

    @abstractmethod
    def apply_entity_batch(
        self,
        kind: str,
        creates: Sequence[dict[str, Any]],
        updates: Sequence[tuple[int, dict[str, Any]]],
    ) -> list[int]:
        """Write one batch of creates and updates in a single commit.

        Returns the IDs of the created entities, in the order given.
        """
        pass

    @abstractmethod
    def set_exclusive_flag(self, kind: str, field: str, entity_id: int) -> None:
        """Set a boolean flag on one entity and clear it on every other one."""
        pass

    # Transaction operations
    @abstractmethod
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
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        bank_account_id: Optional[int] = None,
        parent_id: Optional[int] = None,
        include_archived: bool = False,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            bank_account_id: Optional bank account ID filter
            parent_id: If given, only the children of this transaction
            include_archived: If True, archived children are returned too
        """
        pass

    @abstractmethod
    def find_imported_charge_ids(self, charge_ids: Iterable[str]) -> set[str]:
        """Return the charge IDs already recorded on a live transaction."""
        pass

    @abstractmethod
    def create_child_transactions(
        self, parent_id: int, lines: Sequence[SplitLine], source: str
    ) -> list[int]:
        """Record lines as children of a parent and mark it split, in one commit.

        Returns the child transaction IDs, in line order.
        """
        pass

    @abstractmethod
    def archive_children(self, parent_id: int) -> int:
        """Archive a parent's live children and clear its split mark.

        Returns the number of children archived.
        """
        pass
