"""Split domain service."""

import logging
from typing import Iterable, Sequence

from reconkit.database.base import Database
from reconkit.domain.entities import SplitBalance, SplitLine
from reconkit.domain.errors import (
    ConflictError,
    NotFoundError,
    UnbalancedSplitError,
    ValidationError,
    transaction_not_found,
    unbalanced_split,
)
from reconkit.domain.splits import balance_split, validate_split_lines

logger = logging.getLogger(__name__)

SPLIT_SOURCE = "split"


class SplitService:
    """Service for splitting one bank movement into several accounting lines."""

    def __init__(self, db: Database):
        """Initialize split service.

        Args:
            db: Database instance
        """
        self.db = db

    def check(self, parent_cents: int, line_cents: Iterable[int]) -> SplitBalance:
        """Balance proposed line amounts against a parent amount without writing."""
        return balance_split(parent_cents, line_cents)

    def apply_split(self, transaction_id: int, lines: Sequence[SplitLine]) -> list[int]:
        """Split a transaction into child lines.

        Args:
            transaction_id: Parent transaction ID
            lines: Proposed lines, positive cents each

        Returns:
            IDs of the child transactions

        Raises:
            NotFoundError: If the parent or a referenced category/contact
                doesn't exist
            ConflictError: If the parent is already split
            ValidationError: If the parent cannot be split or a line is invalid
            UnbalancedSplitError: If the lines don't add up to the parent
        """
        parent = self.db.get_transaction(transaction_id)
        if parent is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if parent.is_split:
            raise ConflictError(f"Transaction {transaction_id} is already split")
        if parent.parent_id is not None or parent.archived:
            raise ValidationError(f"Transaction {transaction_id} is a split line itself")
        if parent.amount_cents <= 0:
            raise ValidationError(f"Transaction {transaction_id} is not an income and cannot be split")
        if parent.source == "stripe":
            raise ValidationError(
                f"Transaction {transaction_id} comes from a payout import and cannot be split here"
            )

        cleaned = validate_split_lines(lines)
        for line in cleaned:
            if line.category_id is not None and self.db.get_entity("category", line.category_id) is None:
                raise NotFoundError(f"Category {line.category_id} not found")
            if line.contact_id is not None and self.db.get_entity("contact", line.contact_id) is None:
                raise NotFoundError(f"Contact {line.contact_id} not found")

        balance = balance_split(parent.amount_cents, [line.amount_cents for line in cleaned])
        if not balance.balanced:
            logger.warning(
                "Split of transaction %d rejected: delta %d cents", transaction_id, balance.delta_cents
            )
            raise UnbalancedSplitError(unbalanced_split(balance.delta_cents), balance.delta_cents)

        child_ids = self.db.create_child_transactions(parent.id, cleaned, source=SPLIT_SOURCE)
        logger.info("Split transaction %d into %d lines", transaction_id, len(child_ids))
        return child_ids

    def undo_split(self, transaction_id: int) -> int:
        """Archive a transaction's split lines and restore it.

        Calling it again on a restored transaction archives nothing.

        Returns:
            Number of lines archived

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        parent = self.db.get_transaction(transaction_id)
        if parent is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        archived = self.db.archive_children(transaction_id)
        logger.info("Undid split of transaction %d: %d lines archived", transaction_id, archived)
        return archived
