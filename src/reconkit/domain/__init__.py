"""Domain layer for reconkit application."""

from reconkit.domain.transaction import TransactionService
from reconkit.domain.import_service import ImportService
from reconkit.domain.payout_service import PayoutService
from reconkit.domain.split_service import SplitService

__all__ = [
    "TransactionService",
    "ImportService",
    "PayoutService",
    "SplitService",
]
