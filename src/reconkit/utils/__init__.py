"""Utility functions for reconkit."""

from reconkit.utils.date_parser import parse_date
from reconkit.utils.amount_parser import parse_amount, parse_amount_to_cents, to_cents
from reconkit.utils.normalize import FieldKind, normalize_key
from reconkit.utils.chunking import chunked

__all__ = [
    "parse_date",
    "parse_amount",
    "parse_amount_to_cents",
    "to_cents",
    "FieldKind",
    "normalize_key",
    "chunked",
]
