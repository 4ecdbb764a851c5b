"""Helpers for slicing decision lists into write batches."""

from typing import Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive chunks of at most ``size``.

    Order is preserved and nothing is regrouped, so applying the chunks in
    sequence is equivalent to applying the whole list.

    Raises:
        ValueError: If size is not a positive integer
    """
    if size <= 0:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[start:start + size]) for start in range(0, len(items), size)]
