"""Split-amount balancing.

A split decomposes one observed transaction amount into several accounting
lines. Unlike payout matching there is no tolerance: the lines must add up
to the parent amount to the cent. Everything here works on integer cents;
converting user-entered decimals happens before these functions are called.
"""

from typing import Iterable, Sequence

from reconkit.domain.entities import SplitBalance, SplitKind, SplitLine
from reconkit.domain.errors import ValidationError


def _require_cents(value, what: str) -> int:
    # bool is an int subclass; floats and Decimals are rejected outright
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{what} must be integer cents, got {value!r}")
    return value


def calculate_split_delta_cents(parent_cents: int, line_cents: Iterable[int]) -> int:
    """Return parent minus the signed sum of the lines, in cents."""
    parent = _require_cents(parent_cents, "Parent amount")
    total = sum(_require_cents(cents, f"Line {i} amount") for i, cents in enumerate(line_cents))
    return parent - total


def is_split_balanced(parent_cents: int, line_cents: Iterable[int]) -> bool:
    return calculate_split_delta_cents(parent_cents, line_cents) == 0


def balance_split(parent_cents: int, line_cents: Iterable[int]) -> SplitBalance:
    """Compute the delta and the balanced verdict for a proposed split."""
    amounts = list(line_cents)
    delta = calculate_split_delta_cents(parent_cents, amounts)
    return SplitBalance(
        parent_cents=parent_cents,
        total_cents=parent_cents - delta,
        delta_cents=delta,
        balanced=delta == 0,
    )


def validate_split_lines(lines: Sequence[SplitLine]) -> list[SplitLine]:
    """Check user-proposed split lines before they are balanced.

    Returns the lines with notes trimmed (empty notes become None).

    Raises:
        ValidationError: If fewer than two lines are given, or any line has a
            non-positive or non-integer amount, an unknown kind, or lacks the
            reference its kind needs
    """
    if len(lines) < 2:
        raise ValidationError("A split needs at least 2 lines")

    cleaned = []
    for i, line in enumerate(lines):
        amount = _require_cents(line.amount_cents, f"lines[{i}].amount_cents")
        if amount <= 0:
            raise ValidationError(f"lines[{i}].amount_cents must be greater than zero")
        try:
            kind = SplitKind(line.kind)
        except ValueError:
            raise ValidationError(f"lines[{i}].kind '{line.kind}' is not valid")
        if kind == SplitKind.FEE:
            raise ValidationError(f"lines[{i}].kind '{kind.value}' cannot be entered by hand")
        if kind == SplitKind.DONATION and line.contact_id is None:
            raise ValidationError(f"lines[{i}] needs a donor contact")
        if kind == SplitKind.NON_DONATION and line.category_id is None:
            raise ValidationError(f"lines[{i}] needs a category")

        note = line.note.strip() if isinstance(line.note, str) else None
        cleaned.append(
            SplitLine(
                amount_cents=amount,
                kind=kind,
                category_id=line.category_id,
                contact_id=line.contact_id,
                note=note or None,
                reference=line.reference,
            )
        )
    return cleaned
