"""Amount parsing utilities.

Conversions between user-facing decimal strings and integer cents. The
engine only ever sees cents; these helpers are the boundary.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45" / "123,45 €"
    - "-123.45"
    - "1,234.56" (comma thousands, point decimal)
    - "1.234,56" (point thousands, comma decimal)
    - "10,5" (a lone comma is a decimal separator)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥\s]", "", amount_str)

    if "," in amount_str and "." in amount_str:
        # Whichever separator comes last is the decimal one
        if amount_str.rfind(",") > amount_str.rfind("."):
            amount_str = amount_str.replace(".", "").replace(",", ".")
        else:
            amount_str = amount_str.replace(",", "")
    elif "," in amount_str:
        amount_str = amount_str.replace(",", ".")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def to_cents(amount: Decimal | str | int) -> int:
    """Convert a decimal amount to integer cents, rounding half up once."""
    if isinstance(amount, bool):
        raise ValueError(f"Not an amount: {amount!r}")
    if isinstance(amount, str):
        amount = parse_amount(amount)
    quantized = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return int(quantized * 100)


def parse_amount_to_cents(amount_str: str) -> int:
    """Parse a user-entered amount string straight into integer cents."""
    return to_cents(parse_amount(amount_str))


def cents_to_decimal(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal for display."""
    return Decimal(int(cents)).scaleb(-2)


def format_cents(cents: int) -> str:
    """Format integer cents as a signed string with two decimals."""
    return f"{cents_to_decimal(cents):,.2f}"
