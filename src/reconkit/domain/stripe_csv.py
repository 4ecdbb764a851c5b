"""Reader for payment-processor (Stripe) charge exports."""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from reconkit.domain.constants import ALLOWED_CHARGE_STATUSES
from reconkit.domain.entities import StripeChargeRow
from reconkit.domain.errors import MissingColumnError, ValidationError, missing_columns
from reconkit.utils.amount_parser import parse_amount_to_cents
from reconkit.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

# Canonical column -> accepted headers (compared trimmed, case-insensitive)
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "Created date (UTC)": ("created date (utc)", "created (utc)"),
    "Amount": ("amount",),
    "Fee": ("fee",),
    "Customer Email": ("customer email", "email"),
    "Status": ("status",),
    "Transfer": ("transfer",),
    "Amount Refunded": ("amount refunded", "refunded"),
}
DESCRIPTION_ALIASES = ("description",)


@dataclass
class StripeParseResult:
    """Charges read from the export, before payout grouping."""

    rows: list[StripeChargeRow] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _find_column(headers: list[str], aliases: tuple[str, ...]) -> Optional[int]:
    normalized = [header.strip().lower() for header in headers]
    for alias in aliases:
        if alias in normalized:
            return normalized.index(alias)
    return None


def _amount_cents(value: str, row_num: int, column: str) -> int:
    if not value:
        return 0
    try:
        return parse_amount_to_cents(value)
    except ValueError:
        raise ValidationError(f"Row {row_num}: could not parse {column} '{value}'")


def parse_stripe_csv(text: str) -> StripeParseResult:
    """Parse a charge export into StripeChargeRow values.

    Only charges with status succeeded or paid are kept; the rest are
    counted in a warning. Refunded charges are kept here and left out later
    by the payout grouper.

    Args:
        text: CSV text of the export (comma separated, BOM tolerated)

    Returns:
        StripeParseResult with the accepted charges and any warnings

    Raises:
        MissingColumnError: If a required column is absent
        ValidationError: If the file has no charges or an unreadable amount
            or date
    """
    reader = csv.reader(text.lstrip("\ufeff").splitlines())
    headers = next(reader, None)
    if not headers or not any(h.strip() for h in headers):
        raise ValidationError("The file contains no charges")

    columns: dict[str, int] = {}
    missing = []
    for canonical, aliases in COLUMN_ALIASES.items():
        idx = _find_column(headers, aliases)
        if idx is None:
            missing.append(canonical)
        else:
            columns[canonical] = idx
    if missing:
        raise MissingColumnError(missing_columns(missing), missing)
    description_idx = _find_column(headers, DESCRIPTION_ALIASES)

    result = StripeParseResult()
    data_rows = 0
    skipped_statuses = 0

    for row_num, values in enumerate(reader, start=2):
        if not any(value.strip() for value in values):
            continue
        data_rows += 1

        def get(column: str) -> str:
            idx = columns[column]
            return values[idx].strip() if idx < len(values) else ""

        status = get("Status")
        if status.lower() not in ALLOWED_CHARGE_STATUSES:
            skipped_statuses += 1
            continue

        try:
            created = parse_date(get("Created date (UTC)"))
        except ValueError:
            raise ValidationError(
                f"Row {row_num}: invalid created date '{get('Created date (UTC)')}'"
            )

        description = None
        if description_idx is not None and description_idx < len(values):
            description = values[description_idx].strip() or None

        result.rows.append(
            StripeChargeRow(
                id=get("id"),
                created_date=created,
                amount_cents=_amount_cents(get("Amount"), row_num, "Amount"),
                fee_cents=_amount_cents(get("Fee"), row_num, "Fee"),
                customer_email=get("Customer Email"),
                status=status,
                transfer=get("Transfer"),
                amount_refunded_cents=_amount_cents(
                    get("Amount Refunded"), row_num, "Amount Refunded"
                ),
                description=description,
            )
        )

    if data_rows == 0:
        raise ValidationError("The file contains no charges")

    if skipped_statuses:
        result.warnings.append(
            f"{skipped_statuses} charge{'s' if skipped_statuses != 1 else ''} "
            "excluded because their status is not succeeded or paid"
        )

    logger.debug("Read %d charges (%d excluded by status)", len(result.rows), skipped_statuses)
    return result


def read_stripe_csv(csv_file_path: str | Path) -> StripeParseResult:
    """Read a charge export from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")
    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        return parse_stripe_csv(f.read())
