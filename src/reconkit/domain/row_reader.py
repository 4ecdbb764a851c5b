"""Strict parse step from spreadsheet CSV rows to ParsedRow values.

The matcher never sees raw cells. This module finds the columns of an
entity kind by their header aliases, coerces each cell to its declared type,
normalizes identifying fields, and reports problems per row.
"""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from reconkit.domain.entities import ParsedRow
from reconkit.domain.entity_kinds import EntityKindConfig, FieldSpec, ValueType
from reconkit.domain.errors import MissingColumnError, ValidationError, missing_columns
from reconkit.utils.date_parser import parse_date
from reconkit.utils.normalize import (
    FieldKind,
    is_valid_iban_format,
    is_valid_spanish_tax_id,
    normalize_key,
    strip_accents,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"si", "yes", "1", "true", "x"}
_FALSE_VALUES = {"no", "0", "false", "-"}

_CATEGORY_TYPES = {
    "income": "income",
    "ingres": "income",
    "ingreso": "income",
    "ingressos": "income",
    "ingresos": "income",
    "expense": "expense",
    "despesa": "expense",
    "despeses": "expense",
    "gasto": "expense",
    "gastos": "expense",
}


@dataclass
class RowReadResult:
    """Parsed rows plus the problems found while reading them."""

    rows: list[ParsedRow] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def normalize_header(header: str) -> str:
    """Lower-case, strip accents and collapse whitespace: " Per  Defecte " -> "per defecte"."""
    return " ".join(strip_accents(header or "").lower().split())


def detect_columns(config: EntityKindConfig, headers: list[str]) -> dict[str, int]:
    """Map field names to column indexes using each field's header aliases."""
    normalized = [normalize_header(header) for header in headers]
    mapping: dict[str, int] = {}
    for spec in config.fields:
        aliases = {normalize_header(alias) for alias in spec.headers}
        for idx, header in enumerate(normalized):
            if header in aliases:
                mapping[spec.name] = idx
                break
    return mapping


def parse_bool(value: Any) -> Optional[bool]:
    """Parse spreadsheet booleans (Sí/Yes/1/true/x vs No/0/false/-)."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = strip_accents(str(value)).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


def parse_order(value: Any) -> Optional[int]:
    """Parse an ordering value ("10", "10.0", "10,0"); None if not a number."""
    if value is None:
        return None
    text = str(value).strip().replace(",", ".")
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(round(number))


def parse_category_type(value: Any) -> Optional[str]:
    """Map Catalan, Spanish and English type names to income/expense."""
    if value is None:
        return None
    return _CATEGORY_TYPES.get(strip_accents(str(value)).strip().lower())


def _cell(row: list[str], idx: Optional[int]) -> Optional[str]:
    if idx is None or idx >= len(row):
        return None
    value = row[idx].strip() if row[idx] else ""
    return value or None


def _coerce(
    spec: FieldSpec, raw: Optional[str], row_num: int, result: RowReadResult
) -> tuple[Any, bool]:
    """Coerce one cell. Returns (value, keep_row)."""
    if raw is None:
        return None, True

    if spec.value_type == ValueType.BOOL:
        value = parse_bool(raw)
        if value is None:
            result.warnings.append(
                f"Row {row_num}: {spec.label} value '{raw}' not recognized, ignored."
            )
        return value, True

    if spec.value_type == ValueType.DATE:
        try:
            return parse_date(raw), True
        except ValueError:
            result.warnings.append(f"Row {row_num}: invalid {spec.label} '{raw}', ignored.")
            return None, True

    if spec.value_type == ValueType.INT:
        value = parse_order(raw)
        if value is None:
            result.warnings.append(f"Row {row_num}: invalid {spec.label} '{raw}', ignored.")
        return value, True

    if spec.value_type == ValueType.CATEGORY_TYPE:
        value = parse_category_type(raw)
        if value is None:
            result.errors.append(
                f"Row {row_num}: invalid {spec.label} '{raw}'. Valid values: income, expense."
            )
            return None, False
        return value, True

    if spec.normalizer == FieldKind.IBAN and not is_valid_iban_format(raw):
        result.errors.append(f"Row {row_num}: invalid IBAN '{raw}'.")
        return None, False

    if spec.normalizer == FieldKind.TAX_ID and not is_valid_spanish_tax_id(raw):
        result.warnings.append(
            f"Row {row_num}: {spec.label} '{raw}' is not a valid DNI, NIE or CIF; kept as given."
        )

    if spec.normalizer is not None:
        return normalize_key(raw, spec.normalizer), True
    return raw, True


def parse_entity_csv(config: EntityKindConfig, text: str) -> RowReadResult:
    """Parse CSV text into ParsedRow values for one entity kind.

    Row numbers are 1-based as a spreadsheet shows them (header is row 1).

    Raises:
        ValidationError: If the text has no header row
        MissingColumnError: If a required column is absent
    """
    text = text.lstrip("\ufeff")
    sample = text[:1024]
    try:
        delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
    except csv.Error:
        delimiter = ","

    reader = csv.reader(text.splitlines(), delimiter=delimiter)
    headers = next(reader, None)
    if not headers or not any(h.strip() for h in headers):
        raise ValidationError("File has no columns")

    mapping = detect_columns(config, headers)
    result = RowReadResult()

    missing_required = [spec.label for spec in config.fields if spec.required and spec.name not in mapping]
    if missing_required:
        raise MissingColumnError(missing_columns(missing_required), missing_required)

    key_names = {name for name, _ in config.key_fields}
    missing_key = [config.field(name).label for name in key_names if name not in mapping]
    if missing_key:
        result.warnings.append(
            f"No {', '.join(sorted(missing_key))} column found; every row will be created "
            "as new without update capability."
        )
    missing_optional = [
        spec.label for spec in config.fields
        if spec.name not in mapping and not spec.required and spec.name not in key_names
    ]
    if missing_optional:
        result.warnings.append(f"Columns not found, left empty: {', '.join(missing_optional)}.")

    for row_num, row in enumerate(reader, start=2):
        if not any(cell.strip() for cell in row):
            continue

        values: dict[str, Any] = {}
        keep = True
        for spec in config.fields:
            raw = _cell(row, mapping.get(spec.name))
            value, keep = _coerce(spec, raw, row_num, result)
            if not keep:
                break
            values[spec.name] = value
        if not keep:
            continue

        name = values.pop("name", None) or ""
        result.rows.append(ParsedRow(row_index=row_num, kind=config.name, name=name, fields=values))

    logger.debug(
        "Parsed %d %s rows (%d warnings, %d errors)",
        len(result.rows),
        config.name,
        len(result.warnings),
        len(result.errors),
    )
    return result


def read_entity_rows(config: EntityKindConfig, csv_file_path: str | Path) -> RowReadResult:
    """Read a CSV file and parse it for one entity kind.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file has no header row
        MissingColumnError: If a required column is absent
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")
    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        return parse_entity_csv(config, f.read())
