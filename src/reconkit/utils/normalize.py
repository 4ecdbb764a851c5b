"""Key normalization for matching incoming rows against stored entities.

Every normalizer is a pure, total function: it never raises and returns
either a canonical string or None when the input is empty or unusable.
Two values a person would call "the same identifier" normalize to the
same key.

Free-text names are only trimmed. Business names can legitimately differ
by case or punctuation alone, so they are compared case-sensitively; the
one exception is the category name key, which folds case and whitespace
because category names are matched within a single (type, name) space.
"""

from enum import Enum
import re
import unicodedata
from typing import Any, Optional


class FieldKind(str, Enum):
    """Kinds of identifying fields the normalizer understands."""

    IBAN = "iban"
    TAX_ID = "taxId"
    NAME = "name"
    NAME_KEY = "nameKey"
    EMAIL = "email"
    PHONE = "phone"
    ZIP = "zip"


_CIF_CONTROL_LETTERS = "JABCDEFGHI"
_DNI_CONTROL_LETTERS = "TRWAGMYFPDXBNJZSQVHLCKE"


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    try:
        text = str(value)
    except Exception:
        return None
    text = text.strip()
    return text or None


def normalize_iban(value: Any) -> Optional[str]:
    """Strip all whitespace and upper-case: "es12 3456 ..." -> "ES123456..."."""
    text = _as_text(value)
    if text is None:
        return None
    return re.sub(r"\s", "", text).upper() or None


def normalize_tax_id(value: Any) -> Optional[str]:
    """Strip spaces, hyphens and dots and upper-case: "b-12.345.678" -> "B12345678"."""
    text = _as_text(value)
    if text is None:
        return None
    return re.sub(r"[\s.\-]", "", text).upper() or None


def normalize_name(value: Any) -> Optional[str]:
    """Trim only; case and punctuation are significant."""
    return _as_text(value)


def normalize_name_key(value: Any) -> Optional[str]:
    """Fold a category name into its key: "Quotes  Socis" -> "quotes-socis"."""
    text = _as_text(value)
    if text is None:
        return None
    return re.sub(r"\s+", "-", text).lower()


def normalize_email(value: Any) -> Optional[str]:
    """Lower-case and remove whitespace."""
    text = _as_text(value)
    if text is None:
        return None
    return re.sub(r"\s", "", text).lower() or None


def normalize_phone(value: Any) -> Optional[str]:
    """Keep digits only, grouped the way local numbers are written.

    Mobiles (9 digits starting 6/7) -> "600 123 456"; landlines (9 digits
    starting 9) -> "93 123 45 67"; longer numbers are grouped by three.
    """
    text = _as_text(value)
    if text is None:
        return None
    digits = re.sub(r"\D", "", text)
    if not digits:
        return None
    if len(digits) == 9 and digits[0] in "67":
        return f"{digits[:3]} {digits[3:6]} {digits[6:]}"
    if len(digits) == 9 and digits[0] == "9":
        return f"{digits[:2]} {digits[2:5]} {digits[5:7]} {digits[7:]}"
    if len(digits) > 9:
        return re.sub(r"(\d{3})(?=\d)", r"\1 ", digits)
    return digits


def normalize_zip_code(value: Any) -> Optional[str]:
    """Five digits, left-padded with zeros: "8001" -> "08001"."""
    text = _as_text(value)
    if text is None:
        return None
    digits = re.sub(r"\D", "", text)
    if not digits:
        return None
    return digits.zfill(5)[:5]


_NORMALIZERS = {
    FieldKind.IBAN: normalize_iban,
    FieldKind.TAX_ID: normalize_tax_id,
    FieldKind.NAME: normalize_name,
    FieldKind.NAME_KEY: normalize_name_key,
    FieldKind.EMAIL: normalize_email,
    FieldKind.PHONE: normalize_phone,
    FieldKind.ZIP: normalize_zip_code,
}


def normalize_key(value: Any, kind: FieldKind | str) -> Optional[str]:
    """Normalize ``value`` as a field of the given kind.

    Unknown kinds fall back to trimming, so the function stays total.
    """
    try:
        kind = FieldKind(kind)
    except ValueError:
        return _as_text(value)
    return _NORMALIZERS[kind](value)


def composite_key(*parts: Optional[str]) -> Optional[str]:
    """Join already-normalized parts; None if any part is missing."""
    if any(part is None or part == "" for part in parts):
        return None
    return ":".join(parts)


def strip_accents(text: str) -> str:
    """Remove combining accents: "García" -> "Garcia"."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_valid_iban_format(value: Any) -> bool:
    """Check IBAN shape only (country letters, 15-34 chars); no MOD-97."""
    iban = normalize_iban(value)
    if iban is None or not 15 <= len(iban) <= 34:
        return False
    return re.fullmatch(r"[A-Z]{2}[0-9A-Z]+", iban) is not None


def spanish_tax_id_type(value: Any) -> Optional[str]:
    """Return "DNI", "NIE" or "CIF" for a valid Spanish tax id, else None.

    When in doubt the answer is None: a wrong positive is worse than an
    identifier left for manual review.
    """
    tax_id = normalize_tax_id(value)
    if tax_id is None or not 8 <= len(tax_id) <= 9:
        return None

    match = re.fullmatch(r"(\d{8})([A-Z])", tax_id)
    if match:
        numbers, letter = match.groups()
        return "DNI" if _DNI_CONTROL_LETTERS[int(numbers) % 23] == letter else None

    match = re.fullmatch(r"([XYZ])(\d{7})([A-Z])", tax_id)
    if match:
        prefix, numbers, letter = match.groups()
        full_number = int(str("XYZ".index(prefix)) + numbers)
        return "NIE" if _DNI_CONTROL_LETTERS[full_number % 23] == letter else None

    match = re.fullmatch(r"([ABCDEFGHJKLMNPQRSUVW])(\d{7})([A-J0-9])", tax_id)
    if match:
        org_type, digits, control = match.groups()
        sum_odd = 0
        sum_even = 0
        for position, digit_char in enumerate(digits):
            digit = int(digit_char)
            if position % 2 == 0:
                doubled = digit * 2
                sum_even += doubled - 9 if doubled > 9 else doubled
            else:
                sum_odd += digit
        control_digit = (10 - ((sum_odd + sum_even) % 10)) % 10
        control_letter = _CIF_CONTROL_LETTERS[control_digit]

        if org_type in "PQRSW":
            valid = control == control_letter
        elif org_type in "AB":
            valid = control == str(control_digit)
        else:
            valid = control in (control_letter, str(control_digit))
        return "CIF" if valid else None

    return None


def is_valid_spanish_tax_id(value: Any) -> bool:
    """True only for a well-formed DNI, NIE or CIF with a correct control."""
    return spanish_tax_id_type(value) is not None
