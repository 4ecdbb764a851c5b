"""Entity kind configuration for the generic matcher.

Each kind the importer understands is described by one ``EntityKindConfig``
value: which field identifies a record, which fields are compared to build
the change list, which fields are deliberately ignored, and which boolean
flag (if any) may be held by at most one record of the kind. The matcher
itself has a single algorithm driven by this data.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Union

from reconkit.domain.entities import ExistingEntity, ParsedRow
from reconkit.domain.errors import (
    ExclusiveFlagError,
    NotFoundError,
    entity_kind_not_found,
    exclusive_flag_claimed_too_often,
)
from reconkit.utils.normalize import FieldKind, composite_key, normalize_key

Record = Union[ParsedRow, ExistingEntity]


class CompareMode(str, Enum):
    """How a comparable field contributes to the change list."""

    # Normalized values differ (empty and missing are the same)
    VALUE = "value"
    # Only compared when the incoming row carries a value
    WHEN_PRESENT = "when_present"
    # Only a False -> True change counts
    PROMOTE_ONLY = "promote_only"


class ValueType(str, Enum):
    """Cell coercion used by the parse step."""

    TEXT = "text"
    BOOL = "bool"
    DATE = "date"
    INT = "int"
    CATEGORY_TYPE = "category_type"


@dataclass(frozen=True)
class FieldSpec:
    """One field of an entity kind."""

    name: str
    label: str
    headers: tuple[str, ...] = ()
    value_type: ValueType = ValueType.TEXT
    normalizer: Optional[FieldKind] = None
    mode: CompareMode = CompareMode.VALUE
    required: bool = False

    def comparable(self, value: Any) -> Any:
        if self.normalizer is not None:
            return normalize_key(value, self.normalizer)
        if value == "":
            return None
        return value

    def differs(self, incoming: Any, existing: Any) -> bool:
        """Return True when the incoming value changes the stored one."""
        if self.mode == CompareMode.PROMOTE_ONLY:
            return incoming is True and existing is not True
        if self.mode == CompareMode.WHEN_PRESENT and incoming is None:
            return False
        return self.comparable(incoming) != self.comparable(existing)


@dataclass(frozen=True)
class ExclusiveFlagRule:
    """A boolean flag that at most one entity of a kind may hold.

    Checked once per run, before any row is matched, so a file that claims
    the flag on several rows is rejected as a whole.
    """

    field: str
    label: str
    promote_first_created: bool = True

    def claimants(self, rows: Iterable[ParsedRow]) -> list[ParsedRow]:
        return [row for row in rows if row.get(self.field) is True]

    def validate(self, rows: Iterable[ParsedRow]) -> Optional[ParsedRow]:
        """Return the single claiming row, or None when no row claims the flag.

        Raises:
            ExclusiveFlagError: If more than one row claims the flag
        """
        claimants = self.claimants(rows)
        if len(claimants) > 1:
            indexes = [row.row_index for row in claimants]
            raise ExclusiveFlagError(
                exclusive_flag_claimed_too_often(self.label, indexes), indexes
            )
        return claimants[0] if claimants else None

    def current_holder(self, existing: Iterable[ExistingEntity]) -> Optional[ExistingEntity]:
        for entity in existing:
            if entity.get(self.field) is True:
                return entity
        return None


@dataclass(frozen=True)
class EntityKindConfig:
    """Data-driven description of how one entity kind is matched."""

    name: str
    label: str
    version: int
    key_fields: tuple[tuple[str, FieldKind], ...]
    fields: tuple[FieldSpec, ...]
    compared: tuple[str, ...]
    ignored: tuple[str, ...] = ()
    exclusive_flag: Optional[ExclusiveFlagRule] = None

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    @property
    def required_fields(self) -> list[str]:
        return [spec.name for spec in self.fields if spec.required]

    @property
    def identifier_label(self) -> str:
        return " + ".join(self.field(name).label for name, _ in self.key_fields)

    def match_key(self, record: Record) -> Optional[str]:
        """Normalized key for a row or stored entity; None if any part is missing."""
        parts = [normalize_key(record.get(name), kind) for name, kind in self.key_fields]
        return composite_key(*parts)

    def diff(self, row: ParsedRow, existing: ExistingEntity) -> list[str]:
        """Labels of compared fields whose incoming value changes the stored one."""
        changes = []
        for name in self.compared:
            if name in self.ignored:
                continue
            spec = self.field(name)
            if spec.differs(row.get(name), existing.get(name)):
                changes.append(spec.label)
        return changes


_NAME_HEADERS = ("nom", "nombre", "name")
_IBAN_HEADERS = ("iban",)
_TAX_ID_HEADERS = ("nif", "dni", "nie", "cif", "tax id", "taxid")
_EMAIL_HEADERS = ("email", "e-mail", "correu", "correo")
_PHONE_HEADERS = ("telefon", "telefono", "phone", "mobil", "movil")
_ZIP_HEADERS = ("codi postal", "codigo postal", "cp", "zip", "postal")
_NOTES_HEADERS = ("notes", "notas", "observacions", "comentaris")


BANK_ACCOUNT = EntityKindConfig(
    name="bank_account",
    label="Bank account",
    version=1,
    key_fields=(("iban", FieldKind.IBAN),),
    fields=(
        FieldSpec("name", "Name", _NAME_HEADERS + ("compte", "cuenta"), required=True,
                  normalizer=FieldKind.NAME),
        FieldSpec("iban", "IBAN", _IBAN_HEADERS, normalizer=FieldKind.IBAN),
        FieldSpec("bank_name", "Bank", ("banc", "banco", "bank", "entitat", "entidad"),
                  normalizer=FieldKind.NAME),
        FieldSpec("is_default", "Default", ("per defecte", "por defecto", "default", "predeterminat"),
                  value_type=ValueType.BOOL, mode=CompareMode.PROMOTE_ONLY),
        FieldSpec("is_active", "Active", ("actiu", "activo", "active", "estat", "estado"),
                  value_type=ValueType.BOOL, mode=CompareMode.WHEN_PRESENT),
    ),
    compared=("name", "bank_name", "is_default", "is_active"),
    exclusive_flag=ExclusiveFlagRule(field="is_default", label="Default"),
)

EMPLOYEE = EntityKindConfig(
    name="employee",
    label="Employee",
    version=1,
    key_fields=(("tax_id", FieldKind.TAX_ID),),
    fields=(
        FieldSpec("name", "Name", _NAME_HEADERS, required=True, normalizer=FieldKind.NAME),
        FieldSpec("tax_id", "Tax ID", _TAX_ID_HEADERS, normalizer=FieldKind.TAX_ID),
        FieldSpec("email", "Email", _EMAIL_HEADERS, normalizer=FieldKind.EMAIL),
        FieldSpec("phone", "Phone", _PHONE_HEADERS, normalizer=FieldKind.PHONE),
        FieldSpec("iban", "IBAN", _IBAN_HEADERS + ("compte", "cuenta"), normalizer=FieldKind.IBAN),
        FieldSpec("start_date", "Start date",
                  ("data alta", "fecha alta", "start date", "inici", "inicio"),
                  value_type=ValueType.DATE),
        FieldSpec("zip_code", "Zip code", _ZIP_HEADERS, normalizer=FieldKind.ZIP),
        FieldSpec("notes", "Notes", _NOTES_HEADERS, normalizer=FieldKind.NAME),
    ),
    compared=("name", "email", "phone", "iban", "start_date", "zip_code", "notes"),
)

CONTACT = EntityKindConfig(
    name="contact",
    label="Contact",
    version=1,
    key_fields=(("tax_id", FieldKind.TAX_ID),),
    fields=(
        FieldSpec("name", "Name", _NAME_HEADERS + ("raó social", "razon social"), required=True,
                  normalizer=FieldKind.NAME),
        FieldSpec("tax_id", "Tax ID", _TAX_ID_HEADERS, normalizer=FieldKind.TAX_ID),
        FieldSpec("email", "Email", _EMAIL_HEADERS, normalizer=FieldKind.EMAIL),
        FieldSpec("phone", "Phone", _PHONE_HEADERS, normalizer=FieldKind.PHONE),
        FieldSpec("iban", "IBAN", _IBAN_HEADERS, normalizer=FieldKind.IBAN),
        FieldSpec("zip_code", "Zip code", _ZIP_HEADERS, normalizer=FieldKind.ZIP),
        FieldSpec("address", "Address", ("adreca", "direccion", "address", "domicili", "domicilio"),
                  normalizer=FieldKind.NAME),
        FieldSpec("contact_type", "Type", ("tipus", "tipo", "type", "rol", "role"),
                  normalizer=FieldKind.NAME_KEY, mode=CompareMode.WHEN_PRESENT),
        FieldSpec("notes", "Notes", _NOTES_HEADERS, normalizer=FieldKind.NAME),
    ),
    compared=("name", "email", "phone", "iban", "zip_code", "address", "contact_type"),
    ignored=("notes",),
)

CATEGORY = EntityKindConfig(
    name="category",
    label="Category",
    version=1,
    key_fields=(("category_type", FieldKind.NAME_KEY), ("name", FieldKind.NAME_KEY)),
    fields=(
        FieldSpec("name", "Name", _NAME_HEADERS + ("categoria", "category"), required=True,
                  normalizer=FieldKind.NAME),
        FieldSpec("category_type", "Type", ("tipus", "tipo", "type"),
                  value_type=ValueType.CATEGORY_TYPE, required=True),
        FieldSpec("order", "Order", ("ordre", "orden", "order"),
                  value_type=ValueType.INT, mode=CompareMode.WHEN_PRESENT),
    ),
    compared=("order",),
)

ENTITY_KINDS: dict[str, EntityKindConfig] = {
    config.name: config for config in (BANK_ACCOUNT, EMPLOYEE, CONTACT, CATEGORY)
}


def get_entity_kind(name: str) -> EntityKindConfig:
    """Look up a kind by name, accepting hyphens and plurals ("bank-accounts").

    Raises:
        NotFoundError: If no kind matches
    """
    key = name.strip().lower().replace("-", "_")
    if key in ENTITY_KINDS:
        return ENTITY_KINDS[key]
    if key.endswith("ies") and f"{key[:-3]}y" in ENTITY_KINDS:
        return ENTITY_KINDS[f"{key[:-3]}y"]
    if key.endswith("s") and key[:-1] in ENTITY_KINDS:
        return ENTITY_KINDS[key[:-1]]
    raise NotFoundError(entity_kind_not_found(name))
