"""Domain model entities for reconkit.

These are pure data classes representing the inputs and outputs of the
reconciliation engine, independent of database schema. Money is always held
as integer cents; Decimal views exist only for display at the boundary.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from reconkit.utils.amount_parser import cents_to_decimal


class MatchAction(str, Enum):
    """Classification of an incoming row against the stored snapshot."""

    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"


class SplitKind(str, Enum):
    """Kind of accounting line a split allocates to."""

    DONATION = "donation"
    NON_DONATION = "non_donation"
    FEE = "fee"


@dataclass(frozen=True)
class ParsedRow:
    """One external record after column mapping and type coercion.

    ``fields`` holds every identifying field and optional attribute the
    entity kind declares; ``name`` is kept apart since every kind has one.
    """

    row_index: int
    kind: str
    name: str
    fields: dict[str, Any] = field(default_factory=dict)

    def get(self, field_name: str, default: Any = None) -> Any:
        if field_name == "name":
            return self.name
        return self.fields.get(field_name, default)


@dataclass(frozen=True)
class ExistingEntity:
    """Snapshot of a stored record, read fresh at the start of each run."""

    id: int
    kind: str
    name: str
    fields: dict[str, Any] = field(default_factory=dict)

    def get(self, field_name: str, default: Any = None) -> Any:
        if field_name == "name":
            return self.name
        return self.fields.get(field_name, default)


@dataclass(frozen=True)
class MatchDecision:
    """Planned outcome for one incoming row. A plan, never persisted."""

    row: ParsedRow
    action: MatchAction
    existing_id: Optional[int] = None
    changes: tuple[str, ...] = ()
    reason: Optional[str] = None
    match_key: Optional[str] = None
    promoted: bool = False
    # Apply sets the kind's exclusive flag on this row's entity
    holds_flag: bool = False

    @property
    def row_index(self) -> int:
        return self.row.row_index


@dataclass(frozen=True)
class MatchSummary:
    """Aggregate counts of a matching run."""

    total: int
    to_create: int
    to_update: int
    to_skip: int


@dataclass(frozen=True)
class MatchResult:
    """Decisions plus everything the preview needs to explain them."""

    kind: str
    decisions: tuple[MatchDecision, ...] = ()
    warnings: tuple[str, ...] = ()
    messages: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def summary(self) -> MatchSummary:
        actions = [decision.action for decision in self.decisions]
        return MatchSummary(
            total=len(actions),
            to_create=actions.count(MatchAction.CREATE),
            to_update=actions.count(MatchAction.UPDATE),
            to_skip=actions.count(MatchAction.SKIP),
        )

    @property
    def blocked(self) -> bool:
        return bool(self.errors)

    def by_action(self, action: MatchAction) -> list[MatchDecision]:
        return [decision for decision in self.decisions if decision.action == action]


@dataclass(frozen=True)
class StripeChargeRow:
    """One payment-processor charge, amounts in cents."""

    id: str
    created_date: date
    amount_cents: int
    fee_cents: int
    customer_email: str
    status: str
    transfer: str
    amount_refunded_cents: int = 0
    description: Optional[str] = None


@dataclass(frozen=True)
class PayoutGroup:
    """All charges paid out together under one transfer identifier."""

    transfer_id: str
    charges: tuple[StripeChargeRow, ...]
    gross_cents: int
    fee_cents: int
    net_cents: int

    @property
    def gross(self) -> Decimal:
        return cents_to_decimal(self.gross_cents)

    @property
    def fees(self) -> Decimal:
        return cents_to_decimal(self.fee_cents)

    @property
    def net(self) -> Decimal:
        return cents_to_decimal(self.net_cents)


@dataclass(frozen=True)
class RefundWarning:
    """Refunded charges left out of payout accounting."""

    count: int
    refunded_cents: int
    excluded_cents: int

    @property
    def message(self) -> str:
        return (
            f"{self.count} refunded charge{'s' if self.count != 1 else ''} excluded "
            f"(refunded {cents_to_decimal(self.refunded_cents)}, "
            f"charged {cents_to_decimal(self.excluded_cents)})"
        )


@dataclass(frozen=True)
class PayoutGrouping:
    """Output of the payout grouper."""

    groups: tuple[PayoutGroup, ...]
    refund_warning: Optional[RefundWarning] = None

    @property
    def warnings(self) -> list[str]:
        if self.refund_warning is None:
            return []
        return [self.refund_warning.message]

    def get(self, transfer_id: str) -> Optional[PayoutGroup]:
        for group in self.groups:
            if group.transfer_id == transfer_id:
                return group
        return None


@dataclass(frozen=True)
class SplitLine:
    """One proposed allocation of a parent transaction's amount."""

    amount_cents: int
    kind: SplitKind
    category_id: Optional[int] = None
    contact_id: Optional[int] = None
    note: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class SplitBalance:
    """Balancer verdict for a set of split lines."""

    parent_cents: int
    total_cents: int
    delta_cents: int
    balanced: bool


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction domain entity."""

    id: int
    date: date
    description: Optional[str]
    amount_cents: int
    bank_account_id: Optional[int]
    category_id: Optional[int]
    contact_id: Optional[int]
    source: Optional[str]
    parent_id: Optional[int]
    is_split: bool
    stripe_payment_id: Optional[str]
    archived: bool
    created_at: datetime

    @property
    def amount(self) -> Decimal:
        return cents_to_decimal(self.amount_cents)
