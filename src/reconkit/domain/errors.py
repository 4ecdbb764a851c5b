"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as an operation already applied."""


class BlockingError(DomainError):
    """Input violates a structural invariant; the whole run is aborted.

    No decisions are produced when one of these is raised, so the caller
    must present the error and persist nothing.
    """


class ExclusiveFlagError(BlockingError):
    """More than one incoming row claims an exclusive flag."""

    def __init__(self, message: str, row_indexes: list[int]):
        super().__init__(message)
        self.row_indexes = row_indexes


class MissingColumnError(BlockingError):
    """The input file lacks a column the parse step cannot do without."""

    def __init__(self, message: str, columns: list[str]):
        super().__init__(message)
        self.columns = columns


class MissingTransferError(BlockingError):
    """A paid-out charge carries no transfer identifier."""

    def __init__(self, message: str, charge_ids: list[str]):
        super().__init__(message)
        self.charge_ids = charge_ids


class AmbiguousPayoutError(BlockingError):
    """Several payout groups lie within tolerance of one deposit."""

    def __init__(self, message: str, candidates: list):
        super().__init__(message)
        self.candidates = candidates


class AlreadyImportedError(BlockingError):
    """Some charges of a payout are already recorded in the ledger."""

    def __init__(self, message: str, charge_ids: list[str]):
        super().__init__(message)
        self.charge_ids = charge_ids


class UnmatchedPayerError(BlockingError):
    """Donations whose payer is not a known contact."""

    def __init__(self, message: str, charge_ids: list[str]):
        super().__init__(message)
        self.charge_ids = charge_ids


class BatchLimitError(BlockingError):
    """An atomic write would exceed the store's per-batch ceiling."""


class UnbalancedSplitError(BlockingError):
    """Split lines do not add up to the parent amount."""

    def __init__(self, message: str, delta_cents: int):
        super().__init__(message)
        self.delta_cents = delta_cents


def entity_kind_not_found(kind: str) -> str:
    """Return message for an unknown entity kind."""
    return f"Unknown entity kind '{kind}'"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def exclusive_flag_claimed_too_often(label: str, row_indexes: list[int]) -> str:
    """Return message when several rows claim the same exclusive flag."""
    rows = ", ".join(str(index) for index in row_indexes)
    return (
        f"{len(row_indexes)} rows are marked as '{label}' (rows {rows}). "
        "Only one is allowed."
    )


def missing_transfer(count: int) -> str:
    """Return message for paid-out charges without a transfer identifier."""
    return (
        f"{count} charge{'s' if count != 1 else ''} "
        f"{'have' if count != 1 else 'has'} no Transfer (payout) value. "
        "Export the payments report with the default columns."
    )


def missing_columns(columns: list[str]) -> str:
    """Return message for required columns absent from an input file."""
    return f"File is missing required columns: {', '.join(columns)}"


def already_imported(charge_ids: list[str]) -> str:
    """Return message when charges of a payout were already imported."""
    preview = ", ".join(charge_ids[:3]) + ("..." if len(charge_ids) > 3 else "")
    return (
        f"{len(charge_ids)} charge{'s' if len(charge_ids) != 1 else ''} "
        f"already imported ({preview})"
    )


def unbalanced_split(delta_cents: int) -> str:
    """Return message when split lines do not sum to the parent amount."""
    return f"Split lines do not add up to the parent amount (delta {delta_cents} cents)"


def unmatched_payers(charge_ids: list[str]) -> str:
    """Return message when donations cannot be tied to a contact."""
    preview = ", ".join(charge_ids[:3]) + ("..." if len(charge_ids) > 3 else "")
    return (
        f"{len(charge_ids)} donation{'s' if len(charge_ids) != 1 else ''} "
        f"without a matching contact ({preview}). Import the donors first."
    )
