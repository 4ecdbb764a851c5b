"""Payout grouping and payout-to-deposit matching.

A payment processor pays several charges out together as one bank deposit.
The grouper rebuilds those batches from the charge report; the matcher then
looks for the batches that could explain a given deposit.

All sums are taken over integer cents. A batch's net is derived once as
gross minus fees, so it is exact to the cent.
"""

import logging
from typing import Iterable, Optional, Sequence

from reconkit.domain.constants import MAX_PAYOUT_CHARGES, PAYOUT_TOLERANCE_CENTS
from reconkit.domain.entities import (
    PayoutGroup,
    PayoutGrouping,
    RefundWarning,
    SplitKind,
    SplitLine,
    StripeChargeRow,
)
from reconkit.domain.errors import (
    AlreadyImportedError,
    AmbiguousPayoutError,
    BatchLimitError,
    MissingTransferError,
    ValidationError,
    already_imported,
    missing_transfer,
)
from reconkit.utils.amount_parser import format_cents

logger = logging.getLogger(__name__)


def group_charges_by_transfer(rows: Sequence[StripeChargeRow]) -> PayoutGrouping:
    """Group charges into payout batches by transfer identifier.

    Charges with a nonzero refunded amount are left out of every batch and
    reported once in the grouping's refund warning. Groups come back in the
    order their transfer first appears in the report.

    Raises:
        MissingTransferError: If any non-refunded charge has no transfer id
    """
    refunded = [row for row in rows if row.amount_refunded_cents != 0]
    paid = [row for row in rows if row.amount_refunded_cents == 0]

    without_transfer = [row for row in paid if not row.transfer or not row.transfer.strip()]
    if without_transfer:
        raise MissingTransferError(
            missing_transfer(len(without_transfer)),
            [row.id for row in without_transfer],
        )

    by_transfer: dict[str, list[StripeChargeRow]] = {}
    for row in paid:
        by_transfer.setdefault(row.transfer.strip(), []).append(row)

    groups = []
    for transfer_id, charges in by_transfer.items():
        gross_cents = sum(charge.amount_cents for charge in charges)
        fee_cents = sum(charge.fee_cents for charge in charges)
        groups.append(
            PayoutGroup(
                transfer_id=transfer_id,
                charges=tuple(charges),
                gross_cents=gross_cents,
                fee_cents=fee_cents,
                net_cents=gross_cents - fee_cents,
            )
        )

    refund_warning = None
    if refunded:
        refund_warning = RefundWarning(
            count=len(refunded),
            refunded_cents=sum(row.amount_refunded_cents for row in refunded),
            excluded_cents=sum(row.amount_cents for row in refunded),
        )

    logger.debug(
        "Grouped %d charges into %d payouts (%d refunded excluded)",
        len(paid),
        len(groups),
        len(refunded),
    )
    return PayoutGrouping(groups=tuple(groups), refund_warning=refund_warning)


def find_matching_payouts(
    groups: Iterable[PayoutGroup],
    deposit_cents: int,
    tolerance_cents: int = PAYOUT_TOLERANCE_CENTS,
) -> list[PayoutGroup]:
    """Return every group whose net is within tolerance of the deposit.

    All candidates are returned, never just the closest: when several
    batches fit, the caller has to let a person choose. An empty list is
    the normal "no payout yet" state, not an error.
    """
    if tolerance_cents < 0:
        raise ValidationError(f"Tolerance must not be negative, got {tolerance_cents}")
    return [
        group for group in groups
        if abs(group.net_cents - deposit_cents) <= tolerance_cents
    ]


def find_matching_payout(
    groups: Iterable[PayoutGroup],
    deposit_cents: int,
    tolerance_cents: int = PAYOUT_TOLERANCE_CENTS,
) -> Optional[PayoutGroup]:
    """Return the single matching group, or None when nothing matches.

    Raises:
        AmbiguousPayoutError: If more than one group matches; the candidates
            are attached to the error for the caller to present
    """
    matches = find_matching_payouts(groups, deposit_cents, tolerance_cents)
    if not matches:
        return None
    if len(matches) > 1:
        raise AmbiguousPayoutError(
            f"{len(matches)} payouts match the deposit of {format_cents(deposit_cents)}: "
            f"{', '.join(group.transfer_id for group in matches)}. Choose one.",
            matches,
        )
    return matches[0]


def plan_payout_allocation(
    group: PayoutGroup,
    already_imported_ids: Iterable[str] = (),
) -> list[SplitLine]:
    """Decompose a payout into ledger lines: one per charge plus the fees.

    Donation lines carry the charge amount and reference the charge id; a
    single negative fee line carries the batch's total fees. The lines add
    up to the group's net exactly.

    Raises:
        ValidationError: If the group has no charges
        BatchLimitError: If the lines would not fit in one write batch
        AlreadyImportedError: If any charge of the group is already recorded
    """
    if not group.charges:
        raise ValidationError(f"Payout {group.transfer_id} has no charges")
    if len(group.charges) > MAX_PAYOUT_CHARGES:
        raise BatchLimitError(
            f"Payout {group.transfer_id} has {len(group.charges)} charges; "
            f"at most {MAX_PAYOUT_CHARGES} can be imported at once"
        )

    imported = set(already_imported_ids)
    duplicates = [charge.id for charge in group.charges if charge.id in imported]
    if duplicates:
        raise AlreadyImportedError(already_imported(duplicates), duplicates)

    lines = [
        SplitLine(
            amount_cents=charge.amount_cents,
            kind=SplitKind.DONATION,
            note=charge.description or f"Stripe donation - {charge.customer_email}",
            reference=charge.id,
        )
        for charge in group.charges
    ]
    if group.fee_cents > 0:
        lines.append(
            SplitLine(
                amount_cents=-group.fee_cents,
                kind=SplitKind.FEE,
                note=f"Stripe fees - {len(group.charges)} donations",
                reference=group.transfer_id,
            )
        )
    return lines
