"""Payout import domain service.

Ties a bank deposit to the payout batch that explains it and records the
batch as donation and fee lines under the deposit.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from reconkit.database.base import Database
from reconkit.domain.constants import PAYOUT_TOLERANCE_CENTS
from reconkit.domain.entities import PayoutGroup, PayoutGrouping, SplitKind
from reconkit.domain.errors import (
    ConflictError,
    NotFoundError,
    UnbalancedSplitError,
    UnmatchedPayerError,
    ValidationError,
    transaction_not_found,
    unbalanced_split,
    unmatched_payers,
)
from reconkit.domain.payouts import (
    find_matching_payout,
    find_matching_payouts,
    group_charges_by_transfer,
    plan_payout_allocation,
)
from reconkit.domain.splits import balance_split
from reconkit.domain.stripe_csv import parse_stripe_csv
from reconkit.utils.amount_parser import format_cents
from reconkit.utils.normalize import normalize_email

logger = logging.getLogger(__name__)

PAYOUT_SOURCE = "stripe"


@dataclass(frozen=True)
class PayoutPreview:
    """Grouped payouts and the ones that fit a deposit."""

    grouping: PayoutGrouping
    candidates: tuple[PayoutGroup, ...]
    warnings: tuple[str, ...]


class PayoutService:
    """Service for reconciling processor payouts with bank deposits."""

    def __init__(self, db: Database):
        """Initialize payout service.

        Args:
            db: Database instance
        """
        self.db = db

    def preview(
        self,
        csv_text: str,
        deposit_cents: int,
        tolerance_cents: int = PAYOUT_TOLERANCE_CENTS,
    ) -> PayoutPreview:
        """Group a charge export and list the payouts that match a deposit.

        Raises:
            MissingColumnError: If the export lacks a required column
            MissingTransferError: If a charge has no transfer id
            ValidationError: If the export has no charges
        """
        parsed = parse_stripe_csv(csv_text)
        grouping = group_charges_by_transfer(parsed.rows)
        candidates = find_matching_payouts(grouping.groups, deposit_cents, tolerance_cents)
        return PayoutPreview(
            grouping=grouping,
            candidates=tuple(candidates),
            warnings=tuple(parsed.warnings) + tuple(grouping.warnings),
        )

    def apply(
        self,
        csv_text: str,
        deposit_transaction_id: int,
        transfer_id: Optional[str] = None,
        tolerance_cents: int = PAYOUT_TOLERANCE_CENTS,
        fee_category_id: Optional[int] = None,
        require_contacts: bool = False,
    ) -> dict[str, Any]:
        """Record the payout matching a deposit as child transactions.

        Args:
            csv_text: Charge export text
            deposit_transaction_id: ID of the bank deposit transaction
            transfer_id: Payout to use when several match the deposit
            tolerance_cents: Allowed difference between payout net and deposit
            fee_category_id: Optional category for the fee line
            require_contacts: Refuse to record donations without a contact, and
                fees without a fee category

        Returns:
            Dict with:
            - transfer_id: the payout recorded
            - donations: number of donation lines
            - fees_cents: total fees recorded
            - matched_contacts: donation lines tied to a known contact
            - unmatched_emails: payer emails with no contact
            - child_ids: IDs of the created transactions
            - warnings: export and grouping warnings

        Raises:
            NotFoundError: If the deposit, the fee category or a matching payout
                doesn't exist
            ConflictError: If the deposit is already split
            ValidationError: If the deposit is not an income or the chosen
                transfer does not match it
            AmbiguousPayoutError: If several payouts match and none was chosen
            AlreadyImportedError: If any charge is already recorded
            UnbalancedSplitError: If the lines do not add up to the payout net
            UnmatchedPayerError: If require_contacts is set and a donation has no
                contact
        """
        deposit = self.db.get_transaction(deposit_transaction_id)
        if deposit is None:
            raise NotFoundError(transaction_not_found(deposit_transaction_id))
        if deposit.is_split:
            raise ConflictError(f"Transaction {deposit.id} is already split")
        if deposit.amount_cents <= 0:
            raise ValidationError(f"Transaction {deposit.id} is not a deposit")
        if fee_category_id is not None and self.db.get_entity("category", fee_category_id) is None:
            raise NotFoundError(f"Category {fee_category_id} not found")

        preview = self.preview(csv_text, deposit.amount_cents, tolerance_cents)
        group = self._choose_group(preview, deposit.amount_cents, transfer_id, tolerance_cents)

        already = self.db.find_imported_charge_ids(charge.id for charge in group.charges)
        lines = plan_payout_allocation(group, already)
        if require_contacts and group.fee_cents and fee_category_id is None:
            raise ValidationError("A fee category is required to record payout fees")

        contacts_by_email: dict[str, int] = {}
        for contact in self.db.list_entities("contact"):
            email = normalize_email(contact.get("email"))
            if email and email not in contacts_by_email:
                contacts_by_email[email] = contact.id
        emails_by_charge = {charge.id: normalize_email(charge.customer_email) for charge in group.charges}

        unmatched = []
        without_contact = []
        resolved = []
        for line in lines:
            if line.kind == SplitKind.FEE:
                resolved.append(replace(line, category_id=fee_category_id))
                continue
            email = emails_by_charge.get(line.reference)
            contact_id = contacts_by_email.get(email) if email else None
            if contact_id is None:
                without_contact.append(line.reference)
                if email:
                    unmatched.append(email)
            resolved.append(replace(line, contact_id=contact_id))

        if require_contacts and without_contact:
            raise UnmatchedPayerError(unmatched_payers(without_contact), without_contact)

        balance = balance_split(group.net_cents, [line.amount_cents for line in resolved])
        if not balance.balanced:
            raise UnbalancedSplitError(unbalanced_split(balance.delta_cents), balance.delta_cents)

        child_ids = self.db.create_child_transactions(deposit.id, resolved, source=PAYOUT_SOURCE)
        donations = sum(1 for line in resolved if line.kind == SplitKind.DONATION)
        logger.info(
            "Recorded payout %s under transaction %d: %d donations, fees %s",
            group.transfer_id,
            deposit.id,
            donations,
            format_cents(group.fee_cents),
        )
        return {
            "transfer_id": group.transfer_id,
            "donations": donations,
            "fees_cents": group.fee_cents,
            "matched_contacts": donations - len(without_contact),
            "unmatched_emails": sorted(set(unmatched)),
            "child_ids": child_ids,
            "warnings": list(preview.warnings),
        }

    def _choose_group(
        self,
        preview: PayoutPreview,
        deposit_cents: int,
        transfer_id: Optional[str],
        tolerance_cents: int,
    ) -> PayoutGroup:
        if transfer_id is not None:
            for group in preview.candidates:
                if group.transfer_id == transfer_id.strip():
                    return group
            if preview.grouping.get(transfer_id.strip()) is None:
                raise NotFoundError(f"Payout {transfer_id} not found in the export")
            raise ValidationError(
                f"Payout {transfer_id} does not match the deposit of {format_cents(deposit_cents)}"
            )

        group = find_matching_payout(preview.candidates, deposit_cents, tolerance_cents)
        if group is None:
            raise NotFoundError(
                f"No payout matches the deposit of {format_cents(deposit_cents)}"
            )
        return group
