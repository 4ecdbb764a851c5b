"""Payout reconciliation commands."""

from pathlib import Path

import click
from reconkit.cli.error_handling import handle_domain_error
from reconkit.domain.constants import PAYOUT_TOLERANCE_CENTS
from reconkit.domain.payout_service import PayoutService
from reconkit.utils.amount_parser import format_cents, parse_amount_to_cents

_tolerance_option = click.option(
    "--tolerance-cents",
    type=click.IntRange(min=0),
    default=PAYOUT_TOLERANCE_CENTS,
    show_default=True,
    envvar="RECONKIT_TOLERANCE_CENTS",
    help="Allowed difference between payout net and deposit",
)


def _read_export(path: str) -> str:
    return Path(path).read_text(encoding="utf-8-sig")


@click.group()
def payouts_group():
    """Match processor payouts to bank deposits."""
    pass


@payouts_group.command("preview")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--deposit", required=True, help="Deposit amount seen in the bank (e.g., 145.05)")
@_tolerance_option
@click.pass_context
def preview_payouts(ctx, csv_file: str, deposit: str, tolerance_cents: int):
    """Group a charge export by payout and show which ones fit a deposit."""
    db = ctx.obj["db"]
    service = PayoutService(db)

    try:
        deposit_cents = parse_amount_to_cents(deposit)
        preview = service.preview(_read_export(csv_file), deposit_cents, tolerance_cents)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nPayouts in export: {len(preview.grouping.groups)}")
    click.echo("-" * 70)
    click.echo(f"{'Transfer':<28} {'Charges':>7} {'Gross':>11} {'Fees':>9} {'Net':>11}")
    click.echo("-" * 70)
    for group in preview.grouping.groups:
        mark = " <" if group in preview.candidates else ""
        click.echo(
            f"{group.transfer_id:<28} {len(group.charges):>7} {format_cents(group.gross_cents):>11} "
            f"{format_cents(group.fee_cents):>9} {format_cents(group.net_cents):>11}{mark}"
        )
    for warning in preview.warnings:
        click.echo(f"\nWarning: {warning}")

    if not preview.candidates:
        click.echo(f"\nNo payout matches the deposit of {format_cents(deposit_cents)}.")
    elif len(preview.candidates) == 1:
        click.echo(f"\nPayout {preview.candidates[0].transfer_id} matches the deposit.")
    else:
        click.echo(
            f"\n{len(preview.candidates)} payouts match the deposit; choose one with --transfer."
        )


@payouts_group.command("apply")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--deposit-transaction", type=int, required=True, help="ID of the bank deposit transaction")
@click.option("--transfer", help="Payout (transfer id) to record when several match")
@click.option("--fee-category", type=int, help="Category ID for the fee line")
@click.option(
    "--require-contacts",
    is_flag=True,
    envvar="RECONKIT_REQUIRE_CONTACTS",
    help="Refuse payouts with unknown payers or fees without --fee-category",
)
@_tolerance_option
@click.pass_context
def apply_payout(
    ctx,
    csv_file: str,
    deposit_transaction: int,
    transfer: str | None,
    fee_category: int | None,
    require_contacts: bool,
    tolerance_cents: int,
):
    """Record the payout matching a deposit as donation and fee lines."""
    db = ctx.obj["db"]
    service = PayoutService(db)

    try:
        result = service.apply(
            _read_export(csv_file),
            deposit_transaction,
            transfer_id=transfer,
            tolerance_cents=tolerance_cents,
            fee_category_id=fee_category,
            require_contacts=require_contacts,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    for warning in result["warnings"]:
        click.echo(f"Warning: {warning}")
    click.echo(f"\nRecorded payout {result['transfer_id']} under transaction {deposit_transaction}:")
    click.echo(f"  Donations: {result['donations']} ({result['matched_contacts']} matched to contacts)")
    click.echo(f"  Fees: {format_cents(result['fees_cents'])}")
    if result["fees_cents"] and fee_category is None:
        click.echo("Warning: the fee line has no category; pass --fee-category to set one.")
    unmatched = result["donations"] - result["matched_contacts"]
    if unmatched:
        click.echo(f"Warning: {unmatched} donation(s) recorded without a contact.")
    if result["unmatched_emails"]:
        click.echo("  Payers without a contact:")
        for email in result["unmatched_emails"]:
            click.echo(f"    {email}")


def register_commands(cli: click.Group) -> None:
    """Register payout commands with main CLI."""
    cli.add_command(payouts_group, name="payouts")
