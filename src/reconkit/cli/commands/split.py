"""Split commands."""

import click
from reconkit.cli.error_handling import handle_domain_error
from reconkit.domain.entities import SplitKind, SplitLine
from reconkit.domain.split_service import SplitService
from reconkit.utils.amount_parser import format_cents, parse_amount_to_cents


def _parse_line(value: str, kind: SplitKind) -> SplitLine:
    """Parse "AMOUNT:ID" into a split line ("60.00:3")."""
    amount, sep, ref = value.rpartition(":")
    if not sep or not amount:
        raise click.BadParameter(f"expected AMOUNT:ID, got '{value}'")
    try:
        amount_cents = parse_amount_to_cents(amount)
        ref_id = int(ref)
    except ValueError:
        raise click.BadParameter(f"expected AMOUNT:ID, got '{value}'")
    if kind == SplitKind.DONATION:
        return SplitLine(amount_cents=amount_cents, kind=kind, contact_id=ref_id)
    return SplitLine(amount_cents=amount_cents, kind=kind, category_id=ref_id)


@click.group()
def split_group():
    """Split a bank movement into accounting lines."""
    pass


@split_group.command("check")
@click.argument("parent_amount")
@click.argument("line_amounts", nargs=-1, required=True)
@click.pass_context
def check_split(ctx, parent_amount: str, line_amounts: tuple[str, ...]):
    """Check whether line amounts add up to a parent amount.

    Examples:
        reconkit split check 100.00 60.00 40.00
    """
    db = ctx.obj["db"]
    service = SplitService(db)
    try:
        balance = service.check(
            parse_amount_to_cents(parent_amount),
            [parse_amount_to_cents(amount) for amount in line_amounts],
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Parent: {format_cents(balance.parent_cents)}")
    click.echo(f"Lines:  {format_cents(balance.total_cents)}")
    click.echo(f"Delta:  {format_cents(balance.delta_cents)}")
    if balance.balanced:
        click.echo("Balanced.")
    else:
        click.echo(f"Not balanced: off by {balance.delta_cents} cents.")
        ctx.exit(1)


@split_group.command("apply")
@click.argument("transaction_id", type=int)
@click.option("--donation", "donations", multiple=True, help="Donation line as AMOUNT:CONTACT_ID")
@click.option("--other", "others", multiple=True, help="Non-donation line as AMOUNT:CATEGORY_ID")
@click.pass_context
def apply_split(ctx, transaction_id: int, donations: tuple[str, ...], others: tuple[str, ...]):
    """Split a transaction into donation and non-donation lines.

    The lines must add up to the transaction amount exactly.

    Examples:
        reconkit split apply 12 --donation 60.00:3 --other 40.00:7
    """
    db = ctx.obj["db"]
    service = SplitService(db)

    lines = [_parse_line(value, SplitKind.DONATION) for value in donations]
    lines += [_parse_line(value, SplitKind.NON_DONATION) for value in others]

    try:
        child_ids = service.apply_split(transaction_id, lines)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Split transaction {transaction_id} into {len(child_ids)} lines")


@split_group.command("undo")
@click.argument("transaction_id", type=int)
@click.pass_context
def undo_split(ctx, transaction_id: int):
    """Undo a split, archiving its lines."""
    db = ctx.obj["db"]
    service = SplitService(db)
    try:
        archived = service.undo_split(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    if archived:
        click.echo(f"Archived {archived} lines of transaction {transaction_id}")
    else:
        click.echo(f"Transaction {transaction_id} had no lines to archive")


def register_commands(cli: click.Group) -> None:
    """Register split commands with main CLI."""
    cli.add_command(split_group, name="split")
