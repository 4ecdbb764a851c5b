"""Transaction management commands."""

import click
from reconkit.cli.error_handling import handle_domain_error
from reconkit.domain.transaction import TransactionService
from reconkit.utils.amount_parser import format_cents, parse_amount_to_cents
from reconkit.utils.date_parser import parse_date, parse_optional_date


@click.group()
def transaction_group():
    """Manage ledger transactions."""
    pass


@transaction_group.command("add")
@click.option("--date", "date_str", required=True, help="Transaction date (DD/MM/YYYY or YYYY-MM-DD)")
@click.option("--amount", required=True, help="Amount (e.g., 150.00, -12,50 or 1.234,56)")
@click.option("--description", help="Transaction description")
@click.option("--bank-account", type=int, help="Bank account ID")
@click.option("--category", type=int, help="Category ID")
@click.option("--contact", type=int, help="Contact ID")
@click.option("--source", default="manual", show_default=True, help="Origin of the movement")
@click.pass_context
def add_transaction(
    ctx,
    date_str: str,
    amount: str,
    description: str | None,
    bank_account: int | None,
    category: int | None,
    contact: int | None,
    source: str,
) -> None:
    """Record a transaction, typically a bank movement to reconcile.

    Examples:
        reconkit transaction add --date 15/03/2024 --amount 145.05 --description "STRIPE PAYOUT"
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        txn_date = parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
        return

    try:
        amount_cents = parse_amount_to_cents(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
        return

    try:
        transaction_id = service.create_transaction(
            date=txn_date,
            amount_cents=amount_cents,
            description=description,
            bank_account_id=bank_account,
            category_id=category,
            contact_id=contact,
            source=source,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created transaction {transaction_id} ({format_cents(amount_cents)})")


@transaction_group.command("list")
@click.option("--start-date", help="Start date (DD/MM/YYYY or YYYY-MM-DD)")
@click.option("--end-date", help="End date (DD/MM/YYYY or YYYY-MM-DD)")
@click.option("--bank-account", type=int, help="Bank account ID")
@click.pass_context
def list_transactions(ctx, start_date: str | None, end_date: str | None, bank_account: int | None):
    """View transactions with optional filters."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        start = parse_optional_date(start_date)
        end = parse_optional_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)
        return

    transactions = service.list_transactions(start_date=start, end_date=end, bank_account_id=bank_account)
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 90)
    click.echo(f"{'ID':<6} {'Date':<12} {'Amount':>12}  {'Parent':<7} {'Source':<8} {'Description':<40}")
    click.echo("-" * 90)
    for txn in transactions:
        marker = "*" if txn.is_split else ""
        parent = str(txn.parent_id) if txn.parent_id else ""
        click.echo(
            f"{str(txn.id) + marker:<6} {str(txn.date):<12} {format_cents(txn.amount_cents):>12}  "
            f"{parent:<7} {(txn.source or ''):<8} {(txn.description or '')[:40]:<40}"
        )
    click.echo("-" * 90)
    click.echo("* split into lines")


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.option("--archived", is_flag=True, help="Include archived lines")
@click.pass_context
def show_transaction(ctx, transaction_id: int, archived: bool) -> None:
    """Show a transaction and the lines it was split into."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)
        return

    click.echo(f"\nTransaction ID: {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {format_cents(txn.amount_cents)}")
    if txn.description:
        click.echo(f"  Description: {txn.description}")
    click.echo(f"  Split: {'yes' if txn.is_split else 'no'}")

    children = service.list_children(transaction_id, include_archived=archived)
    if not children:
        return
    click.echo("  Lines:")
    for child in children:
        ref = child.contact_id or child.category_id or ""
        flag = " (archived)" if child.archived else ""
        click.echo(
            f"    {child.id:<6} {format_cents(child.amount_cents):>12}  {ref!s:<6} "
            f"{child.description or ''}{flag}"
        )


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
