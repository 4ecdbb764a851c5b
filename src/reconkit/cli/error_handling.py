"""CLI error handling helpers."""

import click

from reconkit.domain.errors import AmbiguousPayoutError, DomainError
from reconkit.utils.amount_parser import format_cents


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, AmbiguousPayoutError):
        for group in error.candidates:
            click.echo(
                f"  {group.transfer_id}: {len(group.charges)} charges, net {format_cents(group.net_cents)}",
                err=True,
            )
        click.echo("Re-run with --transfer to choose one.", err=True)
    ctx.exit(1)
