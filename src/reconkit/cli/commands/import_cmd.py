"""Entity import command."""

import click
from reconkit.cli.error_handling import handle_domain_error
from reconkit.domain.constants import MAX_BATCH_SIZE
from reconkit.domain.entities import MatchAction, MatchResult
from reconkit.domain.import_service import ImportService


def _echo_preview(result: MatchResult) -> None:
    summary = result.summary
    click.echo(f"\nImport preview ({result.kind}):")
    click.echo(f"  To create: {summary.to_create}")
    click.echo(f"  To update: {summary.to_update}")
    click.echo(f"  To skip:   {summary.to_skip}")

    if result.warnings:
        click.echo("\nWarnings:")
        for warning in result.warnings:
            click.echo(f"  {warning}")
    for message in result.messages:
        click.echo(f"\n{message}")

    if result.decisions:
        click.echo("-" * 60)
    for decision in result.decisions:
        detail = ""
        if decision.action == MatchAction.UPDATE:
            detail = f" ({', '.join(decision.changes)})"
        elif decision.action == MatchAction.SKIP:
            detail = f" ({decision.reason})"
        click.echo(
            f"Row {decision.row_index:<4} {decision.action.value.upper():<7} '{decision.row.name}'{detail}"
        )


@click.command("import")
@click.argument("kind")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--only-create", is_flag=True, help="Never update entities that already exist")
@click.option("--apply", "apply_changes", is_flag=True, help="Write the changes (default is preview only)")
@click.option(
    "--batch-size",
    type=click.IntRange(1, MAX_BATCH_SIZE),
    default=MAX_BATCH_SIZE,
    show_default=True,
    envvar="RECONKIT_BATCH_SIZE",
    help="Entity writes per commit",
)
@click.pass_context
def import_entities(ctx, kind: str, csv_file: str, only_create: bool, apply_changes: bool, batch_size: int):
    """Import entities of KIND from a CSV file.

    Shows what would be created, updated and skipped. Nothing is written
    unless --apply is given.

    Examples:
        reconkit import bank-accounts comptes.csv
        reconkit import contacts donants.csv --apply
    """
    db = ctx.obj["db"]
    service = ImportService(db)

    try:
        report = service.import_file(
            kind,
            csv_file,
            apply=apply_changes,
            only_create=only_create,
            batch_size=batch_size,
        )
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    result = report["result"]
    if result.blocked:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)
        return

    _echo_preview(result)
    if report["row_errors"]:
        click.echo(f"\nRows not imported: {len(report['row_errors'])}")
        for error in report["row_errors"]:
            click.echo(f"  {error}", err=True)

    applied = report["applied"]
    if applied is None:
        click.echo("\nPreview only. Re-run with --apply to write these changes.")
        return
    click.echo("\nImport complete:")
    click.echo(f"  Created: {applied['created']}")
    click.echo(f"  Updated: {applied['updated']}")
    click.echo(f"  Skipped: {applied['skipped']}")
    click.echo(f"  Batches: {applied['batches']}")


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_entities)
