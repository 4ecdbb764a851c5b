"""Main CLI entry point."""

import logging

import click
from reconkit.database.factories import create_sqlite_database

# Import and register all commands at module level
from reconkit.cli.commands import (
    entities,
    import_cmd,
    payouts,
    split,
    transaction,
)

LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides RECONKIT_DB_PATH environment variable)",
    envvar="RECONKIT_DB_PATH",
)
@click.option("--verbose", "-v", count=True, help="Log progress (-v) or matching details (-vv)")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: int):
    """Reconkit - Reconciliation and import matching.

    Import bank accounts, employees, contacts and categories from
    spreadsheets without creating duplicates, tie payment-processor payouts
    to bank deposits, and split bank movements into accounting lines.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=LOG_LEVELS.get(verbose, logging.DEBUG),
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
entities.register_commands(cli)
import_cmd.register_commands(cli)
transaction.register_commands(cli)
payouts.register_commands(cli)
split.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
