"""Entity kind and entity listing commands."""

import click
from reconkit.cli.error_handling import handle_domain_error
from reconkit.domain.entity_kinds import ENTITY_KINDS, get_entity_kind
from reconkit.domain.errors import NotFoundError


@click.command("kinds")
def list_kinds():
    """List the entity kinds that can be imported."""
    click.echo("\nEntity kinds:")
    click.echo("-" * 60)
    for config in ENTITY_KINDS.values():
        click.echo(f"{config.name:14s} | matched by {config.identifier_label}")


@click.command("list")
@click.argument("kind")
@click.pass_context
def list_entities(ctx, kind: str):
    """List stored entities of one kind (e.g. bank-accounts, contacts)."""
    db = ctx.obj["db"]
    try:
        config = get_entity_kind(kind)
    except NotFoundError as e:
        handle_domain_error(ctx, e)
        return

    entities = db.list_entities(config.name)
    if not entities:
        click.echo(f"No {config.label.lower()} entities found.")
        return

    click.echo(f"\n{config.label} entities:")
    click.echo("-" * 60)
    for entity in entities:
        key = " / ".join(str(entity.get(name) or "-") for name, _ in config.key_fields)
        line = f"ID: {entity.id:3d} | {entity.name:30s} | {key}"
        if config.exclusive_flag and entity.get(config.exclusive_flag.field):
            line += f" [{config.exclusive_flag.label.lower()}]"
        click.echo(line)


def register_commands(cli):
    """Register entity commands with main CLI."""
    cli.add_command(list_kinds)
    cli.add_command(list_entities)
