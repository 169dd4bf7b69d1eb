"""Main CLI entry point."""

import logging

import click
from moneta.database.factories import create_sqlite_database

# Import and register all commands at module level
from moneta.cli.commands import (
    account,
    add,
    assistant,
    card,
    category,
    statement,
    summary,
    transaction,
    transfers,
)

DEFAULT_USER = "local"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides MONETA_DB_PATH environment variable)",
    envvar="MONETA_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    default=DEFAULT_USER,
    show_default=True,
    help="User whose data is read and written (overrides MONETA_USER)",
    envvar="MONETA_USER",
)
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline progress to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str, verbose: bool):
    """Moneta - Personal finance tracking.

    Manage accounts and transactions, and import bank statements and credit
    card invoices with an AI model.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user"] = user_id
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
statement.register_commands(cli)
transfers.register_commands(cli)
summary.register_commands(cli)
card.register_commands(cli)
assistant.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
