"""Bank statement import commands."""

import mimetypes
from pathlib import Path

import click
from moneta.domain.account import AccountService
from moneta.domain.entities import StatementDocument, TransferReport
from moneta.domain.statement_import import StatementImportService
from moneta.cli.account_resolution import resolve_account_or_exit
from moneta.cli.error_handling import format_money, handle_domain_error


def read_document(file_path: str) -> StatementDocument:
    """Load a file from disk as an uploaded document."""
    path = Path(file_path)
    media_type, _ = mimetypes.guess_type(path.name)
    return StatementDocument(filename=path.name, content=path.read_bytes(), media_type=media_type)


def echo_transfer_report(report: TransferReport | None) -> None:
    """Print the result of transfer detection."""
    if report is None:
        click.echo("Transfer detection could not run; the import itself succeeded.")
        return
    if report.skipped:
        return
    click.echo("")
    click.echo(report.summary)


@click.group()
def statement_group():
    """Import bank statements."""
    pass


@statement_group.command("import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID the statement belongs to")
@click.option("--password", help="Password of an encrypted PDF statement")
@click.option("--yes", is_flag=True, help="Import without asking for confirmation")
@click.option(
    "--allow-duplicate",
    is_flag=True,
    help="Import even if the same transactions were already imported",
)
@click.pass_context
def import_statement(
    ctx, file_path: str, account: str, password: str | None, yes: bool, allow_duplicate: bool
):
    """Extract transactions from a PDF, TXT or OFX statement and import them.

    The extracted transactions are shown for review before anything is
    saved. When the statement states a closing balance, the account balance
    is set to it.

    Examples:
        moneta statement import extrato.pdf --account Nubank
        moneta statement import extrato.pdf --account 1 --password 1234 --yes
    """
    db = ctx.obj["db"]
    user_id = ctx.obj["user"]
    account_service = AccountService(db)
    service = StatementImportService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    account_obj = account_service.get_account(user_id, account_id)
    document = read_document(file_path)

    result = service.process_statement(user_id, account_id, document, password=password)
    if not result.ok and result.password_required and password is None and not yes:
        click.echo(result.error)
        password = click.prompt("PDF password", hide_input=True)
        result = service.process_statement(user_id, account_id, document, password=password)

    if not result.ok:
        click.echo(f"Error: {result.error}", err=True)
        ctx.exit(1)

    if result.dropped:
        click.echo(f"Warning: {result.dropped} malformed line(s) were skipped.", err=True)

    if not result.transactions:
        click.echo("No transactions were found in the statement.")
        return

    click.echo(f"\nExtracted {len(result.transactions)} transaction(s) for '{account_obj.name}':")
    click.echo("-" * 90)
    click.echo(f"{'Date':<12} {'Amount':>12} {'Type':<8} {'Category':<20} {'Description':<35}")
    click.echo("-" * 90)
    for txn in result.transactions:
        click.echo(
            f"{txn.date:<12} {format_money(txn.amount):>12} {txn.type:<8} "
            f"{txn.category[:20]:<20} {txn.description[:35]:<35}"
        )
    click.echo("-" * 90)
    if result.closing_balance is not None:
        click.echo(f"Closing balance: {format_money(result.closing_balance)}")
    else:
        click.echo("Closing balance: not found (account balance will not change)")

    if not yes and not click.confirm("Import these transactions?"):
        click.echo("Import cancelled.")
        return

    try:
        imported = service.import_transactions(
            user_id,
            account_id,
            result.transactions,
            result.closing_balance,
            allow_duplicate=allow_duplicate,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Imported {imported.inserted} transaction(s) into '{account_obj.name}'.")
    if imported.balance_updated:
        click.echo(f"Account balance set to {format_money(result.closing_balance)}.")
    echo_transfer_report(imported.transfer_report)


def register_commands(cli):
    """Register statement commands with main CLI."""
    cli.add_command(statement_group, name="statement")
