"""Account management commands."""

import click
from moneta.domain.account import AccountService
from moneta.domain.entities import AccountType
from moneta.cli.account_resolution import resolve_account_or_exit
from moneta.cli.error_handling import format_money, handle_domain_error
from moneta.utils.amount_parser import parse_amount

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    default=AccountType.CHECKING.value,
    show_default=True,
    help="Account type",
)
@click.option("--balance", default="0", help="Opening balance (e.g., 1500.00 or 1.500,00)")
@click.pass_context
def create_account(ctx, name: str, account_type: str, balance: str):
    """Create a new account.

    Examples:
        moneta account create "Nubank"
        moneta account create "Reserva" --type savings --balance 2500,00
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        opening_balance = parse_amount(balance)
    except ValueError as e:
        click.echo(f"Error: Invalid balance: {e}", err=True)
        ctx.exit(1)

    try:
        account_id = service.create_account(
            ctx.obj["user"], name=name, account_type=account_type, balance=opening_balance
        )
        click.echo(f"Created account '{name.strip()}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their stored balances."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(ctx.obj["user"])
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type:11s} | {format_money(acc.balance):>14s}"
        )


@account_group.command("set-balance")
@click.argument("account", metavar="ACCOUNT")
@click.argument("balance", metavar="BALANCE")
@click.pass_context
def set_balance(ctx, account: str, balance: str) -> None:
    """Overwrite the stored balance of an account.

    ACCOUNT can be an account name or ID.

    Examples:
        moneta account set-balance "Nubank" 1234,56
        moneta account set-balance 1 -- -80.00
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        new_balance = parse_amount(balance)
    except ValueError as e:
        click.echo(f"Error: Invalid balance: {e}", err=True)
        ctx.exit(1)

    try:
        service.update_account(ctx.obj["user"], account_id, balance=new_balance)
        click.echo(f"Balance set to {format_money(new_balance)}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if it has no transactions. Use
    'transaction delete' to remove them first.

    Examples:
        moneta account delete "Nubank"
        moneta account delete 1 --yes
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    user_id = ctx.obj["user"]
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(user_id, account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(user_id, account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
