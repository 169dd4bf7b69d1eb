"""Add transaction command."""

import click
from moneta.domain.transaction import TransactionService
from moneta.domain.account import AccountService
from moneta.domain.category import CategoryService
from moneta.domain.entities import TransactionType
from moneta.cli.account_resolution import resolve_account_or_exit
from moneta.cli.error_handling import format_money, handle_domain_error
from moneta.utils.date_parser import parse_date
from moneta.utils.amount_parser import parse_amount


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD, DD/MM/YYYY or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45 or 123,45)")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    default="expense",
    show_default=True,
    help="Transaction type",
)
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category name (created if it does not exist)")
@click.option("--recurring", is_flag=True, help="Mark the transaction as recurring")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    transaction_type: str,
    description: str | None,
    category: str | None,
    recurring: bool,
):
    """Add a transaction manually.

    A negative amount is stored as an expense of the same magnitude.

    Examples:
        moneta add --account Nubank --date 2024-03-01 --amount 25,90 --description "Uber" --category Transporte
        moneta add --account 1 --date today --amount 3000 --type income --category Salário
    """
    db = ctx.obj["db"]
    user_id = ctx.obj["user"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    account_obj = account_service.get_account(user_id, account_id)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    if txn_amount < 0:
        txn_amount = -txn_amount
        transaction_type = TransactionType.EXPENSE.value

    try:
        category_id = None
        if category:
            category_id = category_service.get_or_create_category(
                user_id, category, transaction_type
            ).id

        transaction_id = transaction_service.create_transaction(
            user_id,
            account_id=account_id,
            date=txn_date,
            amount=txn_amount,
            transaction_type=transaction_type,
            description=description,
            category_id=category_id,
            is_recurring=recurring,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Account: {account_obj.name}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {format_money(txn_amount)} ({transaction_type})")
    if description:
        click.echo(f"  Description: {description}")
    if category:
        click.echo(f"  Category: {category}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
