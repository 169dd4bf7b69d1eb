"""Transaction management commands."""

import click
from moneta.domain.transaction import TransactionService
from moneta.domain.account import AccountService
from moneta.domain.category import CategoryService
from moneta.domain.entities import TransactionType
from moneta.cli.account_resolution import resolve_account_or_exit
from moneta.cli.date_filters import resolve_cli_date_range
from moneta.cli.error_handling import format_money, handle_domain_error


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--account", help="Account name or ID")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    help="Only show this transaction type",
)
@click.option("--search", help="Case-insensitive text to look for in descriptions")
@click.option("--limit", type=int, help="Maximum number of transactions to show")
@click.option("--offset", type=int, default=0, help="Number of transactions to skip")
@click.option("--verbose", "-v", is_flag=True, help="Show all fields of each transaction")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    transaction_type: str | None,
    search: str | None,
    limit: int | None,
    offset: int,
    verbose: bool,
):
    """View transactions with optional filters, newest first.

    Account can be specified by name or ID.
    """
    db = ctx.obj["db"]
    user_id = ctx.obj["user"]
    service = TransactionService(db)
    category_service = CategoryService(db)
    account_service = AccountService(db)

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags={}
    )

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, account)

    try:
        transactions = service.list_transactions(
            user_id,
            start_date=start,
            end_date=end,
            account_id=account_id,
            transaction_type=transaction_type,
            search=search,
            limit=limit,
            offset=offset,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts(user_id)}
    categories = {cat.id: cat.name for cat in category_service.list_categories(user_id)}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    if verbose:
        click.echo("=" * 100)
        for txn in transactions:
            click.echo(f"\nTransaction ID: {txn.id}")
            click.echo(f"  Date: {txn.date}")
            click.echo(f"  Amount: {format_money(txn.amount)} ({txn.transaction_type})")
            click.echo(f"  Account: {accounts.get(txn.account_id, 'Unknown')} (ID: {txn.account_id})")
            click.echo(f"  Category: {categories.get(txn.category_id, 'Uncategorized')}")
            if txn.description:
                click.echo(f"  Description: {txn.description}")
            click.echo(f"  Source: {'statement import' if txn.ai_generated else 'manual'}")
            if txn.is_recurring:
                click.echo("  Recurring: yes")
            click.echo("-" * 100)
    else:
        click.echo("-" * 100)
        click.echo(
            f"{'ID':<6} {'Date':<12} {'Amount':>12} {'Type':<9} {'Account':<18} {'Category':<18} {'Description':<25}"
        )
        click.echo("-" * 100)
        for txn in transactions:
            click.echo(
                f"{txn.id:<6} {str(txn.date):<12} {format_money(txn.amount):>12} {txn.transaction_type:<9} "
                f"{accounts.get(txn.account_id, 'Unknown')[:18]:<18} "
                f"{categories.get(txn.category_id, '')[:18]:<18} {(txn.description or '')[:25]:<25}"
            )

    total_expenses = sum(
        txn.amount for txn in transactions if txn.transaction_type == TransactionType.EXPENSE.value
    )
    total_income = sum(
        txn.amount for txn in transactions if txn.transaction_type == TransactionType.INCOME.value
    )
    click.echo("-" * 100)
    click.echo(
        f"TOTAL  Expenses: {format_money(total_expenses)} | "
        f"Income: {format_money(total_income)} | Count: {len(transactions)}"
    )


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        moneta transaction delete 1
    """
    db = ctx.obj["db"]
    user_id = ctx.obj["user"]
    transaction_service = TransactionService(db)

    txn = transaction_service.get_transaction(user_id, transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        transaction_service.delete_transaction(user_id, transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
