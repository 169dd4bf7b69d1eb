"""Credit card commands."""

import click
from moneta.domain.credit_card import CreditCardService
from moneta.domain.invoice_import import InvoiceImportService
from moneta.cli.commands.statement import read_document
from moneta.cli.error_handling import format_money, handle_domain_error


@click.group()
def card_group():
    """Manage credit cards and invoices."""
    pass


@card_group.command("create")
@click.option("--number", "last4", required=True, help="Card number or its last four digits")
@click.option("--holder", required=True, help="Name printed on the card")
@click.option("--expiry", required=True, help="Expiry date as MM/YY or MM/YYYY")
@click.pass_context
def create_card(ctx, last4: str, holder: str, expiry: str):
    """Register a credit card. Only the last four digits are stored.

    Examples:
        moneta card create --number 1234 --holder "Maria Silva" --expiry 08/29
    """
    db = ctx.obj["db"]
    service = CreditCardService(db)

    month, _, year = expiry.partition("/")
    try:
        card_id = service.create_card(
            ctx.obj["user"], last4=last4, holder_name=holder, expiry_month=month, expiry_year=year
        )
        click.echo(f"Created card ending in {last4[-4:]} (ID: {card_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@card_group.command("list")
@click.pass_context
def list_cards(ctx):
    """List credit cards."""
    db = ctx.obj["db"]
    service = CreditCardService(db)

    cards = service.list_cards(ctx.obj["user"])
    if not cards:
        click.echo("No credit cards found.")
        return

    click.echo("\nCredit cards:")
    click.echo("-" * 60)
    for card in cards:
        click.echo(
            f"ID: {card.id:3d} | **** {card.last4} | {card.holder_name:25s} | "
            f"{card.expiry_month}/{card.expiry_year}"
        )


@card_group.command("invoices")
@click.option("--card", "card_id", type=int, help="Only show invoices of this card ID")
@click.option("--items", "show_items", is_flag=True, help="Show the purchase lines of each invoice")
@click.pass_context
def list_invoices(ctx, card_id: int | None, show_items: bool):
    """List imported invoices, newest first."""
    db = ctx.obj["db"]
    user_id = ctx.obj["user"]
    service = CreditCardService(db)

    try:
        invoices = service.list_invoices(user_id, card_id=card_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not invoices:
        click.echo("No invoices found.")
        return

    for invoice in invoices:
        due = f", due {invoice.due_date}" if invoice.due_date else ""
        click.echo(
            f"\nInvoice {invoice.id} (card {invoice.credit_card_id}): "
            f"{invoice.period_start} to {invoice.period_end}{due} | Total {format_money(invoice.total_amount)}"
        )
        if show_items:
            for item in service.get_invoice_items(user_id, invoice.id):
                installments = ""
                if item.installments_current and item.installments_total:
                    installments = f" ({item.installments_current}/{item.installments_total})"
                click.echo(
                    f"  {str(item.date or ''):<12} {format_money(item.amount):>12} "
                    f"{item.description or ''}{installments}"
                )
        if invoice.ai_suggestions:
            click.echo(f"  Suggestions: {invoice.ai_suggestions}")


@card_group.command("import-invoice")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--card", "card_id", type=int, required=True, help="Card ID the invoice belongs to")
@click.option("--password", help="Password of an encrypted PDF invoice")
@click.option("--no-suggestions", is_flag=True, help="Do not ask the AI for spending suggestions")
@click.pass_context
def import_invoice(ctx, file_path: str, card_id: int, password: str | None, no_suggestions: bool):
    """Extract a credit card invoice from a PDF, CSV, OFX or TXT file.

    Examples:
        moneta card import-invoice fatura.pdf --card 1
    """
    db = ctx.obj["db"]
    service = InvoiceImportService(db, with_suggestions=not no_suggestions)

    result = service.process_invoice(
        ctx.obj["user"], card_id, read_document(file_path), password=password
    )
    if not result.ok:
        click.echo(f"Error: {result.error}", err=True)
        ctx.exit(1)

    click.echo(
        f"Imported invoice {result.invoice_id}: {result.item_count} item(s), "
        f"total {format_money(result.total_amount)}, period ending {result.period_end}"
    )
    if result.ai_suggestions:
        click.echo(f"\nSuggestions: {result.ai_suggestions}")


def register_commands(cli):
    """Register credit card commands with main CLI."""
    cli.add_command(card_group, name="card")
