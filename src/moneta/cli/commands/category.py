"""Category management commands."""

import click
from moneta.domain.category import CategoryService
from moneta.domain.entities import TransactionType
from moneta.cli.error_handling import handle_domain_error

CATEGORY_TYPES = [t.value for t in TransactionType]


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(CATEGORY_TYPES, case_sensitive=False),
    help="Only list categories of this type",
)
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(ctx.obj["user"], category_type=category_type)
    if not categories:
        click.echo("No categories found. Categories are created when statements are imported.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        click.echo(f"  {cat.name} ({cat.category_type}, ID: {cat.id})")


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(CATEGORY_TYPES, case_sensitive=False),
    default="expense",
    help="Category type (default: expense)",
)
@click.pass_context
def create_category(ctx, name: str, category_type: str):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(ctx.obj["user"], name=name, category_type=category_type)
        click.echo(f"Created category '{name.strip()}' (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
