"""CLI helpers for account resolution."""

from __future__ import annotations

import click
from moneta.domain.account import AccountService
from moneta.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID for the current user, or exit with a CLI error."""
    try:
        return resolve_account(account_service, ctx.obj["user"], account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
