"""Transfer detection command."""

import click
from moneta.domain.transfers import TransferDetectionService
from moneta.utils.date_parser import parse_date


@click.command("transfers")
@click.option("--as-of", help="End of the 90-day window (default: today)")
@click.option("--max-day-gap", type=int, default=2, show_default=True, help="Allowed posting-date skew in days")
@click.pass_context
def detect_transfers(ctx, as_of: str | None, max_day_gap: int):
    """Find likely transfers between your own accounts.

    Matches are only reported. Transactions are never changed.
    """
    db = ctx.obj["db"]
    service = TransferDetectionService(db, max_day_gap=max_day_gap)

    today = None
    if as_of:
        try:
            today = parse_date(as_of)
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    report = service.detect_transfers(ctx.obj["user"], today=today)
    click.echo(report.summary)


def register_commands(cli):
    """Register transfers command with main CLI."""
    cli.add_command(detect_transfers)
