"""CLI helpers for date range resolution."""

from datetime import date

import click

from moneta.utils.date_parser import get_date_range, parse_date


def period_flags(**flags: bool) -> dict[str, bool]:
    """Map --this-month style option values to period names."""
    return {name.replace("_", "-"): value for name, value in flags.items()}


def _fail(ctx: click.Context, message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
    today: date | None = None,
) -> tuple[date | None, date | None]:
    """Resolve a date range from period flags or explicit dates.

    A period flag excludes explicit dates. Explicit dates accept the same
    formats as ``parse_date`` (ISO, day-first, relative words). When nothing
    is given, ``default_range`` is returned.

    Args:
        ctx: Click context, used to exit on invalid input
        start_date: Raw --start-date value
        end_date: Raw --end-date value
        period_flags: Period name to flag value, see ``period_flags``
        default_range: Range used when no option is set
        today: Reference date for periods and relative dates

    Returns:
        Tuple of (start, end); either side may be None
    """
    selected = [name for name, is_set in period_flags.items() if is_set]

    if len(selected) > 1:
        _fail(
            ctx,
            "Only one period option (--this-month, --this-year, --last-month, ...) can be specified at a time.",
        )
    if selected and (start_date or end_date):
        _fail(ctx, "Period options cannot be combined with --start-date or --end-date.")

    if selected:
        return get_date_range(selected[0], today=today)

    start = None
    end = None
    for label, raw in (("start", start_date), ("end", end_date)):
        if not raw:
            continue
        try:
            parsed = parse_date(raw, today=today)
        except ValueError as e:
            _fail(ctx, f"Invalid {label} date: {e}")
        if label == "start":
            start = parsed
        else:
            end = parsed

    if start is None and end is None and default_range is not None:
        return default_range

    if start is not None and end is not None and start > end:
        _fail(ctx, "Start date must be on or before end date.")

    return start, end
