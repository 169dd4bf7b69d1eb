"""Summary commands."""

import click
from moneta.domain.report_analysis import ReportAnalysisService
from moneta.domain.summary import SummaryService
from moneta.cli.date_filters import period_flags, resolve_cli_date_range
from moneta.cli.error_handling import format_money, handle_domain_error
from moneta.utils.date_parser import get_date_range


def _echo_monthly(service: SummaryService, user_id: str, year: int) -> None:
    click.echo(f"\nMonthly totals for {year}:")
    click.echo("-" * 50)
    click.echo(f"{'Month':<10} {'Income':>12} {'Expense':>12} {'Net':>12}")
    click.echo("-" * 50)
    for row in service.monthly_totals(user_id, year):
        click.echo(
            f"{row.month:<10} {format_money(row.income):>12} {format_money(row.expense):>12} "
            f"{format_money(row.income - row.expense):>12}"
        )


@click.command("summary")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--this-month", is_flag=True, help="Current month to date (default)")
@click.option("--this-year", is_flag=True, help="Current year to date")
@click.option("--this-week", is_flag=True, help="Current week to date")
@click.option("--last-month", is_flag=True, help="Previous calendar month")
@click.option("--last-year", is_flag=True, help="Previous calendar year")
@click.option("--last-week", is_flag=True, help="Previous week")
@click.option("--monthly", "monthly_year", type=int, help="Show income and expense per month of YEAR")
@click.option("--analyze", is_flag=True, help="Add a short written analysis by the AI")
@click.pass_context
def summary(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_year: bool,
    this_week: bool,
    last_month: bool,
    last_year: bool,
    last_week: bool,
    monthly_year: int | None,
    analyze: bool,
):
    """Show income, expenses and spending by category.

    Transfers between your own accounts on the same day are left out of the
    totals. Investment movements are shown on their own line.

    Examples:
        moneta summary
        moneta summary --last-month
        moneta summary --monthly 2024
        moneta summary --last-month --analyze
    """
    db = ctx.obj["db"]
    user_id = ctx.obj["user"]
    service = SummaryService(db)

    if monthly_year is not None:
        _echo_monthly(service, user_id, monthly_year)
        return

    flags = period_flags(
        this_month=this_month,
        this_year=this_year,
        this_week=this_week,
        last_month=last_month,
        last_year=last_year,
        last_week=last_week,
    )
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=flags,
        default_range=get_date_range("this-month"),
    )

    try:
        report = service.period_summary(user_id, start_date=start, end_date=end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    period = f"{start or 'beginning'} to {end or 'today'}"
    click.echo(f"\nSummary for {period}:")
    click.echo("-" * 50)
    click.echo(f"{'Income':<20} {format_money(report.income):>14}")
    click.echo(f"{'Expenses':<20} {format_money(report.expense):>14}")
    click.echo(f"{'Investments':<20} {format_money(report.investments):>14}")
    click.echo(f"{'Balance':<20} {format_money(report.balance):>14}")
    click.echo("-" * 50)
    click.echo(f"Transactions counted: {report.transaction_count}")
    if report.excluded_transfer_pairs:
        click.echo(f"Transfers between own accounts excluded: {report.excluded_transfer_pairs}")

    if report.spending_by_category:
        click.echo("\nSpending by category:")
        for item in report.spending_by_category:
            click.echo(f"  {item.category_name:<24} {format_money(item.amount):>14} {item.percent:5.1f}%")

    if analyze:
        result = ReportAnalysisService().analyze(report)
        if result.ok:
            click.echo(f"\nAnalysis:\n{result.analysis}")
        else:
            click.echo(f"Warning: analysis unavailable: {result.error}", err=True)


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
