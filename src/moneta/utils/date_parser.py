"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

RELATIVE_DAYS = {
    "today": 0,
    "hoje": 0,
    "yesterday": -1,
    "ontem": -1,
    "tomorrow": 1,
    "amanha": 1,
}

PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def parse_iso_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD date, ignoring any time part.

    Raises:
        ValueError: If the value is not an ISO calendar date
    """
    return date.fromisoformat(value.strip()[:10])


def parse_date(date_str: str, dayfirst: bool = True, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-03-01"
    - Day-first dates, as printed on Brazilian statements: "01/03/2024"
    - Relative dates: "today", "yesterday", "hoje", "ontem",
      "last month", "this year", "this week"

    Args:
        date_str: Date string
        dayfirst: Read ambiguous numeric dates as day/month
        today: Reference date for relative values. Defaults to date.today()

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if today is None:
        today = date.today()

    if date_str in RELATIVE_DAYS:
        return today + timedelta(days=RELATIVE_DAYS[date_str])

    if date_str.startswith(("last ", "this ")):
        start, _ = get_date_range(date_str.replace(" ", "-", 1), today=today)
        return start

    try:
        return parse_iso_date(date_str)
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str, dayfirst=dayfirst).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    Args:
        period: One of this-month, this-year, this-week, last-month,
            last-year, last-week
        today: Reference date. Defaults to date.today()

    Returns:
        Tuple of (start_date, end_date); "this" periods end today

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    if today is None:
        today = date.today()

    if period == "this-month":
        return (today.replace(day=1), today)

    if period == "this-year":
        return (today.replace(month=1, day=1), today)

    if period == "this-week":
        return (today - timedelta(days=today.weekday()), today)

    if period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        return (start_date, today.replace(day=1) - timedelta(days=1))

    if period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        return (start_date, today.replace(month=1, day=1) - timedelta(days=1))

    if period == "last-week":
        start_date = today - timedelta(days=today.weekday() + 7)
        return (start_date, start_date + timedelta(days=6))

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
