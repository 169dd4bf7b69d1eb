"""Tests for date parsing utilities."""

from datetime import date
import pytest

from moneta.utils.date_parser import get_date_range, parse_date, parse_iso_date

TODAY = date(2024, 3, 15)


def test_parse_iso_date():
    assert parse_iso_date("2024-03-01") == date(2024, 3, 1)
    assert parse_iso_date(" 2024-03-01T10:00:00 ") == date(2024, 3, 1)


@pytest.mark.parametrize("value", ["01/03/2024", "2024-13-01", "", "yesterday"])
def test_parse_iso_date_rejects_other_formats(value):
    with pytest.raises(ValueError):
        parse_iso_date(value)


def test_parse_date_day_first():
    assert parse_date("01/03/2024", today=TODAY) == date(2024, 3, 1)


def test_parse_date_month_first():
    assert parse_date("03/01/2024", dayfirst=False, today=TODAY) == date(2024, 3, 1)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("today", date(2024, 3, 15)),
        ("Hoje", date(2024, 3, 15)),
        ("yesterday", date(2024, 3, 14)),
        ("ontem", date(2024, 3, 14)),
        ("tomorrow", date(2024, 3, 16)),
        ("last month", date(2024, 2, 1)),
        ("this year", date(2024, 1, 1)),
    ],
)
def test_parse_relative_dates(value, expected):
    assert parse_date(value, today=TODAY) == expected


def test_parse_date_invalid():
    with pytest.raises(ValueError):
        parse_date("not a date", today=TODAY)


@pytest.mark.parametrize(
    "period, expected",
    [
        ("this-month", (date(2024, 3, 1), date(2024, 3, 15))),
        ("this-year", (date(2024, 1, 1), date(2024, 3, 15))),
        ("this-week", (date(2024, 3, 11), date(2024, 3, 15))),
        ("last-month", (date(2024, 2, 1), date(2024, 2, 29))),
        ("last-year", (date(2023, 1, 1), date(2023, 12, 31))),
        ("last-week", (date(2024, 3, 4), date(2024, 3, 10))),
    ],
)
def test_get_date_range(period, expected):
    assert get_date_range(period, today=TODAY) == expected


def test_get_date_range_unknown():
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("next-decade", today=TODAY)
