"""Tests for SummaryService."""

from datetime import date
from functools import partial
from decimal import Decimal
import pytest

from moneta.domain.errors import ValidationError
from moneta.domain.summary import SummaryService


@pytest.fixture
def summary_service(temp_db):
    return SummaryService(temp_db)


def _add(transaction_service, category_service, user_id, account_id, day, amount, txn_type, category=None):
    category_id = None
    if category is not None:
        category_id = category_service.get_or_create_category(user_id, category, txn_type).id
    return transaction_service.create_transaction(
        user_id, account_id, date(2024, 3, day), Decimal(amount), txn_type, category_id=category_id
    )


def test_period_summary_totals(
    summary_service, transaction_service, category_service, sample_account, user_id
):
    add = partial(_add, transaction_service, category_service, user_id, sample_account.id)
    add(1, "3000.00", "income", "Salário")
    add(2, "150.00", "expense", "Alimentação")
    add(3, "50.00", "expense", "alimentacao")
    add(4, "100.00", "expense", "Transporte")
    add(5, "40.00", "expense")
    add(6, "1000.00", "expense", "Investimento")

    summary = summary_service.period_summary(user_id, date(2024, 3, 1), date(2024, 3, 31))

    assert summary.income == Decimal("3000.00")
    assert summary.expense == Decimal("340.00")
    assert summary.investments == Decimal("1000.00")
    assert summary.balance == Decimal("2660.00")
    assert summary.transaction_count == 6
    assert summary.excluded_transfer_pairs == 0

    by_category = [(c.category_name, c.amount) for c in summary.spending_by_category]
    assert by_category == [
        ("Alimentação", Decimal("200.00")),
        ("Transporte", Decimal("100.00")),
        ("Outros", Decimal("40.00")),
    ]
    assert summary.spending_by_category[0].percent == pytest.approx(58.8)


def test_same_day_transfers_are_excluded(
    summary_service, transaction_service, category_service, sample_account, savings_account, user_id
):
    _add(transaction_service, category_service, user_id, sample_account.id, 10, "500.00", "expense", "Transferência")
    _add(transaction_service, category_service, user_id, savings_account.id, 10, "500.00", "income")
    # Next-day movement is not treated as a self-transfer in totals
    _add(transaction_service, category_service, user_id, sample_account.id, 11, "80.00", "expense")
    _add(transaction_service, category_service, user_id, savings_account.id, 12, "80.00", "income")

    summary = summary_service.period_summary(user_id, date(2024, 3, 1), date(2024, 3, 31))

    assert summary.excluded_transfer_pairs == 1
    assert summary.income == Decimal("80.00")
    assert summary.expense == Decimal("80.00")
    assert summary.transaction_count == 2


def test_month_to_date(summary_service, transaction_service, category_service, sample_account, user_id):
    _add(transaction_service, category_service, user_id, sample_account.id, 1, "10.00", "expense")
    _add(transaction_service, category_service, user_id, sample_account.id, 20, "99.00", "expense")

    summary = summary_service.month_to_date(user_id, today=date(2024, 3, 15))

    assert summary.start_date == date(2024, 3, 1)
    assert summary.expense == Decimal("10.00")


def test_empty_period(summary_service, user_id):
    summary = summary_service.period_summary(user_id, date(2024, 1, 1), date(2024, 1, 31))

    assert summary.income == Decimal("0")
    assert summary.spending_by_category == ()


def test_inverted_period(summary_service, user_id):
    with pytest.raises(ValidationError):
        summary_service.period_summary(user_id, date(2024, 2, 1), date(2024, 1, 1))


def test_monthly_totals(summary_service, transaction_service, category_service, sample_account, user_id):
    _add(transaction_service, category_service, user_id, sample_account.id, 1, "3000.00", "income")
    _add(transaction_service, category_service, user_id, sample_account.id, 2, "120.00", "expense")
    _add(transaction_service, category_service, user_id, sample_account.id, 3, "500.00", "expense", "Investimento")

    totals = summary_service.monthly_totals(user_id, 2024)

    assert len(totals) == 12
    assert totals[0].month == "2024-01"
    march = totals[2]
    assert march.month == "2024-03"
    assert march.income == Decimal("3000.00")
    assert march.expense == Decimal("120.00")
    assert totals[3].income == Decimal("0")
