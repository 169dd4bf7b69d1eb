"""Period summary domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from moneta.database.base import Database
from moneta.domain.category import DEFAULT_CATEGORY_NAME, normalize_category_name
from moneta.domain.entities import (
    CategorySpending,
    MonthlyTotals,
    PeriodSummary,
    Transaction,
    TransactionType,
)
from moneta.domain.errors import ValidationError
from moneta.domain.extraction_prompt import INVESTMENT_CATEGORY
from moneta.domain.transfers import classify_transfers

ZERO = Decimal("0.00")


class SummaryService:
    """Service for income and expense totals.

    Same-day, same-amount movements between two of the user's accounts are
    treated as self-transfers and left out of every total. Expenses in the
    investment category are reported separately from ordinary spending.
    """

    def __init__(self, db: Database, investment_category: str = INVESTMENT_CATEGORY):
        """Initialize summary service.

        Args:
            db: Database instance
            investment_category: Name of the category holding investment
                movements, matched by normalized name
        """
        self.db = db
        self.investment_category = investment_category

    def _excluded_ids(self, transactions: Sequence[Transaction]) -> tuple[set[int], int]:
        pairs = classify_transfers(transactions, max_day_gap=0)
        excluded = set()
        for out_txn, in_txn in pairs:
            excluded.add(out_txn.id)
            excluded.add(in_txn.id)
        return excluded, len(pairs)

    def period_summary(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> PeriodSummary:
        """Summarize income and expenses for a period.

        Args:
            user_id: Owning user
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date

        Returns:
            PeriodSummary with spending by category, largest first
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")

        transactions = self.db.list_transactions(user_id, start_date=start_date, end_date=end_date)
        excluded, pair_count = self._excluded_ids(transactions)
        categories = {cat.id: cat for cat in self.db.list_categories(user_id)}
        investment_key = normalize_category_name(self.investment_category)

        income = ZERO
        expense = ZERO
        investments = ZERO
        counted = 0
        spending: dict[str, Decimal] = {}
        display_names: dict[str, str] = {}

        for txn in transactions:
            if txn.id in excluded:
                continue
            category = categories.get(txn.category_id) if txn.category_id is not None else None
            category_name = category.name if category is not None else DEFAULT_CATEGORY_NAME
            key = normalize_category_name(category_name)

            if txn.transaction_type == TransactionType.INCOME.value:
                income += txn.amount
                counted += 1
            elif txn.transaction_type == TransactionType.EXPENSE.value:
                counted += 1
                if key == investment_key:
                    investments += txn.amount
                    continue
                expense += txn.amount
                spending[key] = spending.get(key, ZERO) + txn.amount
                display_names.setdefault(key, category_name)

        by_category = tuple(
            CategorySpending(
                category_name=display_names[key],
                amount=amount,
                percent=round(float(amount / expense * 100), 1) if expense else 0.0,
            )
            for key, amount in sorted(spending.items(), key=lambda item: (-item[1], item[0]))
        )

        return PeriodSummary(
            start_date=start_date,
            end_date=end_date,
            income=income,
            expense=expense,
            investments=investments,
            balance=income - expense,
            transaction_count=counted,
            excluded_transfer_pairs=pair_count,
            spending_by_category=by_category,
        )

    def month_to_date(self, user_id: str, today: Optional[date] = None) -> PeriodSummary:
        """Summarize the current month up to today."""
        if today is None:
            today = date.today()
        return self.period_summary(user_id, start_date=today.replace(day=1), end_date=today)

    def monthly_totals(self, user_id: str, year: int) -> list[MonthlyTotals]:
        """Income and expense per calendar month of a year.

        Self-transfers and investment movements are excluded as in
        period_summary.

        Returns:
            Twelve MonthlyTotals rows, January first
        """
        transactions = self.db.list_transactions(
            user_id, start_date=date(year, 1, 1), end_date=date(year, 12, 31)
        )
        excluded, _ = self._excluded_ids(transactions)
        categories = {cat.id: cat for cat in self.db.list_categories(user_id)}
        investment_key = normalize_category_name(self.investment_category)

        income = [ZERO] * 12
        expense = [ZERO] * 12
        for txn in transactions:
            if txn.id in excluded:
                continue
            month_index = txn.date.month - 1
            if txn.transaction_type == TransactionType.INCOME.value:
                income[month_index] += txn.amount
            elif txn.transaction_type == TransactionType.EXPENSE.value:
                category = categories.get(txn.category_id)
                if category is not None and normalize_category_name(category.name) == investment_key:
                    continue
                expense[month_index] += txn.amount

        return [
            MonthlyTotals(month=f"{year}-{month:02d}", income=income[month - 1], expense=expense[month - 1])
            for month in range(1, 13)
        ]
