"""Detection of self-transfers between a user's own accounts.

A self-transfer shows up as an expense in one account and an income of the
same amount in another, posted on the same day or a few days apart. Matches
are advisory: nothing here modifies stored transactions.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from moneta.database.base import Database
from moneta.domain.entities import (
    Account,
    Transaction,
    TransactionType,
    TransferCandidatePair,
    TransferReport,
)

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal("0.005")
DEFAULT_MAX_DAY_GAP = 2
LOOKBACK_DAYS = 90
MAX_ROWS = 600


def _as_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def classify_transfers(
    transactions: Iterable[Transaction], max_day_gap: int = DEFAULT_MAX_DAY_GAP
) -> list[tuple[Transaction, Transaction]]:
    """Pair expenses with incomes that look like money moving between accounts.

    Two transactions pair when they belong to different accounts, one is an
    expense and the other an income, their amounts match within
    AMOUNT_TOLERANCE, and their dates are at most ``max_day_gap`` days
    apart. Each transaction joins at most one pair. Closer dates are matched
    first; ties go to the lower ids. Rows already typed as transfers are
    ignored.

    Args:
        transactions: Transactions from any number of accounts
        max_day_gap: Largest allowed date difference in days (0 = same day)

    Returns:
        List of (outgoing, incoming) pairs ordered by outgoing date and id
    """
    expenses = []
    incomes = []
    for txn in transactions:
        if txn.transaction_type == TransactionType.EXPENSE.value:
            expenses.append(txn)
        elif txn.transaction_type == TransactionType.INCOME.value:
            incomes.append(txn)

    candidates = []
    for out_txn in expenses:
        out_amount = abs(_as_decimal(out_txn.amount))
        for in_txn in incomes:
            if in_txn.account_id == out_txn.account_id:
                continue
            if abs(out_amount - abs(_as_decimal(in_txn.amount))) > AMOUNT_TOLERANCE:
                continue
            gap = abs((in_txn.date - out_txn.date).days)
            if gap > max_day_gap:
                continue
            candidates.append((gap, out_txn.id, in_txn.id, out_txn, in_txn))

    candidates.sort(key=lambda c: (c[0], c[1], c[2]))

    used_out: set[int] = set()
    used_in: set[int] = set()
    pairs = []
    for _, out_id, in_id, out_txn, in_txn in candidates:
        if out_id in used_out or in_id in used_in:
            continue
        used_out.add(out_id)
        used_in.add(in_id)
        pairs.append((out_txn, in_txn))

    pairs.sort(key=lambda p: (p[0].date, p[0].id))
    return pairs


def find_transfer_pairs(
    accounts: Sequence[Account],
    transactions: Iterable[Transaction],
    max_day_gap: int = DEFAULT_MAX_DAY_GAP,
) -> list[TransferCandidatePair]:
    """Build reviewable transfer candidates for the given accounts.

    Transactions from accounts outside ``accounts`` are ignored.
    """
    names = {account.id: account.name for account in accounts}
    scoped = [txn for txn in transactions if txn.account_id in names]

    return [
        TransferCandidatePair(
            account_out_id=out_txn.account_id,
            account_out_name=names[out_txn.account_id],
            account_in_id=in_txn.account_id,
            account_in_name=names[in_txn.account_id],
            amount=abs(_as_decimal(out_txn.amount)),
            date=out_txn.date,
            date_in=in_txn.date,
            description_out=out_txn.description,
            description_in=in_txn.description,
            relevant_for_totals=False,
        )
        for out_txn, in_txn in classify_transfers(scoped, max_day_gap=max_day_gap)
    ]


def summarize_pairs(pairs: Sequence[TransferCandidatePair], lookback_days: int = LOOKBACK_DAYS) -> str:
    """Return a one-paragraph description of detected pairs."""
    if not pairs:
        return f"No transfers between your accounts were found in the last {lookback_days} days."

    noun = "transfer" if len(pairs) == 1 else "transfers"
    lines = [
        f"Found {len(pairs)} likely {noun} between your accounts in the last "
        f"{lookback_days} days. They should not count as income or expense."
    ]
    for pair in pairs:
        lines.append(
            f"- {pair.date.isoformat()}: {pair.amount:.2f} from {pair.account_out_name} "
            f"to {pair.account_in_name}"
        )
    return "\n".join(lines)


class TransferDetectionService:
    """Service that runs transfer detection over recent transactions."""

    def __init__(
        self,
        db: Database,
        lookback_days: int = LOOKBACK_DAYS,
        max_rows: int = MAX_ROWS,
        max_day_gap: int = DEFAULT_MAX_DAY_GAP,
    ):
        """Initialize transfer detection service.

        Args:
            db: Database instance
            lookback_days: Size of the trailing window
            max_rows: Most recent rows considered inside the window
            max_day_gap: Largest allowed posting-date skew
        """
        self.db = db
        self.lookback_days = lookback_days
        self.max_rows = max_rows
        self.max_day_gap = max_day_gap

    def detect_transfers(self, user_id: str, today: Optional[date] = None) -> TransferReport:
        """Find likely self-transfers in the user's recent transactions.

        Args:
            user_id: Owning user
            today: End of the lookback window. Defaults to date.today()

        Returns:
            TransferReport; ``skipped`` is set when the user has fewer than
            two accounts
        """
        accounts = self.db.list_accounts(user_id)
        if len(accounts) < 2:
            return TransferReport(
                summary="Transfer detection needs at least two accounts.",
                skipped=True,
            )

        if today is None:
            today = date.today()
        transactions = self.db.list_transactions(
            user_id,
            start_date=today - timedelta(days=self.lookback_days),
            end_date=today,
            limit=self.max_rows,
        )

        pairs = find_transfer_pairs(accounts, transactions, max_day_gap=self.max_day_gap)
        logger.info(
            "Transfer detection over %d transactions found %d pairs", len(transactions), len(pairs)
        )
        return TransferReport(
            summary=summarize_pairs(pairs, self.lookback_days),
            pairs=tuple(pairs),
        )
