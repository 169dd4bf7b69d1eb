"""Domain model entities for moneta.

These are pure data classes representing business concepts, independent of
database schema. Persisted entities are produced by the database mappers;
the remaining ones are results flowing through the statement pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Optional


class TransactionType(str, Enum):
    """Kind of money movement."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class AccountType(str, Enum):
    """Kind of account holding a balance."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    INVESTMENT = "investment"
    CASH = "cash"


@dataclass(frozen=True)
class Account:
    """Account domain entity.

    The balance is a stored snapshot. It is not recomputed from transactions
    and is overwritten when a statement import supplies a closing balance.
    """

    id: int
    user_id: str
    name: str
    account_type: str
    balance: Decimal
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity, unique per user by normalized name and type."""

    id: int
    user_id: str
    name: str
    category_type: str
    normalized_name: str
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    Amount is unsigned; the sign is implied by ``transaction_type``.
    """

    id: int
    user_id: str
    account_id: int
    category_id: Optional[int]
    amount: Decimal
    transaction_type: str
    description: Optional[str]
    date: date
    is_recurring: bool
    ai_generated: bool
    import_batch_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class ImportBatch:
    """Record of one confirmed statement import."""

    id: int
    user_id: str
    account_id: int
    fingerprint: str
    transaction_count: int
    closing_balance: Optional[Decimal]
    created_at: datetime


@dataclass(frozen=True)
class CreditCard:
    """Credit card domain entity. Only the last four digits are stored."""

    id: int
    user_id: str
    last4: str
    holder_name: str
    expiry_month: str
    expiry_year: str
    created_at: datetime


@dataclass(frozen=True)
class CreditCardInvoice:
    """Credit card invoice extracted from an uploaded bill."""

    id: int
    credit_card_id: int
    user_id: str
    period_start: date
    period_end: date
    due_date: Optional[date]
    total_amount: Decimal
    ai_suggestions: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class CreditCardInvoiceItem:
    """Single purchase line of a credit card invoice."""

    id: int
    invoice_id: int
    description: Optional[str]
    amount: Decimal
    date: Optional[date]
    installments_current: Optional[str]
    installments_total: Optional[str]


@dataclass(frozen=True)
class StatementDocument:
    """Uploaded statement file. Lives only until its text is extracted."""

    filename: str
    content: bytes
    media_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return PurePath(self.filename or "").suffix.lower()


@dataclass(frozen=True)
class ExtractedTransaction:
    """Transaction proposed by the LLM, pending user review."""

    date: str
    description: str
    amount: float
    type: str
    category: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "description": self.description,
            "amount": self.amount,
            "type": self.type,
            "category": self.category,
        }


@dataclass(frozen=True)
class StatementExtraction:
    """Validated LLM extraction: transactions plus optional closing balance.

    ``dropped`` counts entries discarded by validation.
    """

    transactions: tuple[ExtractedTransaction, ...] = ()
    closing_balance: Optional[float] = None
    dropped: int = 0


@dataclass(frozen=True)
class ProcessStatementResult:
    """Outcome of statement processing (extraction phase)."""

    ok: bool
    transactions: tuple[ExtractedTransaction, ...] = ()
    closing_balance: Optional[float] = None
    dropped: int = 0
    error: Optional[str] = None
    password_required: bool = False

    @classmethod
    def failure(cls, error: str, password_required: bool = False) -> "ProcessStatementResult":
        return cls(ok=False, error=error, password_required=password_required)


@dataclass(frozen=True)
class TransferCandidatePair:
    """Likely movement of money between two of the user's own accounts."""

    account_out_id: int
    account_out_name: str
    account_in_id: int
    account_in_name: str
    amount: Decimal
    date: date
    date_in: date
    description_out: Optional[str]
    description_in: Optional[str]
    relevant_for_totals: bool = False


@dataclass(frozen=True)
class TransferReport:
    """Advisory report of detected self-transfers."""

    summary: str
    pairs: tuple[TransferCandidatePair, ...] = ()
    skipped: bool = False


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a confirmed statement import."""

    inserted: int
    batch_id: int
    balance_updated: bool
    transfer_report: Optional[TransferReport] = None


@dataclass(frozen=True)
class InvoiceImportResult:
    """Outcome of a credit card invoice import."""

    ok: bool
    invoice_id: Optional[int] = None
    total_amount: Optional[Decimal] = None
    period_end: Optional[date] = None
    item_count: int = 0
    ai_suggestions: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class CategorySpending:
    """Expense total for one category within a period."""

    category_name: str
    amount: Decimal
    percent: float


@dataclass(frozen=True)
class PeriodSummary:
    """Income and expense totals for a period, self-transfers excluded."""

    start_date: Optional[date]
    end_date: Optional[date]
    income: Decimal
    expense: Decimal
    investments: Decimal
    balance: Decimal
    transaction_count: int
    excluded_transfer_pairs: int
    spending_by_category: tuple[CategorySpending, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MonthlyTotals:
    """Income and expense for one calendar month."""

    month: str
    income: Decimal
    expense: Decimal


@dataclass(frozen=True)
class ReportAnalysisResult:
    """Written analysis of a period summary, or the reason it failed."""

    ok: bool
    analysis: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ChatSuggestionsResult:
    """Short questions offered as assistant conversation starters."""

    ok: bool
    suggestions: tuple[str, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class ChatReply:
    """Assistant answer to one user message."""

    ok: bool
    reply: Optional[str] = None
    error: Optional[str] = None
