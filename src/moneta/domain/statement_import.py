"""Statement import and balance reconciliation.

The flow has two phases with a user review in between:

1. ``process_statement`` turns an uploaded file into candidate transactions
   and an optional closing balance. It reports failures as results instead
   of raising.
2. ``import_transactions`` persists the reviewed rows, overwrites the account
   balance with the statement's closing balance, and runs transfer
   detection over recent transactions.
"""

import hashlib
import json
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from moneta.database.base import Database
from moneta.domain.category import CategoryService
from moneta.domain.entities import (
    ExtractedTransaction,
    ImportResult,
    ProcessStatementResult,
    StatementDocument,
    TransactionType,
    TransferReport,
)
from moneta.domain.errors import (
    AIConfigurationError,
    AIServiceError,
    ConflictError,
    ExtractionError,
    MalformedAIResponseError,
    NotFoundError,
    PasswordError,
    ValidationError,
    account_not_found,
    duplicate_statement_import,
)
from moneta.domain.extraction_prompt import build_extraction_request
from moneta.domain.extraction_result import normalize_extraction
from moneta.domain.statement_text import extract_text
from moneta.domain.transfers import TransferDetectionService
from moneta.llm.base import LLMClient
from moneta.llm.factories import create_llm_client
from moneta.utils.amount_parser import parse_amount
from moneta.utils.date_parser import parse_iso_date

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 500
CENT = Decimal("0.01")

CandidateRow = Union[ExtractedTransaction, Mapping[str, Any]]


def _field(row: CandidateRow, name: str) -> Any:
    if isinstance(row, ExtractedTransaction):
        return getattr(row, name)
    return row.get(name)


def _to_cents(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        amount = parse_amount(str(value) if value is not None else "")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def statement_fingerprint(account_id: int, rows: Sequence[dict[str, Any]]) -> str:
    """Hash an account and a normalized row set.

    Row order, description case and surrounding whitespace do not change the
    result, so a re-upload of the same statement produces the same value.
    """
    normalized = sorted(
        [
            row["date"].isoformat(),
            (row["description"] or "").strip().lower(),
            f"{row['amount']:.2f}",
            row["transaction_type"],
        ]
        for row in rows
    )
    dates = [row["date"] for row in rows]
    payload = {
        "account_id": account_id,
        "start": min(dates).isoformat(),
        "end": max(dates).isoformat(),
        "rows": normalized,
    }
    encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


class StatementImportService:
    """Service for importing bank statements through an LLM."""

    def __init__(
        self,
        db: Database,
        llm_client: Optional[LLMClient] = None,
        client_factory: Callable[[], LLMClient] = create_llm_client,
    ):
        """Initialize statement import service.

        Args:
            db: Database instance
            llm_client: Client to use. Created with client_factory on first
                use when None
            client_factory: Builds the client from configuration
        """
        self.db = db
        self.llm_client = llm_client
        self.client_factory = client_factory
        self.category_service = CategoryService(db)
        self.transfer_service = TransferDetectionService(db)

    def _get_llm_client(self) -> LLMClient:
        if self.llm_client is None:
            self.llm_client = self.client_factory()
        return self.llm_client

    def process_statement(
        self,
        user_id: str,
        account_id: Optional[int],
        document: StatementDocument,
        password: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ProcessStatementResult:
        """Extract candidate transactions from an uploaded statement.

        Text extraction runs before the LLM is contacted, so unreadable files
        never reach it. Nothing is persisted.

        Args:
            user_id: Owning user
            account_id: Target account chosen by the user
            document: Uploaded file
            password: Optional PDF password
            today: Reference date for years missing from the statement

        Returns:
            ProcessStatementResult. On failure ``ok`` is False and ``error``
            holds a readable message; ``password_required`` is set when the
            user should (re)enter a PDF password.
        """
        if account_id is None:
            return ProcessStatementResult.failure("Select an account before uploading a statement.")
        if self.db.get_account(user_id, account_id) is None:
            return ProcessStatementResult.failure(account_not_found(account_id))

        try:
            text = extract_text(document, password=password)
        except PasswordError as e:
            return ProcessStatementResult.failure(str(e), password_required=True)
        except (ExtractionError, ValidationError) as e:
            return ProcessStatementResult.failure(str(e))

        try:
            client = self._get_llm_client()
        except AIConfigurationError as e:
            return ProcessStatementResult.failure(f"AI is not configured: {e}")

        try:
            response = client.complete(build_extraction_request(text, today=today))
        except AIServiceError as e:
            return ProcessStatementResult.failure(f"Failed to process statement with AI: {e}")

        try:
            extraction = normalize_extraction(response.content)
        except MalformedAIResponseError as e:
            return ProcessStatementResult.failure(str(e))

        logger.info(
            "Statement for account %s produced %d transactions (%d dropped)",
            account_id,
            len(extraction.transactions),
            extraction.dropped,
        )
        return ProcessStatementResult(
            ok=True,
            transactions=extraction.transactions,
            closing_balance=extraction.closing_balance,
            dropped=extraction.dropped,
        )

    def _parse_rows(self, transactions: Sequence[CandidateRow]) -> list[dict[str, Any]]:
        rows = []
        for index, row in enumerate(transactions, start=1):
            raw_date = _field(row, "date")
            try:
                row_date = raw_date if isinstance(raw_date, date) else parse_iso_date(str(raw_date))
            except ValueError:
                raise ValidationError(f"Transaction {index}: invalid date '{raw_date}'")

            try:
                amount = _to_cents(_field(row, "amount"))
            except ValueError:
                raise ValidationError(f"Transaction {index}: invalid amount '{_field(row, 'amount')}'")

            transaction_type = str(_field(row, "type") or "").strip().lower()
            if amount < 0:
                amount = -amount
                transaction_type = TransactionType.EXPENSE.value
            try:
                transaction_type = TransactionType(transaction_type).value
            except ValueError:
                raise ValidationError(f"Transaction {index}: invalid type '{transaction_type}'")

            description = str(_field(row, "description") or "").strip()[:MAX_DESCRIPTION_LENGTH]
            category = _field(row, "category")
            rows.append(
                {
                    "date": row_date,
                    "description": description or None,
                    "amount": amount,
                    "transaction_type": transaction_type,
                    "category": None if category is None else str(category),
                }
            )
        return rows

    def _repeat_fingerprint(self, user_id: str, fingerprint: str) -> str:
        sequence = 1
        while True:
            candidate = hashlib.sha256(f"{fingerprint}:{sequence}".encode("ascii")).hexdigest()
            if not self.db.import_batch_exists(user_id, candidate):
                return candidate
            sequence += 1

    def import_transactions(
        self,
        user_id: str,
        account_id: int,
        transactions: Sequence[CandidateRow],
        closing_balance: Optional[Union[float, Decimal]] = None,
        allow_duplicate: bool = False,
        today: Optional[date] = None,
    ) -> ImportResult:
        """Persist reviewed transactions and reconcile the account balance.

        Every row is parsed and every category resolved before anything is
        written; one bad row or failed category aborts the whole import. The
        rows, the batch record and the balance overwrite share one database
        transaction. Transfer detection runs after the commit and cannot undo
        it.

        Args:
            user_id: Owning user
            account_id: Target account
            transactions: Reviewed rows (ExtractedTransaction or dicts with
                date, description, amount, type, category)
            closing_balance: Statement closing balance. None leaves the stored
                balance untouched
            allow_duplicate: Import even if the same batch was imported before
            today: End of the transfer detection window

        Returns:
            ImportResult with the inserted count and the transfer report
            (None if detection failed)

        Raises:
            NotFoundError: If the account does not belong to the user
            ValidationError: If there are no rows or a row is invalid
            ConflictError: If the batch was already imported
        """
        if self.db.get_account(user_id, account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if not transactions:
            raise ValidationError("No transactions to import")

        rows = self._parse_rows(transactions)

        balance = None
        if closing_balance is not None:
            try:
                balance = _to_cents(closing_balance)
            except ValueError:
                raise ValidationError(f"Invalid closing balance '{closing_balance}'")

        fingerprint = statement_fingerprint(account_id, rows)
        if self.db.import_batch_exists(user_id, fingerprint):
            if not allow_duplicate:
                raise ConflictError(duplicate_statement_import(account_id))
            logger.warning("Importing a repeated statement batch into account %s", account_id)
            fingerprint = self._repeat_fingerprint(user_id, fingerprint)

        for row in rows:
            category = self.category_service.get_or_create_category(
                user_id, row.pop("category"), row["transaction_type"]
            )
            row["category_id"] = category.id

        batch = self.db.record_statement_import(
            user_id=user_id,
            account_id=account_id,
            fingerprint=fingerprint,
            transactions=rows,
            closing_balance=balance,
        )
        logger.info(
            "Imported %d transactions into account %s (batch %s)", len(rows), account_id, batch.id
        )

        return ImportResult(
            inserted=len(rows),
            batch_id=batch.id,
            balance_updated=balance is not None,
            transfer_report=self._detect_transfers(user_id, today),
        )

    def _detect_transfers(self, user_id: str, today: Optional[date]) -> Optional[TransferReport]:
        try:
            return self.transfer_service.detect_transfers(user_id, today=today)
        except Exception:
            logger.exception("Transfer detection failed after import")
            return None
