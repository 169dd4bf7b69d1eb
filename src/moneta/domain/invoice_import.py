"""Credit card invoice import through an LLM."""

import json
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Optional

from moneta.database.base import Database
from moneta.domain.entities import InvoiceImportResult, StatementDocument
from moneta.domain.errors import (
    AIConfigurationError,
    AIServiceError,
    ExtractionError,
    MalformedAIResponseError,
    ValidationError,
    credit_card_not_found,
)
from moneta.domain.extraction_prompt import truncate_statement_text
from moneta.domain.extraction_result import parse_closing_balance, strip_code_fence
from moneta.domain.statement_text import extract_text
from moneta.llm.base import ChatMessage, CompletionRequest, LLMClient
from moneta.llm.factories import create_llm_client
from moneta.utils.date_parser import parse_iso_date

logger = logging.getLogger(__name__)

INVOICE_EXTENSIONS = (".pdf", ".csv", ".ofx", ".txt")
CENT = Decimal("0.01")

INVOICE_SYSTEM_PROMPT = "Respond only with a valid JSON object, without markdown and without text before or after it."

INVOICE_PROMPT_TEMPLATE = """You are a financial analyst. Read the raw text of a credit card invoice below and extract:

1. Billing period: start and end dates (YYYY-MM-DD). Use {year} when the year is not shown.
2. Due date (YYYY-MM-DD), if present.
3. Invoice total (positive number, e.g. 1500.00).
4. Every purchase line: description (merchant or short text), amount (positive number), purchase date (YYYY-MM-DD if shown) and installments ("1" in installmentsCurrent and "3" in installmentsTotal for "1/3").

Rules:
- Amounts are numbers (e.g. 99.90). Ignore negative signs.
- Use null for any date that does not exist.

Return exactly this structure:
{{"periodStart": "YYYY-MM-DD", "periodEnd": "YYYY-MM-DD", "dueDate": "YYYY-MM-DD or null", "totalAmount": 1234.56, "items": [{{"description": "string", "amount": 99.90, "date": "YYYY-MM-DD or null", "installmentsCurrent": "1 or null", "installmentsTotal": "3 or null"}}]}}

--- INVOICE TEXT ---
{text}"""

SUGGESTIONS_PROMPT_TEMPLATE = """Based on this credit card invoice, write 2 to 4 short sentences with financial health suggestions (for example: avoid too many installments, watch restaurant spending, pay before the due date). Be objective and friendly.

Summary: {summary}

Reply with the suggestion text only, without a title or bullet points."""


@dataclass(frozen=True)
class ParsedInvoiceItem:
    description: Optional[str]
    amount: Decimal
    date: Optional[date]
    installments_current: Optional[str]
    installments_total: Optional[str]


@dataclass(frozen=True)
class ParsedInvoice:
    """Invoice data read from the model output."""

    period_start: date
    period_end: date
    due_date: Optional[date]
    total_amount: Decimal
    items: tuple[ParsedInvoiceItem, ...]


def _optional_date(value: Any) -> Optional[date]:
    if not isinstance(value, str):
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        return None


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        text = str(value).strip()
        return text or None
    return None


def _cents(value: float) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_invoice_response(raw: str) -> ParsedInvoice:
    """Parse the model's invoice JSON.

    Period dates and a non-negative total are required. Item fields are read
    leniently: a missing amount becomes zero, unreadable dates become None.

    Raises:
        MalformedAIResponseError: If the JSON is invalid or required fields
            are missing
    """
    try:
        parsed = json.loads(strip_code_fence(raw or ""))
    except json.JSONDecodeError as e:
        raise MalformedAIResponseError(f"AI returned invalid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedAIResponseError("Could not interpret the extracted invoice data")

    period_start = _optional_date(parsed.get("periodStart"))
    period_end = _optional_date(parsed.get("periodEnd"))
    if period_start is None or period_end is None:
        raise MalformedAIResponseError("Invoice period is missing from the extracted data")

    total = parse_closing_balance(parsed.get("totalAmount"))
    if total is None or total < 0:
        raise MalformedAIResponseError("Invoice total is missing or negative")

    raw_items = parsed.get("items")
    items = []
    for item in raw_items if isinstance(raw_items, list) else []:
        if not isinstance(item, dict):
            continue
        amount = parse_closing_balance(item.get("amount")) or 0.0
        items.append(
            ParsedInvoiceItem(
                description=item.get("description") if isinstance(item.get("description"), str) else None,
                amount=_cents(abs(amount)),
                date=_optional_date(item.get("date")),
                installments_current=_optional_text(item.get("installmentsCurrent")),
                installments_total=_optional_text(item.get("installmentsTotal")),
            )
        )

    return ParsedInvoice(
        period_start=period_start,
        period_end=period_end,
        due_date=_optional_date(parsed.get("dueDate")),
        total_amount=_cents(total),
        items=tuple(items),
    )


class InvoiceImportService:
    """Service for importing credit card invoices."""

    def __init__(
        self,
        db: Database,
        llm_client: Optional[LLMClient] = None,
        client_factory: Callable[[], LLMClient] = create_llm_client,
        with_suggestions: bool = True,
    ):
        """Initialize invoice import service.

        Args:
            db: Database instance
            llm_client: Client to use; built with client_factory when None
            client_factory: Builds the client from configuration
            with_suggestions: Ask the model for short spending advice
        """
        self.db = db
        self.llm_client = llm_client
        self.client_factory = client_factory
        self.with_suggestions = with_suggestions

    def _get_llm_client(self) -> LLMClient:
        if self.llm_client is None:
            self.llm_client = self.client_factory()
        return self.llm_client

    def _suggestions(self, client: LLMClient, invoice: ParsedInvoice) -> Optional[str]:
        summary = (
            f"Total: {invoice.total_amount:.2f}; Period: {invoice.period_start.isoformat()} to "
            f"{invoice.period_end.isoformat()}; {len(invoice.items)} items."
        )
        request = CompletionRequest(
            messages=(
                ChatMessage(role="system", content="Reply with plain text only, without a title."),
                ChatMessage(role="user", content=SUGGESTIONS_PROMPT_TEMPLATE.format(summary=summary)),
            )
        )
        try:
            content = client.complete(request).content.strip()
        except AIServiceError as e:
            logger.warning("Invoice suggestions unavailable: %s", e)
            return None
        return content or None

    def process_invoice(
        self,
        user_id: str,
        card_id: int,
        document: StatementDocument,
        password: Optional[str] = None,
        today: Optional[date] = None,
    ) -> InvoiceImportResult:
        """Extract an invoice from an uploaded bill and store it.

        Returns:
            InvoiceImportResult; on failure ``ok`` is False and ``error``
            holds a readable message
        """
        if self.db.get_credit_card(user_id, card_id) is None:
            return InvoiceImportResult(ok=False, error=credit_card_not_found(card_id))

        try:
            text = extract_text(document, password=password, allowed_extensions=INVOICE_EXTENSIONS)
        except (ExtractionError, ValidationError) as e:
            return InvoiceImportResult(ok=False, error=str(e))

        try:
            client = self._get_llm_client()
        except AIConfigurationError as e:
            return InvoiceImportResult(ok=False, error=f"AI is not configured: {e}")

        if today is None:
            today = date.today()
        request = CompletionRequest(
            messages=(
                ChatMessage(role="system", content=INVOICE_SYSTEM_PROMPT),
                ChatMessage(
                    role="user",
                    content=INVOICE_PROMPT_TEMPLATE.format(
                        year=today.year, text=truncate_statement_text(text)
                    ),
                ),
            ),
            json_mode=True,
        )
        try:
            response = client.complete(request)
            invoice = parse_invoice_response(response.content)
        except AIServiceError as e:
            return InvoiceImportResult(ok=False, error=f"Failed to process invoice with AI: {e}")
        except MalformedAIResponseError as e:
            return InvoiceImportResult(ok=False, error=str(e))

        suggestions = self._suggestions(client, invoice) if self.with_suggestions else None

        invoice_id = self.db.create_credit_card_invoice(
            user_id=user_id,
            credit_card_id=card_id,
            period_start=invoice.period_start,
            period_end=invoice.period_end,
            due_date=invoice.due_date,
            total_amount=invoice.total_amount,
            ai_suggestions=suggestions,
            items=[
                {
                    "description": item.description,
                    "amount": item.amount,
                    "date": item.date,
                    "installments_current": item.installments_current,
                    "installments_total": item.installments_total,
                }
                for item in invoice.items
            ],
        )
        logger.info("Stored invoice %s with %d items for card %s", invoice_id, len(invoice.items), card_id)

        return InvoiceImportResult(
            ok=True,
            invoice_id=invoice_id,
            total_amount=invoice.total_amount,
            period_end=invoice.period_end,
            item_count=len(invoice.items),
            ai_suggestions=suggestions,
        )
