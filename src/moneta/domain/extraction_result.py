"""Validation and normalization of LLM extraction output.

The model output is untrusted text. Invalid JSON is a hard error; individual
malformed entries are dropped and counted.
"""

import json
import logging
import math
import re
from typing import Any, Optional

from moneta.domain.entities import ExtractedTransaction, StatementExtraction, TransactionType
from moneta.domain.errors import MalformedAIResponseError
from moneta.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("date", "description", "amount", "type", "category")

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)

_EXTRACTED_TYPES = (TransactionType.INCOME.value, TransactionType.EXPENSE.value)


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    text = raw.strip()
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


def _to_number(value: Any) -> Optional[float]:
    """Read a JSON number or numeric string, or return None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(parse_amount(value))
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def parse_closing_balance(value: Any) -> Optional[float]:
    """Coerce a reported closing balance to a float.

    Accepts numbers and numeric strings ("1234.56", "1234,56"). Booleans,
    non-finite values and anything unreadable become None.
    """
    return _to_number(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _normalize_entry(entry: Any) -> Optional[ExtractedTransaction]:
    if not isinstance(entry, dict):
        return None
    if any(key not in entry for key in REQUIRED_KEYS):
        return None

    amount = _to_number(entry["amount"])
    if amount is None:
        return None

    transaction_type = _text(entry["type"]).lower()
    if amount < 0:
        amount = -amount
        transaction_type = TransactionType.EXPENSE.value
    if transaction_type not in _EXTRACTED_TYPES:
        return None

    return ExtractedTransaction(
        date=_text(entry["date"]),
        description=_text(entry["description"]),
        amount=amount,
        type=transaction_type,
        category=_text(entry["category"]),
    )


def normalize_extraction(raw: str) -> StatementExtraction:
    """Parse and normalize raw model output.

    Accepted shapes:
    - ``{"transactions": [...], "closingBalance": ...}``
    - ``{"data": [...]}`` (older responses)
    - a bare list of transactions, with no closing balance

    Any other top-level value yields an empty extraction.

    Args:
        raw: Raw completion text

    Returns:
        StatementExtraction with kept entries in their original order

    Raises:
        MalformedAIResponseError: If the text is not valid JSON
    """
    try:
        parsed = json.loads(strip_code_fence(raw or ""))
    except json.JSONDecodeError as e:
        raise MalformedAIResponseError(f"AI returned invalid JSON: {e}") from e

    closing_balance = None
    if isinstance(parsed, list):
        entries = parsed
    elif isinstance(parsed, dict):
        entries = parsed.get("transactions")
        if entries is None:
            entries = parsed.get("data")
        if not isinstance(entries, list):
            entries = []
        closing_balance = parse_closing_balance(parsed.get("closingBalance"))
    else:
        entries = []

    transactions = []
    for entry in entries:
        normalized = _normalize_entry(entry)
        if normalized is not None:
            transactions.append(normalized)

    dropped = len(entries) - len(transactions)
    if dropped:
        logger.warning("Dropped %d malformed extracted entries", dropped)
    logger.info(
        "Normalized %d extracted transactions (closing balance %s)",
        len(transactions),
        "present" if closing_balance is not None else "absent",
    )
    return StatementExtraction(
        transactions=tuple(transactions),
        closing_balance=closing_balance,
        dropped=dropped,
    )
