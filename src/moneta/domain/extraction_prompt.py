"""Prompt contract for statement extraction.

Builds the completion request sent to the LLM. No network I/O happens here;
the response is validated by ``moneta.domain.extraction_result``.
"""

from datetime import date
from typing import Optional

from moneta.llm.base import ChatMessage, CompletionRequest

MAX_PROMPT_CHARS = 120_000
INVESTMENT_CATEGORY = "Investimento"

SYSTEM_PROMPT = (
    "You extract transactions from bank statements. "
    "Respond with a single JSON object and nothing else: "
    "no prose, no explanations, no markdown code fences."
)

USER_PROMPT_TEMPLATE = """Extract every transaction from the bank statement text below.

Rules:
1. Include every transaction line. Ignore headers, footers, page numbers and running-balance lines.
2. "category": infer a short category label from the description using common-sense merchant categorization (e.g. Alimentação, Transporte, Moradia, Saúde, Lazer, Salário, Outros).
3. "amount": always a positive number. If the statement shows a negative value or a debit, use its absolute value and set "type" to "expense".
4. "type": "income" for credits and money received, "expense" for debits and money spent.
5. "date": ISO format YYYY-MM-DD. When the year is missing, use {year}.
6. "closingBalance": the account balance at the end of the statement, taken only from an explicit label such as "saldo", "saldo final", "saldo atual" or "balance" near the end of the document. Use a signed number. If there is no such label, use null.
7. Investment movements (applications, redemptions, CDB, LCI, LCA, Tesouro Direto, fund purchases) must use the category "{investment_category}".

Return exactly this shape:
{{"transactions": [{{"date": "YYYY-MM-DD", "description": "string", "amount": 0.0, "type": "income" or "expense", "category": "string"}}], "closingBalance": number or null}}

Statement text:
{text}"""


def truncate_statement_text(text: str, limit: int = MAX_PROMPT_CHARS) -> str:
    """Cut text to at most ``limit`` characters, dropping the tail."""
    if len(text) <= limit:
        return text
    return text[:limit]


def build_extraction_request(text: str, today: Optional[date] = None) -> CompletionRequest:
    """Build the JSON-mode completion request for a statement.

    Args:
        text: Extracted statement text
        today: Reference date for the default year. Defaults to date.today()

    Returns:
        CompletionRequest with a system and a user message
    """
    if today is None:
        today = date.today()

    user_prompt = USER_PROMPT_TEMPLATE.format(
        year=today.year,
        investment_category=INVESTMENT_CATEGORY,
        text=truncate_statement_text(text),
    )
    return CompletionRequest(
        messages=(
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(role="user", content=user_prompt),
        ),
        json_mode=True,
    )
