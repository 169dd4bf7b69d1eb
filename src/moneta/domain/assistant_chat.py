"""Finance assistant chat backed by the configured LLM."""

import json
import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Sequence

from moneta.database.base import Database
from moneta.domain.entities import ChatReply, ChatSuggestionsResult
from moneta.domain.errors import AIConfigurationError, AIServiceError
from moneta.domain.extraction_result import strip_code_fence
from moneta.domain.summary import SummaryService
from moneta.llm.base import ChatMessage, CompletionRequest, LLMClient
from moneta.llm.factories import create_llm_client

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 6
MAX_SUGGESTION_LENGTH = 45
MAX_HISTORY_MESSAGES = 14

DEFAULT_SUGGESTIONS = (
    "Summarize my finances this month",
    "How can I save more?",
    "Which expenses could I cut?",
    "Help me set savings goals",
    "Tips to organize my budget",
    "Analyze my spending by category",
)

ASSISTANT_SYSTEM_PROMPT = """You are the assistant of moneta, a personal finance tracker. Answer clearly and objectively, in the language the user writes in.
The user may have accounts, transactions, imported bank statements, credit cards and invoices. Help with summaries, saving tips, spending analysis, goals, planning and personal finance questions. If there is not enough data for a specific analysis, suggest importing statements or adding transactions."""

CONTEXT_TEMPLATE = (
    "Current user data: total balance {total}; income this month {income}; "
    "expenses this month {expense}; investments this month {investments}. "
    "Use it only as context and never invent numbers."
)

SUGGESTIONS_SYSTEM_PROMPT = "Return only a JSON array of 6 strings, with no text before or after it."

SUGGESTIONS_PROMPT = """You are the assistant of a personal finance app. Write exactly 6 short suggestions (questions the user could click to ask the assistant), all about personal finance: monthly summary, how to save, spending analysis, goals, tips, planning.
Return ONLY a JSON array of 6 strings, without numbering or markdown. Example: ["Summarize my finances this month","How can I save more?","Which expenses could I cut?"]
At most 40 characters per suggestion."""

CHAT_ROLES = ("user", "assistant")


def parse_suggestions(raw: str) -> tuple[str, ...]:
    """Read suggestion strings from the model output.

    Non-string items are skipped; at most six are kept, each cut to 45
    characters. Returns an empty tuple when nothing usable is found.
    """
    try:
        parsed = json.loads(strip_code_fence(raw or ""))
    except json.JSONDecodeError:
        return ()
    if not isinstance(parsed, list):
        return ()
    texts = (item.strip() for item in parsed if isinstance(item, str))
    return tuple(text[:MAX_SUGGESTION_LENGTH] for text in texts if text)[:MAX_SUGGESTIONS]


class AssistantChatService:
    """Service for the conversational finance assistant.

    Replies are grounded on the user's current totals: the balance over all
    accounts and the month-to-date summary.
    """

    def __init__(
        self,
        db: Database,
        llm_client: Optional[LLMClient] = None,
        client_factory: Callable[[], LLMClient] = create_llm_client,
    ):
        """Initialize assistant chat service.

        Args:
            db: Database instance
            llm_client: Client to use; built with client_factory when None
            client_factory: Builds the client from configuration
        """
        self.db = db
        self.llm_client = llm_client
        self.client_factory = client_factory
        self.summary_service = SummaryService(db)

    def _get_llm_client(self) -> LLMClient:
        if self.llm_client is None:
            self.llm_client = self.client_factory()
        return self.llm_client

    def suggestions(self) -> ChatSuggestionsResult:
        """Conversation starters, falling back to a fixed list.

        Never fails: a missing provider, a provider error or unusable output
        all produce the default suggestions.
        """
        try:
            client = self._get_llm_client()
            response = client.complete(
                CompletionRequest(
                    messages=(
                        ChatMessage(role="system", content=SUGGESTIONS_SYSTEM_PROMPT),
                        ChatMessage(role="user", content=SUGGESTIONS_PROMPT),
                    )
                )
            )
        except AIServiceError as e:
            logger.info("Using default chat suggestions: %s", e)
            return ChatSuggestionsResult(ok=True, suggestions=DEFAULT_SUGGESTIONS)

        suggestions = parse_suggestions(response.content)
        return ChatSuggestionsResult(ok=True, suggestions=suggestions or DEFAULT_SUGGESTIONS)

    def _context(self, user_id: str, today: Optional[date]) -> str:
        total = sum((account.balance for account in self.db.list_accounts(user_id)), Decimal("0.00"))
        month = self.summary_service.month_to_date(user_id, today=today)
        return CONTEXT_TEMPLATE.format(
            total=f"{total:.2f}",
            income=f"{month.income:.2f}",
            expense=f"{month.expense:.2f}",
            investments=f"{month.investments:.2f}",
        )

    def send_message(
        self,
        user_id: str,
        history: Sequence[ChatMessage],
        message: str,
        today: Optional[date] = None,
    ) -> ChatReply:
        """Answer a user message in the context of earlier turns.

        Only the last 14 user and assistant turns of ``history`` are sent.

        Args:
            user_id: Owning user
            history: Earlier turns, oldest first
            message: New user message
            today: Reference date for the month-to-date context

        Returns:
            ChatReply; on failure ``ok`` is False and ``error`` holds a
            readable message
        """
        text = (message or "").strip()
        if not text:
            return ChatReply(ok=False, error="Type a message.")

        try:
            client = self._get_llm_client()
        except AIConfigurationError as e:
            return ChatReply(ok=False, error=f"Assistant unavailable: {e}")

        turns = [m for m in history if m.role in CHAT_ROLES][-MAX_HISTORY_MESSAGES:]
        system_prompt = f"{ASSISTANT_SYSTEM_PROMPT}\n\n{self._context(user_id, today)}"
        request = CompletionRequest(
            messages=(
                ChatMessage(role="system", content=system_prompt),
                *turns,
                ChatMessage(role="user", content=text),
            )
        )
        try:
            reply = client.complete(request).content.strip()
        except AIServiceError as e:
            logger.warning("Assistant request failed: %s", e)
            return ChatReply(ok=False, error=str(e))

        if not reply:
            return ChatReply(ok=False, error="Empty reply from the assistant. Try again.")
        return ChatReply(ok=True, reply=reply)
