"""Written AI analysis of a period summary."""

import json
import logging
from typing import Callable, Optional

from moneta.domain.entities import PeriodSummary, ReportAnalysisResult
from moneta.domain.errors import AIConfigurationError, AIServiceError
from moneta.llm.base import ChatMessage, CompletionRequest, LLMClient
from moneta.llm.factories import create_llm_client

logger = logging.getLogger(__name__)

TOP_CATEGORIES = 5

ANALYSIS_SYSTEM_PROMPT = "Reply with the analysis text only, without a title and without bullet points."

ANALYSIS_PROMPT_TEMPLATE = """You are a personal finance advisor. Based on the report data below, write a short and objective analysis (2 to 4 paragraphs) covering:
1. Overview: how healthy the finances are (income versus expense, balance).
2. Spending by category: point out the largest category with a quick suggestion (e.g. "Food is X% of spending; consider a weekly limit").
3. One practical recommendation for next month.

Report data:
{summary}

Reply in the same language as the category names. Use a friendly and direct tone."""


def summary_payload(report: PeriodSummary) -> dict:
    """Reduce a period summary to the figures sent to the model."""
    return {
        "period": {
            "start": report.start_date.isoformat() if report.start_date else None,
            "end": report.end_date.isoformat() if report.end_date else None,
        },
        "income": f"{report.income:.2f}",
        "expense": f"{report.expense:.2f}",
        "balance": f"{report.balance:.2f}",
        "investments": f"{report.investments:.2f}",
        "transactionCount": report.transaction_count,
        "topCategories": [
            {
                "name": item.category_name,
                "amount": f"{item.amount:.2f}",
                "percent": f"{item.percent:.1f}",
            }
            for item in report.spending_by_category[:TOP_CATEGORIES]
        ],
    }


class ReportAnalysisService:
    """Service asking the model to comment on a period summary."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        client_factory: Callable[[], LLMClient] = create_llm_client,
    ):
        self.llm_client = llm_client
        self.client_factory = client_factory

    def _get_llm_client(self) -> LLMClient:
        if self.llm_client is None:
            self.llm_client = self.client_factory()
        return self.llm_client

    def analyze(self, report: PeriodSummary) -> ReportAnalysisResult:
        """Write a short analysis of income, expense and top categories.

        Args:
            report: Summary produced by SummaryService

        Returns:
            ReportAnalysisResult; on failure ``ok`` is False and ``error``
            holds a readable message
        """
        try:
            client = self._get_llm_client()
        except AIConfigurationError as e:
            return ReportAnalysisResult(ok=False, error=f"AI is not configured: {e}")

        summary = json.dumps(summary_payload(report), ensure_ascii=False, indent=2)
        request = CompletionRequest(
            messages=(
                ChatMessage(role="system", content=ANALYSIS_SYSTEM_PROMPT),
                ChatMessage(role="user", content=ANALYSIS_PROMPT_TEMPLATE.format(summary=summary)),
            )
        )
        try:
            content = client.complete(request).content.strip()
        except AIServiceError as e:
            logger.warning("Report analysis failed: %s", e)
            return ReportAnalysisResult(ok=False, error=str(e))

        if not content:
            return ReportAnalysisResult(ok=False, error="AI returned an empty analysis")
        return ReportAnalysisResult(ok=True, analysis=content)
