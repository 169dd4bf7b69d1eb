"""LLM client factory functions."""

import os
from typing import Mapping, Optional

from moneta.domain.errors import AIConfigurationError
from moneta.llm.base import LLMClient
from moneta.llm.gemini import DEFAULT_GEMINI_MODEL, GeminiClient
from moneta.llm.openai_compat import DEFAULT_GROQ_MODEL, GROQ_BASE_URL, ChatOpenAIClient

MISSING_CREDENTIAL_MESSAGE = (
    "No AI provider is configured. Set GROQ_API_KEY or GEMINI_API_KEY "
    "(or GOOGLE_GENERATIVE_AI_API_KEY)."
)


def create_llm_client(environ: Optional[Mapping[str, str]] = None) -> LLMClient:
    """Create the configured LLM client.

    Groq is used when GROQ_API_KEY is set; otherwise Gemini when
    GOOGLE_GENERATIVE_AI_API_KEY or GEMINI_API_KEY is set.

    Args:
        environ: Mapping to read settings from. Defaults to os.environ

    Returns:
        LLMClient instance

    Raises:
        AIConfigurationError: If no provider credential is set
    """
    if environ is None:
        environ = os.environ

    groq_key = (environ.get("GROQ_API_KEY") or "").strip()
    if groq_key:
        return ChatOpenAIClient(
            api_key=groq_key,
            model=environ.get("GROQ_MODEL") or DEFAULT_GROQ_MODEL,
            base_url=environ.get("GROQ_BASE_URL") or GROQ_BASE_URL,
        )

    gemini_key = (
        environ.get("GOOGLE_GENERATIVE_AI_API_KEY") or environ.get("GEMINI_API_KEY") or ""
    ).strip()
    if gemini_key:
        return GeminiClient(
            api_key=gemini_key,
            model=environ.get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        )

    raise AIConfigurationError(MISSING_CREDENTIAL_MESSAGE)
