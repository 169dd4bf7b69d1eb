"""LLM client layer for moneta."""

from moneta.llm.base import ChatMessage, CompletionRequest, CompletionResponse, LLMClient
from moneta.llm.factories import create_llm_client

__all__ = [
    "ChatMessage",
    "CompletionRequest",
    "CompletionResponse",
    "LLMClient",
    "create_llm_client",
]
