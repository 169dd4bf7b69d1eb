"""Abstract text-completion interface used by the extraction flows."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ChatMessage:
    """One chat turn. Role is "system", "user" or "assistant"."""

    role: str
    content: str


@dataclass(frozen=True)
class CompletionRequest:
    """Request for a single completion.

    ``json_mode`` asks the provider to force a JSON object response. ``model``
    overrides the client's configured model when set.
    """

    messages: tuple[ChatMessage, ...]
    json_mode: bool = False
    model: Optional[str] = None


@dataclass(frozen=True)
class CompletionResponse:
    """Raw model output. Treat as untrusted text."""

    content: str


class LLMClient(ABC):
    """Abstract text-completion client."""

    @abstractmethod
    def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run one completion.

        Raises:
            AIServiceError: If the provider call fails
        """
        pass
