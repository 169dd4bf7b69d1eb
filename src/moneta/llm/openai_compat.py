"""Client for OpenAI-compatible chat endpoints (Groq by default)."""

import logging
from typing import Optional

from moneta.domain.errors import AIServiceError
from moneta.llm.base import CompletionRequest, CompletionResponse, LLMClient

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"


class ChatOpenAIClient(LLMClient):
    """LLMClient backed by langchain-openai's ChatOpenAI."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GROQ_MODEL,
        base_url: Optional[str] = GROQ_BASE_URL,
        temperature: float = 0,
        provider_name: str = "Groq",
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.provider_name = provider_name
        self._llms: dict[str, object] = {}

    def _get_llm(self, model: str):
        """Lazy-load the chat model, one instance per model name."""
        if model not in self._llms:
            from langchain_openai import ChatOpenAI

            self._llms[model] = ChatOpenAI(
                model=model,
                api_key=self.api_key,
                base_url=self.base_url,
                temperature=self.temperature,
            )
        return self._llms[model]

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

        message_types = {"system": SystemMessage, "assistant": AIMessage}
        messages = [message_types.get(m.role, HumanMessage)(content=m.content) for m in request.messages]
        model = request.model or self.model

        try:
            llm = self._get_llm(model)
            if request.json_mode:
                llm = llm.bind(response_format={"type": "json_object"})
            response = llm.invoke(messages)
        except Exception as e:
            logger.warning("%s request failed: %s", self.provider_name, e)
            raise AIServiceError(f"{self.provider_name} error: {e}") from e

        content = response.content
        if not isinstance(content, str):
            # Multi-part content; keep the text parts only
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        return CompletionResponse(content=content)
