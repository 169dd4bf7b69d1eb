"""Client for Google Gemini models."""

import logging

import google.generativeai as genai

from moneta.domain.errors import AIServiceError
from moneta.llm.base import CompletionRequest, CompletionResponse, LLMClient

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash-lite"


class GeminiClient(LLMClient):
    """LLMClient backed by google-generativeai."""

    def __init__(self, api_key: str, model: str = DEFAULT_GEMINI_MODEL):
        self.model = model
        genai.configure(api_key=api_key)

    def _contents(self, request: CompletionRequest):
        """Single prompt string, or role-tagged turns when the model has spoken before."""
        turns = [m for m in request.messages if m.role != "system"]
        if not any(m.role == "assistant" for m in turns):
            return "\n\n".join(m.content for m in turns)
        return [
            {"role": "model" if m.role == "assistant" else "user", "parts": [m.content]}
            for m in turns
        ]

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        system_parts = [m.content for m in request.messages if m.role == "system"]

        generation_config = {"temperature": 0}
        if request.json_mode:
            generation_config["response_mime_type"] = "application/json"

        try:
            model_instance = genai.GenerativeModel(
                model_name=request.model or self.model,
                system_instruction="\n\n".join(system_parts) or None,
                generation_config=generation_config,
            )
            response = model_instance.generate_content(self._contents(request))
        except Exception as e:
            logger.warning("Gemini request failed: %s", e)
            raise AIServiceError(f"Gemini error: {e}") from e

        # Blocked or empty responses carry no parts
        if not response.parts:
            raise AIServiceError("Gemini error: empty or blocked response")
        return CompletionResponse(content=response.text)
