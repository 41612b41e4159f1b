from __future__ import annotations

from ..config import Settings
from ..errors import ConfigurationError
from .base import LLMClient
from .gemini_client import GeminiClient
from .openai_client import OpenAIClient

__all__ = ["LLMClient", "GeminiClient", "OpenAIClient", "create_llm_client"]


def create_llm_client(settings: Settings) -> LLMClient:
    if settings.llm_provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        return OpenAIClient(settings.openai_api_key, model=settings.openai_model, timeout_s=settings.llm_timeout_s)
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY not configured")
    return GeminiClient(settings.gemini_api_key, model=settings.gemini_model, timeout_s=settings.llm_timeout_s)
