from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import LLMError
from .base import LLMClient

logger = logging.getLogger(__name__)


def _to_contents(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    contents = []
    for message in messages:
        role = "model" if message.get("role") == "assistant" else "user"
        contents.append({"role": role, "parts": [{"text": str(message.get("content", ""))}]})
    return contents


class GeminiClient(LLMClient):
    """Gemini generateContent REST client returning the first candidate's text."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", timeout_s: float = 60.0) -> None:
        self._api_key = api_key
        self._model = model
        self._client = httpx.AsyncClient(
            base_url="https://generativelanguage.googleapis.com/v1beta",
            timeout=httpx.Timeout(30.0, read=timeout_s),
            headers={"x-goog-api-key": api_key},
        )

    async def complete(
        self,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ) -> str:
        payload: dict[str, Any] = {
            "contents": _to_contents(messages),
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        try:
            response = await self._client.post(f"/models/{self._model}:generateContent", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:  # pragma: no cover - network failure
            logger.exception("Gemini completion failed: %s", exc)
            raise LLMError(f"Gemini request failed: {exc}") from exc

        data = response.json()
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError) as exc:
            raise LLMError(f"Unexpected Gemini response shape: {data!r}") from exc
        return "".join(part.get("text", "") for part in parts)

    async def close(self) -> None:
        await self._client.aclose()
