from __future__ import annotations

import abc
from typing import Any


class LLMClient(abc.ABC):
    """Abstract base class representing a language model client."""

    @abc.abstractmethod
    async def complete(
        self,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ) -> str:
        """Return the raw text of the model's answer."""

    async def close(self) -> None:
        """Release transport resources."""
