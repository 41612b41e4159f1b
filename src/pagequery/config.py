from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

load_dotenv()


LLMProvider = Literal["gemini", "openai"]


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class Settings:
    """Configuration loaded from environment variables."""

    llm_provider: LLMProvider = "gemini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    llm_timeout_s: float = 60.0
    address_length: int = 3
    headless_default: bool = True
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls) -> "Settings":
        llm_raw = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
        llm_provider: LLMProvider = "gemini" if llm_raw not in {"gemini", "openai"} else llm_raw  # type: ignore[assignment]

        return cls(
            llm_provider=llm_provider,
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            llm_timeout_s=float(os.getenv("LLM_TIMEOUT_S", "60")),
            address_length=max(1, int(os.getenv("ADDRESS_LENGTH", "3"))),
            headless_default=_bool_env("HEADLESS_DEFAULT", True),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=Path(os.getenv("LOG_DIR", "logs")),
        )

    def ensure_directories(self) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def api_key(self) -> str | None:
        if self.llm_provider == "openai":
            return self.openai_api_key
        return self.gemini_api_key
