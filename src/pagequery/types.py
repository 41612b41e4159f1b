from __future__ import annotations

import json
import re
from typing import Any, ClassVar

import orjson
from pydantic import BaseModel, Field

from .errors import ParsingError

DICTIONARY_HEADER = "<!-- Tag Dictionary -->"
MARKUP_HEADER = "<!-- Minified HTML -->"


class CompactedPage(BaseModel):
    """Token stream and tag dictionary produced for one page snapshot."""

    compacted_text: str = ""
    dictionary_text: str = ""
    tag_count: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @classmethod
    def empty(cls) -> "CompactedPage":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.compacted_text and not self.dictionary_text

    def render(self) -> str:
        """Return the text sent to the LLM: dictionary first, then markup."""

        return f"{DICTIONARY_HEADER}\n{self.dictionary_text}\n\n{MARKUP_HEADER}\n{self.compacted_text}"


class JSONRepair:
    COMMON_REPLACEMENTS: ClassVar[list[tuple[re.Pattern[str], str]]] = [
        (re.compile(r",\s*([}\]])"), r"\1"),
        (re.compile(r"(\{|\[)\s*,"), r"\1"),
        (re.compile(r"\bNone\b"), "null"),
        (re.compile(r"\bTrue\b"), "true"),
        (re.compile(r"\bFalse\b"), "false"),
    ]

    @staticmethod
    def _normalise_quotes(text: str) -> str:
        text = text.replace("“", '"').replace("”", '"').replace("’", "'")
        if '"' in text:
            return text
        return text.replace("'", '"')

    @classmethod
    def repair(cls, payload: str) -> str:
        content = payload.strip()
        content = cls._normalise_quotes(content)
        for pattern, replacement in cls.COMMON_REPLACEMENTS:
            content = pattern.sub(replacement, content)
        starts = [index for index in (content.find("{"), content.find("[")) if index >= 0]
        if starts:
            content = content[min(starts) :]
        ends = [index for index in (content.rfind("}"), content.rfind("]")) if index >= 0]
        if ends:
            content = content[: max(ends) + 1]
        return content


_FENCED_JSON = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_FENCED_ANY = re.compile(r"```[a-zA-Z]*\s*(.*?)\s*```", re.DOTALL)


def _candidates(output: str) -> list[str]:
    candidates: list[str] = []
    for pattern in (_FENCED_JSON, _FENCED_ANY):
        match = pattern.search(output)
        if match:
            candidates.append(match.group(1).strip())
    candidates.append(output.strip())
    return candidates


def extract_json(output: str) -> Any:
    """Pull the JSON payload out of an LLM answer.

    Fenced ```json blocks win over other fenced blocks, which win over the
    bare text. Each candidate is parsed as-is first, then after repair.
    """

    for candidate in _candidates(output):
        if not candidate:
            continue
        try:
            return orjson.loads(candidate)
        except orjson.JSONDecodeError:
            pass
        repaired = JSONRepair.repair(candidate)
        try:
            return json.loads(repaired)
        except json.JSONDecodeError:  # pragma: no cover - try next candidate
            continue
    raise ParsingError(f"Failed to extract JSON from LLM output: {output[:200]!r}")
