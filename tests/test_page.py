from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from pagequery.config import Settings
from pagequery.dom.paths import CSS_PATH_SCRIPT, XPATH_SCRIPT
from pagequery.errors import ConfigurationError, ParsingError
from pagequery.llm import GeminiClient, OpenAIClient, create_llm_client
from pagequery.llm.base import LLMClient
from pagequery.llm.prompts import DATA_SYSTEM_PROMPT, ELEMENT_SYSTEM_PROMPT
from pagequery.page import QueryEngine
from pagequery.types import CompactedPage


class StubLLM(LLMClient):
    def __init__(self, responses: list[str]) -> None:
        self._responses = responses
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    async def complete(
        self,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ) -> str:
        self.requests.append({"system": system, "messages": messages})
        return self._responses[min(len(self.requests) - 1, len(self._responses) - 1)]

    async def close(self) -> None:
        self.closed = True


@dataclass
class DummyProcessor:
    compacted: CompactedPage
    markdown: str = ""
    calls: list[str] = field(default_factory=list)

    async def compact(self, page: Any) -> CompactedPage:
        self.calls.append("compact")
        return self.compacted

    async def extract_markdown(self, page: Any) -> str:
        self.calls.append("markdown")
        return self.markdown


@dataclass
class DummyElement:
    css: str
    xpath: str

    async def evaluate(self, script: str) -> str:
        return self.css if script == CSS_PATH_SCRIPT else self.xpath


@dataclass
class DummyPage:
    elements: dict[str, DummyElement] = field(default_factory=dict)
    url: str = "https://example.com/login"
    title_text: str = "Login"

    async def query_selector(self, selector: str) -> DummyElement | None:
        return self.elements.get(selector)

    async def title(self) -> str:
        return self.title_text


COMPACTED = CompactedPage(
    compacted_text="t1(Ab3)t2(Q1w)Log int3t4",
    dictionary_text='t1: <form>\nt2: <button class="primary">\nt3: </button>\nt4: </form>',
    tag_count=4,
)


def _page() -> DummyPage:
    return DummyPage(
        elements={
            '[address="Q1w"]': DummyElement("html > body > form > button.primary", "/html/body/form/button"),
            '[address="Ab3"]': DummyElement("html > body > form", "/html/body/form"),
        }
    )


def _engine(responses: list[str], processor: DummyProcessor) -> tuple[QueryEngine, StubLLM]:
    llm = StubLLM(responses)
    return QueryEngine(llm=llm, processor=processor), llm  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_css_path_query_round_trip() -> None:
    processor = DummyProcessor(COMPACTED)
    engine, llm = _engine(['```json\n{"login_form": {"form": "Ab3", "submit": "Q1w", "captcha": ""}}\n```'], processor)
    page = engine.wrap(_page())

    result = await page.get_css_path_by_query("{ login_form { form, submit, captcha } }")

    assert result == {
        "login_form": {
            "form": "html > body > form",
            "submit": "html > body > form > button.primary",
            "captcha": None,
        }
    }
    request = llm.requests[0]
    assert request["system"] == ELEMENT_SYSTEM_PROMPT
    content = request["messages"][0]["content"]
    assert COMPACTED.render() in content
    assert content.endswith("Query:\n{ login_form { form, submit, captcha } }")


@pytest.mark.asyncio
async def test_xpath_and_element_queries() -> None:
    processor = DummyProcessor(COMPACTED)
    engine, _ = _engine(['{"buttons": ["Q1w", "nope"]}'], processor)
    dummy = _page()
    page = engine.wrap(dummy)

    assert await page.get_xpath_by_query("all buttons") == {"buttons": ["/html/body/form/button", None]}
    elements = await page.get_elements_by_query("all buttons")
    assert elements == {"buttons": [dummy.elements['[address="Q1w"]'], None]}
    assert processor.calls == ["compact", "compact"]


@pytest.mark.asyncio
async def test_data_query_uses_markdown() -> None:
    processor = DummyProcessor(COMPACTED, markdown="# Shop\n* Tea $4")
    engine, llm = _engine(['```json\n{"products": [{"name": "Tea", "price": 4}]}\n```'], processor)
    page = engine.wrap(_page())

    assert await page.get_data_by_query("{ products[] { name, price (number) } }") == {
        "products": [{"name": "Tea", "price": 4}]
    }
    assert llm.requests[0]["system"] == DATA_SYSTEM_PROMPT
    assert "Markdown Content:\n# Shop" in llm.requests[0]["messages"][0]["content"]
    assert processor.calls == ["markdown"]


@pytest.mark.asyncio
async def test_empty_page_skips_the_llm() -> None:
    processor = DummyProcessor(CompactedPage.empty())
    engine, llm = _engine(["{}"], processor)

    assert await engine.wrap(_page()).get_css_path_by_query("anything") is None
    assert llm.requests == []


@pytest.mark.asyncio
async def test_unconfigured_engine_fails_before_touching_page() -> None:
    processor = DummyProcessor(COMPACTED)
    engine = QueryEngine(processor=processor)  # type: ignore[arg-type]
    page = engine.wrap(_page())

    with pytest.raises(ConfigurationError):
        await page.get_elements_by_query("login button")
    assert processor.calls == []

    llm = StubLLM([json.dumps({"button": "Q1w"})])
    engine.configure(llm)
    assert await page.get_css_path_by_query("login button") == {"button": "html > body > form > button.primary"}


@pytest.mark.asyncio
async def test_unparseable_answer_raises() -> None:
    engine, _ = _engine(["I could not find it."], DummyProcessor(COMPACTED))
    with pytest.raises(ParsingError):
        await engine.wrap(_page()).get_css_path_by_query("login button")


@pytest.mark.asyncio
async def test_wrapper_delegates_to_page_and_closes_client() -> None:
    engine, llm = _engine(["{}"], DummyProcessor(COMPACTED))
    page = engine.wrap(_page())

    assert page.url == "https://example.com/login"
    assert await page.title() == "Login"
    await engine.close()
    assert llm.closed


@pytest.mark.asyncio
async def test_create_llm_client_from_settings() -> None:
    with pytest.raises(ConfigurationError):
        create_llm_client(Settings(llm_provider="gemini", gemini_api_key=None))

    gemini = create_llm_client(Settings(llm_provider="gemini", gemini_api_key="key"))
    openai = create_llm_client(Settings(llm_provider="openai", openai_api_key="key"))
    assert isinstance(gemini, GeminiClient)
    assert isinstance(openai, OpenAIClient)
    await gemini.close()
    await openai.close()
