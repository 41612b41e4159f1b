from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Page

from .config import Settings
from .dom.resolver import AddressResolver, ResolutionMode
from .errors import ConfigurationError, ParsingError
from .llm import create_llm_client
from .llm.base import LLMClient
from .llm.prompts import QueryKind, build_query_message, system_prompt
from .logging import query_context
from .processor import PageProcessor
from .types import extract_json

logger = logging.getLogger(__name__)


class QueryEngine:
    """Holds the LLM client used by every page it wraps.

    Configure it once before use; ``configure`` swaps the client for all
    pages wrapped by this engine. Nothing resets it implicitly.
    """

    def __init__(
        self,
        llm: LLMClient | None = None,
        processor: PageProcessor | None = None,
        max_tokens: int = 4096,
    ) -> None:
        self._llm = llm
        self._processor = processor or PageProcessor()
        self._max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "QueryEngine":
        return cls(
            llm=create_llm_client(settings),
            processor=PageProcessor(address_length=settings.address_length),
        )

    def configure(self, llm: LLMClient) -> None:
        self._llm = llm

    @property
    def configured(self) -> bool:
        return self._llm is not None

    def ensure_configured(self) -> None:
        if self._llm is None:
            raise ConfigurationError("No LLM client configured; call QueryEngine.configure() first")

    @property
    def llm(self) -> LLMClient:
        self.ensure_configured()
        return self._llm  # type: ignore[return-value]

    @property
    def processor(self) -> PageProcessor:
        return self._processor

    def wrap(self, page: Page) -> "QueryablePage":
        return QueryablePage(page, self)

    async def ask(self, content: str, query: str, kind: QueryKind) -> Any:
        raw = await self.llm.complete(
            system=system_prompt(kind),
            messages=[build_query_message(content, query, kind)],
            max_tokens=self._max_tokens,
            temperature=0.0,
        )
        logger.debug("LLM raw response: %s", raw)
        try:
            return extract_json(raw)
        except ParsingError:
            logger.exception("Failed to parse LLM response")
            raise

    async def close(self) -> None:
        if self._llm is not None:
            await self._llm.close()


class QueryablePage:
    """A Playwright page with four natural-language query methods.

    Element, CSS path and XPath queries stamp addresses onto the live page
    before asking the LLM, so the page is modified by them. Data queries
    read a copy. Other attribute access goes to the wrapped page.
    """

    def __init__(self, page: Page, engine: QueryEngine) -> None:
        self._page = page
        self._engine = engine

    @property
    def page(self) -> Page:
        return self._page

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._page, name)

    async def get_elements_by_query(self, query: str) -> Any:
        """Resolve the answer's addresses to element handles (``None`` when missing)."""

        return await self._query_addresses(query, ResolutionMode.ELEMENT)

    async def get_css_path_by_query(self, query: str) -> Any:
        return await self._query_addresses(query, ResolutionMode.CSS_PATH)

    async def get_xpath_by_query(self, query: str) -> Any:
        return await self._query_addresses(query, ResolutionMode.XPATH)

    async def get_data_by_query(self, query: str) -> Any:
        """Extract data from the page's Markdown rendering."""

        self._engine.ensure_configured()
        with query_context(url=self._page.url, mode="data"):
            markdown = await self._engine.processor.extract_markdown(self._page)
            if not markdown:
                return None
            return await self._engine.ask(markdown, query, "data")

    async def _query_addresses(self, query: str, mode: ResolutionMode) -> Any:
        self._engine.ensure_configured()
        with query_context(url=self._page.url, mode=mode.value):
            compacted = await self._engine.processor.compact(self._page)
            if compacted.is_empty:
                return None
            answer = await self._engine.ask(compacted.render(), query, "element")
            return await AddressResolver(self._page).resolve(answer, mode)
