from __future__ import annotations

import logging

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from .errors import BrowserError

logger = logging.getLogger(__name__)


class BrowserSession:
    """Chromium session with a single page, used by the CLI."""

    def __init__(self, headless: bool = True, navigation_timeout_ms: int = 30_000) -> None:
        self._headless = headless
        self._navigation_timeout_ms = navigation_timeout_ms
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.stop()

    async def start(self) -> None:
        if self._page is not None:
            return
        playwright = await async_playwright().start()
        self._playwright = playwright
        try:
            browser = await playwright.chromium.launch(headless=self._headless)
        except PlaywrightError as exc:
            await playwright.stop()
            self._playwright = None
            raise BrowserError("Unable to launch Chromium") from exc
        context = await browser.new_context()
        self._browser = browser
        self._context = context
        self._page = await context.new_page()

    async def stop(self) -> None:
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise BrowserError("Browser not started")
        return self._page

    async def open(self, url: str) -> Page:
        page = self.page
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=self._navigation_timeout_ms)
        except PlaywrightError as exc:
            raise BrowserError(f"Navigation to {url} failed") from exc
        try:
            await page.wait_for_load_state("load", timeout=self._navigation_timeout_ms)
        except PlaywrightError:  # pragma: no cover - tolerance for slow subresources
            logger.debug("Load state wait timed out for %s", url)
        return page
