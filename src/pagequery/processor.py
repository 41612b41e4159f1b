from __future__ import annotations

import logging
import random

from playwright.async_api import Page

from .dom.codec import DictionaryCodec
from .dom.frames import flatten_frames, snapshot_with_frames
from .dom.markdown import html_to_markdown
from .dom.sanitizer import sanitize
from .dom.stamper import DEFAULT_ADDRESS_LENGTH, stamp_addresses
from .types import CompactedPage

logger = logging.getLogger(__name__)


class PageProcessor:
    """Prepare a live page for an LLM query.

    ``compact`` rewrites the live page (frames inlined, attributes reduced,
    addresses stamped) so the addresses in the LLM answer can be looked up
    afterwards. ``extract_markdown`` works on a copy and leaves the page as is.
    The caller owns the page exclusively while either runs.
    """

    def __init__(
        self,
        codec: DictionaryCodec | None = None,
        address_length: int = DEFAULT_ADDRESS_LENGTH,
        rng: random.Random | None = None,
    ) -> None:
        self._codec = codec or DictionaryCodec()
        self._address_length = address_length
        self._rng = rng

    async def compact(self, page: Page) -> CompactedPage:
        inlined = await flatten_frames(page)
        body = await page.query_selector("body")
        if body is None:
            logger.info("Page has no body; nothing to compact")
            return CompactedPage.empty()

        await sanitize(body)
        stamped = await stamp_addresses(body, min_length=self._address_length, rng=self._rng)
        markup = await body.inner_html()
        compacted = self._codec.encode(markup)
        logger.info(
            "Prepared page for element query",
            extra={"frames_inlined": inlined, "elements_stamped": stamped},
        )
        return compacted

    async def extract_markdown(self, page: Page) -> str:
        html = await snapshot_with_frames(page)
        if not html:
            logger.info("Page has no body; nothing to convert")
            return ""
        return html_to_markdown(html)


async def compact_page(page: Page, address_length: int = DEFAULT_ADDRESS_LENGTH) -> CompactedPage:
    return await PageProcessor(address_length=address_length).compact(page)


async def extract_markdown(page: Page) -> str:
    return await PageProcessor().extract_markdown(page)
