from __future__ import annotations

import enum
import logging
from typing import Any

from playwright.async_api import ElementHandle, Page

from .paths import css_path, xpath
from .stamper import ADDRESS_ATTRIBUTE

logger = logging.getLogger(__name__)


class ResolutionMode(str, enum.Enum):
    ELEMENT = "element"
    CSS_PATH = "css_path"
    XPATH = "xpath"


class NodeKind(enum.Enum):
    ARRAY = "array"
    MAPPING = "mapping"
    ADDRESS = "address"
    SCALAR = "scalar"


def classify(value: Any) -> NodeKind:
    if isinstance(value, (list, tuple)):
        return NodeKind.ARRAY
    if isinstance(value, dict):
        return NodeKind.MAPPING
    if isinstance(value, str):
        return NodeKind.ADDRESS
    return NodeKind.SCALAR


def _css_escape(char: str) -> str:
    if char in '\\"':
        return "\\" + char
    # Raw line breaks and control characters end a CSS string early.
    if ord(char) < 0x20 or ord(char) == 0x7F:
        return f"\\{ord(char):x} "
    return char


def address_selector(address: str, attribute: str = ADDRESS_ATTRIBUTE) -> str:
    escaped = "".join(_css_escape(char) for char in address)
    return f'[{attribute}="{escaped}"]'


class AddressResolver:
    """Map addresses in an LLM answer back to the stamped page.

    The answer keeps its shape: lists stay lists of the same length, dicts
    keep their keys in order, and only string leaves are replaced. A leaf
    with no matching element (or an empty string) becomes ``None``.
    """

    def __init__(self, page: Page, attribute: str = ADDRESS_ATTRIBUTE) -> None:
        self._page = page
        self._attribute = attribute

    async def find(self, address: str) -> ElementHandle | None:
        address = address.strip()
        if not address:
            return None
        element = await self._page.query_selector(address_selector(address, self._attribute))
        if element is None:
            logger.debug("No element carries address %s", address)
        return element

    async def resolve(self, query: Any, mode: ResolutionMode = ResolutionMode.ELEMENT) -> Any:
        mode = ResolutionMode(mode)
        kind = classify(query)
        if kind is NodeKind.ARRAY:
            return [await self.resolve(item, mode) for item in query]
        if kind is NodeKind.MAPPING:
            resolved: dict[Any, Any] = {}
            for key, value in query.items():
                resolved[key] = await self.resolve(value, mode)
            return resolved
        if kind is NodeKind.ADDRESS:
            return await self._resolve_address(query, mode)
        return query

    async def _resolve_address(self, address: str, mode: ResolutionMode) -> Any:
        element = await self.find(address)
        if mode is ResolutionMode.CSS_PATH:
            return await css_path(element)
        if mode is ResolutionMode.XPATH:
            return await xpath(element)
        return element

    async def resolve_elements(self, query: Any) -> Any:
        return await self.resolve(query, ResolutionMode.ELEMENT)

    async def resolve_css_paths(self, query: Any) -> Any:
        return await self.resolve(query, ResolutionMode.CSS_PATH)

    async def resolve_xpaths(self, query: Any) -> Any:
        return await self.resolve(query, ResolutionMode.XPATH)
