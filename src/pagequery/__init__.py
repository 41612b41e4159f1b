from __future__ import annotations

from .config import Settings
from .dom.resolver import AddressResolver, ResolutionMode
from .page import QueryablePage, QueryEngine
from .processor import PageProcessor, compact_page, extract_markdown
from .types import CompactedPage, extract_json

__all__ = [
	"AddressResolver",
	"CompactedPage",
	"PageProcessor",
	"QueryEngine",
	"QueryablePage",
	"ResolutionMode",
	"Settings",
	"compact_page",
	"extract_json",
	"extract_markdown",
]
