from __future__ import annotations

from .codec import DictionaryCodec, TagDictionary, minify_markup
from .frames import flatten_frames, snapshot_with_frames
from .markdown import html_to_markdown
from .paths import css_path, xpath
from .resolver import AddressResolver, NodeKind, ResolutionMode, classify
from .sanitizer import sanitize
from .stamper import ADDRESS_ATTRIBUTE, AddressGenerator, stamp_addresses

__all__ = [
	"ADDRESS_ATTRIBUTE",
	"AddressGenerator",
	"AddressResolver",
	"DictionaryCodec",
	"NodeKind",
	"ResolutionMode",
	"TagDictionary",
	"classify",
	"css_path",
	"flatten_frames",
	"html_to_markdown",
	"minify_markup",
	"sanitize",
	"snapshot_with_frames",
	"stamp_addresses",
	"xpath",
]
