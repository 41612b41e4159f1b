from __future__ import annotations

import logging
import re
from typing import Iterator

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..types import CompactedPage
from .stamper import ADDRESS_ATTRIBUTE

logger = logging.getLogger(__name__)

SENTINEL_TOKEN = "tX"

TAG_PATTERN = re.compile(r"<[^>]+>")
# The address is stamped last, so it is the final attribute of the tag.
ADDRESS_PATTERN = re.compile(rf'\s+{ADDRESS_ATTRIBUTE}="([^"]*)"(?=\s*/?>$)')

_WHITESPACE = re.compile(r"\s+")
_PRESERVE_WHITESPACE = frozenset({"pre", "textarea"})
_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "br", "caption", "col",
        "colgroup", "dd", "details", "dialog", "div", "dl", "dt", "fieldset",
        "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
        "head", "header", "hr", "html", "iframe", "legend", "li", "link", "main",
        "menu", "meta", "nav", "noscript", "ol", "optgroup", "option", "p", "pre",
        "section", "select", "summary", "table", "tbody", "td", "template", "tfoot",
        "th", "thead", "title", "tr", "ul",
    }
)
_EMPTY_REMOVABLE = frozenset({"class", "id", "style", "title", "lang", "dir"})
_REDUNDANT_DEFAULTS = {
    ("input", "type"): "text",
    ("form", "method"): "get",
    ("script", "type"): "text/javascript",
    ("style", "type"): "text/css",
    ("script", "language"): "javascript",
}


def minify_markup(markup: str) -> str:
    """Collapse whitespace, drop comments and empty or default-valued attributes."""

    soup = BeautifulSoup(markup, "html.parser", multi_valued_attributes=None)

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        for name, value in list(tag.attrs.items()):
            text = "" if value is None else str(value)
            if (name in _EMPTY_REMOVABLE or name.startswith("on")) and not text.strip():
                del tag.attrs[name]
            elif _REDUNDANT_DEFAULTS.get((tag.name, name)) == text.strip().lower():
                del tag.attrs[name]

    for text in soup.find_all(string=True):
        if type(text) is not NavigableString:
            continue
        if any(parent.name in _PRESERVE_WHITESPACE for parent in text.parents):
            continue
        collapsed = _WHITESPACE.sub(" ", str(text))
        if not collapsed.strip() and _is_layout_whitespace(text):
            text.extract()
        elif collapsed != str(text):
            text.replace_with(collapsed)

    return str(soup).strip()


def _is_layout_whitespace(text: NavigableString) -> bool:
    """Whitespace at the edge of its parent or next to a block tag renders as nothing."""

    previous, following = text.previous_sibling, text.next_sibling
    if previous is None or following is None:
        return True
    return any(isinstance(node, Tag) and node.name in _BLOCK_TAGS for node in (previous, following))


def is_closing_tag(tag: str) -> bool:
    return tag.startswith("</")


def tag_shape(tag: str) -> str:
    """Dictionary key of a tag: its literal text without the address attribute."""

    if is_closing_tag(tag):
        return tag
    return ADDRESS_PATTERN.sub("", tag)


def tag_address(tag: str) -> str:
    match = ADDRESS_PATTERN.search(tag)
    return match.group(1) if match else ""


class TagDictionary:
    """Insertion-ordered tag shape -> token mapping (t1, t2, ...)."""

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, shape: object) -> bool:
        return shape in self._tokens

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._tokens.items())

    def add(self, shape: str) -> str:
        token = self._tokens.get(shape)
        if token is None:
            token = f"t{len(self._tokens) + 1}"
            self._tokens[shape] = token
        return token

    def lookup(self, shape: str) -> str:
        return self._tokens.get(shape, SENTINEL_TOKEN)

    def render(self) -> str:
        return "\n".join(f"{token}: {shape}" for shape, token in self._tokens.items())


class DictionaryCodec:
    """Turn stamped markup into a token stream plus the tag dictionary.

    Tags are matched as opaque ``<...>`` substrings of the minified markup;
    nothing is parsed beyond that. Opening tags become ``token(address)``,
    closing tags become ``token``.
    """

    def build_dictionary(self, markup: str) -> TagDictionary:
        dictionary = TagDictionary()
        for tag in TAG_PATTERN.findall(markup):
            dictionary.add(tag_shape(tag))
        return dictionary

    def render(self, markup: str, dictionary: TagDictionary) -> str:
        def replace(match: re.Match[str]) -> str:
            tag = match.group(0)
            token = dictionary.lookup(tag_shape(tag))
            if is_closing_tag(tag):
                return token
            return f"{token}({tag_address(tag)})"

        return TAG_PATTERN.sub(replace, markup)

    def encode(self, markup: str) -> CompactedPage:
        minified = minify_markup(markup)
        if not minified:
            return CompactedPage.empty()

        dictionary = self.build_dictionary(minified)
        compacted = self.render(minified, dictionary)
        tag_count = len(TAG_PATTERN.findall(minified))
        logger.info(
            "Compacted markup",
            extra={
                "markup_chars": len(minified),
                "compacted_chars": len(compacted),
                "tag_count": tag_count,
                "dictionary_size": len(dictionary),
            },
        )
        return CompactedPage(
            compacted_text=compacted,
            dictionary_text=dictionary.render(),
            tag_count=tag_count,
        )
