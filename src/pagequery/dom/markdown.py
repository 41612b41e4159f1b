from __future__ import annotations

import re

from markdownify import ATX, markdownify

_BLANK_RUNS = re.compile(r"\n\s*\n")


def html_to_markdown(html: str) -> str:
    """Best-effort Markdown text for data queries; not a faithful rendering."""

    if not html.strip():
        return ""
    markdown = markdownify(
        html,
        heading_style=ATX,
        bullets="*",
        strip=["script", "style"],
    )
    return _BLANK_RUNS.sub("\n", markdown).strip()
