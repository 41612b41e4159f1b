from __future__ import annotations

import logging

from playwright.async_api import ElementHandle

logger = logging.getLogger(__name__)

STRIPPED_SELECTOR = "script, style, svg"
BINARY_HREF_SELECTOR = '[href^="data:" i]'

# Body of an in-page function taking the root node as `root`. Shared by the
# frame flattening scripts so frames are cleaned with the same rules.
SANITIZE_JS = f"""
    root.querySelectorAll('{STRIPPED_SELECTOR}').forEach((node) => node.remove());
    root.querySelectorAll('{BINARY_HREF_SELECTOR}').forEach((node) => node.removeAttribute('href'));
"""

SANITIZE_SCRIPT = f"""
(root) => {{
    {SANITIZE_JS}
}}
"""


async def sanitize(root: ElementHandle) -> None:
    """Drop script/style/svg subtrees and data: hrefs under ``root``.

    Mutates the live subtree. Running it twice is a no-op.
    """

    await root.evaluate(SANITIZE_SCRIPT)
    logger.debug("Sanitized subtree")
