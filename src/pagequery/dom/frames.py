from __future__ import annotations

import asyncio
import logging

from playwright.async_api import ElementHandle, Error as PlaywrightError, Frame, Page

from .sanitizer import SANITIZE_JS

logger = logging.getLogger(__name__)

FRAME_MARKER_ATTRIBUTE = "data-was-iframe"
FRAME_SELECTOR = "iframe"

WAIT_FOR_READY_SCRIPT = """
() => new Promise((resolve) => {
    if (document.readyState === 'complete' || document.readyState === 'interactive') {
        resolve();
    } else {
        window.addEventListener('DOMContentLoaded', () => resolve(), { once: true });
    }
})
"""

EXTRACT_FRAME_BODY_SCRIPT = f"""
() => {{
    const root = document.body;
    if (!root) return '';
    {SANITIZE_JS}
    return root.innerHTML;
}}
"""

REPLACE_FRAME_SCRIPT = """
(frame, { content, marker }) => {
    if (!frame.parentNode) return false;
    const container = frame.ownerDocument.createElement('div');
    container.setAttribute(marker, 'true');
    container.innerHTML = content;
    frame.parentNode.replaceChild(container, frame);
    return true;
}
"""

# Works on a clone of the body so the live page keeps its frames. Clone and
# live document list their iframes in the same order, which pairs each
# placeholder in the clone with the live frame holding its document.
SNAPSHOT_SCRIPT = f"""
async ({{ selector, marker }}) => {{
    const waitForReady = (doc) => new Promise((resolve) => {{
        if (doc.readyState === 'complete' || doc.readyState === 'interactive') {{
            resolve();
        }} else {{
            doc.addEventListener('DOMContentLoaded', () => resolve(), {{ once: true }});
        }}
    }});
    const sanitize = (root) => {{
        {SANITIZE_JS}
    }};
    let skipped = 0;
    const inline = async (liveRoot, clonedRoot) => {{
        const liveFrames = Array.from(liveRoot.querySelectorAll(selector));
        const placeholders = Array.from(clonedRoot.querySelectorAll(selector));
        await Promise.all(liveFrames.map(async (frame, index) => {{
            const placeholder = placeholders[index];
            if (!placeholder) return;
            try {{
                const frameDoc = frame.contentDocument;
                if (!frameDoc) {{
                    skipped += 1;
                    return;
                }}
                await waitForReady(frameDoc);
                if (!frameDoc.body) {{
                    skipped += 1;
                    return;
                }}
                const frameClone = frameDoc.body.cloneNode(true);
                await inline(frameDoc.body, frameClone);
                const wrapper = document.createElement('div');
                wrapper.setAttribute(marker, 'true');
                wrapper.innerHTML = frameClone.innerHTML;
                placeholder.replaceWith(wrapper);
            }} catch (err) {{
                console.warn('Skipping inaccessible frame', err);
                skipped += 1;
            }}
        }}));
    }};

    if (!document.body) return {{ html: '', skipped: 0 }};
    const clone = document.body.cloneNode(true);
    await inline(document.body, clone);
    sanitize(clone);
    return {{ html: clone.outerHTML, skipped }};
}}
"""


async def _inline_frame(handle: ElementHandle) -> int:
    try:
        frame = await handle.content_frame()
        if frame is None:
            logger.warning("Skipping frame without an accessible document")
            return 0
        await frame.evaluate(WAIT_FOR_READY_SCRIPT)
        nested = await flatten_frames(frame)
        content = await frame.evaluate(EXTRACT_FRAME_BODY_SCRIPT)
        replaced = await handle.evaluate(
            REPLACE_FRAME_SCRIPT,
            {"content": content, "marker": FRAME_MARKER_ATTRIBUTE},
        )
    except PlaywrightError:
        logger.warning("Skipping frame that could not be read", exc_info=True)
        return 0
    return nested + 1 if replaced else nested


async def flatten_frames(scope: Page | Frame) -> int:
    """Replace every reachable iframe under ``scope`` with its body markup.

    Nested frames are inlined into their parent frame first, so one call on
    the page flattens any depth. Frames of one level are read concurrently;
    the call returns once all of them are done. Frames that cannot be read
    are left in place. Returns the number of frames inlined.
    """

    handles = await scope.query_selector_all(FRAME_SELECTOR)
    if not handles:
        return 0
    results = await asyncio.gather(*(_inline_frame(handle) for handle in handles))
    inlined = sum(results)
    logger.debug("Flattened frames", extra={"frames": len(handles), "inlined": inlined})
    return inlined


async def snapshot_with_frames(page: Page) -> str:
    """Sanitized body markup with same-origin frames inlined, page untouched."""

    result = await page.evaluate(
        SNAPSHOT_SCRIPT,
        {"selector": FRAME_SELECTOR, "marker": FRAME_MARKER_ATTRIBUTE},
    )
    if result["skipped"]:
        logger.warning("Skipped inaccessible frames in snapshot", extra={"skipped": result["skipped"]})
    return result["html"]
