from __future__ import annotations

from playwright.async_api import ElementHandle

CSS_PATH_SCRIPT = r"""
(target) => {
    const escape = (value) => (window.CSS && CSS.escape ? CSS.escape(value) : value);
    const step = (node) => {
        const tag = node.localName;
        if (node.id) return `${tag}#${escape(node.id)}`;
        const parent = node.parentElement;
        if (!parent) return tag;
        const siblings = Array.from(parent.children);
        const sameTag = siblings.filter((sibling) => sibling.localName === tag);
        if (sameTag.length === 1) return tag;
        const unique = Array.from(node.classList).find((name) =>
            sameTag.every((sibling) => sibling === node || !sibling.classList.contains(name))
        );
        if (unique) return `${tag}.${escape(unique)}`;
        return `${tag}:nth-child(${siblings.indexOf(node) + 1})`;
    };
    const parts = [];
    for (let node = target; node && node.nodeType === Node.ELEMENT_NODE; node = node.parentElement) {
        parts.unshift(step(node));
    }
    return parts.join(' > ');
}
"""

XPATH_SCRIPT = r"""
(target) => {
    const step = (node) => {
        const name = node.localName;
        const parent = node.parentElement;
        if (!parent) return name;
        const sameName = Array.from(parent.children).filter((sibling) => sibling.localName === name);
        if (sameName.length === 1) return name;
        return `${name}[${sameName.indexOf(node) + 1}]`;
    };
    const parts = [];
    for (let node = target; node && node.nodeType === Node.ELEMENT_NODE; node = node.parentElement) {
        parts.unshift(step(node));
    }
    return parts.length ? '/' + parts.join('/') : '';
}
"""


async def css_path(element: ElementHandle | None) -> str | None:
    """``html > body > div#main > a:nth-child(2)`` style selector, or None."""

    if element is None:
        return None
    return await element.evaluate(CSS_PATH_SCRIPT) or None


async def xpath(element: ElementHandle | None) -> str | None:
    """Absolute ``/html/body/div[2]/span`` expression, or None."""

    if element is None:
        return None
    return await element.evaluate(XPATH_SCRIPT) or None
