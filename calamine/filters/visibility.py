"""Hidden-element filter.

Hidden elements are unwrapped, not removed: their children stay in place.
Sites that ship the whole article inside a ``display:none`` loader container
keep their content.  Only inline ``style`` and ARIA attributes are consulted.
"""

from __future__ import annotations

import logging
import re

from bs4 import Tag

from calamine.config import FilterConfig
from calamine.tree import Document, elements, is_connected, unwrap

logger = logging.getLogger(__name__)

# "prop: value" pairs of an inline style declaration; !important is ignored
_DECLARATION_RE = re.compile(r"([a-zA-Z-]+)\s*:\s*([^;]+)")
_OPACITY_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))(%?)")


def parse_inline_style(style: str) -> dict[str, str]:
    """Parse a ``style`` attribute into a lower-cased property map."""
    declarations: dict[str, str] = {}
    for prop, value in _DECLARATION_RE.findall(style):
        value = value.replace("!important", "").strip().lower()
        declarations[prop.strip().lower()] = value
    return declarations


def _parse_opacity(value: str) -> float | None:
    m = _OPACITY_RE.match(value)
    if not m:
        return None
    number = float(m.group(1))
    return number / 100.0 if m.group(2) else number


def is_hidden(element: Tag, opacity_threshold: float = 0.3) -> bool:
    """Return True if *element*'s inline attributes make it invisible."""
    if element.name == "input" and str(element.get("type") or "").strip().lower() == "hidden":
        return True

    if str(element.get("aria-hidden") or "").strip().lower() == "true":
        return True

    style = element.get("style")
    if not style:
        return False
    declarations = parse_inline_style(str(style))
    if declarations.get("display") == "none":
        return True
    if declarations.get("visibility") == "hidden":
        return True
    opacity = declarations.get("opacity")
    if opacity is not None:
        parsed = _parse_opacity(opacity)
        if parsed is not None and parsed < opacity_threshold:
            return True
    return False


def hidden_filter(document: Document, config: FilterConfig) -> None:
    """Unwrap every hidden element below body."""
    body = document.body
    if body is None:
        return

    unwrapped = 0
    for element in elements(body):
        if is_connected(document, element) and is_hidden(element, config.opacity_threshold):
            unwrap(element)
            unwrapped += 1
    if unwrapped:
        logger.debug("hidden_filter unwrapped %d element(s)", unwrapped)
