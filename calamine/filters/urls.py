"""URL filters: script anchors and base-URL resolution.

``url_resolution_filter`` rewrites relative URL attributes to absolute ones
so that extracted content still links correctly once it leaves its page::

    <img src="/a.jpg" srcset="a-2x.jpg 2x">
    # with base_url "https://example.com/post/1"
    <img src="https://example.com/a.jpg" srcset="https://example.com/post/a-2x.jpg 2x">
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

from bs4 import Tag

from calamine.config import FilterConfig
from calamine.tree import Document, elements, is_connected, unwrap

logger = logging.getLogger(__name__)

# Element attributes holding a single URL
URL_ATTRIBUTES: dict[str, str] = {
    "a": "href",
    "applet": "codebase",
    "area": "href",
    "audio": "src",
    "base": "href",
    "blockquote": "cite",
    "body": "background",
    "button": "formaction",
    "del": "cite",
    "embed": "src",
    "form": "action",
    "frame": "src",
    "head": "profile",
    "html": "manifest",
    "iframe": "src",
    "img": "src",
    "input": "src",
    "ins": "cite",
    "link": "href",
    "model-viewer": "src",
    "object": "data",
    "q": "cite",
    "script": "src",
    "source": "src",
    "track": "src",
    "video": "src",
}

SRCSET_TAGS: frozenset[str] = frozenset({"img", "source"})

# URL parsers drop tabs and newlines anywhere, and C0 controls or spaces at the ends
_TAB_NEWLINE_RE = re.compile(r"[\t\n\r]")
_C0_AND_SPACE = "".join(chr(code) for code in range(0x21))


def is_script_url(value: str) -> bool:
    """True when *value* parses to a ``javascript:`` URL."""
    url = _TAB_NEWLINE_RE.sub("", value).strip(_C0_AND_SPACE)
    return url.lower().startswith("javascript:")


def script_anchor_filter(document: Document, config: FilterConfig) -> None:
    """Unwrap ``<a href="javascript:...">`` so only its content remains."""
    body = document.body
    if body is None:
        return

    unwrapped = 0
    for anchor in body.find_all("a", href=True):
        if not isinstance(anchor, Tag) or not is_connected(document, anchor):
            continue
        if is_script_url(str(anchor["href"])):
            unwrap(anchor)
            unwrapped += 1
    if unwrapped:
        logger.debug("script_anchor_filter unwrapped %d anchor(s)", unwrapped)


def resolve_url(value: str, base_url: str) -> str | None:
    """Absolute form of *value* against *base_url*, or ``None`` if it cannot be resolved."""
    url = value.strip()
    if not url:
        return None
    try:
        return urljoin(base_url, url)
    except ValueError:
        return None


def parse_srcset(srcset: str) -> list[tuple[str, str]]:
    """Split a ``srcset`` value into ``(url, descriptor)`` candidates.

    A URL runs up to the next whitespace, so commas inside it (data URLs)
    survive; a trailing comma ends the candidate without a descriptor.
    """
    candidates: list[tuple[str, str]] = []
    position, length = 0, len(srcset)
    while position < length:
        while position < length and (srcset[position].isspace() or srcset[position] == ","):
            position += 1
        if position >= length:
            break
        start = position
        while position < length and not srcset[position].isspace():
            position += 1
        url = srcset[start:position]
        descriptor = ""
        if url.endswith(","):
            url = url.rstrip(",")
        else:
            end = srcset.find(",", position)
            if end == -1:
                end = length
            descriptor = " ".join(srcset[position:end].split())
            position = end + 1
        if url:
            candidates.append((url, descriptor))
    return candidates


def resolve_srcset(srcset: str, base_url: str) -> str:
    """Resolve every candidate URL of *srcset*, keeping descriptors."""
    parts = []
    for url, descriptor in parse_srcset(srcset):
        url = resolve_url(url, base_url) or url
        parts.append(f"{url} {descriptor}" if descriptor else url)
    return ", ".join(parts)


def url_resolution_filter(document: Document, config: FilterConfig) -> None:
    """Rewrite URL-valued attributes as absolute URLs against ``document.base_url``.

    Does nothing without a base URL.  Values that fail to resolve are left
    as they are.
    """
    base_url = document.base_url
    if not base_url or document.body is None:
        return

    changed = 0
    for element in elements(document.soup):
        name = URL_ATTRIBUTES.get(element.name)
        value = element.get(name) if name else None
        if isinstance(value, str):
            resolved = resolve_url(value, base_url)
            if resolved is not None and resolved != value:
                element[name] = resolved
                changed += 1

        if element.name in SRCSET_TAGS:
            srcset = element.get("srcset")
            if isinstance(srcset, str) and srcset.strip():
                resolved = resolve_srcset(srcset, base_url)
                if resolved != srcset:
                    element["srcset"] = resolved
                    changed += 1
    if changed:
        logger.debug("url_resolution_filter rewrote %d attribute(s)", changed)
