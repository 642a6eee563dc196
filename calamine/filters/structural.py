"""Structural safety filters: blacklisted elements and attribute whitelisting."""

from __future__ import annotations

import logging

from calamine.config import FilterConfig
from calamine.tree import Document, elements, is_connected, remove

logger = logging.getLogger(__name__)


def blacklist_filter(document: Document, config: FilterConfig) -> None:
    """Remove every element whose tag is in ``config.blacklist``.

    Runs over the whole document, not just body, so ``<head>`` metadata goes
    too, but only once a body exists.  Matches nested inside an
    already-removed match are skipped.
    """
    if document.body is None or not config.blacklist:
        return

    removed = 0
    for element in elements(document.soup):
        if element.name in config.blacklist and is_connected(document, element):
            remove(element)
            removed += 1
    if removed:
        logger.debug("blacklist_filter removed %d element(s)", removed)


def attribute_filter(document: Document, config: FilterConfig) -> None:
    """Drop attributes not whitelisted for the element's tag.

    A ``None`` whitelist disables the pass; a tag absent from the whitelist
    loses all of its attributes.
    """
    whitelist = config.attribute_whitelist
    if whitelist is None or document.body is None:
        return

    for element in elements(document.soup):
        if not element.attrs:
            continue
        allowed = whitelist.get(element.name, frozenset())
        for name in [n for n in element.attrs if n not in allowed]:
            del element[name]
