"""Text-level passes over body: whitespace, leaves and edge trimming."""

from __future__ import annotations

import logging
import re

from bs4 import Tag
from bs4.element import PageElement

from calamine.config import FilterConfig
from calamine.tree import (
    Document,
    closest,
    descendants,
    is_comment,
    is_connected,
    is_text,
    post_order,
    remove,
)

logger = logging.getLogger(__name__)

_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")


# ---------------------------------------------------------------------------
# Whitespace condensation
# ---------------------------------------------------------------------------

def condense_whitespace(value: str) -> str:
    return _WHITESPACE_RUN_RE.sub(" ", value)


def whitespace_filter(document: Document, config: FilterConfig) -> None:
    """Collapse whitespace runs in text nodes outside ``pre``/``code``-like ancestors."""
    body = document.body
    if body is None:
        return

    sensitive = config.whitespace_sensitive_tags
    for node in descendants(body):
        if not is_text(node):
            continue
        value = str(node)
        if len(value) <= config.whitespace_min_length:
            continue
        if closest(node, sensitive) is not None:
            continue
        condensed = condense_whitespace(value)
        if condensed != value:
            node.replace_with(condensed)


# ---------------------------------------------------------------------------
# Leaf pruning
# ---------------------------------------------------------------------------

def classify_leaves(container: Tag, leaf_exceptions: frozenset[str]) -> dict[int, bool]:
    """Map ``id(node)`` to its leaf status for every node in *container*'s subtree.

    Children are visited before parents, so an element's status is derived
    from already-classified children without recursion.
    """
    leaves: dict[int, bool] = {}
    for node in post_order(container):
        if isinstance(node, Tag):
            leaf = node.name not in leaf_exceptions and all(
                leaves[id(child)] for child in node.contents
            )
        elif is_comment(node):
            leaf = True
        elif is_text(node):
            leaf = not str(node).strip()
        else:
            leaf = False
        leaves[id(node)] = leaf
    return leaves


def leaf_filter(document: Document, config: FilterConfig) -> None:
    """Remove every leaf element (and comment) below body."""
    body = document.body
    if body is None:
        return

    leaves = classify_leaves(body, config.leaf_exceptions)
    removed = 0
    for node in descendants(body):
        if not (isinstance(node, Tag) or is_comment(node)):
            continue
        if leaves.get(id(node)) and is_connected(document, node):
            remove(node)
            removed += 1
    if removed:
        logger.debug("leaf_filter removed %d node(s)", removed)


# ---------------------------------------------------------------------------
# Document trimming
# ---------------------------------------------------------------------------

def _is_trimmable(node: PageElement, trimmable_tags: frozenset[str]) -> bool:
    if is_text(node):
        return not str(node).strip()
    if is_comment(node):
        return True
    if not isinstance(node, Tag):
        return False
    if node.name in trimmable_tags:
        return True
    if node.name == "p" and not node.get_text(strip=True):
        return all(
            child.name in trimmable_tags for child in node.find_all(True)
        )
    return False


def trim_filter(document: Document, config: FilterConfig) -> None:
    """Strip blank text, rules, breaks and empty paragraphs from body's edges."""
    body = document.body
    if body is None:
        return

    trimmable = config.trimmable_tags
    node = body.contents[0] if body.contents else None
    while node is not None and _is_trimmable(node, trimmable):
        following = node.next_sibling
        remove(node)
        node = following

    node = body.contents[-1] if body.contents else None
    while node is not None and _is_trimmable(node, trimmable):
        preceding = node.previous_sibling
        remove(node)
        node = preceding
