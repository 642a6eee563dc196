"""Best-node selection and pruning around it."""

from __future__ import annotations

import logging

from bs4 import Tag

from calamine.extractors.scoring import ScoreTable
from calamine.tree import (
    Document,
    TreeInvariantError,
    ancestors,
    contains,
    descendants,
    is_connected,
    is_whitespace_text,
    remove,
)

logger = logging.getLogger(__name__)


def select_best(scores: ScoreTable, document: Document) -> Tag | None:
    """Return the highest-scoring element other than root and body.

    The earliest element in document order wins a tie.  Falls back to body
    when there is no other candidate, and to ``None`` without a body.
    """
    body = document.body
    root = document.root
    best: Tag | None = None
    best_score = float("-inf")
    for element, score in scores.items():
        if element is body or element is root:
            continue
        if best is None or score > best_score:
            best = element
            best_score = score
    return best if best is not None else body


def prune(document: Document, best: Tag | None) -> None:
    """Remove everything under body that is neither *best*, its ancestor, nor inside it.

    Whitespace-only text along the ancestor chain is kept.  Raises
    :class:`~calamine.tree.TreeInvariantError` when *best* is not attached
    to the document's body.
    """
    body = document.body
    if body is None or best is None or best is body or best is document.root:
        return
    if not is_connected(document, best) or not contains(body, best):
        raise TreeInvariantError(f"best node <{best.name}> is not attached to the document body")

    keep = {id(ancestor) for ancestor in ancestors(best)}
    removed = 0
    for node in descendants(body):
        if node is best or id(node) in keep:
            continue
        if contains(best, node) or not is_connected(document, node):
            continue
        if isinstance(node, Tag) or not is_whitespace_text(node):
            remove(node)
            removed += 1
    logger.debug("prune: removed %d node(s) around <%s>", removed, best.name)
