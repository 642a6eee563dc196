"""Sanitization sub-package: ordered, idempotent tree-rewrite passes."""

from collections.abc import Callable

from calamine.config import FilterConfig
from calamine.tree import Document

from .condense import condense_tagnames_filter, table_filter
from .images import lazy_image_filter, sourceless_image_filter, tracking_image_filter
from .structural import attribute_filter, blacklist_filter
from .text import leaf_filter, trim_filter, whitespace_filter
from .urls import script_anchor_filter, url_resolution_filter
from .visibility import hidden_filter

Pass = Callable[[Document, FilterConfig], None]

# Run before scoring: make the tree safe and strip what should never score
PRE_SCORING_PASSES: tuple[Pass, ...] = (
    blacklist_filter,
    hidden_filter,
    script_anchor_filter,
    lazy_image_filter,
    sourceless_image_filter,
    url_resolution_filter,
    tracking_image_filter,
)

# Run after pruning: canonicalize what is left
POST_SCORING_PASSES: tuple[Pass, ...] = (
    whitespace_filter,
    leaf_filter,
    table_filter,
    condense_tagnames_filter,
    attribute_filter,
)

__all__ = [
    "POST_SCORING_PASSES",
    "PRE_SCORING_PASSES",
    "Pass",
    "attribute_filter",
    "blacklist_filter",
    "condense_tagnames_filter",
    "hidden_filter",
    "lazy_image_filter",
    "leaf_filter",
    "script_anchor_filter",
    "sourceless_image_filter",
    "table_filter",
    "tracking_image_filter",
    "trim_filter",
    "url_resolution_filter",
    "whitespace_filter",
]
