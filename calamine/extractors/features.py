"""Per-element feature extraction.

Every element under body (body included, so it can serve as the fallback
candidate) gets a :data:`FeatureVector` of raw signal values.  Nothing here
mutates the tree.

Signals:

* ``text_density``   - non-whitespace characters in the subtree
* ``anchor_density`` - characters inside ``<a href>`` in the subtree
* ``attr_bias``      - ``id``/``class`` tokens looked up in a keyword table
* ``tag_bias``       - intrinsic weight of the tag name
* ``schema_bias``    - uniquely matching schema.org article ``itemtype``
* ``child_bias``     - weight of the element's direct child tags
* ``image_bias``     - area and caption bonuses of direct child images
* ``list_descendant`` / ``nav_descendant`` - inside a list / navigation block

Usage::

    from calamine.extractors.features import extract_features

    features = extract_features(document, config)
    for element, vector in features:
        print(element.name, vector["text_density"])
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping

from bs4 import Tag

from calamine.config import SIGNAL_NAMES, FilterConfig
from calamine.tree import Document, ancestors, closest, elements, is_text, post_order

logger = logging.getLogger(__name__)

FeatureVector = dict[str, float]

# Image bias constants
_AREA_DAMPENING = 0.0015
_MAX_IMAGE_AREA = 100_000
_ALT_BONUS = 20.0
_TITLE_BONUS = 30.0
_CAPTION_BONUS = 50.0
_CAROUSEL_PENALTY = -50.0

_TOKEN_SPLIT_RE = re.compile(r"[\s\-_0-9]+")
_MAX_TOKEN_LENGTH = 15
_SCHEMA_TYPE_RE = re.compile(r"^https?://schema\.org/([A-Za-z]+)/?$")


class FeatureTable:
    """Feature vectors keyed by element identity, iterated in document order."""

    def __init__(self) -> None:
        self._elements: list[Tag] = []
        self._vectors: dict[int, FeatureVector] = {}
        self._text_counts: dict[int, int] = {}
        self._anchor_counts: dict[int, int] = {}

    def add(self, element: Tag, vector: FeatureVector, text_chars: int, anchor_chars: int) -> None:
        if id(element) not in self._vectors:
            self._elements.append(element)
        self._vectors[id(element)] = vector
        self._text_counts[id(element)] = text_chars
        self._anchor_counts[id(element)] = anchor_chars

    def __getitem__(self, element: Tag) -> FeatureVector:
        return self._vectors[id(element)]

    def __contains__(self, element: object) -> bool:
        return id(element) in self._vectors

    def __iter__(self) -> Iterator[tuple[Tag, FeatureVector]]:
        for element in self._elements:
            yield element, self._vectors[id(element)]

    def __len__(self) -> int:
        return len(self._elements)

    def elements(self) -> list[Tag]:
        return list(self._elements)

    def text_char_count(self, element: Tag) -> int:
        return self._text_counts.get(id(element), 0)

    def anchor_char_count(self, element: Tag) -> int:
        return self._anchor_counts.get(id(element), 0)


# ---------------------------------------------------------------------------
# Density signals
# ---------------------------------------------------------------------------

def count_text_chars(container: Tag) -> dict[int, int]:
    """Non-whitespace character count for *container* and every element below it.

    Computed bottom-up over a post-order walk: an element's count is the sum
    of its children's counts.
    """
    counts: dict[int, int] = {}
    for node in post_order(container):
        if isinstance(node, Tag):
            counts[id(node)] = sum(counts.get(id(child), 0) for child in node.contents)
        elif is_text(node):
            counts[id(node)] = sum(1 for ch in str(node) if not ch.isspace())
    return counts


def _is_link(element: Tag) -> bool:
    return element.name == "a" and element.has_attr("href")


def count_anchor_chars(body: Tag, text_counts: dict[int, int]) -> dict[int, int]:
    """Characters inside outermost ``<a href>`` elements, propagated upward.

    Each outermost anchor records its own text count, and every strict
    ancestor below *body* receives the same amount.
    """
    counts: dict[int, int] = {}
    for anchor in body.find_all(_is_link):
        if any(_is_link(ancestor) for ancestor in ancestors(anchor)):
            continue
        chars = text_counts.get(id(anchor), 0)
        if not chars:
            continue
        counts[id(anchor)] = counts.get(id(anchor), 0) + chars
        for ancestor in ancestors(anchor):
            if ancestor is body:
                break
            counts[id(ancestor)] = counts.get(id(ancestor), 0) + chars
    return counts


# ---------------------------------------------------------------------------
# Bias signals
# ---------------------------------------------------------------------------

def attribute_tokens(element: Tag) -> set[str]:
    """Distinct lower-cased tokens of *element*'s ``id`` and ``class``.

    Tokens of :data:`_MAX_TOKEN_LENGTH` characters or more are dropped.
    """
    values = []
    for name in ("id", "class"):
        value = element.get(name)
        if isinstance(value, list):
            values.extend(value)
        elif value:
            values.append(value)
    joined = " ".join(values).lower().strip()
    if not joined:
        return set()
    return {
        token for token in _TOKEN_SPLIT_RE.split(joined)
        if token and len(token) < _MAX_TOKEN_LENGTH
    }


def attribute_bias(element: Tag, keywords: Mapping[str, float]) -> float:
    return float(sum(keywords.get(token, 0.0) for token in attribute_tokens(element)))


def child_bias(element: Tag, table: Mapping[str, float]) -> float:
    return float(
        sum(table.get(child.name, 0.0) for child in element.contents if isinstance(child, Tag))
    )


def schema_item_types(element: Tag) -> set[str]:
    """schema.org type names listed in *element*'s ``itemtype`` attribute."""
    raw = element.get("itemtype")
    if not raw:
        return set()
    if isinstance(raw, list):
        raw = " ".join(raw)
    types = set()
    for url in str(raw).split():
        m = _SCHEMA_TYPE_RE.match(url.strip())
        if m:
            types.add(m.group(1))
    return types


def schema_bias(candidates: list[Tag], schema_types: tuple[str, ...]) -> dict[int, float]:
    """+1 per configured type for the single element carrying it.

    A type carried by more than one element is ambiguous and ignored.
    """
    matches: dict[str, list[Tag]] = {name: [] for name in schema_types}
    for element in candidates:
        for name in schema_item_types(element):
            if name in matches:
                matches[name].append(element)

    bias: dict[int, float] = {}
    for matched in matches.values():
        if len(matched) == 1:
            key = id(matched[0])
            bias[key] = bias.get(key, 0.0) + 1.0
    return bias


def _dimension(image: Tag, name: str) -> int | None:
    raw = str(image.get(name) or "").strip().lower().removesuffix("px")
    try:
        value = int(float(raw))
    except (ValueError, OverflowError):
        return None
    return value if value > 0 else None


def image_area(image: Tag) -> int:
    """Declared pixel area; a single known dimension is treated as a square."""
    width = _dimension(image, "width")
    height = _dimension(image, "height")
    if width and height:
        return width * height
    if width:
        return width * width
    if height:
        return height * height
    return 0


def _has_caption(image: Tag) -> bool:
    figure = closest(image, ("figure",))
    return figure is not None and figure.find("figcaption") is not None


def image_bias(element: Tag) -> float:
    """Bonus an element earns from the images among its direct children."""
    images = [child for child in element.contents if isinstance(child, Tag) and child.name == "img"]
    if not images:
        return 0.0

    bias = 0.0
    for image in images:
        bias += _AREA_DAMPENING * min(_MAX_IMAGE_AREA, image_area(image))
        if image.has_attr("alt"):
            bias += _ALT_BONUS
        if image.has_attr("title"):
            bias += _TITLE_BONUS
        if _has_caption(image):
            bias += _CAPTION_BONUS
    # Carousels
    if len(images) > 1:
        bias += _CAROUSEL_PENALTY * (len(images) - 1)
    return bias


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def extract_features(document: Document, config: FilterConfig) -> FeatureTable:
    """Compute a :data:`FeatureVector` for body and every element below it."""
    table = FeatureTable()
    body = document.body
    if body is None:
        return table

    candidates = [body, *elements(body)]
    text_counts = count_text_chars(body)
    anchor_counts = count_anchor_chars(body, text_counts)
    schema = schema_bias(candidates, config.schema_types)

    for element in candidates:
        text_chars = text_counts.get(id(element), 0)
        anchor_chars = anchor_counts.get(id(element), 0)
        vector: FeatureVector = dict.fromkeys(SIGNAL_NAMES, 0.0)
        vector["text_density"] = float(text_chars)
        vector["anchor_density"] = float(anchor_chars)
        vector["attr_bias"] = attribute_bias(element, config.attribute_keywords)
        vector["tag_bias"] = float(config.tag_bias.get(element.name, 0.0))
        vector["schema_bias"] = schema.get(id(element), 0.0)
        vector["child_bias"] = child_bias(element, config.child_bias)
        vector["image_bias"] = image_bias(element)
        if element is not body:
            vector["list_descendant"] = float(closest(element, config.list_tags) is not None)
            vector["nav_descendant"] = float(closest(element, config.navigation_tags) is not None)
        table.add(element, vector, text_chars, anchor_chars)

    logger.debug("extract_features: %d candidate element(s)", len(table))
    return table
