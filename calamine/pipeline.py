"""Boilerplate removal pipeline.

Pass order is fixed:

1. pre-scoring sanitization (blacklist, hidden, script anchors, lazy images,
   source-less images, URL resolution, tracking images)
2. feature extraction and scoring
3. best-node selection and pruning
4. post-scoring sanitization, then edge trimming
5. optional ``data-calamine-*`` annotations

Usage::

    from calamine import extract_html

    html = extract_html(open("page.html").read(), base_url="https://example.com/post")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import NamedTuple

from bs4 import Tag

from calamine.config import FilterConfig
from calamine.extractors import (
    FeatureTable,
    ScoreTable,
    extract_features,
    prune,
    score_features,
    select_best,
)
from calamine.filters import POST_SCORING_PASSES, PRE_SCORING_PASSES, trim_filter
from calamine.settings import BATCH_MAX_WORKERS
from calamine.tree import Document, is_connected, parse_html

logger = logging.getLogger(__name__)

ANNOTATION_PREFIX = "data-calamine-"


class ExtractionError(RuntimeError):
    """Raised by :func:`extract_batch` when a document fails and ``on_error="raise"``.

    Attributes:
        index -- position of the failing document in the input
    """

    def __init__(self, index: int, cause: Exception) -> None:
        self.index = index
        super().__init__(f"document {index} failed: {cause}")


class ExtractionResult(NamedTuple):
    document: Document
    best: Tag | None
    scores: ScoreTable
    features: FeatureTable


def _format_value(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def annotate(document: Document, features: FeatureTable, scores: ScoreTable) -> None:
    """Write each surviving element's score and non-zero signals as attributes."""
    for element, vector in features:
        if not is_connected(document, element):
            continue
        score = scores.get(element)
        if score is not None:
            element[ANNOTATION_PREFIX + "score"] = _format_value(score)
        for name, value in vector.items():
            if value:
                element[ANNOTATION_PREFIX + name.replace("_", "-")] = _format_value(value)


def transform(document: Document, config: FilterConfig | None = None) -> ExtractionResult:
    """Run the full pipeline on *document* in place and return the intermediate tables."""
    if config is None:
        config = FilterConfig()

    if document.body is None:
        logger.debug("transform: document has no body; nothing to do")
        return ExtractionResult(document, None, ScoreTable(), FeatureTable())

    for sanitize in PRE_SCORING_PASSES:
        sanitize(document, config)

    features = extract_features(document, config)
    scores = score_features(features, config)
    best = select_best(scores, document)
    if best is not None:
        logger.debug(
            "transform: best node <%s> score=%.2f",
            best.name, scores.get(best, 0.0),
        )

    prune(document, best)

    for sanitize in POST_SCORING_PASSES:
        sanitize(document, config)
    trim_filter(document, config)

    if config.annotate:
        annotate(document, features, scores)

    return ExtractionResult(document, best, scores, features)


def extract(document: Document, config: FilterConfig | None = None) -> Document:
    """Strip boilerplate from *document* in place and return it."""
    return transform(document, config).document


def extract_html(
    markup: str | bytes,
    config: FilterConfig | None = None,
    *,
    base_url: str = "",
) -> str:
    """Parse *markup*, extract its main content and serialize the body's contents.

    Documents without a body are returned whole.
    """
    document = extract(parse_html(markup, base_url=base_url), config)
    body = document.body
    if body is None:
        return str(document)
    return body.decode_contents()


def extract_batch(
    markups: Iterable[str | bytes],
    *,
    config: FilterConfig | None = None,
    max_workers: int = BATCH_MAX_WORKERS,
    on_error: str = "skip",
) -> list[str | None]:
    """Run :func:`extract_html` over many documents concurrently.

    Results keep the input order.

    Args:
        markups:     HTML documents to process.
        config:      Shared :class:`~calamine.config.FilterConfig`.
        max_workers: Maximum number of worker threads (default 8).
        on_error:    How to handle a failing document:
                     ``"skip"`` (default) omits it from the results;
                     ``"raise"`` re-raises it wrapped in :class:`ExtractionError`;
                     ``"include"`` puts ``None`` in its slot.

    Raises:
        :class:`ExtractionError`: Only when ``on_error="raise"`` and a document fails.
        :class:`ValueError`: For unknown *on_error* values.
    """
    if on_error not in ("skip", "raise", "include"):
        raise ValueError(f"on_error must be 'skip', 'raise', or 'include'; got {on_error!r}")

    documents = list(markups)
    results: list[str | None] = [None] * len(documents)
    failed: set[int] = set()

    def _extract_one(idx: int, markup: str | bytes) -> tuple[int, str | None]:
        try:
            return idx, extract_html(markup, config)
        except Exception as exc:
            if on_error == "raise":
                raise ExtractionError(idx, exc) from exc
            logger.warning("extract_batch: document %d failed: %s", idx, exc)
            failed.add(idx)
            return idx, None

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_extract_one, i, markup) for i, markup in enumerate(documents)]
        for future in as_completed(futures):
            idx, html = future.result()
            results[idx] = html

    if on_error == "include":
        return results
    return [html for idx, html in enumerate(results) if idx not in failed]
