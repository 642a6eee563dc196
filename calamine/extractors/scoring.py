"""Weighted scoring of feature vectors."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from bs4 import Tag

from calamine.config import SIGNAL_NAMES, FilterConfig
from calamine.extractors.features import FeatureTable

logger = logging.getLogger(__name__)

_DENSITY_SIGNALS = ("text_density", "anchor_density")


class ScoreTable:
    """Accumulated score per element, iterated in insertion (document) order.

    Scores only ever grow by :meth:`add`; nothing is retracted within a run.
    """

    def __init__(self) -> None:
        self._elements: list[Tag] = []
        self._scores: dict[int, float] = {}

    def add(self, element: Tag, amount: float) -> None:
        key = id(element)
        if key not in self._scores:
            self._elements.append(element)
            self._scores[key] = 0.0
        self._scores[key] += amount

    def __getitem__(self, element: Tag) -> float:
        return self._scores[id(element)]

    def get(self, element: Tag, default: float | None = None) -> float | None:
        return self._scores.get(id(element), default)

    def __contains__(self, element: object) -> bool:
        return id(element) in self._scores

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._elements)

    def items(self) -> Iterator[tuple[Tag, float]]:
        for element in self._elements:
            yield element, self._scores[id(element)]

    def ranked(self, limit: int | None = None) -> list[tuple[Tag, float]]:
        """Highest scores first; ties keep document order."""
        order = sorted(
            enumerate(self.items()),
            key=lambda pair: (-pair[1][1], pair[0]),
        )
        ranked = [item for _, item in order]
        return ranked if limit is None else ranked[:limit]


def density_score(text_chars: float, anchor_chars: float, config: FilterConfig) -> float:
    """Text bonus minus anchor penalty, capped at ``config.text_bias_cap``."""
    weights = config.weights
    score = weights["text_density"] * text_chars + weights["anchor_density"] * anchor_chars
    if config.text_bias_cap is not None:
        score = min(config.text_bias_cap, score)
    return score


def score_features(features: FeatureTable, config: FilterConfig) -> ScoreTable:
    """Fold every feature vector into one scalar per element."""
    weights = config.weights
    scores = ScoreTable()
    for element, vector in features:
        scores.add(
            element,
            density_score(vector["text_density"], vector["anchor_density"], config),
        )
        for name in SIGNAL_NAMES:
            if name in _DENSITY_SIGNALS:
                continue
            value = vector.get(name, 0.0)
            if value:
                scores.add(element, weights[name] * value)

    logger.debug("score_features: scored %d element(s)", len(scores))
    return scores
