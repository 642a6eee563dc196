"""Extraction sub-package: feature signals, scoring and best-node selection."""

from .features import FeatureTable, FeatureVector, extract_features
from .scoring import ScoreTable, score_features
from .selection import prune, select_best

__all__ = [
    "FeatureTable",
    "FeatureVector",
    "ScoreTable",
    "extract_features",
    "prune",
    "score_features",
    "select_best",
]
