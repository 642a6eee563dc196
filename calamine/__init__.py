"""calamine - strip boilerplate from HTML and keep the article.

Quick usage::

    from calamine import extract_html

    html = extract_html(raw_html, base_url="https://example.com/post")

Working on a parsed document::

    from calamine import FilterConfig, parse_html, transform

    document = parse_html(raw_html)
    result = transform(document, FilterConfig(annotate=True))
    print(result.best.name, result.scores[result.best])

Per-site profiles::

    from calamine import extract_html, load_config

    config = load_config("profiles.yaml", url="https://news.example.com/a")
    html = extract_html(raw_html, config)
"""

from calamine.config import ConfigError, FilterConfig, load_config
from calamine.pipeline import (
    ExtractionError,
    ExtractionResult,
    extract,
    extract_batch,
    extract_html,
    transform,
)
from calamine.tree import Document, TreeInvariantError, parse_html

__version__ = "0.1.0"
__all__ = [
    "ConfigError",
    "Document",
    "ExtractionError",
    "ExtractionResult",
    "FilterConfig",
    "TreeInvariantError",
    "extract",
    "extract_batch",
    "extract_html",
    "load_config",
    "parse_html",
    "transform",
]
