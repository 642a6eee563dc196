"""Filter configuration and YAML profiles.

:class:`FilterConfig` carries every table the filters and extractors consume.
It is validated once, at construction, and frozen afterwards: a malformed
weight table fails here rather than half-way through a traversal.

YAML profiles look like::

    default:
      annotate: false
      weights:
        schema_bias: 800
    domains:
      example.com:
        tracking_hosts: [pixel.example.net]

``load_config(path, url)`` merges the most specific matching ``domains``
entry over ``default``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# ---------------------------------------------------------------------------
# Signal names (keys of FeatureVector and of the weight table)
# ---------------------------------------------------------------------------

SIGNAL_NAMES: tuple[str, ...] = (
    "text_density",
    "anchor_density",
    "attr_bias",
    "tag_bias",
    "schema_bias",
    "child_bias",
    "image_bias",
    "list_descendant",
    "nav_descendant",
)

DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "text_density": 0.25,
    "anchor_density": -0.7,
    "attr_bias": 1.0,
    "tag_bias": 1.0,
    "schema_bias": 500.0,
    "child_bias": 1.0,
    "image_bias": 1.0,
    "list_descendant": -100.0,
    "nav_descendant": -50.0,
})

# ---------------------------------------------------------------------------
# Sanitization tables
# ---------------------------------------------------------------------------

DEFAULT_BLACKLIST: frozenset[str] = frozenset(
    {
        "applet", "base", "basefont", "bgsound", "button", "command",
        "datalist", "dialog", "embed", "fieldset", "frame", "frameset",
        "head", "input", "isindex", "keygen", "link", "math", "meta",
        "noembed", "noframes", "noscript", "object", "optgroup", "option",
        "output", "param", "script", "select", "style", "svg", "template",
        "textarea", "title",
    }
)

DEFAULT_ATTRIBUTE_WHITELIST: Mapping[str, frozenset[str]] = MappingProxyType({
    "a": frozenset({"href", "name", "title", "rel"}),
    "iframe": frozenset({"src"}),
    "source": frozenset({"media", "sizes", "srcset", "src", "type"}),
    "img": frozenset({"src", "alt", "title", "srcset", "width", "height"}),
})

# Priority order matters: the first valid value wins.
DEFAULT_LAZY_IMAGE_ATTRIBUTES: tuple[str, ...] = (
    "big-src", "load-src", "data-src", "data-src-full16x9", "data-src-large",
    "data-original-desktop", "data-baseurl", "data-flickity-lazyload",
    "data-lazy", "data-path", "data-image-src", "data-original",
    "data-adaptive-image", "data-imgsrc", "data-default-src",
    "data-hi-res-src",
)

DEFAULT_TRACKING_HOSTS: frozenset[str] = frozenset(
    {
        "2o7.net",
        "ad.doubleclick.net",
        "ad.linksynergy.com",
        "analytics.twitter.com",
        "anon-stats.eff.org",
        "bat.bing.com",
        "b.scorecardresearch.com",
        "beacon.gu-web.net",
        "googleads.g.doubleclick.net",
        "in.getclicky.com",
        "insight.adsrvr.org",
        "me.effectivemeasure.net",
        "metrics.foxnews.com",
        "moatads.com",
        "pagead2.googlesyndication.com",
        "pixel.quantserve.com",
        "pixel.wp.com",
        "pubads.g.doubleclick.net",
        "sb.scorecardresearch.com",
        "stats.bbc.co.uk",
        "statse.webtrendslive.com",
        "t.co",
    }
)

DEFAULT_TRIMMABLE_TAGS: frozenset[str] = frozenset({"br", "hr", "nobr"})

DEFAULT_LEAF_EXCEPTIONS: frozenset[str] = frozenset(
    {
        "area", "audio", "base", "br", "canvas", "col", "command", "embed",
        "hr", "iframe", "img", "input", "keygen", "meta", "nobr", "object",
        "param", "path", "picture", "source", "svg", "textarea", "track",
        "video", "wbr",
    }
)

DEFAULT_WHITESPACE_SENSITIVE: frozenset[str] = frozenset(
    {"pre", "code", "textarea", "ruby", "xmp"}
)

# ---------------------------------------------------------------------------
# Scoring tables
# ---------------------------------------------------------------------------

DEFAULT_TAG_BIAS: Mapping[str, float] = MappingProxyType({
    "article": 200, "content": 200, "div": 200, "main": 100, "section": 50,
    "blockquote": 10, "code": 10, "figcaption": 10, "figure": 10,
    "ilayer": 10, "layer": 10, "p": 10, "pre": 10, "ruby": 10, "summary": 10,
    "address": -5, "dd": -5, "dt": -5, "h1": -5, "h2": -5, "h3": -5,
    "h4": -5, "h5": -5, "h6": -5, "small": -5, "sub": -5, "sup": -5,
    "th": -5, "form": -20, "li": -50, "ol": -50, "ul": -50, "font": -100,
    "aside": -100, "header": -100, "footer": -100, "table": -100,
    "tbody": -100, "thead": -100, "tfoot": -100, "nav": -100, "a": -500,
    "tr": -500,
})

DEFAULT_CHILD_BIAS: Mapping[str, float] = MappingProxyType({
    "a": -5, "blockquote": 20, "div": -50, "figure": 20, "h1": 10, "h2": 10,
    "h3": 10, "h4": 10, "h5": 10, "h6": 10, "li": -5, "ol": -20, "p": 100,
    "pre": 10, "ul": -20,
})

DEFAULT_ATTRIBUTE_KEYWORDS: Mapping[str, float] = MappingProxyType({
    "about": -35, "ad": -100, "ads": -50, "advert": -200, "article": 200,
    "articlebody": 500, "articlecontent": 1000, "articles": 100,
    "articletext": 500, "attachment": 20, "author": 20, "blog": 20,
    "blogpost": 500, "blogposting": 500, "body": 100, "bottom": -100,
    "brand": -50, "breadcrumbs": -20, "button": -100, "byline": 20,
    "caption": 10, "carousel": 30, "cmt": -100, "colophon": -100,
    "column": 10, "comic": 75, "comment": -500, "comments": -300,
    "commercial": -500, "community": -100, "complementary": -100,
    "component": -50, "contact": -50, "content": 100, "contentpane": 200,
    "credit": -50, "date": -50, "dropdown": -100, "email": -100,
    "entry": 100, "excerpt": 20, "facebook": -100, "featured": 20,
    "foot": -100, "footer": -200, "footnote": -150, "google": -50,
    "gutter": -300, "head": -50, "header": -100, "heading": -50,
    "hentry": 150, "hnews": 200, "inset": -50, "insta": -100, "left": -75,
    "license": -100, "like": -100, "link": -100, "links": -100,
    "logo": -50, "main": 50, "mainnav": -500, "masthead": -30,
    "media": -100, "menu": -200, "meta": -50, "most": -50, "nav": -200,
    "navbar": -100, "navigation": -100, "newsarticle": 500,
    "newscontent": 500, "newsletter": -100, "next": -300, "page": 50,
    "popular": -50, "popup": -100, "post": 150, "prev": -300,
    "print": -50, "promo": -200, "promotions": -200, "reading": 100,
    "recap": -100, "related": -300, "relate": -300, "replies": -100,
    "reply": -50, "right": -100, "rightrail": -100, "scroll": -50,
    "share": -200, "sharebar": -200, "shop": -200, "shoutbox": -200,
    "side": -200, "sidebar": -200, "signup": -100, "snippet": 50,
    "social": -200, "sponsor": -200, "story": 100, "storycontent": 500,
    "storytext": 200, "subscribe": -50, "summary": 50, "tabs": -100,
    "tag": -100, "tagcloud": -100, "tags": -100, "teaser": -100,
    "text": 20, "time": -30, "timestamp": -50, "title": -50, "tool": -200,
    "tools": -200, "twitter": -200, "txt": 50, "utility": -50,
    "vcard": -50, "widget": -200, "zone": -50,
})

DEFAULT_LIST_TAGS: frozenset[str] = frozenset({"li", "ol", "ul", "dd", "dl", "dt"})
DEFAULT_NAVIGATION_TAGS: frozenset[str] = frozenset({"aside", "header", "footer", "nav"})

DEFAULT_SCHEMA_TYPES: tuple[str, ...] = (
    "Article",
    "Blog",
    "BlogPost",
    "BlogPosting",
    "NewsArticle",
    "ScholarlyArticle",
    "TechArticle",
    "WebPage",
)


class ConfigError(ValueError):
    """Raised when a YAML profile cannot be turned into a :class:`FilterConfig`."""


def _check_finite(table: Mapping[str, float], label: str) -> Mapping[str, float]:
    for key, value in table.items():
        if not math.isfinite(value):
            raise ValueError(f"{label} value for {key!r} must be finite, got {value!r}")
    return table


def _normalize_tag(name: str) -> str:
    name = name.strip().lower()
    if not name:
        raise ValueError("tag names must be non-empty strings")
    return name


def _normalize_tags(names: frozenset[str]) -> frozenset[str]:
    return frozenset(_normalize_tag(name) for name in names)


def _table_field(default: Mapping[str, Any]) -> Any:
    # Defaults run through the field validators too
    return Field(default_factory=lambda: dict(default), validate_default=True)


class FilterConfig(BaseModel):
    """Static configuration for one or many ``extract`` calls.

    Lookup tables are exposed as read-only mappings, so a config shared
    between threads cannot be changed through ``config.weights[...] = ...``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=False)

    # Sanitization
    blacklist: frozenset[str] = DEFAULT_BLACKLIST
    attribute_whitelist: Mapping[str, frozenset[str]] | None = _table_field(
        DEFAULT_ATTRIBUTE_WHITELIST,
    )
    lazy_image_attributes: tuple[str, ...] = DEFAULT_LAZY_IMAGE_ATTRIBUTES
    tracking_hosts: frozenset[str] = DEFAULT_TRACKING_HOSTS
    trimmable_tags: frozenset[str] = DEFAULT_TRIMMABLE_TAGS
    leaf_exceptions: frozenset[str] = DEFAULT_LEAF_EXCEPTIONS
    whitespace_sensitive_tags: frozenset[str] = DEFAULT_WHITESPACE_SENSITIVE
    whitespace_min_length: int = Field(default=3, ge=0)
    opacity_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    # Scoring
    weights: Mapping[str, float] = _table_field(DEFAULT_WEIGHTS)
    text_bias_cap: float | None = 4000.0
    tag_bias: Mapping[str, float] = _table_field(DEFAULT_TAG_BIAS)
    child_bias: Mapping[str, float] = _table_field(DEFAULT_CHILD_BIAS)
    attribute_keywords: Mapping[str, float] = _table_field(DEFAULT_ATTRIBUTE_KEYWORDS)
    list_tags: frozenset[str] = DEFAULT_LIST_TAGS
    navigation_tags: frozenset[str] = DEFAULT_NAVIGATION_TAGS
    schema_types: tuple[str, ...] = DEFAULT_SCHEMA_TYPES

    # Output
    annotate: bool = False
    condense_tagnames: bool = True
    condense_copy_attributes: bool = False

    @field_validator(
        "blacklist", "trimmable_tags", "leaf_exceptions",
        "whitespace_sensitive_tags", "list_tags", "navigation_tags",
    )
    @classmethod
    def normalize_tag_sets(cls, v: frozenset[str]) -> frozenset[str]:
        return _normalize_tags(v)

    @field_validator("tracking_hosts")
    @classmethod
    def normalize_hosts(cls, v: frozenset[str]) -> frozenset[str]:
        hosts = set()
        for host in v:
            host = host.strip().lower().strip(".")
            if not host or any(ch.isspace() for ch in host):
                raise ValueError(f"invalid tracking host {host!r}")
            hosts.add(host)
        return frozenset(hosts)

    @field_validator("lazy_image_attributes", "schema_types")
    @classmethod
    def non_empty_entries(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for entry in v:
            if not entry.strip():
                raise ValueError("entries must be non-empty strings")
        return tuple(entry.strip() for entry in v)

    @field_validator("attribute_whitelist")
    @classmethod
    def normalize_whitelist(
        cls, v: Mapping[str, frozenset[str]] | None,
    ) -> Mapping[str, frozenset[str]] | None:
        if v is None:
            return None
        return MappingProxyType(
            {_normalize_tag(tag): frozenset(names) for tag, names in v.items()}
        )

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        unknown = sorted(set(v) - set(SIGNAL_NAMES))
        if unknown:
            raise ValueError(f"unknown signal name(s) in weights: {', '.join(unknown)}")
        _check_finite(v, "weight")
        # Partial tables only override the defaults they name
        return MappingProxyType({**DEFAULT_WEIGHTS, **v})

    @field_validator("tag_bias", "child_bias")
    @classmethod
    def validate_tag_tables(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        _check_finite(v, "bias")
        return MappingProxyType({_normalize_tag(tag): weight for tag, weight in v.items()})

    @field_validator("attribute_keywords")
    @classmethod
    def validate_keywords(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        _check_finite(v, "keyword weight")
        keywords: dict[str, float] = {}
        for keyword, weight in v.items():
            token = keyword.strip().lower()
            if not token or any(ch.isspace() for ch in token):
                raise ValueError(f"keyword {keyword!r} must be a single non-empty token")
            keywords[token] = weight
        return MappingProxyType(keywords)

    @field_validator("text_bias_cap")
    @classmethod
    def validate_cap(cls, v: float | None) -> float | None:
        if v is not None and not math.isfinite(v):
            raise ValueError("text_bias_cap must be finite or null")
        return v


def load_config(path: str | Path, url: str = "") -> FilterConfig:
    """Load a YAML profile and return the :class:`FilterConfig` for *url*.

    Raises :class:`ConfigError` when the file is unreadable, is not a mapping,
    or its merged settings fail validation.
    """
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping, got {type(data).__name__}")

    default = data.get("default") or {}
    domains = data.get("domains") or {}
    if not isinstance(default, dict) or not isinstance(domains, dict):
        raise ConfigError(f"config {path}: 'default' and 'domains' must be mappings")

    netloc = (urlparse(url).hostname or "").lower() if url else ""
    best_key = ""
    best_cfg: dict[str, Any] = {}
    for key, cfg in domains.items():
        if not isinstance(key, str) or not isinstance(cfg, dict):
            continue
        key_lower = key.lower()
        if (netloc == key_lower or netloc.endswith("." + key_lower)) and (
            len(key_lower) > len(best_key)
        ):
            best_key = key_lower
            best_cfg = cfg

    merged: dict[str, Any] = dict(default)
    for name, value in best_cfg.items():
        # Tables merge key-by-key so a domain can tweak a single weight
        if isinstance(value, dict) and isinstance(merged.get(name), dict):
            merged[name] = {**merged[name], **value}
        else:
            merged[name] = value

    try:
        return FilterConfig(**merged)
    except ValidationError as exc:
        raise ConfigError(f"invalid config {path}: {exc}") from exc
