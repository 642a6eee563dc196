"""Image filters: lazy-load promotion, source-less and tracking-image removal."""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlparse

from bs4 import Tag

from calamine.config import FilterConfig
from calamine.tree import Document, is_connected, remove

logger = logging.getLogger(__name__)

# Lazy attribute values longer than this are treated as garbage
_MAX_URL_LENGTH = 3000


def image_has_source(image: Tag) -> bool:
    """True when *image* has a non-empty ``src`` or ``srcset``."""
    for name in ("src", "srcset"):
        value = image.get(name)
        if value and str(value).strip():
            return True
    return False


def _is_valid_lazy_value(value: object) -> bool:
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    if not stripped or len(stripped) > _MAX_URL_LENGTH:
        return False
    return not any(ch.isspace() for ch in stripped)


def lazy_image_filter(document: Document, config: FilterConfig) -> None:
    """Promote the first valid lazy-load attribute of source-less images to ``src``."""
    body = document.body
    if body is None:
        return

    promoted = 0
    for image in body.find_all("img"):
        if not isinstance(image, Tag) or image_has_source(image):
            continue
        for name in config.lazy_image_attributes:
            value = image.get(name)
            if _is_valid_lazy_value(value):
                del image[name]
                image["src"] = str(value).strip()
                promoted += 1
                break
    if promoted:
        logger.debug("lazy_image_filter promoted %d image(s)", promoted)


def sourceless_image_filter(document: Document, config: FilterConfig) -> None:
    """Remove images left without ``src`` or ``srcset`` after lazy promotion."""
    body = document.body
    if body is None:
        return

    removed = 0
    for image in body.find_all("img"):
        if isinstance(image, Tag) and is_connected(document, image) and not image_has_source(image):
            remove(image)
            removed += 1
    if removed:
        logger.debug("sourceless_image_filter removed %d image(s)", removed)


def _int_attribute(image: Tag, name: str) -> int | None:
    raw = str(image.get(name) or "").strip().lower().removesuffix("px")
    try:
        return int(float(raw))
    except (ValueError, OverflowError):
        return None


def image_is_pixel(image: Tag) -> bool:
    """True for images whose explicit width and height are both under 2px."""
    if not image.get("src"):
        return False
    width = _int_attribute(image, "width")
    height = _int_attribute(image, "height")
    return width is not None and height is not None and width < 2 and height < 2


def source_hostname(image: Tag, base_url: str = "") -> str:
    """Resolve *image*'s ``src`` against *base_url* and return its hostname."""
    src = str(image.get("src") or "").strip()
    if not src or any(ch.isspace() for ch in src):
        return ""
    if base_url:
        src = urljoin(base_url, src)
    elif src.startswith("//"):
        src = "http:" + src
    try:
        parsed = urlparse(src)
    except ValueError:
        return ""
    if parsed.scheme not in ("http", "https"):
        return ""
    return (parsed.hostname or "").lower()


def is_tracking_host(hostname: str, tracking_hosts: frozenset[str]) -> bool:
    """True when *hostname* equals or is a subdomain of a tracking host."""
    if not hostname:
        return False
    if hostname in tracking_hosts:
        return True
    labels = hostname.split(".")
    return any(".".join(labels[i:]) in tracking_hosts for i in range(1, len(labels) - 1))


def tracking_image_filter(document: Document, config: FilterConfig) -> None:
    """Remove telemetry images: known tracking hosts and 1x1 pixels."""
    body = document.body
    if body is None:
        return

    removed = 0
    for image in body.find_all("img"):
        if not isinstance(image, Tag) or not is_connected(document, image):
            continue
        host = source_hostname(image, document.base_url)
        if image_is_pixel(image) or is_tracking_host(host, config.tracking_hosts):
            remove(image)
            removed += 1
    if removed:
        logger.debug("tracking_image_filter removed %d image(s)", removed)
