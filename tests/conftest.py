"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from calamine.config import FilterConfig
from calamine.tree import Document, parse_html

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article.html")


@pytest.fixture
def article_path() -> Path:
    return FIXTURES_DIR / "article.html"


@pytest.fixture
def profiles_path() -> Path:
    return FIXTURES_DIR / "profiles.yaml"


@pytest.fixture
def config() -> FilterConfig:
    return FilterConfig()


@pytest.fixture
def make_document():
    """Build a document whose body holds *body_markup* verbatim."""

    def _make(body_markup: str, base_url: str = "") -> Document:
        return parse_html(
            f"<html><head></head><body>{body_markup}</body></html>",
            base_url=base_url,
        )

    return _make
