"""Tests for calamine.pipeline."""

import logging

import pytest
from bs4 import BeautifulSoup, Tag

from calamine import pipeline
from calamine.config import FilterConfig
from calamine.pipeline import ExtractionError, extract, extract_batch, extract_html, transform
from calamine.tree import Document, TreeInvariantError, parse_html

SINGLE_PARAGRAPH = "<html><body><p>Hello world</p></body></html>"


class TestEndToEnd:
    def test_article_is_best(self, article_html):
        result = transform(parse_html(article_html))
        assert result.best is not None
        assert result.best.name == "article"

    def test_only_article_remains(self, article_html):
        result = transform(parse_html(article_html))
        body = result.document.body
        children = [child for child in body.contents if isinstance(child, Tag)]
        assert [child.name for child in children] == ["article"]
        assert children[0] is result.best

    def test_boilerplate_removed(self, article_html):
        html = extract_html(article_html)
        assert "Reading the river" in html
        assert "The river changes its mind" in html
        assert "Archive" not in html
        assert "Copyright" not in html
        assert "<script" not in html
        assert "itemtype" not in html

    def test_images_sanitized(self, article_html):
        html = extract_html(article_html)
        assert "pixel.quantserve.com" not in html
        assert 'src="https://cdn.example.com/photos/river-bend.jpg"' in html
        assert "data-src" not in html

    def test_whitespace_condensed(self, article_html):
        html = extract_html(article_html)
        assert "spring. Sandbars that were solid footing in August" in html

    def test_links_resolved_against_base_url(self):
        markup = (
            '<html><body><article><p>See <a href="../notes">the notes</a> and '
            '<a href="javascript:share()">share</a>.</p><img src="fig.png" width="40" height="40">'
            "</article></body></html>"
        )
        html = extract_html(markup, base_url="https://example.com/blog/post")
        assert 'href="https://example.com/notes"' in html
        assert 'src="https://example.com/blog/fig.png"' in html
        assert "javascript:" not in html
        assert "and share." in html

    def test_default_config_not_shared_mutably(self):
        first = transform(parse_html(SINGLE_PARAGRAPH))
        with pytest.raises(TypeError):
            FilterConfig().weights["text_density"] = 0.0
        second = transform(parse_html(SINGLE_PARAGRAPH))
        assert [s for _, s in first.scores.items()] == [s for _, s in second.scores.items()]

    def test_head_removed(self, article_html):
        result = transform(parse_html(article_html))
        assert result.document.soup.find("head") is None
        assert result.document.soup.find("title") is None


class TestDeterminism:
    def test_same_output(self, article_html):
        assert extract_html(article_html) == extract_html(article_html)

    def test_same_scores(self, article_html):
        first = transform(parse_html(article_html))
        second = transform(parse_html(article_html))
        assert [s for _, s in first.scores.items()] == [s for _, s in second.scores.items()]


class TestNoOps:
    def test_no_body(self):
        document = Document(
            BeautifulSoup("<html><head><title>x</title></head></html>", "html.parser"),
        )
        before = str(document)
        result = transform(document)
        assert result.best is None
        assert len(result.scores) == 0
        assert str(document) == before

    def test_empty_document(self):
        document = Document(BeautifulSoup("", "html.parser"))
        assert extract(document) is document
        assert str(document) == ""

    def test_single_paragraph_unchanged(self):
        document = parse_html(SINGLE_PARAGRAPH)
        before = str(document)
        assert extract(document) is document
        assert str(document) == before

    def test_extract_html_single_paragraph(self):
        assert extract_html(SINGLE_PARAGRAPH) == "<p>Hello world</p>"


class TestAnnotate:
    def test_scores_written(self, article_html):
        result = transform(parse_html(article_html), FilterConfig(annotate=True))
        best = result.best
        assert "data-calamine-score" in best.attrs
        assert best["data-calamine-schema-bias"] == "1"
        assert best["data-calamine-tag-bias"] == "200"

    def test_off_by_default(self, article_html):
        assert "data-calamine-" not in extract_html(article_html)


class TestErrors:
    def test_invariant_error_propagates(self, monkeypatch):
        def detached_best(scores, document):
            return document.soup.new_tag("div")

        monkeypatch.setattr(pipeline, "select_best", detached_best)
        with pytest.raises(TreeInvariantError):
            transform(parse_html(SINGLE_PARAGRAPH))


class TestExtractBatch:
    @pytest.fixture
    def flaky_extract(self, monkeypatch):
        real_extract = pipeline.extract

        def _extract(document, config=None):
            if "BOOM" in str(document):
                raise RuntimeError("boom")
            return real_extract(document, config)

        monkeypatch.setattr(pipeline, "extract", _extract)

    def test_order_preserved(self):
        markups = [f"<html><body><p>Doc {i}</p></body></html>" for i in range(10)]
        results = extract_batch(markups, max_workers=4)
        assert results == [f"<p>Doc {i}</p>" for i in range(10)]

    def test_skip_failed(self, flaky_extract, caplog):
        markups = [SINGLE_PARAGRAPH, "<p>BOOM</p>", "<p>Later</p>"]
        with caplog.at_level(logging.WARNING, logger="calamine.pipeline"):
            results = extract_batch(markups)
        assert results == ["<p>Hello world</p>", "<p>Later</p>"]
        assert "document 1 failed" in caplog.text

    def test_include_failed(self, flaky_extract):
        results = extract_batch([SINGLE_PARAGRAPH, "<p>BOOM</p>"], on_error="include")
        assert results == ["<p>Hello world</p>", None]

    def test_raise_failed(self, flaky_extract):
        with pytest.raises(ExtractionError) as excinfo:
            extract_batch(["<p>BOOM</p>"], on_error="raise")
        assert excinfo.value.index == 0
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_unknown_on_error(self):
        with pytest.raises(ValueError, match="on_error"):
            extract_batch([SINGLE_PARAGRAPH], on_error="ignore")
