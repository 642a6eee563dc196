"""Tests for the calamine command line."""

import logging

import pytest

from calamine import settings
from calamine.__main__ import _build_parser, main


def test_extracts_to_stdout(article_path, capsys):
    assert main([str(article_path)]) == 0
    out = capsys.readouterr().out
    assert "Reading the river" in out
    assert "Archive" not in out


def test_writes_out_file(article_path, tmp_path, capsys):
    target = tmp_path / "clean.html"
    assert main([str(article_path), "--out", str(target)]) == 0
    assert capsys.readouterr().out == ""
    assert "Reading the river" in target.read_text(encoding="utf-8")


def test_annotate_flag(article_path, capsys):
    assert main([str(article_path), "--annotate"]) == 0
    assert "data-calamine-score" in capsys.readouterr().out


def test_keep_attributes_flag(article_path, capsys):
    assert main([str(article_path), "--keep-attributes"]) == 0
    assert 'itemtype="http://schema.org/Article"' in capsys.readouterr().out


def test_no_condense_flag(tmp_path, capsys):
    page = tmp_path / "page.html"
    page.write_text("<html><body><p><strong>Bold</strong> text</p></body></html>", encoding="utf-8")
    assert main([str(page), "--no-condense"]) == 0
    assert "<strong>Bold</strong>" in capsys.readouterr().out


def test_top_candidates_table(article_path, capsys):
    assert main([str(article_path), "--top", "3"]) == 0
    captured = capsys.readouterr()
    assert "candidates" in captured.err
    assert "article" in captured.err


def test_config_profile(article_path, profiles_path, capsys):
    rc = main([str(article_path), "--config", str(profiles_path), "--url", "https://news.example.com/a"])
    assert rc == 0
    assert "data-calamine-score" in capsys.readouterr().out


def test_missing_input_exits_1(tmp_path, capsys):
    assert main([str(tmp_path / "missing.html")]) == 1
    assert "cannot read" in capsys.readouterr().err


def test_bad_config_exits_2(article_path, tmp_path, capsys):
    bad = tmp_path / "bad.yaml"
    bad.write_text("default:\n  opacity_threshold: 7\n", encoding="utf-8")
    assert main([str(article_path), "--config", str(bad)]) == 2
    assert "ERROR" in capsys.readouterr().err


def test_logging_uses_project_settings(article_path, monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    assert main([str(article_path)]) == 0
    assert calls[0]["format"] == settings.LOG_FORMAT
    assert calls[0]["level"] == getattr(logging, settings.LOG_LEVEL)


def test_log_level_choices_come_from_settings():
    parser = _build_parser()
    assert parser.parse_args(["page.html"]).log_level == settings.LOG_LEVEL
    with pytest.raises(SystemExit):
        parser.parse_args(["page.html", "--log-level", "TRACE"])
