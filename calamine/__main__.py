"""CLI entry point: python -m calamine FILE [options]"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from calamine.config import ConfigError, FilterConfig, load_config
from calamine.pipeline import ExtractionResult, transform
from calamine.settings import LOG_FORMAT, LOG_LEVEL, LOG_LEVELS
from calamine.tree import TreeInvariantError, parse_html

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calamine",
        description=(
            "Strip boilerplate (navigation, ads, share widgets) from an HTML page\n"
            "and print the main content."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", metavar="FILE",
                        help="HTML file to read, or '-' for stdin")
    parser.add_argument("--url", default="", metavar="URL",
                        help="Page URL: resolves image sources and selects the domain profile")
    parser.add_argument("--config", default=None, metavar="YAML",
                        help="YAML profile with 'default' and per-domain settings")
    parser.add_argument("--annotate", action="store_true", default=False,
                        help="Write data-calamine-* score attributes into the output")
    parser.add_argument("--no-condense", action="store_true", default=False,
                        help="Keep <strong>/<em> instead of renaming them to <b>/<i>")
    parser.add_argument("--keep-attributes", action="store_true", default=False,
                        help="Skip the attribute whitelist (keep every attribute)")
    parser.add_argument("--out", default=None, metavar="PATH",
                        help="Write the extracted HTML here instead of stdout")
    parser.add_argument("--top", type=int, default=0, metavar="N",
                        help="Print the N highest-scoring candidates to stderr")
    parser.add_argument("--log-level", default=LOG_LEVEL,
                        choices=LOG_LEVELS,
                        metavar="{" + ",".join(LOG_LEVELS) + "}",
                        help=f"Logging level (default: {LOG_LEVEL})")
    return parser


def _resolve_config(args: argparse.Namespace) -> FilterConfig:
    config = load_config(args.config, url=args.url) if args.config else FilterConfig()
    overrides: dict[str, object] = {}
    if args.annotate:
        overrides["annotate"] = True
    if args.no_condense:
        overrides["condense_tagnames"] = False
    if args.keep_attributes:
        overrides["attribute_whitelist"] = None
    return config.model_copy(update=overrides) if overrides else config


def _read_markup(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _print_candidates(result: ExtractionResult, limit: int) -> None:
    console = Console(stderr=True)
    tbl = Table(
        title=f"[bold cyan]Top {limit} candidates[/bold cyan]",
        box=box.SIMPLE_HEAVY,
        show_lines=False,
    )
    tbl.add_column("#",      style="dim",   justify="right", width=4, no_wrap=True)
    tbl.add_column("Tag",    style="cyan",  max_width=12,             no_wrap=True)
    tbl.add_column("Score",  justify="right", width=10,               no_wrap=True)
    tbl.add_column("Text",   justify="right", width=7,                no_wrap=True)
    tbl.add_column("Anchor", justify="right", width=7,                no_wrap=True)

    for i, (element, score) in enumerate(result.scores.ranked(limit), 1):
        marker = " [bold yellow]*[/bold yellow]" if element is result.best else ""
        tbl.add_row(
            str(i),
            f"{element.name}{marker}",
            f"{score:.1f}",
            str(result.features.text_char_count(element)),
            str(result.features.anchor_char_count(element)),
        )
    console.print(tbl)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        config = _resolve_config(args)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    try:
        markup = _read_markup(args.file)
    except OSError as exc:
        print(f"ERROR: cannot read {args.file}: {exc}", file=sys.stderr)
        return 1

    document = parse_html(markup, base_url=args.url)
    try:
        result = transform(document, config)
    except TreeInvariantError as exc:
        logger.error("Extraction failed: %s", exc)
        return 1

    body = result.document.body
    html = body.decode_contents() if body is not None else str(result.document)

    if args.out:
        try:
            Path(args.out).write_text(html, encoding="utf-8")
        except OSError as exc:
            print(f"ERROR: cannot write {args.out}: {exc}", file=sys.stderr)
            return 1
    else:
        sys.stdout.write(html)
        if not html.endswith("\n"):
            sys.stdout.write("\n")

    if args.top > 0 and len(result.scores):
        _print_candidates(result, args.top)

    return 0


if __name__ == "__main__":
    sys.exit(main())
