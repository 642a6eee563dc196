"""Layout simplification: single-cell tables and emphasis tag names."""

from __future__ import annotations

import logging

from bs4 import Tag

from calamine.config import FilterConfig
from calamine.tree import Document, closest, elements, is_connected, replace_with_children

logger = logging.getLogger(__name__)

CONDENSED_TAGNAMES: dict[str, str] = {"strong": "b", "em": "i"}

_CELL_TAGS = ("td", "th")


def _own_rows(table: Tag) -> list[Tag]:
    """Rows of *table*, excluding rows that belong to nested tables."""
    return [
        row for row in table.find_all("tr")
        if isinstance(row, Tag) and closest(row, ("table",)) is table
    ]


def single_cell(table: Tag) -> Tag | None:
    """Return the only cell of a one-row, one-cell table, else ``None``."""
    rows = _own_rows(table)
    if len(rows) != 1:
        return None
    cells = rows[0].find_all(_CELL_TAGS, recursive=False)
    if len(cells) != 1:
        return None
    return cells[0]


def table_filter(document: Document, config: FilterConfig) -> None:
    """Replace layout tables holding a single cell with that cell's content."""
    body = document.body
    if body is None:
        return

    unwrapped = 0
    for table in body.find_all("table"):
        if not isinstance(table, Tag) or not is_connected(document, table):
            continue
        cell = single_cell(table)
        if cell is not None:
            replace_with_children(table, cell)
            unwrapped += 1
    if unwrapped:
        logger.debug("table_filter unwrapped %d table(s)", unwrapped)


def condense_tagnames_filter(document: Document, config: FilterConfig) -> None:
    """Rename ``strong``/``em`` to ``b``/``i``.

    Attributes are dropped unless ``config.condense_copy_attributes`` is set.
    Disabled entirely by ``config.condense_tagnames = False``.
    """
    body = document.body
    if body is None or not config.condense_tagnames:
        return

    for element in elements(body):
        replacement = CONDENSED_TAGNAMES.get(element.name)
        if replacement is None:
            continue
        element.name = replacement
        if not config.condense_copy_attributes:
            element.attrs = {}
