"""Document tree adapter over BeautifulSoup.

Every filter and extractor works on plain ``bs4`` objects: elements are
:class:`bs4.Tag`, text is :class:`bs4.NavigableString`.  This module owns the
few helpers they all share (document-order snapshots, connectedness checks,
unwrap/remove with linkage assertions).

Node identity is object identity.  ``Tag.__eq__`` compares markup, so two
distinct ``<p>x</p>`` elements are equal; never use ``==`` or ``in`` on lists
of nodes here.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import PageElement, PreformattedString


class TreeInvariantError(AssertionError):
    """Raised when the tree's parent/child linkage is broken.

    This is a programming error, not bad input: it aborts the current
    extraction and is never swallowed by the core.
    """


class Document:
    """A parsed HTML document with ``root``/``body`` accessors."""

    def __init__(self, soup: BeautifulSoup, base_url: str = "") -> None:
        self.soup = soup
        self.base_url = base_url

    @property
    def root(self) -> Tag | None:
        """The document element (``<html>``), or the first top-level tag."""
        for child in self.soup.contents:
            if isinstance(child, Tag):
                return child
        return None

    @property
    def body(self) -> Tag | None:
        root = self.root
        if root is None:
            return None
        if root.name == "body":
            return root
        body = root.find("body")
        return body if isinstance(body, Tag) else None

    def __str__(self) -> str:
        return str(self.soup)

    def __repr__(self) -> str:
        return f"Document(base_url={self.base_url!r}, has_body={self.body is not None})"


def parse_html(markup: str | bytes, base_url: str = "") -> Document:
    """Parse *markup* with the lxml tree builder and wrap it in a :class:`Document`."""
    return Document(BeautifulSoup(markup, "lxml"), base_url=base_url)


# ---------------------------------------------------------------------------
# Node classification
# ---------------------------------------------------------------------------

def is_text(node: object) -> bool:
    """True for character data (not comments, doctypes or CDATA)."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def is_comment(node: object) -> bool:
    return isinstance(node, Comment)


def is_whitespace_text(node: object) -> bool:
    return is_text(node) and not str(node).strip()


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

def elements(container: Tag | BeautifulSoup) -> list[Tag]:
    """Snapshot of every element below *container* in document (pre-)order."""
    return [el for el in container.find_all(True) if isinstance(el, Tag)]


def descendants(container: Tag) -> list[PageElement]:
    """Snapshot of every node (elements and text) below *container*."""
    return list(container.descendants)


def ancestors(node: PageElement) -> Iterator[Tag]:
    """Yield the element ancestors of *node*, closest first."""
    parent = node.parent
    while parent is not None and not isinstance(parent, BeautifulSoup):
        yield parent
        parent = parent.parent


def closest(node: PageElement, names: Iterable[str] | frozenset[str]) -> Tag | None:
    """Return the closest element ancestor of *node* whose tag is in *names*."""
    for ancestor in ancestors(node):
        if ancestor.name in names:
            return ancestor
    return None


def contains(container: Tag, node: PageElement) -> bool:
    """True when *node* is *container* or one of its descendants."""
    current: PageElement | None = node
    while current is not None:
        if current is container:
            return True
        current = current.parent
    return False


def is_connected(document: Document, node: PageElement) -> bool:
    """True when *node* can still reach the document through its parents."""
    return contains(document.soup, node)


def post_order(container: Tag) -> list[PageElement]:
    """Return *container*'s subtree (itself included) in post-order.

    Uses an explicit stack so arbitrarily deep documents never hit the
    interpreter's recursion limit.
    """
    order: list[PageElement] = []
    stack: list[tuple[PageElement, bool]] = [(container, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or not isinstance(node, Tag):
            order.append(node)
            continue
        stack.append((node, True))
        for child in reversed(node.contents):
            stack.append((child, False))
    return order


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------

def check_linkage(node: PageElement) -> None:
    """Raise :class:`TreeInvariantError` if *node*'s parent does not list it."""
    parent = node.parent
    if parent is None:
        return
    if not any(child is node for child in parent.contents):
        raise TreeInvariantError(
            f"<{getattr(node, 'name', '#text')}> is not a child of its parent <{parent.name}>",
        )


def remove(node: PageElement) -> None:
    """Detach *node* (and its subtree) from the tree.

    Uses ``extract()`` rather than ``decompose()`` so detached descendants keep
    a valid parent chain and :func:`is_connected` stays answerable for them.
    """
    check_linkage(node)
    node.extract()


def unwrap(element: Tag) -> None:
    """Replace *element* with its children, keeping their order."""
    if element.parent is None:
        return
    check_linkage(element)
    element.unwrap()


def replace_with_children(element: Tag, source: Tag) -> None:
    """Replace *element* with the children of *source* (a descendant of it)."""
    check_linkage(element)
    for child in list(source.contents):
        element.insert_before(child.extract())
    element.extract()
