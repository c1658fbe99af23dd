"""Build element trees from markup.

This is a lenient tree builder on top of :mod:`html.parser`: it handles void
elements and implied end tags for mismatched closers, which is enough for
templates and test fixtures. It does not implement the full HTML5 tree
construction algorithm.
"""

from __future__ import annotations

from html.parser import HTMLParser

from .constants import VOID_ELEMENTS
from .node import Comment, Document, Element, Node, Text


class _TreeBuilder(HTMLParser):
    def __init__(self, root: Node) -> None:
        super().__init__(convert_charrefs=True)
        self.root = root
        self.open_elements: list[Node] = [root]

    @property
    def current(self) -> Node:
        return self.open_elements[-1]

    def handle_starttag(self, tag, attrs):
        attributes: dict[str, str | None] = {}
        for key, value in attrs:
            if key not in attributes:
                attributes[key] = value
        element = Element(tag, attributes)
        self.current.append_child(element)
        if tag not in VOID_ELEMENTS:
            self.open_elements.append(element)

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)
        if tag not in VOID_ELEMENTS and self.current.name == tag:
            self.open_elements.pop()

    def handle_endtag(self, tag):
        # Close up to the nearest open element with this name; stray end tags are ignored
        for i in range(len(self.open_elements) - 1, 0, -1):
            if self.open_elements[i].name == tag:
                del self.open_elements[i:]
                return

    def handle_data(self, data):
        if not data:
            return
        last = self.current.last_child
        if last is not None and last.name == "#text":
            last.data += data
        else:
            self.current.append_child(Text(data))

    def handle_comment(self, data):
        self.current.append_child(Comment(data))


def parse_fragment(markup: str) -> list[Node]:
    """Parse `markup` and return its top-level nodes, detached."""
    container = Node("#document-fragment")
    builder = _TreeBuilder(container)
    builder.feed(markup)
    builder.close()
    nodes = list(container.children)
    for node in nodes:
        container.remove_child(node)
    return nodes


def parse_document(markup: str) -> Document:
    """Parse `markup` into a `Document` holding its top-level nodes."""
    document = Document()
    builder = _TreeBuilder(document)
    builder.feed(markup)
    builder.close()
    return document
