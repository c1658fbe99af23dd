"""HTML serialization for htmlupdate element trees."""

from __future__ import annotations

from typing import Any

from .constants import VOID_ELEMENTS

_RAW_TEXT_ELEMENTS = frozenset({"script", "style"})
_PREFORMATTED_ELEMENTS = frozenset({"pre", "textarea"})


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr_value(value: str) -> str:
    return value.replace("&", "&amp;").replace('"', "&quot;")


def serialize_start_tag(name: str, attrs: dict[str, str | None] | None) -> str:
    parts: list[str] = ["<", name]
    for key, value in (attrs or {}).items():
        if value is None or value == "":
            parts.extend([" ", key])
        else:
            parts.extend([" ", key, '="', _escape_attr_value(str(value)), '"'])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def to_html(node: Any, indent: int = 0, indent_size: int = 2, *, pretty: bool = False) -> str:
    """Convert node to an HTML string."""
    if node.name in {"#document", "#document-fragment"}:
        parts = [_node_to_html(child, indent, indent_size, pretty, in_raw=False) for child in node.children]
        parts = [p for p in parts if p]
        return "\n".join(parts) if pretty else "".join(parts)
    return _node_to_html(node, indent, indent_size, pretty, in_raw=False)


def _node_to_html(node: Any, indent: int, indent_size: int, pretty: bool, *, in_raw: bool) -> str:
    """Helper to convert a node to HTML."""
    prefix = " " * (indent * indent_size) if pretty else ""
    name = node.name

    # Text node
    if name == "#text":
        text = node.data
        if in_raw:
            return text
        if pretty:
            text = text.strip()
            return f"{prefix}{_escape_text(text)}" if text else ""
        return _escape_text(text)

    # Comment node
    if name == "#comment":
        return f"{prefix}<!--{node.data}-->"

    # Nested container nodes render their children
    if name in {"#document", "#document-fragment"}:
        parts = [_node_to_html(child, indent, indent_size, pretty, in_raw=in_raw) for child in node.children]
        return ("\n" if pretty else "").join(p for p in parts if p)

    start = prefix + serialize_start_tag(name, node.attributes)

    # Void elements
    if name in VOID_ELEMENTS:
        return start

    children = node.children
    if not children:
        return f"{start}{serialize_end_tag(name)}"

    raw = name in _RAW_TEXT_ELEMENTS
    all_text = all(c.name == "#text" for c in children)

    # Inline rendering when there is nothing to indent
    if not pretty or all_text or name in _PREFORMATTED_ELEMENTS:
        inner = "".join(_node_to_html(c, 0, indent_size, False, in_raw=raw) for c in children)
        return f"{start}{inner}{serialize_end_tag(name)}"

    parts = [start]
    for child in children:
        child_html = _node_to_html(child, indent + 1, indent_size, pretty, in_raw=raw)
        if child_html:
            parts.append(child_html)
    parts.append(f"{prefix}{serialize_end_tag(name)}")
    return "\n".join(parts)
