"""Inline style access for element nodes.

`StyleDeclaration` is a live mutable mapping over an element's ``style``
attribute. Nothing is cached: every read parses the attribute and every write
serializes it back, so the attribute stays the single source of truth.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, MutableMapping

from .errors import StylePropertyError

_PROPERTY_NAME = re.compile(r"^-?[a-z][a-z0-9-]*$")
_CUSTOM_PROPERTY_NAME = re.compile(r"^--[^\s:;{}!]+$")
_CAMEL_BOUNDARY = re.compile(r"([A-Z])")

_SPECIAL_NAMES = {
    "cssFloat": "float",
    "css_float": "float",
}


def normalize_property_name(name: str) -> str:
    """Return the CSS spelling of a style property name.

    Accepts kebab-case (``background-color``), camelCase
    (``backgroundColor``, ``WebkitTransition``) and snake_case
    (``background_color``). Custom properties (``--accent``) are kept
    verbatim.
    """
    if not isinstance(name, str):
        msg = f"Style property name must be a string, not {type(name).__name__}"
        raise StylePropertyError(msg)

    if name.startswith("--"):
        if not _CUSTOM_PROPERTY_NAME.match(name):
            msg = f"Invalid custom property name: {name!r}"
            raise StylePropertyError(msg)
        return name

    special = _SPECIAL_NAMES.get(name)
    if special is not None:
        return special

    converted = name.replace("_", "-")
    if any(ch.isupper() for ch in converted):
        converted = _CAMEL_BOUNDARY.sub(r"-\1", converted).lower()
    if not _PROPERTY_NAME.match(converted):
        msg = f"Invalid style property name: {name!r}"
        raise StylePropertyError(msg)
    return converted


def _split_declarations(text: str) -> list[str]:
    # Split on ';' outside quotes and parentheses, e.g. url("a;b")
    parts: list[str] = []
    buf: list[str] = []
    quote = ""
    depth = 0
    for ch in text:
        if quote:
            if ch == quote:
                quote = ""
        elif ch in {'"', "'"}:
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")" and depth:
            depth -= 1
        elif ch == ";" and not depth:
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf))
    return parts


def parse_style(text: str | None) -> dict[str, tuple[str, str]]:
    """Parse a style attribute into ``{name: (value, priority)}``.

    Malformed declarations are dropped, like a browser would.
    """
    declarations: dict[str, tuple[str, str]] = {}
    if not text:
        return declarations
    for chunk in _split_declarations(text):
        name, sep, value = chunk.partition(":")
        if not sep:
            continue
        name = name.strip()
        value = value.strip()
        if not name or not value:
            continue
        if not name.startswith("--"):
            name = name.lower()
        priority = ""
        lowered = value.lower()
        if lowered.endswith("!important"):
            value = value[: -len("!important")].rstrip()
            priority = "important"
        declarations[name] = (value, priority)
    return declarations


def serialize_style(declarations: dict[str, tuple[str, str]]) -> str:
    parts = []
    for name, (value, priority) in declarations.items():
        if priority:
            parts.append(f"{name}: {value} !{priority};")
        else:
            parts.append(f"{name}: {value};")
    return " ".join(parts)


def normalize_property_value(value: object) -> str:
    """Return the text a style property value is written as."""
    if isinstance(value, bool):
        msg = f"Style value must be a string or number, not {value!r}"
        raise StylePropertyError(msg)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    if any(ch in text for ch in ";{}"):
        msg = f"Invalid style value: {text!r}"
        raise StylePropertyError(msg)
    return text


class StyleDeclaration(MutableMapping):
    __slots__ = ("_element",)

    def __init__(self, element):
        object.__setattr__(self, "_element", element)

    def _read(self) -> dict[str, tuple[str, str]]:
        return parse_style(self._element.get_attribute("style"))

    def _write(self, declarations: dict[str, tuple[str, str]]) -> None:
        if declarations:
            self._element.set_attribute("style", serialize_style(declarations))
        else:
            self._element.remove_attribute("style")

    @property
    def css_text(self) -> str:
        return serialize_style(self._read())

    @css_text.setter
    def css_text(self, text: str) -> None:
        self._write(parse_style(text))

    def get_property_value(self, name: str) -> str:
        entry = self._read().get(normalize_property_name(name))
        return entry[0] if entry else ""

    def get_property_priority(self, name: str) -> str:
        entry = self._read().get(normalize_property_name(name))
        return entry[1] if entry else ""

    def set_property(self, name: str, value: object, priority: str = "") -> None:
        """Set one property. An empty value removes it."""
        prop = normalize_property_name(name)
        if value is None:
            self.remove_property(prop)
            return
        text = normalize_property_value(value)
        if not text:
            self.remove_property(prop)
            return
        if priority not in {"", "important"}:
            msg = f"Invalid style priority: {priority!r}"
            raise StylePropertyError(msg)
        declarations = self._read()
        declarations[prop] = (text, priority)
        self._write(declarations)

    def remove_property(self, name: str) -> str:
        prop = normalize_property_name(name)
        declarations = self._read()
        old = declarations.pop(prop, None)
        if old is None:
            return ""
        self._write(declarations)
        return old[0]

    def __getitem__(self, name: str) -> str:
        entry = self._read().get(normalize_property_name(name))
        if entry is None:
            raise KeyError(name)
        return entry[0]

    def __setitem__(self, name: str, value: object) -> None:
        self.set_property(name, value)

    def __delitem__(self, name: str) -> None:
        prop = normalize_property_name(name)
        declarations = self._read()
        if prop not in declarations:
            raise KeyError(name)
        del declarations[prop]
        self._write(declarations)

    def __iter__(self) -> Iterator[str]:
        return iter(self._read())

    def __len__(self) -> int:
        return len(self._read())

    # Attribute-style access: style.background_color = "red"
    def __getattr__(self, name: str) -> str:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_property_value(name)

    def __setattr__(self, name: str, value: object) -> None:
        if name.startswith("_") or name == "css_text":
            object.__setattr__(self, name, value)
            return
        self.set_property(name, value)

    def __repr__(self) -> str:
        return f"StyleDeclaration({self.css_text!r})"
