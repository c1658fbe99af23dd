"""``data-*`` attribute access for element nodes."""

from __future__ import annotations

import re
from collections.abc import Iterator, MutableMapping

_DASH_LOWER = re.compile(r"-([a-z])")
_UPPER = re.compile(r"([A-Z])")


def key_to_attribute(key: str) -> str:
    """``userId`` -> ``data-user-id``."""
    if not isinstance(key, str):
        msg = f"Dataset key must be a string, not {type(key).__name__}"
        raise TypeError(msg)
    if _DASH_LOWER.search(key):
        msg = f"Dataset key {key!r} must not contain a dash followed by a lowercase letter"
        raise ValueError(msg)
    return "data-" + _UPPER.sub(lambda m: "-" + m.group(1).lower(), key)


def attribute_to_key(name: str) -> str | None:
    """``data-user-id`` -> ``userId``; None for other attributes."""
    if not name.startswith("data-"):
        return None
    return _DASH_LOWER.sub(lambda m: m.group(1).upper(), name[5:])


class Dataset(MutableMapping):
    __slots__ = ("_element",)

    def __init__(self, element):
        self._element = element

    def __getitem__(self, key: str) -> str:
        attr = key_to_attribute(key)
        if not self._element.has_attribute(attr):
            raise KeyError(key)
        value = self._element.get_attribute(attr)
        return "" if value is None else value

    def __setitem__(self, key: str, value: object) -> None:
        if value is None:
            self._element.remove_attribute(key_to_attribute(key))
            return
        self._element.set_attribute(key_to_attribute(key), value)

    def __delitem__(self, key: str) -> None:
        attr = key_to_attribute(key)
        if not self._element.has_attribute(attr):
            raise KeyError(key)
        self._element.remove_attribute(attr)

    def __iter__(self) -> Iterator[str]:
        keys = []
        for name in self._element.attributes:
            key = attribute_to_key(name)
            if key is not None:
                keys.append(key)
        return iter(keys)

    def __len__(self) -> int:
        return sum(1 for name in self._element.attributes if name.startswith("data-"))

    def __repr__(self) -> str:
        return f"Dataset({dict(self)!r})"
