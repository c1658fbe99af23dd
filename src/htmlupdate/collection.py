"""Element collections.

`ElementList` is a fixed snapshot. `LiveElementList` re-runs its query on
every access, so its length follows the tree as it changes; code that needs a
stable view across several steps must `materialize()` it first.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any


class ElementList(Sequence):
    __slots__ = ("__weakref__", "_items")

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._items = tuple(items)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ElementList(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def item(self, index: int) -> Any | None:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ElementList):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return list(self._items) == list(other)
        return NotImplemented

    __hash__ = None  # Unhashable since we define __eq__

    def __repr__(self) -> str:
        return f"ElementList({list(self._items)!r})"


class LiveElementList(Sequence):
    """Elements under `root` matching `predicate`, recomputed on each access."""

    __slots__ = ("__weakref__", "_predicate", "_root")

    def __init__(self, root: Any, predicate: Callable[[Any], bool]) -> None:
        self._root = root
        self._predicate = predicate

    def _current(self) -> list[Any]:
        return [element for element in self._root.iter_elements() if self._predicate(element)]

    def __getitem__(self, index):
        current = self._current()
        if isinstance(index, slice):
            return ElementList(current[index])
        return current[index]

    def __len__(self) -> int:
        return len(self._current())

    def __iter__(self) -> Iterator[Any]:
        # One query per iteration, so a single pass sees a consistent list
        return iter(self._current())

    def item(self, index: int) -> Any | None:
        current = self._current()
        if 0 <= index < len(current):
            return current[index]
        return None

    def __repr__(self) -> str:
        return f"LiveElementList(length={len(self)})"


def materialize(collection: Any) -> list[Any]:
    """Snapshot `collection` into a list.

    Adapters exposing ``__wrapped__`` are unwrapped first. Any iterable works;
    objects with only ``__len__`` and ``__getitem__`` are read by index.
    Strings, bytes and mappings are rejected with TypeError.
    """
    if collection is None:
        return []

    seen = set()
    while hasattr(collection, "__wrapped__") and id(collection) not in seen:
        seen.add(id(collection))
        collection = collection.__wrapped__

    if isinstance(collection, (str, bytes, bytearray, Mapping)):
        msg = f"{type(collection).__name__} is not an element collection"
        raise TypeError(msg)
    if isinstance(collection, (list, tuple)):
        return list(collection)
    if hasattr(collection, "__iter__"):
        return list(collection)
    if hasattr(collection, "__len__") and hasattr(collection, "__getitem__"):
        return [collection[i] for i in range(len(collection))]
    msg = f"{type(collection).__name__} is not an element collection"
    raise TypeError(msg)
