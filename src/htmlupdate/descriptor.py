"""Update descriptor classification and index resolution.

A descriptor key is either an index key, targeting one element of a
collection, or a bulk key, applied to every element. The split is exact: a
string key is an index key only when it is the canonical decimal spelling of
an integer, so ``"0"`` and ``"-1"`` are indices while ``"01"``, ``"1.5"``,
``"+1"`` and ``"-0"`` are ordinary bulk keys. Integer-looking keys can
therefore never name a bulk property.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def is_index_key(key: object) -> bool:
    """True if `key` addresses a collection position."""
    if isinstance(key, bool):
        return False
    if isinstance(key, int):
        return True
    if not isinstance(key, str):
        return False
    try:
        number = int(key)
    except ValueError:
        return False
    # Rejects leading zeros, signs, whitespace and digit separators
    return str(number) == key


def index_of(key: int | str) -> int:
    """Convert an index key to an int."""
    if not is_index_key(key):
        msg = f"{key!r} is not an index key"
        raise ValueError(msg)
    return int(key)


def resolve_index(index: int, length: int) -> int:
    """Resolve a possibly negative index against `length`.

    ``resolve_index(-1, 5) == 4``. The result is not clamped and may still be
    out of range; check it with `is_valid_index`.
    """
    if index < 0:
        return length + index
    return index


def is_valid_index(index: int, length: int) -> bool:
    return 0 <= index < length


@dataclass(frozen=True, slots=True)
class ClassifiedDescriptor:
    indexed: dict[Any, Any] = field(default_factory=dict)
    bulk: dict[Any, Any] = field(default_factory=dict)

    @property
    def has_indexed(self) -> bool:
        return bool(self.indexed)

    @property
    def has_bulk(self) -> bool:
        return bool(self.bulk)


def classify(descriptor: Mapping[Any, Any]) -> ClassifiedDescriptor:
    """Split `descriptor` into indexed and bulk entries, keeping key order."""
    if not isinstance(descriptor, Mapping):
        msg = f"Descriptor must be a mapping, not {type(descriptor).__name__}"
        raise TypeError(msg)

    indexed: dict[Any, Any] = {}
    bulk: dict[Any, Any] = {}
    for key, value in descriptor.items():
        if is_index_key(key):
            indexed[key] = value
        else:
            bulk[key] = value
    return ClassifiedDescriptor(indexed=indexed, bulk=bulk)
