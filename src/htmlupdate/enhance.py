"""Update-capable adapters for elements and collections.

`ensure_enhanced()` wraps an element in an `UpdatableElement` or a
collection in an `UpdatableCollection`, at most once per object. Which
objects have been enhanced is recorded in a side table owned by this module,
never on the objects themselves. The table holds weak references where the objects allow them: an
adapter lives as long as its caller keeps it, and enhancing the same object
after the adapter is gone builds a new one.

An external enhancement facility can be registered with
`register_enhancer()`; while one is registered it is used instead of the
local adapters.
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any, Protocol

from .applier import apply_to_element, apply_update
from .collection import materialize
from .node import is_element
from .orchestrator import ApplyResult, update_collection
from .policy import DEFAULT_POLICY, UpdatePolicy

logger = logging.getLogger(__name__)


class Enhancer(Protocol):
    def enhance_one(self, handle: Any) -> Any: ...

    def enhance_many(self, collection: Any) -> Any: ...


class _StrongRef:
    """Stands in for a weakref to an object that cannot be weakly referenced."""

    __slots__ = ("_obj",)

    def __init__(self, obj: Any) -> None:
        self._obj = obj

    def __call__(self) -> Any:
        return self._obj


def _ref(obj: Any, callback: Callable[[Any], None] | None = None) -> Callable[[], Any]:
    try:
        return weakref.ref(obj, callback)
    except TypeError:
        return _StrongRef(obj)


class _MarkerTable:
    """Identity-keyed record of enhanced objects and what they became.

    Entries are keyed by id() and hold the object and its enhanced form
    through weak references, so an entry goes away with either of them.
    Objects that cannot be weakly referenced (plain lists, tuples) are held
    strongly, which also keeps their id() from being reused.
    """

    def __init__(self) -> None:
        # id(obj) -> (ref to obj, ref to result, or None when obj is its own result)
        self._entries: dict[int, tuple[Callable[[], Any], Callable[[], Any] | None]] = {}

    def _discard(self, key: int, ref: Callable[[], Any]) -> None:
        entry = self._entries.get(key)
        if entry is not None and (entry[0] is ref or entry[1] is ref):
            del self._entries[key]

    def get(self, obj: Any) -> Any | None:
        key = id(obj)
        entry = self._entries.get(key)
        if entry is None or entry[0]() is not obj:
            return None
        result_ref = entry[1]
        if result_ref is None:
            return obj
        result = result_ref()
        if result is None:
            del self._entries[key]
        return result

    def mark(self, obj: Any, result: Any) -> None:
        key = id(obj)
        discard = partial(self._discard, key)
        self._entries[key] = (_ref(obj, discard), None if result is obj else _ref(result, discard))

    def mark_self(self, obj: Any) -> None:
        """Record `obj` as already enhanced, if it can be weakly referenced."""
        key = id(obj)
        try:
            obj_ref = weakref.ref(obj, partial(self._discard, key))
        except TypeError:
            return
        self._entries[key] = (obj_ref, None)


_markers = _MarkerTable()
_enhancer: Enhancer | None = None


def register_enhancer(enhancer: Enhancer) -> None:
    """Prefer `enhancer` over the local adapters from now on."""
    global _enhancer
    if not callable(getattr(enhancer, "enhance_one", None)) or not callable(getattr(enhancer, "enhance_many", None)):
        msg = "Enhancer must provide enhance_one() and enhance_many()"
        raise TypeError(msg)
    _enhancer = enhancer


def unregister_enhancer() -> None:
    global _enhancer
    _enhancer = None


def get_enhancer() -> Enhancer | None:
    return _enhancer


def _merge(descriptor: Any, changes: dict[str, Any]) -> Any:
    if not changes:
        return {} if descriptor is None else descriptor
    merged = dict(descriptor) if descriptor else {}
    merged.update(changes)
    return merged


class UpdatableElement:
    """An element plus an ``update()`` method.

    Attribute reads and writes pass through to the wrapped element. If the
    element already has an ``update`` callable of its own, ``update()`` calls
    that instead of the local applier.
    """

    __slots__ = ("__weakref__", "_element", "_policy")

    def __init__(self, element: Any, *, policy: UpdatePolicy = DEFAULT_POLICY) -> None:
        object.__setattr__(self, "_element", element)
        object.__setattr__(self, "_policy", policy)

    @property
    def element(self) -> Any:
        return self._element

    @property
    def __wrapped__(self) -> Any:
        return self._element

    def update(self, descriptor: Mapping[Any, Any] | None = None, /, **changes: Any) -> UpdatableElement:
        merged = _merge(descriptor, changes)
        own_update = getattr(self._element, "update", None)
        if callable(own_update):
            own_update(merged)
        else:
            apply_update(self._element, merged, policy=self._policy)
        return self

    def __getattr__(self, name: str) -> Any:
        return getattr(self._element, name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._element, name, value)

    def __repr__(self) -> str:
        return f"UpdatableElement({self._element!r})"


class UpdatableCollection:
    """A collection plus an index-aware ``update()`` method.

    ``update({"0": {...}, "-1": {...}, "title": "x"})`` applies ``title`` to
    every element and the indexed entries to the first and last one. The
    result of the last call is kept in `last_result`.
    """

    __slots__ = ("__weakref__", "_collection", "_policy", "last_result")

    def __init__(self, collection: Any, *, policy: UpdatePolicy = DEFAULT_POLICY) -> None:
        self._collection = collection
        self._policy = policy
        self.last_result: ApplyResult | None = None

    @property
    def collection(self) -> Any:
        return self._collection

    @property
    def __wrapped__(self) -> Any:
        return self._collection

    def update(self, descriptor: Mapping[Any, Any] | None = None, /, **changes: Any) -> UpdatableCollection:
        merged = _merge(descriptor, changes)
        self.last_result = update_collection(
            self._collection,
            merged,
            partial(apply_to_element, policy=self._policy),
        )
        return self

    def __len__(self) -> int:
        return len(self._collection)

    def __getitem__(self, index):
        return self._collection[index]

    def __iter__(self):
        return iter(self._collection)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._collection, name)

    def __repr__(self) -> str:
        return f"UpdatableCollection({self._collection!r})"


def _is_collection(obj: Any) -> bool:
    if isinstance(obj, (str, bytes, bytearray, Mapping)) or is_element(obj):
        return False
    return hasattr(obj, "__iter__") or (hasattr(obj, "__len__") and hasattr(obj, "__getitem__"))


def is_enhanced(obj: Any) -> bool:
    if isinstance(obj, (UpdatableElement, UpdatableCollection)):
        return True
    return _markers.get(obj) is not None


def ensure_enhanced(obj: Any, *, policy: UpdatePolicy = DEFAULT_POLICY) -> Any:
    """Return the update-capable form of `obj`, creating it only once.

    Elements become `UpdatableElement`, collections `UpdatableCollection`
    (or whatever the registered enhancer returns). Anything else is returned
    unchanged.
    """
    if obj is None or isinstance(obj, (UpdatableElement, UpdatableCollection)):
        return obj

    existing = _markers.get(obj)
    if existing is not None:
        return existing

    enhancer = _enhancer
    if is_element(obj):
        if enhancer is not None:
            logger.debug("Delegating enhancement of %r to %r", obj, enhancer)
            result = enhancer.enhance_one(obj)
        else:
            result = UpdatableElement(obj, policy=policy)
    elif _is_collection(obj):
        if enhancer is not None:
            logger.debug("Delegating enhancement of %r to %r", obj, enhancer)
            result = enhancer.enhance_many(obj)
        else:
            result = UpdatableCollection(obj, policy=policy)
    else:
        logger.debug("Not enhancing %r: neither an element nor a collection", obj)
        return obj

    _markers.mark(obj, result)
    if enhancer is not None and result is not obj:
        _markers.mark_self(result)
    return result


def enhance_all(elements: Any, *, policy: UpdatePolicy = DEFAULT_POLICY) -> list[Any]:
    """Enhance each element of `elements` individually."""
    return [ensure_enhanced(element, policy=policy) for element in materialize(elements)]
