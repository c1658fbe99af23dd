"""Collection updates with bulk and per-index entries.

`update_collection()` snapshots the collection once, applies every bulk
entry to every element, and only then applies the indexed entries, so an
indexed entry always wins over a bulk entry for the same element.
Element-level problems are counted in the result, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .collection import materialize
from .descriptor import classify, index_of, is_valid_index, resolve_index
from .errors import _ERROR_SINK, UpdateError, emit_error
from .node import is_element

logger = logging.getLogger(__name__)

ApplyFn = Callable[[Any, Mapping[Any, Any]], Any]


@dataclass(slots=True)
class IndexedStats:
    successful: int = 0
    failed: int = 0
    out_of_bounds: int = 0


@dataclass(slots=True)
class UpdateStats:
    collection_length: int = 0
    bulk_update_count: int = 0
    indexed_stats: IndexedStats = field(default_factory=IndexedStats)


@dataclass(slots=True)
class ApplyResult:
    success: bool
    is_empty: bool = False
    error: str | None = None
    stats: UpdateStats | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render with the camelCase keys used by browser-side callers."""
        out: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            out["error"] = self.error
        if self.success:
            out["isEmpty"] = self.is_empty
        if self.stats is None:
            out["stats"] = None
        else:
            indexed = self.stats.indexed_stats
            out["stats"] = {
                "collectionLength": self.stats.collection_length,
                "bulkUpdateCount": self.stats.bulk_update_count,
                "indexedStats": {
                    "successful": indexed.successful,
                    "failed": indexed.failed,
                    "outOfBounds": indexed.out_of_bounds,
                },
            }
        return out


def _structural_failure(message: str) -> ApplyResult:
    logger.warning("update_collection: %s", message)
    emit_error("structural-input-error", message=message)
    return ApplyResult(success=False, error=message)


def _apply_bulk(elements: list[Any], bulk: dict[Any, Any], apply_fn: ApplyFn) -> int:
    count = 0
    for position, element in enumerate(elements):
        if not is_element(element):
            continue
        try:
            apply_fn(element, bulk)
        except Exception as exc:
            logger.warning("Error applying bulk update to element %d: %s", position, exc)
            emit_error("per-key-application-error", index=position, message=str(exc))
            continue
        count += 1
    return count


def _apply_indexed(elements: list[Any], indexed: dict[Any, Any], apply_fn: ApplyFn) -> IndexedStats:
    stats = IndexedStats()
    length = len(elements)

    for key, updates in indexed.items():
        resolved = resolve_index(index_of(key), length)

        if not is_valid_index(resolved, length):
            logger.warning("Index %s (resolved to %d) is out of bounds (collection length: %d)", key, resolved, length)
            emit_error("index-out-of-bounds", key=key, index=resolved, message=f"collection length is {length}")
            stats.out_of_bounds += 1
            continue

        element = elements[resolved]
        if not is_element(element):
            logger.warning("Element at index %s is not a valid element", key)
            emit_error("invalid-element-slot", key=key, index=resolved, message="not an element")
            stats.failed += 1
            continue

        if not isinstance(updates, Mapping):
            logger.warning("Updates for index %s must be a mapping, got %s", key, type(updates).__name__)
            emit_error("invalid-element-slot", key=key, index=resolved, message="nested descriptor is not a mapping")
            stats.failed += 1
            continue

        try:
            apply_fn(element, updates)
        except Exception as exc:
            logger.warning("Error applying updates to index %s: %s", key, exc)
            emit_error("invalid-element-slot", key=key, index=resolved, message=str(exc))
            stats.failed += 1
            continue
        stats.successful += 1

    return stats


def update_collection(
    collection: Any,
    descriptor: Mapping[Any, Any],
    apply_fn: ApplyFn | None,
    *,
    errors: list[UpdateError] | None = None,
) -> ApplyResult:
    """Apply `descriptor` across `collection` using `apply_fn` per element.

    Structural problems (no collection, a descriptor that is not a mapping,
    a missing apply function) come back as ``ApplyResult(success=False)``.
    """
    token = _ERROR_SINK.set(errors) if errors is not None else None
    try:
        if collection is None:
            return _structural_failure("Null collection")
        if not isinstance(descriptor, Mapping):
            return _structural_failure("Invalid updates object")
        if not callable(apply_fn):
            return _structural_failure("Update function not provided")

        try:
            elements = materialize(collection)
        except TypeError as exc:
            return _structural_failure(str(exc))

        if not elements:
            logger.info("update_collection called on empty collection")
            return ApplyResult(success=True, is_empty=True, stats=UpdateStats())

        separated = classify(descriptor)
        stats = UpdateStats(collection_length=len(elements))

        # Bulk first, for every element, so indexed entries override it
        if separated.has_bulk:
            stats.bulk_update_count = _apply_bulk(elements, separated.bulk, apply_fn)

        if separated.has_indexed:
            stats.indexed_stats = _apply_indexed(elements, separated.indexed, apply_fn)

        return ApplyResult(success=True, is_empty=False, stats=stats)
    finally:
        if token is not None:
            _ERROR_SINK.reset(token)
