"""Apply one update descriptor to one element."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .errors import _ERROR_SINK, UpdateError
from .operations import apply_operation, compile_update, report_key_failure
from .policy import DEFAULT_POLICY, UpdatePolicy

logger = logging.getLogger(__name__)


def apply_update(
    element: Any,
    descriptor: Mapping[Any, Any],
    *,
    policy: UpdatePolicy = DEFAULT_POLICY,
    errors: list[UpdateError] | None = None,
) -> Any:
    """Apply `descriptor` to `element` and return `element`.

    Every key is classified first, then the operations run in descriptor
    order. A key that raises is logged (and appended to `errors` when given)
    and the remaining keys are still applied, unless `policy.strict` is set.
    """
    if element is None or not isinstance(descriptor, Mapping):
        logger.warning("apply_update requires an element and a mapping descriptor, got %r", type(descriptor).__name__)
        return element

    token = _ERROR_SINK.set(errors) if errors is not None else None
    try:
        for op in compile_update(element, descriptor, policy=policy):
            try:
                apply_operation(element, op)
            except Exception as exc:
                report_key_failure(op.key, exc, policy)
    finally:
        if token is not None:
            _ERROR_SINK.reset(token)
    return element


def apply_to_element(element: Any, descriptor: Mapping[Any, Any], *, policy: UpdatePolicy = DEFAULT_POLICY) -> Any:
    """Apply through the element's own ``update`` capability when it has one."""
    own_update = getattr(element, "update", None)
    if callable(own_update):
        own_update(descriptor)
        return element
    return apply_update(element, descriptor, policy=policy)
