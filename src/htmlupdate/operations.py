"""Descriptor keys as tagged update operations.

`compile_update()` turns each key of a descriptor into one operation before
anything is mutated; `apply_operation()` performs one of them. Keys are
matched in a fixed order, first match wins:

1. ``style`` with a mapping -> StyleOp
2. ``class_list`` with a mapping -> ClassListOp
3. ``attrs``/``attributes`` with a mapping, ``set_attribute``,
   ``remove_attribute`` -> AttributeOp
4. ``dataset`` with a mapping -> DatasetOp
5. ``add_event_listener``/``remove_event_listener`` -> EventOp
6. ``on<type>`` with a callable -> PropertyOp (handler slot)
7. a public method of the element -> MethodCallOp
8. a settable field of the element -> PropertyOp
9. a primitive value -> FallbackOp (generic attribute)

A name that is both a method and a settable field is treated as a method.
"""

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from .constants import CLASS_LIST_METHODS
from .errors import StrictUpdateError, emit_error
from .events import is_event_handler_name
from .node import stringify_value
from .policy import DEFAULT_POLICY, UpdatePolicy
from .style import normalize_property_name, normalize_property_value

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_MISSING = object()

_CAMEL_WORD = re.compile(r"(.)([A-Z][a-z]+)")
_CAMEL_TAIL = re.compile(r"([a-z0-9])([A-Z])")


@dataclass(frozen=True, slots=True)
class StyleOp:
    kind: Literal["style"]
    key: Any
    properties: tuple[tuple[str, Any], ...]


@dataclass(frozen=True, slots=True)
class ClassListOp:
    kind: Literal["class_list"]
    key: Any
    actions: tuple[tuple[str, tuple[Any, ...]], ...]


@dataclass(frozen=True, slots=True)
class AttributeOp:
    kind: Literal["attribute"]
    key: Any
    set_items: tuple[tuple[str, Any], ...]
    remove_names: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DatasetOp:
    kind: Literal["dataset"]
    key: Any
    entries: tuple[tuple[str, Any], ...]


@dataclass(frozen=True, slots=True)
class EventOp:
    kind: Literal["event"]
    key: Any
    action: Literal["add", "remove"]
    listeners: tuple[tuple[str, Callable[..., Any], Any], ...]


@dataclass(frozen=True, slots=True)
class MethodCallOp:
    kind: Literal["method_call"]
    key: Any
    name: str
    args: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class PropertyOp:
    kind: Literal["property"]
    key: Any
    name: str
    value: Any


@dataclass(frozen=True, slots=True)
class FallbackOp:
    kind: Literal["fallback"]
    key: Any
    name: str
    value: Any


UpdateOperation = StyleOp | ClassListOp | AttributeOp | DatasetOp | EventOp | MethodCallOp | PropertyOp | FallbackOp


def camel_to_snake(name: str) -> str:
    """``textContent`` -> ``text_content``, ``innerHTML`` -> ``inner_html``."""
    return _CAMEL_TAIL.sub(r"\1_\2", _CAMEL_WORD.sub(r"\1_\2", name)).lower()


def _is_pair_like(value: object) -> bool:
    return isinstance(value, (list, tuple))


def _is_primitive(value: object) -> bool:
    return isinstance(value, (str, int, float, bool))


def _names(value: object) -> tuple[Any, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def _call_args(value: object) -> tuple[Any, ...]:
    # A list or tuple is spread, None means no arguments
    if value is None:
        return ()
    if _is_pair_like(value):
        return tuple(value)
    return (value,)


def _lookup(element: Any, name: str) -> Any:
    try:
        return inspect.getattr_static(element, name)
    except AttributeError:
        return _MISSING


def _has_handler_slot(element: Any, name: str) -> bool:
    if not is_event_handler_name(name):
        return False
    has_slot = getattr(element, "has_event_handler_slot", None)
    if callable(has_slot):
        return bool(has_slot(name))
    return _lookup(element, name) is not _MISSING


def _member_name(element: Any, key: object, policy: UpdatePolicy) -> str | None:
    """The element member a bulk key refers to, if any."""
    if not isinstance(key, str) or not key or key.startswith("_"):
        return None
    candidates = [key]
    if policy.camel_case_aliases:
        snake = camel_to_snake(key)
        if snake != key:
            candidates.append(snake)
    for name in candidates:
        if _lookup(element, name) is not _MISSING or _has_handler_slot(element, name):
            return name
    return None


def _is_method(element: Any, name: str) -> bool:
    # A handler stored on the instance is a value to replace, not a method to call
    if is_event_handler_name(name) and _lookup(type(element), name) is _MISSING:
        return False
    static = _lookup(element, name)
    if static is _MISSING or isinstance(static, (property, type)):
        return False
    if isinstance(static, (staticmethod, classmethod)):
        return True
    if inspect.isfunction(static) or inspect.ismethoddescriptor(static) or inspect.isbuiltin(static):
        return True
    if inspect.ismemberdescriptor(static) or inspect.isgetsetdescriptor(static):
        return False
    return callable(static)


def _is_settable_field(element: Any, name: str) -> bool:
    if name in getattr(element, "protected_fields", ()):
        return False
    static = _lookup(element, name)
    if static is _MISSING:
        return _has_handler_slot(element, name)
    if isinstance(static, property):
        return static.fset is not None
    if inspect.ismemberdescriptor(static):
        return True
    if inspect.isgetsetdescriptor(static) or inspect.isfunction(static) or isinstance(static, type):
        return False
    return True


def _style_properties(value: Mapping[Any, Any]) -> tuple[tuple[str, Any], ...]:
    # Checked up front so one bad property leaves the whole map unwritten
    properties = []
    for name, v in value.items():
        normalize_property_name(name)
        if v is not None:
            normalize_property_value(v)
            properties.append((name, v))
    return tuple(properties)


def _listeners(value: Any, key: object) -> tuple[tuple[str, Any, Any], ...]:
    if _is_pair_like(value):
        if len(value) < 2:
            msg = "Listener list must be [type, handler] or [type, handler, options]"
            raise ValueError(msg)
        return ((str(value[0]), value[1], value[2] if len(value) > 2 else None),)

    if isinstance(value, Mapping):
        listeners = []
        for event_type, handler in value.items():
            if callable(handler):
                listeners.append((str(event_type), handler, None))
            elif _is_pair_like(handler) and handler and callable(handler[0]):
                listeners.append((str(event_type), handler[0], handler[1] if len(handler) > 1 else None))
            else:
                logger.warning("Skipping %r listener for %r: not a handler or [handler, options]", event_type, key)
                emit_error("unsupported-value", key=key, message=f"invalid listener for {event_type!r}")
        return tuple(listeners)

    msg = f"Invalid event listener format: {type(value).__name__}"
    raise TypeError(msg)


def classify_key(element: Any, key: Any, value: Any, policy: UpdatePolicy = DEFAULT_POLICY) -> UpdateOperation | None:
    """Classify one descriptor entry. Returns None (after logging) when the
    entry cannot be applied to `element` at all."""
    reserved = policy.reserved_keys.get(key) if isinstance(key, str) else None

    if reserved == "style" and isinstance(value, Mapping):
        return StyleOp(
            kind="style",
            key=key,
            properties=_style_properties(value),
        )

    if reserved == "class_list" and isinstance(value, Mapping):
        return ClassListOp(
            kind="class_list",
            key=key,
            actions=tuple((str(method), _names(names)) for method, names in value.items()),
        )

    if reserved == "attrs" and isinstance(value, Mapping):
        set_items = []
        remove_names = []
        for name, v in value.items():
            if v is None or v is False:
                remove_names.append(name)
            else:
                set_items.append((name, v))
        return AttributeOp(kind="attribute", key=key, set_items=tuple(set_items), remove_names=tuple(remove_names))

    if reserved == "set_attribute":
        if _is_pair_like(value) and len(value) >= 2:
            return AttributeOp(kind="attribute", key=key, set_items=((value[0], value[1]),), remove_names=())
        if isinstance(value, Mapping):
            return AttributeOp(kind="attribute", key=key, set_items=tuple(value.items()), remove_names=())
        msg = "set_attribute expects a [name, value] pair or a mapping"
        raise TypeError(msg)

    if reserved == "remove_attribute":
        return AttributeOp(kind="attribute", key=key, set_items=(), remove_names=_names(value))

    if reserved == "dataset" and isinstance(value, Mapping):
        return DatasetOp(kind="dataset", key=key, entries=tuple(value.items()))

    if reserved in {"add_event_listener", "remove_event_listener"}:
        return EventOp(
            kind="event",
            key=key,
            action="add" if reserved == "add_event_listener" else "remove",
            listeners=_listeners(value, key),
        )

    if is_event_handler_name(key) and callable(value) and _lookup(type(element), key) is _MISSING:
        return PropertyOp(kind="property", key=key, name=key, value=value)

    name = _member_name(element, key, policy)
    if name is not None:
        if _is_method(element, name):
            return MethodCallOp(
                kind="method_call",
                key=key,
                name=name,
                args=_call_args(value),
            )
        if _is_settable_field(element, name):
            return PropertyOp(kind="property", key=key, name=name, value=value)

    if _is_primitive(value) and policy.attribute_fallback:
        return FallbackOp(kind="fallback", key=key, name=str(key), value=value)

    logger.warning("Cannot apply property %r to %r", key, element)
    emit_error("unsupported-value", key=key, message=f"cannot apply {type(value).__name__} value")
    return None


def report_key_failure(key: Any, exc: Exception, policy: UpdatePolicy) -> None:
    if policy.strict:
        raise StrictUpdateError(key, exc) from exc
    logger.warning("Error updating property %r: %s", key, exc)
    emit_error("per-key-application-error", key=key, message=str(exc))


def compile_update(element: Any, descriptor: Mapping[Any, Any], *, policy: UpdatePolicy = DEFAULT_POLICY) -> list[UpdateOperation]:
    """Classify every entry of `descriptor` against `element`.

    An entry that fails to classify is reported and left out; the others are
    still returned.
    """
    compiled: list[UpdateOperation] = []
    for key, value in descriptor.items():
        try:
            op = classify_key(element, key, value, policy)
        except Exception as exc:
            report_key_failure(key, exc, policy)
            continue
        if op is not None:
            compiled.append(op)
    return compiled


def _apply_class_list(element: Any, op: ClassListOp) -> None:
    class_list = element.class_list
    for method, names in op.actions:
        if method == "add":
            class_list.add(*names)
        elif method == "remove":
            class_list.remove(*names)
        elif method == "toggle":
            for name in names:
                class_list.toggle(name)
        elif method == "replace":
            if len(names) == 2:
                class_list.replace(names[0], names[1])
            else:
                logger.debug("class_list.replace needs exactly two names, got %r", names)
        elif method == "contains":
            for name in names:
                logger.debug("class_list.contains(%r): %s", name, class_list.contains(name))
        else:
            logger.warning("Unknown class_list method %r (expected one of %s)", method, ", ".join(CLASS_LIST_METHODS))


def apply_operation(element: Any, op: UpdateOperation) -> None:
    """Perform one compiled operation on `element`."""
    kind = op.kind
    if kind == "style":
        style = element.style
        for name, value in op.properties:
            style[name] = value
    elif kind == "class_list":
        _apply_class_list(element, op)
    elif kind == "attribute":
        for name, value in op.set_items:
            element.set_attribute(name, stringify_value(value))
        for name in op.remove_names:
            element.remove_attribute(name)
    elif kind == "dataset":
        dataset = element.dataset
        for name, value in op.entries:
            dataset[name] = value
    elif kind == "event":
        register = element.add_event_listener if op.action == "add" else element.remove_event_listener
        for event_type, handler, options in op.listeners:
            if options is None:
                register(event_type, handler)
            else:
                register(event_type, handler, options)
    elif kind == "method_call":
        getattr(element, op.name)(*op.args)
    elif kind == "property":
        setattr(element, op.name, op.value)
    elif kind == "fallback":
        element.set_attribute(op.name, stringify_value(op.value))
    else:
        msg = f"Unsupported operation: {type(op).__name__}"
        raise TypeError(msg)
