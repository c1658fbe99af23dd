"""Event registration and dispatch for element nodes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[["Event"], Any]

CAPTURING_PHASE = 1
AT_TARGET = 2
BUBBLING_PHASE = 3


class Event:
    __slots__ = (
        "_stop",
        "_stop_immediate",
        "bubbles",
        "cancelable",
        "current_target",
        "default_prevented",
        "detail",
        "event_phase",
        "target",
        "type",
    )

    def __init__(self, type, *, bubbles=False, cancelable=False, detail=None):
        if not type:
            msg = "Event type must be a non-empty string"
            raise ValueError(msg)
        self.type = str(type)
        self.bubbles = bool(bubbles)
        self.cancelable = bool(cancelable)
        self.detail = detail
        self.target = None
        self.current_target = None
        self.event_phase = 0
        self.default_prevented = False
        self._stop = False
        self._stop_immediate = False

    def prevent_default(self):
        if self.cancelable:
            self.default_prevented = True

    def stop_propagation(self):
        self._stop = True

    def stop_immediate_propagation(self):
        self._stop = True
        self._stop_immediate = True

    def __repr__(self):
        return f"Event({self.type!r})"


class _Listener:
    __slots__ = ("capture", "handler", "once", "removed")

    def __init__(self, handler, capture, once):
        self.handler = handler
        self.capture = capture
        self.once = once
        self.removed = False


def _flatten_options(options: bool | Mapping[str, Any] | None) -> tuple[bool, bool]:
    """Return (capture, once) from a listener options value."""
    if options is None:
        return False, False
    if isinstance(options, bool):
        return options, False
    if isinstance(options, Mapping):
        return bool(options.get("capture", False)), bool(options.get("once", False))
    msg = f"Listener options must be a bool or a mapping, not {type(options).__name__}"
    raise TypeError(msg)


def is_event_handler_name(name: object) -> bool:
    """True for `on<type>` handler slot names such as ``onclick``."""
    return isinstance(name, str) and len(name) > 2 and name.startswith("on") and name[2:].isidentifier()


class EventTarget:
    """Listener bookkeeping shared by element nodes.

    Subclasses provide ``_listeners`` (type -> list of listeners) and
    ``_handlers`` (type -> handler assigned through an ``on<type>`` slot).
    """

    __slots__ = ()

    def add_event_listener(self, type, handler, options=None):
        if not callable(handler):
            msg = f"Event handler for {type!r} must be callable"
            raise TypeError(msg)
        capture, once = _flatten_options(options)
        listeners = self._listeners.setdefault(str(type), [])
        for existing in listeners:
            # The same (handler, capture) pair is only ever registered once
            if existing.handler == handler and existing.capture == capture:
                return
        listeners.append(_Listener(handler, capture, once))

    def remove_event_listener(self, type, handler, options=None):
        capture, _ = _flatten_options(options)
        listeners = self._listeners.get(str(type))
        if not listeners:
            return
        for existing in listeners:
            if existing.handler == handler and existing.capture == capture:
                existing.removed = True
                listeners.remove(existing)
                break
        if not listeners:
            del self._listeners[str(type)]

    def has_event_listener(self, type, handler=None):
        listeners = self._listeners.get(str(type), ())
        if handler is None:
            return bool(listeners)
        return any(existing.handler == handler for existing in listeners)

    def set_event_handler(self, type, handler):
        if handler is None:
            self._handlers.pop(str(type), None)
            return
        if not callable(handler):
            msg = f"on{type} handler must be callable or None"
            raise TypeError(msg)
        self._handlers[str(type)] = handler

    def _invoke(self, event, phase):
        event.current_target = self
        event.event_phase = phase
        listeners = self._listeners.get(event.type)
        if listeners:
            for listener in list(listeners):
                if listener.removed:
                    continue
                if phase == CAPTURING_PHASE and not listener.capture:
                    continue
                if phase == BUBBLING_PHASE and listener.capture:
                    continue
                if listener.once:
                    self.remove_event_listener(event.type, listener.handler, listener.capture)
                try:
                    listener.handler(event)
                except Exception:
                    # Listener errors are reported and do not abort dispatch
                    logger.exception("Error in %r listener on %r", event.type, self)
                if event._stop_immediate:
                    return
        if phase != CAPTURING_PHASE:
            handler = self._handlers.get(event.type)
            if handler is not None:
                try:
                    handler(event)
                except Exception:
                    logger.exception("Error in on%s handler on %r", event.type, self)

    def dispatch_event(self, event):
        """Dispatch `event` with this node as the target.

        Capture listeners on ancestors run first (outermost first), then the
        target's listeners, then bubbling listeners on ancestors when the
        event bubbles. Returns False if a listener called
        ``prevent_default()`` on a cancelable event.
        """
        if isinstance(event, str):
            event = Event(event)
        event.target = self

        ancestors = []
        current = getattr(self, "parent", None)
        while current is not None:
            if isinstance(current, EventTarget):
                ancestors.append(current)
            current = getattr(current, "parent", None)

        for node in reversed(ancestors):
            node._invoke(event, CAPTURING_PHASE)
            if event._stop:
                break
        else:
            self._invoke(event, AT_TARGET)
            if event.bubbles and not event._stop:
                for node in ancestors:
                    node._invoke(event, BUBBLING_PHASE)
                    if event._stop:
                        break

        event.current_target = None
        event.event_phase = 0
        return not event.default_prevented
