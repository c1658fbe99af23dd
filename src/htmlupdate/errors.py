"""Error records and exceptions.

Per-key and per-element problems are recovered where they happen. When a
caller passes an ``errors`` list to an entry point, each recovered problem is
also appended to it as an :class:`UpdateError`.
"""

from __future__ import annotations

from contextvars import ContextVar

_ERROR_SINK: ContextVar[list[UpdateError] | None] = ContextVar("htmlupdate_error_sink", default=None)


class UpdateError:
    """Represents one recovered update problem."""

    __slots__ = ("code", "index", "key", "message")

    def __init__(self, code, key=None, index=None, message=None):
        self.code = code
        self.key = key
        self.index = index
        self.message = message or code

    def __repr__(self):
        if self.index is not None:
            return f"UpdateError({self.code!r}, key={self.key!r}, index={self.index})"
        if self.key is not None:
            return f"UpdateError({self.code!r}, key={self.key!r})"
        return f"UpdateError({self.code!r})"

    def __str__(self):
        where = ""
        if self.index is not None:
            where = f"[{self.index}]"
        if self.key is not None:
            where = f"{where}{self.key}: "
        elif where:
            where = f"{where}: "
        if self.message != self.code:
            return f"{where}{self.code} - {self.message}"
        return f"{where}{self.code}"

    def __eq__(self, other):
        if not isinstance(other, UpdateError):
            return NotImplemented
        return self.code == other.code and self.key == other.key and self.index == other.index

    __hash__ = None  # Unhashable since we define __eq__


def emit_error(code: str, *, key: object = None, index: int | None = None, message: str | None = None) -> None:
    """Record an :class:`UpdateError` in the active sink.

    If no sink is active this is a no-op.
    """

    sink = _ERROR_SINK.get()
    if sink is None:
        return
    sink.append(UpdateError(str(code), key=key, index=index, message=str(message) if message is not None else None))


class InvalidCharacterError(ValueError):
    """Raised when a class token or attribute name contains forbidden characters."""


class StylePropertyError(ValueError):
    """Raised when a style property name or value cannot be represented."""


class StrictUpdateError(Exception):
    """Raised in strict mode when a descriptor key cannot be applied."""

    def __init__(self, key, cause):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to apply {key!r}: {cause}")
