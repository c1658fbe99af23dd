"""Class token list for element nodes.

`ClassList` reads and writes the ``class`` attribute directly and keeps
token order stable, dropping duplicates the way DOMTokenList does.
"""

from __future__ import annotations

from collections.abc import Iterator

from .constants import HTML_WHITESPACE
from .errors import InvalidCharacterError


def _validate_token(token: object) -> str:
    if not isinstance(token, str):
        msg = f"Class token must be a string, not {type(token).__name__}"
        raise TypeError(msg)
    if token == "":
        msg = "Class token must not be empty"
        raise ValueError(msg)
    if any(ch in HTML_WHITESPACE for ch in token):
        msg = f"Class token {token!r} contains whitespace"
        raise InvalidCharacterError(msg)
    return token


class ClassList:
    __slots__ = ("_element",)

    def __init__(self, element):
        self._element = element

    def _tokens(self) -> list[str]:
        value = self._element.get_attribute("class")
        if not value:
            return []
        seen: list[str] = []
        for token in value.split():
            if token not in seen:
                seen.append(token)
        return seen

    def _store(self, tokens: list[str]) -> None:
        self._element.set_attribute("class", " ".join(tokens))

    @property
    def value(self) -> str:
        return self._element.get_attribute("class") or ""

    @value.setter
    def value(self, text: str) -> None:
        self._element.set_attribute("class", text)

    def contains(self, token: str) -> bool:
        return token in self._tokens()

    def add(self, *tokens: str) -> None:
        checked = [_validate_token(t) for t in tokens]
        current = self._tokens()
        for token in checked:
            if token not in current:
                current.append(token)
        self._store(current)

    def remove(self, *tokens: str) -> None:
        checked = [_validate_token(t) for t in tokens]
        current = self._tokens()
        if not self._element.has_attribute("class"):
            return
        self._store([t for t in current if t not in checked])

    def toggle(self, token: str, force: bool | None = None) -> bool:
        """Toggle `token`; returns whether it is present afterwards."""
        _validate_token(token)
        current = self._tokens()
        if token in current:
            if force is True:
                return True
            current.remove(token)
            self._store(current)
            return False
        if force is False:
            return False
        current.append(token)
        self._store(current)
        return True

    def replace(self, old: str, new: str) -> bool:
        """Replace `old` with `new` in place; returns False if `old` is absent."""
        _validate_token(old)
        _validate_token(new)
        current = self._tokens()
        if old not in current:
            return False
        result = []
        for token in current:
            if token == old:
                token = new
            if token not in result:
                result.append(token)
        self._store(result)
        return True

    def __contains__(self, token: object) -> bool:
        return token in self._tokens()

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens())

    def __len__(self) -> int:
        return len(self._tokens())

    def __getitem__(self, index: int) -> str:
        return self._tokens()[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ClassList):
            return self._tokens() == other._tokens()
        if isinstance(other, (list, tuple)):
            return self._tokens() == list(other)
        return NotImplemented

    __hash__ = None  # Unhashable since we define __eq__

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"ClassList({self._tokens()!r})"
