"""Update policy.

An :class:`UpdatePolicy` controls how descriptor keys are interpreted. The
defaults match how descriptors written for the DOM behave.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType

from .constants import CAMEL_CASE_RESERVED_KEYS, RESERVED_KEYS


@dataclass(frozen=True, slots=True)
class UpdatePolicy:
    """Switches for the element applier.

    - `camel_case_aliases`: accept `classList`, `setAttribute`, ... as
      spellings of the reserved keys, and look up `textContent` as
      `text_content` when the element has no member named `textContent`.
    - `attribute_fallback`: set unknown keys with primitive values as
      attributes. When off, such keys are logged and skipped.
    - `strict`: raise `StrictUpdateError` on the first key that fails
      instead of logging it and moving on.
    """

    camel_case_aliases: bool = True
    attribute_fallback: bool = True
    strict: bool = False

    reserved_keys: MappingProxyType = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        merged = dict(RESERVED_KEYS)
        if self.camel_case_aliases:
            merged.update(CAMEL_CASE_RESERVED_KEYS)
        object.__setattr__(self, "camel_case_aliases", bool(self.camel_case_aliases))
        object.__setattr__(self, "attribute_fallback", bool(self.attribute_fallback))
        object.__setattr__(self, "strict", bool(self.strict))
        object.__setattr__(self, "reserved_keys", MappingProxyType(merged))


DEFAULT_POLICY: UpdatePolicy = UpdatePolicy()
