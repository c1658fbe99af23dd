from .applier import apply_to_element, apply_update
from .collection import ElementList, LiveElementList, materialize
from .descriptor import ClassifiedDescriptor, classify, index_of, is_index_key, is_valid_index, resolve_index
from .enhance import (
    UpdatableCollection,
    UpdatableElement,
    enhance_all,
    ensure_enhanced,
    is_enhanced,
    register_enhancer,
    unregister_enhancer,
)
from .errors import InvalidCharacterError, StrictUpdateError, StylePropertyError, UpdateError
from .events import Event
from .fragment import parse_document, parse_fragment
from .node import Comment, Document, Element, Node, Text, is_element
from .operations import apply_operation, compile_update
from .orchestrator import ApplyResult, IndexedStats, UpdateStats, update_collection
from .policy import DEFAULT_POLICY, UpdatePolicy
from .serialize import to_html

__all__ = [
    "DEFAULT_POLICY",
    "ApplyResult",
    "ClassifiedDescriptor",
    "Comment",
    "Document",
    "Element",
    "ElementList",
    "Event",
    "IndexedStats",
    "InvalidCharacterError",
    "LiveElementList",
    "Node",
    "StrictUpdateError",
    "StylePropertyError",
    "Text",
    "UpdatableCollection",
    "UpdatableElement",
    "UpdateError",
    "UpdatePolicy",
    "UpdateStats",
    "apply_operation",
    "apply_to_element",
    "apply_update",
    "classify",
    "compile_update",
    "enhance_all",
    "ensure_enhanced",
    "index_of",
    "is_element",
    "is_enhanced",
    "is_index_key",
    "is_valid_index",
    "materialize",
    "parse_document",
    "parse_fragment",
    "register_enhancer",
    "resolve_index",
    "to_html",
    "unregister_enhancer",
    "update_collection",
]
