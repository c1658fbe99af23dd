from __future__ import annotations

from .classlist import ClassList
from .collection import ElementList, LiveElementList
from .constants import (
    ATTRIBUTE_NAME_FORBIDDEN,
    COMMENT_NODE,
    DOCUMENT_FRAGMENT_NODE,
    DOCUMENT_NODE,
    ELEMENT_NODE,
    TEXT_NODE,
)
from .dataset import Dataset
from .errors import InvalidCharacterError
from .events import Event, EventTarget, is_event_handler_name
from .style import StyleDeclaration

# Event types whose on<type> slot exists on every element even while unassigned
GLOBAL_EVENT_HANDLERS = frozenset(
    {
        "blur",
        "change",
        "click",
        "contextmenu",
        "dblclick",
        "drag",
        "dragend",
        "dragstart",
        "drop",
        "error",
        "focus",
        "input",
        "keydown",
        "keypress",
        "keyup",
        "load",
        "mousedown",
        "mouseenter",
        "mouseleave",
        "mousemove",
        "mouseout",
        "mouseover",
        "mouseup",
        "pointerdown",
        "pointermove",
        "pointerup",
        "reset",
        "resize",
        "scroll",
        "select",
        "submit",
        "toggle",
        "wheel",
    }
)


def stringify_value(value):
    """Convert a value to attribute text the way the DOM does.

    None stays None, which marks a bare boolean attribute.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_element(obj) -> bool:
    """True if `obj` is a usable element handle."""
    return getattr(obj, "node_type", None) == ELEMENT_NODE


class Node:
    """Represents a DOM-like node.
    - name: e.g., 'div', 'p', etc. '#text', '#comment' and '#document' for the others.
    - children: list of child Nodes
    - parent: reference to parent Node (or None for root)
    - next_sibling/previous_sibling: references to adjacent nodes in the tree.
    """

    __slots__ = (
        "__weakref__",
        "children",
        "name",
        "namespace",
        "next_sibling",
        "parent",
        "previous_sibling",
    )

    node_type = DOCUMENT_FRAGMENT_NODE

    # Slots that hold tree structure; descriptors may not assign them directly
    protected_fields = frozenset(
        {"attributes", "children", "name", "namespace", "next_sibling", "parent", "previous_sibling"}
    )

    def __init__(self, name, namespace=None):
        if name is None or name == "":
            msg = "Empty name passed to Node constructor"
            raise ValueError(msg)
        self.name = name
        self.namespace = namespace
        self.children = []
        self.parent = None
        self.next_sibling = None
        self.previous_sibling = None

    def _detach(self, child):
        if child.previous_sibling:
            child.previous_sibling.next_sibling = child.next_sibling
        if child.next_sibling:
            child.next_sibling.previous_sibling = child.previous_sibling
        child.parent.children.remove(child)
        child.parent = None
        child.next_sibling = None
        child.previous_sibling = None

    def append_child(self, child):
        if self._would_create_circular_reference(child):
            msg = f"Adding {child.name} as child of {self.name} would create circular reference"
            raise ValueError(msg)

        if child.parent:
            self._detach(child)

        if self.children:
            self.children[-1].next_sibling = child
            child.previous_sibling = self.children[-1]
        else:
            child.previous_sibling = None

        child.parent = self
        child.next_sibling = None
        self.children.append(child)
        return child

    def _would_create_circular_reference(self, child):
        """Check if adding child would create a circular reference."""
        if child is self:
            return True
        if not child.children:
            return False
        current = self.parent
        while current is not None:
            if current is child:
                return True
            current = current.parent
        return False

    def insert_before(self, new_node, reference_node):
        if reference_node is None:
            return self.append_child(new_node)
        if reference_node.parent is not self:
            msg = "Reference node is not a child of this node"
            raise ValueError(msg)
        if self._would_create_circular_reference(new_node):
            msg = f"Inserting {new_node.name} into {self.name} would create circular reference"
            raise ValueError(msg)

        if new_node.parent:
            self._detach(new_node)

        idx = self.children.index(reference_node)
        new_node.parent = self
        self.children.insert(idx, new_node)

        new_node.next_sibling = reference_node
        new_node.previous_sibling = reference_node.previous_sibling
        reference_node.previous_sibling = new_node
        if new_node.previous_sibling:
            new_node.previous_sibling.next_sibling = new_node
        return new_node

    def remove_child(self, child):
        """Remove a child node, updating all sibling links."""
        if child.parent is not self:
            msg = "Node to remove is not a child of this node"
            raise ValueError(msg)
        self._detach(child)
        return child

    def replace_children(self, *nodes):
        for child in list(self.children):
            self._detach(child)
        for node in nodes:
            self.append_child(_as_node(node))

    def append(self, *nodes):
        for node in nodes:
            self.append_child(_as_node(node))

    def prepend(self, *nodes):
        first = self.children[0] if self.children else None
        for node in nodes:
            self.insert_before(_as_node(node), first)

    def remove(self):
        if self.parent is not None:
            self.parent.remove_child(self)

    @property
    def last_child(self):
        return self.children[-1] if self.children else None

    @property
    def text_content(self):
        parts = []
        for node in self.iter_descendants():
            if node.node_type == TEXT_NODE:
                parts.append(node.data)
        return "".join(parts)

    @text_content.setter
    def text_content(self, value):
        for child in list(self.children):
            self._detach(child)
        text = "" if value is None else str(value)
        if text:
            self.append_child(Text(text))

    def iter_descendants(self):
        """Yield every descendant in document order (not including self)."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    def iter_elements(self):
        for node in self.iter_descendants():
            if node.node_type == ELEMENT_NODE:
                yield node

    def get_element_by_id(self, element_id):
        for element in self.iter_elements():
            if element.attributes.get("id") == element_id:
                return element
        return None

    def get_elements_by_class_name(self, class_names):
        """Live list of elements carrying every class in `class_names`."""
        wanted = str(class_names).split()

        def has_classes(element):
            tokens = (element.attributes.get("class") or "").split()
            return bool(wanted) and all(name in tokens for name in wanted)

        return LiveElementList(self, has_classes)

    def get_elements_by_tag_name(self, name):
        """Live list of elements with tag `name` ("*" for all)."""
        name = str(name).lower()
        if name == "*":
            return LiveElementList(self, lambda element: True)
        return LiveElementList(self, lambda element: element.name == name)

    def query_all(self, predicate):
        """Static snapshot of descendant elements matching `predicate`."""
        return ElementList(element for element in self.iter_elements() if predicate(element))

    def __repr__(self):
        return f"Node({self.name}, children={len(self.children)})"


class Document(Node):
    __slots__ = ()

    node_type = DOCUMENT_NODE

    def __init__(self):
        super().__init__("#document")

    def create_element(self, name, attributes=None):
        return Element(name, attributes)

    def create_text_node(self, data):
        return Text(data)


class Text(Node):
    __slots__ = ("data",)

    node_type = TEXT_NODE

    def __init__(self, data=""):
        super().__init__("#text")
        self.data = "" if data is None else str(data)

    @property
    def text_content(self):
        return self.data

    @text_content.setter
    def text_content(self, value):
        self.data = "" if value is None else str(value)

    def append_child(self, child):
        msg = "Text nodes cannot have children"
        raise ValueError(msg)

    def __repr__(self):
        return f"Text({self.data[:30]!r})"


class Comment(Text):
    __slots__ = ()

    node_type = COMMENT_NODE

    def __init__(self, data=""):
        super().__init__(data)
        self.name = "#comment"

    def __repr__(self):
        return f"Comment({self.data[:30]!r})"


def _as_node(value):
    if isinstance(value, Node):
        return value
    return Text(value)


def _validate_attribute_name(name):
    if not isinstance(name, str):
        msg = f"Attribute name must be a string, not {type(name).__name__}"
        raise TypeError(msg)
    if not name or any(ch in ATTRIBUTE_NAME_FORBIDDEN for ch in name):
        msg = f"Invalid attribute name: {name!r}"
        raise InvalidCharacterError(msg)


def _reflect(attr_name, doc=None):
    """Property mirroring a string attribute, "" when absent."""

    def getter(self):
        value = self.attributes.get(attr_name)
        return "" if value is None else value

    def setter(self, value):
        self.set_attribute(attr_name, value)

    return property(getter, setter, doc=doc)


class Element(EventTarget, Node):
    """An element node.

    Attributes are stored as a plain dict of lowercase names to string values
    (None for a bare boolean attribute). `style`, `class_list` and `dataset`
    are live views over that dict. `on<type>` names are handler slots:
    assigning a callable registers it, reading returns it (or None).
    """

    __slots__ = ("_handlers", "_listeners", "attributes")

    node_type = ELEMENT_NODE

    def __init__(self, name, attributes=None, namespace=None):
        super().__init__(str(name).lower() if namespace is None else str(name), namespace)
        self._listeners = {}
        self._handlers = {}
        self.attributes = {}
        if attributes:
            for key, value in attributes.items():
                lowered = key.lower() if namespace is None else key
                if lowered not in self.attributes:
                    self.attributes[lowered] = stringify_value(value)

    # on<type> handler slots
    def __getattr__(self, name):
        if is_event_handler_name(name):
            handlers = object.__getattribute__(self, "_handlers")
            if name[2:] in handlers or name[2:] in GLOBAL_EVENT_HANDLERS:
                return handlers.get(name[2:])
        msg = f"{type(self).__name__!r} object has no attribute {name!r}"
        raise AttributeError(msg)

    def __setattr__(self, name, value):
        if self._is_handler_assignment(name, value):
            self.set_event_handler(name[2:], value)
            return
        object.__setattr__(self, name, value)

    def _is_handler_assignment(self, name, value):
        # online, options and the like stay ordinary fields unless a handler slot exists
        if not is_event_handler_name(name):
            return False
        event_type = name[2:]
        if event_type in GLOBAL_EVENT_HANDLERS or event_type in getattr(self, "_handlers", ()):
            return True
        if hasattr(type(self), name) or name in getattr(self, "__dict__", ()):
            return False
        return callable(value)

    def has_event_handler_slot(self, name):
        return is_event_handler_name(name) and (name[2:] in GLOBAL_EVENT_HANDLERS or name[2:] in self._handlers)

    @property
    def tag_name(self):
        return self.name

    def _normalize_name(self, name):
        _validate_attribute_name(name)
        return name.lower() if self.namespace is None else name

    def get_attribute(self, name):
        return self.attributes.get(self._normalize_name(name))

    def has_attribute(self, name):
        return self._normalize_name(name) in self.attributes

    def set_attribute(self, name, value):
        self.attributes[self._normalize_name(name)] = stringify_value(value)

    def remove_attribute(self, name):
        self.attributes.pop(self._normalize_name(name), None)

    def toggle_attribute(self, name, force=None):
        key = self._normalize_name(name)
        if key in self.attributes:
            if force is True:
                return True
            del self.attributes[key]
            return False
        if force is False:
            return False
        self.attributes[key] = ""
        return True

    def get_attribute_names(self):
        return list(self.attributes)

    id = _reflect("id")
    class_name = _reflect("class")
    title = _reflect("title")
    lang = _reflect("lang")
    dir = _reflect("dir")

    @property
    def hidden(self):
        return "hidden" in self.attributes

    @hidden.setter
    def hidden(self, value):
        self.toggle_attribute("hidden", bool(value))

    @property
    def style(self):
        return StyleDeclaration(self)

    @style.setter
    def style(self, value):
        if value is None:
            self.remove_attribute("style")
        else:
            self.style.css_text = str(value)

    @property
    def class_list(self):
        return ClassList(self)

    @class_list.setter
    def class_list(self, value):
        if isinstance(value, str):
            self.set_attribute("class", value)
        else:
            self.set_attribute("class", " ".join(value))

    @property
    def dataset(self):
        return Dataset(self)

    @property
    def inner_html(self):
        from .serialize import to_html

        return "".join(to_html(child) for child in self.children)

    @inner_html.setter
    def inner_html(self, markup):
        from .fragment import parse_fragment

        self.replace_children(*parse_fragment("" if markup is None else str(markup)))

    @property
    def inner_text(self):
        return self.text_content

    @inner_text.setter
    def inner_text(self, value):
        self.text_content = value

    @property
    def outer_html(self):
        from .serialize import to_html

        return to_html(self)

    def click(self):
        return self.dispatch_event(Event("click", bubbles=True, cancelable=True))

    def __repr__(self):
        return f"Element(<{self.name}>, children={len(self.children)})"
