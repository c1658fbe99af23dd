"""Element and descriptor constants.

Usage:
    from htmlupdate.constants import VOID_ELEMENTS, RESERVED_KEYS
"""

# Node types, numbered the way the DOM numbers them
ELEMENT_NODE = 1
TEXT_NODE = 3
COMMENT_NODE = 8
DOCUMENT_NODE = 9
DOCUMENT_FRAGMENT_NODE = 11

# HTML5 void elements (no closing tag)
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Descriptor keys with dedicated handling, mapped to their operation family.
RESERVED_KEYS = {
    "style": "style",
    "class_list": "class_list",
    "attrs": "attrs",
    "attributes": "attrs",
    "set_attribute": "set_attribute",
    "remove_attribute": "remove_attribute",
    "dataset": "dataset",
    "add_event_listener": "add_event_listener",
    "remove_event_listener": "remove_event_listener",
}

# Spellings accepted when descriptors come from camelCase sources (JSON, JS).
CAMEL_CASE_RESERVED_KEYS = {
    "classList": "class_list",
    "setAttribute": "set_attribute",
    "removeAttribute": "remove_attribute",
    "addEventListener": "add_event_listener",
    "removeEventListener": "remove_event_listener",
}

CLASS_LIST_METHODS = ("add", "remove", "toggle", "replace", "contains")

# Characters that may not appear in an attribute name
ATTRIBUTE_NAME_FORBIDDEN = frozenset(" \t\n\f\r\"'>/=\x00")

# ASCII whitespace as the HTML standard defines it
HTML_WHITESPACE = " \t\n\f\r"
