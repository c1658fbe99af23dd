from __future__ import annotations

import dataclasses
import unittest

from htmlupdate import DEFAULT_POLICY, Element, UpdatePolicy
from htmlupdate.constants import ELEMENT_NODE
from htmlupdate.operations import (
    AttributeOp,
    EventOp,
    FallbackOp,
    MethodCallOp,
    PropertyOp,
    StyleOp,
    camel_to_snake,
    classify_key,
    compile_update,
)


def _handler(event) -> None:
    return None


class Widget(Element):
    __slots__ = ("calls",)

    def __init__(self) -> None:
        super().__init__("div")
        self.calls = []

    def refresh(self, *args) -> None:
        self.calls.append(args)


class PlainHandle:
    """A handle that is not an Element node."""

    node_type = ELEMENT_NODE

    def __init__(self) -> None:
        self.calls = []
        self.label = "initial"
        self.render = lambda *args: self.calls.append(args)


class TestCamelToSnake(unittest.TestCase):
    def test_conversions(self) -> None:
        assert camel_to_snake("textContent") == "text_content"
        assert camel_to_snake("innerHTML") == "inner_html"
        assert camel_to_snake("outerHTML") == "outer_html"
        assert camel_to_snake("className") == "class_name"
        assert camel_to_snake("title") == "title"


class TestPolicy(unittest.TestCase):
    def test_default_policy_accepts_camel_case_reserved_keys(self) -> None:
        assert DEFAULT_POLICY.reserved_keys["classList"] == "class_list"
        assert DEFAULT_POLICY.reserved_keys["attributes"] == "attrs"

    def test_camel_case_aliases_can_be_disabled(self) -> None:
        policy = UpdatePolicy(camel_case_aliases=False)
        assert "classList" not in policy.reserved_keys
        assert policy.reserved_keys["class_list"] == "class_list"

    def test_policy_is_immutable(self) -> None:
        with self.assertRaises(dataclasses.FrozenInstanceError):
            DEFAULT_POLICY.strict = True  # type: ignore[misc]
        with self.assertRaises(TypeError):
            DEFAULT_POLICY.reserved_keys["x"] = "y"  # type: ignore[index]


class TestClassifyKey(unittest.TestCase):
    def test_reserved_keys_produce_their_operation_kinds(self) -> None:
        element = Element("div")
        ops = compile_update(
            element,
            {
                "style": {"color": "red", "margin": None},
                "classList": {"add": "a"},
                "attrs": {"role": "button", "hidden": None},
                "dataset": {"userId": 1},
                "addEventListener": ["click", _handler],
                "removeEventListener": {"focus": _handler},
            },
        )
        assert [op.kind for op in ops] == ["style", "class_list", "attribute", "dataset", "event", "event"]

        style = ops[0]
        assert isinstance(style, StyleOp)
        assert style.properties == (("color", "red"),)

        attrs = ops[2]
        assert isinstance(attrs, AttributeOp)
        assert attrs.set_items == (("role", "button"),)
        assert attrs.remove_names == ("hidden",)

        add, remove = ops[4], ops[5]
        assert isinstance(add, EventOp)
        assert add.action == "add"
        assert add.listeners == (("click", _handler, None),)
        assert remove.action == "remove"

    def test_set_attribute_shapes(self) -> None:
        element = Element("div")
        pair = classify_key(element, "set_attribute", ["data-x", 1])
        assert pair == AttributeOp(kind="attribute", key="set_attribute", set_items=(("data-x", 1),), remove_names=())

        mapping = classify_key(element, "setAttribute", {"a": "1", "b": "2"})
        assert mapping.set_items == (("a", "1"), ("b", "2"))

        with self.assertRaises(TypeError):
            classify_key(element, "set_attribute", "oops")

    def test_handler_slot_with_callable(self) -> None:
        op = classify_key(Element("button"), "onclick", _handler)
        assert op == PropertyOp(kind="property", key="onclick", name="onclick", value=_handler)

    def test_method_call_spreads_lists(self) -> None:
        op = classify_key(Widget(), "refresh", [1, 2])
        assert op == MethodCallOp(kind="method_call", key="refresh", name="refresh", args=(1, 2))

    def test_method_call_with_none_passes_no_arguments(self) -> None:
        op = classify_key(Element("button"), "click", None)
        assert op == MethodCallOp(kind="method_call", key="click", name="click", args=())

    def test_property_with_setter(self) -> None:
        op = classify_key(Element("div"), "text_content", "Hi")
        assert op == PropertyOp(kind="property", key="text_content", name="text_content", value="Hi")

    def test_camel_case_member_falls_back_to_snake_case(self) -> None:
        op = classify_key(Element("div"), "textContent", "Hi")
        assert isinstance(op, PropertyOp)
        assert op.name == "text_content"
        assert op.key == "textContent"

    def test_camel_case_member_lookup_can_be_disabled(self) -> None:
        op = classify_key(Element("div"), "textContent", "Hi", UpdatePolicy(camel_case_aliases=False))
        assert isinstance(op, FallbackOp)
        assert op.name == "textContent"

    def test_callable_instance_attribute_is_called_not_replaced(self) -> None:
        op = classify_key(PlainHandle(), "render", "x")
        assert isinstance(op, MethodCallOp)

    def test_plain_instance_attribute_is_assigned(self) -> None:
        op = classify_key(PlainHandle(), "label", "new")
        assert op == PropertyOp(kind="property", key="label", name="label", value="new")

    def test_unknown_key_with_primitive_falls_back_to_attribute(self) -> None:
        op = classify_key(Element("div"), "aria-label", "Close")
        assert op == FallbackOp(kind="fallback", key="aria-label", name="aria-label", value="Close")

    def test_unknown_key_with_structured_value_is_skipped(self) -> None:
        with self.assertLogs("htmlupdate", level="WARNING") as logs:
            op = classify_key(Element("div"), "payload", {"a": 1})
        assert op is None
        assert any("payload" in line for line in logs.output)

    def test_protected_tree_fields_are_not_assignable(self) -> None:
        with self.assertLogs("htmlupdate", level="WARNING"):
            op = classify_key(Element("div"), "children", [])
        assert op is None

    def test_private_names_are_never_members(self) -> None:
        op = classify_key(Element("div"), "_handlers", "x")
        assert isinstance(op, FallbackOp)

    def test_fallback_can_be_disabled(self) -> None:
        with self.assertLogs("htmlupdate", level="WARNING"):
            op = classify_key(Element("div"), "aria-label", "x", UpdatePolicy(attribute_fallback=False))
        assert op is None

    def test_compile_isolates_classification_failures(self) -> None:
        element = Element("div")
        with self.assertLogs("htmlupdate", level="WARNING") as logs:
            ops = compile_update(element, {"set_attribute": 5, "title": "ok"})
        assert [op.key for op in ops] == ["title"]
        assert any("set_attribute" in line for line in logs.output)
