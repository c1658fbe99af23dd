"""Tests for error records, the error sink and strict mode."""

import unittest

from htmlupdate import Element, StrictUpdateError, UpdateError, UpdatePolicy, apply_update, update_collection
from htmlupdate.errors import emit_error


class TestUpdateError(unittest.TestCase):
    """UpdateError formatting and comparison."""

    def test_message_defaults_to_code(self):
        error = UpdateError("unsupported-value")
        assert error.message == "unsupported-value"
        assert str(error) == "unsupported-value"
        assert repr(error) == "UpdateError('unsupported-value')"

    def test_str_includes_location(self):
        assert str(UpdateError("per-key-application-error", key="style", message="bad")) == (
            "style: per-key-application-error - bad"
        )
        assert str(UpdateError("index-out-of-bounds", key="5", index=5, message="collection length is 3")) == (
            "[5]5: index-out-of-bounds - collection length is 3"
        )
        assert str(UpdateError("invalid-element-slot", index=2)) == "[2]: invalid-element-slot"

    def test_repr_includes_location(self):
        assert repr(UpdateError("x", key="k")) == "UpdateError('x', key='k')"
        assert repr(UpdateError("x", key="k", index=1)) == "UpdateError('x', key='k', index=1)"

    def test_equality_ignores_message(self):
        assert UpdateError("x", key="k", message="a") == UpdateError("x", key="k", message="b")
        assert UpdateError("x", key="k") != UpdateError("x", key="j")
        assert UpdateError("x") != "x"

    def test_unhashable(self):
        with self.assertRaises(TypeError):
            hash(UpdateError("x"))


class TestErrorSink(unittest.TestCase):
    """Errors are only recorded when a caller supplies a list."""

    def test_emit_without_sink_is_a_no_op(self):
        emit_error("unsupported-value", key="k")

    def test_errors_are_scoped_to_the_call(self):
        element = Element("div")
        first = []
        second = []
        with self.assertLogs("htmlupdate", level="WARNING"):
            apply_update(element, {"payload": [1]}, errors=first)
            apply_update(element, {"payload": [2]})
            apply_update(element, {"other": {}}, errors=second)
        assert [e.key for e in first] == ["payload"]
        assert [e.key for e in second] == ["other"]

    def test_collection_errors_include_nested_key_failures(self):
        errors = []
        with self.assertLogs("htmlupdate", level="WARNING"):
            update_collection([Element("li")], {"0": {"payload": [1]}}, apply_update, errors=errors)
        assert errors == [UpdateError("unsupported-value", key="payload")]


class TestStrictMode(unittest.TestCase):
    """Strict mode raises on the first failing key."""

    def test_strict_mode_raises(self):
        with self.assertRaises(StrictUpdateError) as ctx:
            apply_update(Element("div"), {"class_list": {"add": ""}}, policy=UpdatePolicy(strict=True))
        assert ctx.exception.key == "class_list"
        assert isinstance(ctx.exception.cause, ValueError)
        assert "class_list" in str(ctx.exception)

    def test_strict_mode_raises_during_classification(self):
        element = Element("div")
        with self.assertRaises(StrictUpdateError):
            apply_update(element, {"title": "x", "set_attribute": 1}, policy=UpdatePolicy(strict=True))
        # Nothing is applied when classification fails
        assert element.title == ""

    def test_unsupported_values_are_not_strict_failures(self):
        element = Element("div")
        with self.assertLogs("htmlupdate", level="WARNING"):
            apply_update(element, {"payload": {"a": 1}, "title": "x"}, policy=UpdatePolicy(strict=True))
        assert element.title == "x"
