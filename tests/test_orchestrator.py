from __future__ import annotations

import unittest
from functools import partial

from htmlupdate import (
    ApplyResult,
    Element,
    IndexedStats,
    UpdateError,
    UpdatePolicy,
    UpdateStats,
    apply_to_element,
    apply_update,
    update_collection,
)


def _items(count: int) -> list[Element]:
    return [Element("li") for _ in range(count)]


def _list_root(count: int) -> Element:
    root = Element("ul")
    for i in range(count):
        root.append_child(Element("li", {"class": "item", "id": f"item-{i}"}))
    return root


class TestBulkAndIndexed(unittest.TestCase):
    def test_bulk_applies_to_all_before_indexed(self) -> None:
        items = _items(3)
        result = update_collection(
            items,
            {"0": {"text_content": "First"}, "2": {"text_content": "Last"}, "title": "red"},
            apply_update,
        )
        assert result.success is True
        assert result.is_empty is False
        assert result.stats == UpdateStats(
            collection_length=3,
            bulk_update_count=3,
            indexed_stats=IndexedStats(successful=2, failed=0, out_of_bounds=0),
        )
        assert [item.title for item in items] == ["red", "red", "red"]
        assert [item.text_content for item in items] == ["First", "", "Last"]

    def test_indexed_entry_overrides_bulk_entry_regardless_of_key_order(self) -> None:
        items = _items(3)
        update_collection(items, {"1": {"text_content": "one"}, "text_content": "bulk"}, apply_update)
        assert [item.text_content for item in items] == ["bulk", "one", "bulk"]

    def test_negative_indices(self) -> None:
        items = _items(3)
        result = update_collection(items, {"-1": {"title": "last"}, "-3": {"title": "first"}}, apply_update)
        assert [item.title for item in items] == ["first", "", "last"]
        assert result.stats.indexed_stats.successful == 2

    def test_int_keys_are_indices(self) -> None:
        items = _items(2)
        update_collection(items, {1: {"title": "second"}}, apply_update)
        assert [item.title for item in items] == ["", "second"]

    def test_out_of_bounds_indices_are_counted(self) -> None:
        items = _items(3)
        errors: list[UpdateError] = []
        with self.assertLogs("htmlupdate", level="WARNING") as logs:
            result = update_collection(
                items,
                {"5": {"title": "x"}, "-4": {"title": "y"}, "0": {"title": "z"}},
                apply_update,
                errors=errors,
            )
        stats = result.stats.indexed_stats
        assert stats == IndexedStats(successful=1, failed=0, out_of_bounds=2)
        assert result.success is True
        assert [item.title for item in items] == ["z", "", ""]
        assert any("out of bounds" in line for line in logs.output)
        assert errors == [
            UpdateError("index-out-of-bounds", key="5", index=5),
            UpdateError("index-out-of-bounds", key="-4", index=-1),
        ]

    def test_only_bulk(self) -> None:
        items = _items(2)
        result = update_collection(items, {"class_list": {"add": "on"}}, apply_update)
        assert result.stats.bulk_update_count == 2
        assert result.stats.indexed_stats == IndexedStats()
        assert all(item.class_name == "on" for item in items)


class TestElementLevelFailures(unittest.TestCase):
    def test_non_element_slots(self) -> None:
        element = Element("li")
        with self.assertLogs("htmlupdate", level="WARNING"):
            result = update_collection(
                [element, "text", None],
                {"title": "bulk", "1": {"title": "x"}, "2": {"title": "y"}},
                apply_update,
            )
        assert result.success is True
        assert result.stats.bulk_update_count == 1
        assert result.stats.indexed_stats == IndexedStats(successful=0, failed=2, out_of_bounds=0)
        assert element.title == "bulk"

    def test_nested_value_must_be_a_mapping(self) -> None:
        items = _items(1)
        errors: list[UpdateError] = []
        with self.assertLogs("htmlupdate", level="WARNING"):
            result = update_collection(items, {"0": "red"}, apply_update, errors=errors)
        assert result.stats.indexed_stats.failed == 1
        assert errors == [UpdateError("invalid-element-slot", key="0", index=0)]

    def test_raising_apply_function(self) -> None:
        items = _items(2)
        calls = []

        def flaky(element, descriptor):
            calls.append(element)
            if element is items[0]:
                raise RuntimeError("boom")
            return apply_update(element, descriptor)

        with self.assertLogs("htmlupdate", level="WARNING"):
            result = update_collection(items, {"title": "t", "0": {"id": "a"}, "1": {"id": "b"}}, flaky)
        assert result.stats.bulk_update_count == 1
        assert result.stats.indexed_stats == IndexedStats(successful=1, failed=1, out_of_bounds=0)
        assert items[1].id == "b"
        assert len(calls) == 4

    def test_strict_policy_failures_count_as_failed(self) -> None:
        items = _items(2)
        apply_fn = partial(apply_to_element, policy=UpdatePolicy(strict=True))
        with self.assertLogs("htmlupdate", level="WARNING"):
            result = update_collection(
                items,
                {"0": {"style": {"bad name!": "x"}}, "1": {"title": "fine"}},
                apply_fn,
            )
        assert result.stats.indexed_stats == IndexedStats(successful=1, failed=1, out_of_bounds=0)
        assert items[1].title == "fine"


class TestStructuralFailures(unittest.TestCase):
    def test_null_collection(self) -> None:
        with self.assertLogs("htmlupdate", level="WARNING"):
            result = update_collection(None, {"title": "x"}, apply_update)
        assert result == ApplyResult(success=False, error="Null collection")

    def test_descriptor_must_be_a_mapping(self) -> None:
        with self.assertLogs("htmlupdate", level="WARNING"):
            result = update_collection(_items(1), ["title"], apply_update)
        assert result.success is False
        assert result.error == "Invalid updates object"

    def test_apply_function_must_be_callable(self) -> None:
        with self.assertLogs("htmlupdate", level="WARNING"):
            result = update_collection(_items(1), {"title": "x"}, None)
        assert result.success is False
        assert result.error == "Update function not provided"

    def test_non_collection_inputs(self) -> None:
        errors: list[UpdateError] = []
        for value in ("abc", {"0": Element("li")}, 42):
            with self.assertLogs("htmlupdate", level="WARNING"):
                result = update_collection(value, {"title": "x"}, apply_update, errors=errors)
            assert result.success is False
            assert "not an element collection" in result.error
        assert [e.code for e in errors] == ["structural-input-error"] * 3

    def test_errors_list_is_not_required(self) -> None:
        with self.assertLogs("htmlupdate", level="WARNING"):
            result = update_collection(None, {}, apply_update)
        assert result.stats is None


class TestEmptyAndLiveCollections(unittest.TestCase):
    def test_empty_collection(self) -> None:
        with self.assertLogs("htmlupdate", level="INFO"):
            result = update_collection([], {"0": {"title": "x"}, "title": "y"}, apply_update)
        assert result == ApplyResult(success=True, is_empty=True, stats=UpdateStats())

    def test_empty_live_collection(self) -> None:
        root = Element("ul")
        with self.assertLogs("htmlupdate", level="INFO"):
            result = update_collection(root.get_elements_by_tag_name("li"), {"title": "x"}, apply_update)
        assert result.is_empty is True

    def test_live_collection_is_snapshotted_before_bulk(self) -> None:
        root = _list_root(3)
        live = root.get_elements_by_class_name("item")
        result = update_collection(
            live,
            {"class_list": {"remove": "item"}, "2": {"text_content": "third"}, "-1": {"title": "last"}},
            apply_update,
        )
        assert len(live) == 0
        third = root.get_element_by_id("item-2")
        assert third.text_content == "third"
        assert third.title == "last"
        assert result.stats.collection_length == 3
        assert result.stats.indexed_stats == IndexedStats(successful=2, failed=0, out_of_bounds=0)

    def test_tuple_and_generator_collections(self) -> None:
        items = _items(2)
        update_collection(tuple(items), {"title": "t"}, apply_update)
        update_collection((item for item in items), {"id": "g"}, apply_update)
        assert [(item.title, item.id) for item in items] == [("t", "g"), ("t", "g")]


class TestApplyResult(unittest.TestCase):
    def test_to_dict_uses_camel_case_keys(self) -> None:
        result = update_collection(_items(2), {"title": "x", "1": {"id": "b"}}, apply_update)
        assert result.to_dict() == {
            "success": True,
            "isEmpty": False,
            "stats": {
                "collectionLength": 2,
                "bulkUpdateCount": 2,
                "indexedStats": {"successful": 1, "failed": 0, "outOfBounds": 0},
            },
        }

    def test_to_dict_for_failures(self) -> None:
        assert ApplyResult(success=False, error="Null collection").to_dict() == {
            "success": False,
            "error": "Null collection",
            "stats": None,
        }
