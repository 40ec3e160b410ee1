from __future__ import annotations

import pytest

from json_grid_editor.classifier import FieldKind, classify, is_record


@pytest.mark.parametrize(
    "value, expected",
    [
        ("text", FieldKind.PRIMITIVE),
        (42, FieldKind.PRIMITIVE),
        (None, FieldKind.PRIMITIVE),
        (True, FieldKind.PRIMITIVE),
        ([], FieldKind.NESTED_LIST),
        ([{"a": 1}], FieldKind.NESTED_LIST),
        ([1, 2, 3], FieldKind.NESTED_LIST),
        ({}, FieldKind.NESTED_OBJECT),
        ({"a": 1}, FieldKind.NESTED_OBJECT),
    ],
)
def test_classify(value, expected):
    assert classify(value) is expected


def test_single_item_list_is_not_an_object():
    assert classify([{"a": 1}]) is FieldKind.NESTED_LIST
    assert classify({"a": 1}) is FieldKind.NESTED_OBJECT


def test_non_record_items_are_opaque():
    assert is_record({"a": 1})
    assert not is_record("a")
    assert not is_record([1])
