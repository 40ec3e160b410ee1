from __future__ import annotations

from json_grid_editor.schema_utils import infer_columns, nested_column_map, nested_columns


def test_union_keeps_first_appearance_order():
    assert infer_columns([{"a": 1}, {"b": 2}, {"a": 3, "c": 4}]) == ["a", "b", "c"]


def test_empty_document_has_no_columns():
    assert infer_columns([]) == []


def test_nested_columns_union_across_rows(sample_document):
    assert nested_columns(sample_document, "b") == ["x", "z"]
    assert nested_columns(sample_document, "c") == ["y"]


def test_nested_columns_skip_opaque_items_and_primitives():
    doc = [{"k": [1, {"p": 1}]}, {"k": "plain"}, {"k": []}]
    assert nested_columns(doc, "k") == ["p"]


def test_nested_column_map_only_lists_nested_columns(sample_document):
    assert nested_column_map(sample_document) == {"b": ["x", "z"], "c": ["y"]}


def test_empty_nested_list_still_counts_as_nested():
    assert nested_column_map([{"a": 1, "b": []}]) == {"b": []}
