from __future__ import annotations

import json

import pandas as pd

from json_grid_editor.document_store import DocumentStore
from json_grid_editor.handlers_document import (
    download_handler,
    load_document_handler,
    new_document_handler,
    revert_last_handler,
    save_document_handler,
    upload_handler,
)
from json_grid_editor.handlers_grid import (
    add_column_handler,
    add_nested_row_handler,
    add_row_handler,
    apply_grid_edits,
    apply_nested_edits,
    delete_column_handler,
    delete_nested_row_handler,
    delete_row_handler,
    show_nested_table,
)
from json_grid_editor.projection import project


def _grid(store):
    return project(store.snapshot()).to_frame()


def test_grid_edit_writes_changed_cells_only(store):
    frame = _grid(store)
    frame.iloc[0, 0] = "42"
    outputs = apply_grid_edits(store, frame)
    assert outputs[-1] == "Updated 1 cell(s)."
    assert store.snapshot()[0]["a"] == 42
    assert outputs[1].iloc[0, 0] == "42"


def test_grid_edit_of_nested_summary_is_rejected(store, sample_document):
    frame = _grid(store)
    frame.iloc[0, 1] = "oops"
    outputs = apply_grid_edits(store, frame)
    assert outputs[-1].startswith("Error:")
    assert store.snapshot() == sample_document


def test_grid_edit_accepts_list_payload(store):
    rows = _grid(store).values.tolist()
    rows[1][0] = "text"
    apply_grid_edits(store, rows)
    assert store.snapshot()[1]["a"] == "text"


def test_nested_edits(store):
    frame = project(store.snapshot()).nested_frame(1, "b")
    frame.iloc[1, 1] = "5"
    outputs = apply_nested_edits(store, frame, 1, "b")
    assert store.snapshot()[1]["b"][1] == {"x": "3", "z": 5}
    assert outputs[-1] == "Updated 1 nested cell(s)."


def test_nested_edit_of_missing_key_is_reported(store):
    frame = project(store.snapshot()).nested_frame(0, "b")
    frame.iloc[0, 1] = "new"
    outputs = apply_nested_edits(store, frame, 0, "b")
    assert "does not exist" in outputs[-1]
    assert store.snapshot()[0]["b"] == [{"x": "1"}]


def test_show_nested_table(store):
    frame, message = show_nested_table(store, 0, "c")
    assert list(frame.columns) == ["y"]
    assert "single object" in message
    empty, message = show_nested_table(store, 0, "a")
    assert empty.empty


def test_structural_handlers(store):
    add_row_handler(store)
    assert store.row_count == 3

    outputs = delete_row_handler(store, 2, False)
    assert store.row_count == 3
    assert "Confirm" in outputs[-1]
    delete_row_handler(store, 2, True)
    assert store.row_count == 2

    add_column_handler(store, "kpis", "nested", "metric, value")
    assert store.snapshot()[0]["kpis"] == [{"metric": "", "value": ""}]
    outputs = add_column_handler(store, "kpis", "primitive", "")
    assert outputs[-1].startswith("Error:")

    delete_column_handler(store, "kpis", True)
    assert "kpis" not in store.columns()


def test_nested_row_handlers_use_shared_headers(store):
    add_nested_row_handler(store, 0, "b")
    assert store.snapshot()[0]["b"][-1] == {"x": "", "z": ""}
    outputs = add_nested_row_handler(store, 0, "c")
    assert "single object" in outputs[-1]
    delete_nested_row_handler(store, 0, True, 0, "b")
    assert store.snapshot()[0]["b"] == [{"x": "", "z": ""}]


def test_document_lifecycle(storage):
    store = DocumentStore()
    storage.save("doc1", [{"a": 1}])

    outputs = load_document_handler(storage, store, "doc1")
    assert store.snapshot() == [{"a": 1}]
    assert outputs[-1] == "Loaded doc1 (1 rows)."

    apply_grid_edits(store, pd.DataFrame([["2"]], columns=["a"]))
    assert save_document_handler(storage, store, "doc1") == "Saved successfully!"
    assert storage.fetch("doc1") == [{"a": 2}]

    outputs = revert_last_handler(storage, store, "doc1")
    assert store.snapshot() == [{"a": 1}]
    assert outputs[-1].startswith("Reverted last save.")

    new_document_handler(store)
    assert store.is_empty


def test_failed_load_keeps_document(storage, store, sample_document):
    outputs = load_document_handler(storage, store, "../bad")
    assert outputs[-1].startswith("Error loading data")
    assert store.snapshot() == sample_document


def test_failed_save_reports_message(storage):
    store = DocumentStore([{"a": {"b": {"c": 1}}}])
    assert save_document_handler(storage, store, "doc1").startswith("Save failed: Validation Error")


def test_upload_and_download(storage, tmp_path):
    source = tmp_path / "upload.json"
    source.write_text(json.dumps([{"k": "v"}]), encoding="utf-8")
    store = DocumentStore()

    outputs = upload_handler(storage, store, str(source), "demo")
    new_id = outputs[0]
    assert new_id != "demo"
    assert store.snapshot() == [{"k": "v"}]
    assert outputs[-1].startswith("File uploaded and saved.")

    path, message = download_handler(storage, new_id)
    assert json.loads(open(path, encoding="utf-8").read()) == [{"k": "v"}]
    assert download_handler(storage, "missing")[0] is None


def test_grid_edit_of_missing_cell_is_reported_without_writing():
    store = DocumentStore([{"a": 1, "b": 2}, {"a": 3}])
    frame = _grid(store)
    frame.iloc[1, 1] = "9"
    outputs = apply_grid_edits(store, frame)
    assert outputs[-1] == "Error: row 1, b: column does not exist in this row"
    assert store.snapshot() == [{"a": 1, "b": 2}, {"a": 3}]


def test_nested_edit_of_plain_item_is_read_only():
    store = DocumentStore([{"l": ["plain", {"k": 2}]}])
    frame = project(store.snapshot()).nested_frame(0, "l")
    frame.iloc[0, 0] = "changed"
    frame.iloc[1, 0] = "3"
    outputs = apply_nested_edits(store, frame, 0, "l")
    assert outputs[-1] == "Error: l[0]: item is not a record and is read-only"
    assert store.snapshot() == [{"l": ["plain", {"k": 3}]}]


def test_add_column_handler_trims_the_typed_name(store):
    add_column_handler(store, "  notes  ", "primitive", "")
    assert "notes" in store.columns()
    assert "  notes  " not in store.columns()
