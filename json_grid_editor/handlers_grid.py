from __future__ import annotations

from typing import Any, List, Optional

import gradio as gr
import pandas as pd

from .classifier import FieldKind
from .document_store import DocumentStore
from .errors import JsonGridError
from .log import get_logger
from .mutations import ColumnKind
from .projection import GridProjection, display_text, project

logger = get_logger('handlers_grid')

NOT_CONFIRMED = "Tick 'Confirm delete' first."


def frame_rows(frame) -> List[List[Any]]:
    """Rows of a Gradio Dataframe value (pandas, dict payload or list of lists)."""
    if frame is None:
        return []
    try:
        return frame.values.tolist()
    except AttributeError:
        if isinstance(frame, dict):
            return [list(row) for row in frame.get("data", [])]
        return [list(row) for row in frame]


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return ""
        except (TypeError, ValueError):
            pass
    return value if isinstance(value, str) else display_text(value)


def parse_index(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)


def parse_sub_keys(text: str) -> List[str]:
    if not text:
        return []
    return [part.strip() for part in str(text).split(",") if part.strip()]


def nested_cell(projection: GridProjection, nested_row, nested_key):
    row_index = parse_index(nested_row)
    if row_index is None or not nested_key or nested_key not in projection.headers:
        return None
    if row_index < 0 or row_index >= len(projection.rows):
        return None
    cell = projection.cell(row_index, nested_key)
    if not cell.kind.is_nested:
        return None
    return cell


def nested_frame(projection: GridProjection, nested_row, nested_key) -> pd.DataFrame:
    cell = nested_cell(projection, nested_row, nested_key)
    if cell is None:
        return pd.DataFrame()
    return projection.nested_frame(cell.row_index, cell.key)


def render_editor(store: DocumentStore, message: str, nested_row=None, nested_key=None):
    """Outputs shared by every handler that changes the document."""
    projection = project(store.snapshot())
    nested_keys = list(projection.nested_headers)
    selected = nested_key if nested_key in nested_keys else None
    return (
        store,
        projection.to_frame(),
        gr.update(choices=projection.headers, value=None),
        gr.update(choices=nested_keys, value=selected),
        nested_frame(projection, nested_row, selected),
        message,
    )


def _run(store: DocumentStore, action, success: str, nested_row=None, nested_key=None):
    try:
        action()
    except JsonGridError as exc:
        logger.warning("Rejected edit: %s", exc)
        return render_editor(store, f"Error: {exc}", nested_row, nested_key)
    return render_editor(store, success, nested_row, nested_key)


def show_nested_table(store: DocumentStore, nested_row, nested_key):
    projection = project(store.snapshot())
    cell = nested_cell(projection, nested_row, nested_key)
    if cell is None:
        return pd.DataFrame(), "Pick a row and a nested column."
    if cell.kind is FieldKind.NESTED_OBJECT:
        return projection.nested_frame(cell.row_index, cell.key), f"{cell.key} (row {cell.row_index}) is a single object."
    return projection.nested_frame(cell.row_index, cell.key), f"{cell.key} (row {cell.row_index}): {cell.text}"


def apply_grid_edits(store: DocumentStore, grid_df, nested_row=None, nested_key=None):
    """Write back every changed primitive cell of the top-level grid."""
    projection = project(store.snapshot())
    rows = frame_rows(grid_df)
    applied = 0
    errors: List[str] = []

    for row_index, row_cells in enumerate(projection.rows):
        if row_index >= len(rows):
            break
        edited = rows[row_index]
        for col, cell in enumerate(row_cells):
            if col >= len(edited):
                break
            new_text = cell_text(edited[col])
            if new_text == cell.text:
                continue
            if cell.kind.is_nested:
                errors.append(f"row {row_index}, {cell.key}: nested cells are edited in the nested table")
                continue
            if not cell.editable:
                errors.append(f"row {row_index}, {cell.key}: column does not exist in this row")
                continue
            try:
                store.set_cell(row_index, cell.key, new_text)
                applied += 1
            except JsonGridError as exc:
                errors.append(f"row {row_index}, {cell.key}: {exc}")

    if errors:
        logger.warning("Rejected %d grid edit(s)", len(errors))
        return render_editor(store, "Error: " + "; ".join(errors), nested_row, nested_key)
    return render_editor(store, f"Updated {applied} cell(s)." if applied else "", nested_row, nested_key)


def apply_nested_edits(store: DocumentStore, nested_df, nested_row, nested_key):
    projection = project(store.snapshot())
    cell = nested_cell(projection, nested_row, nested_key)
    if cell is None:
        return render_editor(store, "Error: no nested table selected.", nested_row, nested_key)

    rows = frame_rows(nested_df)
    applied = 0
    errors: List[str] = []
    for position, view in enumerate(cell.nested_rows):
        if position >= len(rows):
            break
        edited = rows[position]
        if not view.editable:
            if any(cell_text(v) != old for v, old in zip(edited, view.values)):
                errors.append(f"{cell.key}[{view.nested_index}]: item is not a record and is read-only")
            continue
        for col, header in enumerate(cell.nested_headers):
            if col >= len(edited):
                break
            new_text = cell_text(edited[col])
            if new_text == view.values[col]:
                continue
            path = cell.nested_path(view.nested_index, header)
            try:
                store.set_cell(cell.row_index, path, new_text)
                applied += 1
            except JsonGridError as exc:
                errors.append(f"{path.describe()}: {exc}")

    if errors:
        return render_editor(store, "Error: " + "; ".join(errors), nested_row, nested_key)
    return render_editor(store, f"Updated {applied} nested cell(s)." if applied else "", nested_row, nested_key)


def add_row_handler(store: DocumentStore, nested_row=None, nested_key=None):
    return _run(store, store.add_row, "Row added.", nested_row, nested_key)


def delete_row_handler(store: DocumentStore, row_index, confirmed, nested_row=None, nested_key=None):
    if not confirmed:
        return render_editor(store, NOT_CONFIRMED, nested_row, nested_key)
    index = parse_index(row_index)
    # Row positions shift, so the nested selection is dropped.
    return _run(store, lambda: store.delete_row(index), f"Row {index} deleted.")


def add_column_handler(store: DocumentStore, name, kind, sub_keys_text, nested_row=None, nested_key=None):
    kind = ColumnKind.NESTED if kind == ColumnKind.NESTED.value else ColumnKind.PRIMITIVE
    name = (name or "").strip()
    sub_keys = parse_sub_keys(sub_keys_text)
    return _run(
        store,
        lambda: store.add_column(name, kind, sub_keys),
        f"Column {name!r} added.",
        nested_row,
        nested_key,
    )


def delete_column_handler(store: DocumentStore, key, confirmed, nested_row=None, nested_key=None):
    if not confirmed:
        return render_editor(store, NOT_CONFIRMED, nested_row, nested_key)
    if not key:
        return render_editor(store, "Error: pick a column to delete.", nested_row, nested_key)
    return _run(store, lambda: store.delete_column(key), f"Column {key!r} deleted.", nested_row, nested_key)


def add_nested_row_handler(store: DocumentStore, nested_row, nested_key):
    index = parse_index(nested_row)
    if index is None or not nested_key:
        return render_editor(store, "Error: no nested table selected.", nested_row, nested_key)
    # Fixed header set shared by the whole column, not this row's own keys.
    sub_keys = store.nested_columns(nested_key)
    return _run(
        store,
        lambda: store.add_nested_row(index, nested_key, sub_keys),
        f"Nested row added to {nested_key} (row {index}).",
        nested_row,
        nested_key,
    )


def delete_nested_row_handler(store: DocumentStore, nested_index, confirmed, nested_row, nested_key):
    if not confirmed:
        return render_editor(store, NOT_CONFIRMED, nested_row, nested_key)
    index = parse_index(nested_row)
    position = parse_index(nested_index)
    if index is None or not nested_key:
        return render_editor(store, "Error: no nested table selected.", nested_row, nested_key)
    return _run(
        store,
        lambda: store.delete_nested_row(index, nested_key, position),
        f"Nested row {position} deleted from {nested_key} (row {index}).",
        nested_row,
        nested_key,
    )
