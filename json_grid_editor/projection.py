"""Grid projection of a document snapshot.

Headers are the inferred top-level column set. Nested header sets are computed
once per top-level column (union across all rows), so every row's nested table
under the same column is rendered with the same columns.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .accessors import CellPath
from .classifier import FieldKind, classify, is_record
from .schema_utils import infer_columns, nested_column_map

MISSING = object()

# Header for nested columns whose items are all non-records.
OPAQUE_HEADER = 'value'


def display_text(value: Any) -> str:
    if value is None or value is MISSING:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and math.isnan(value):
        return ''
    return str(value)


@dataclass(frozen=True)
class NestedRowView:
    nested_index: Optional[int]
    values: Tuple[str, ...]
    editable: bool = True


@dataclass(frozen=True)
class CellView:
    row_index: int
    key: str
    kind: FieldKind
    value: Any = MISSING
    nested_headers: Tuple[str, ...] = ()
    nested_rows: Tuple[NestedRowView, ...] = ()

    @property
    def present(self) -> bool:
        return self.value is not MISSING

    @property
    def editable(self) -> bool:
        """Primitive cells that exist in their record accept in-grid edits."""
        return self.kind is FieldKind.PRIMITIVE and self.present

    @property
    def text(self) -> str:
        if self.kind is FieldKind.NESTED_LIST:
            count = len(self.value)
            return f"[{count} row{'' if count == 1 else 's'}]"
        if self.kind is FieldKind.NESTED_OBJECT:
            return '{1 row}'
        return display_text(self.value)

    def nested_path(self, nested_index: Optional[int], nested_key: str) -> CellPath:
        return CellPath(self.key, nested_index, nested_key)


@dataclass
class GridProjection:
    headers: List[str]
    rows: List[List[CellView]] = field(default_factory=list)
    nested_headers: Dict[str, List[str]] = field(default_factory=dict)

    def cell(self, row_index: int, key: str) -> CellView:
        return self.rows[row_index][self.headers.index(key)]

    def to_frame(self) -> pd.DataFrame:
        """Top-level grid as strings; nested cells show a row-count summary."""
        data = [[cell.text for cell in row] for row in self.rows]
        return pd.DataFrame(data, columns=self.headers, dtype=object)

    def nested_frame(self, row_index: int, key: str) -> pd.DataFrame:
        cell = self.cell(row_index, key)
        data = [list(row.values) for row in cell.nested_rows]
        return pd.DataFrame(data, columns=list(cell.nested_headers), dtype=object)


def _nested_rows(value: Any, kind: FieldKind, headers: Sequence[str]) -> Tuple[NestedRowView, ...]:
    if kind is FieldKind.NESTED_OBJECT:
        return (NestedRowView(None, tuple(display_text(value.get(h, MISSING)) for h in headers)),)
    rows = []
    for idx, item in enumerate(value):
        if is_record(item):
            rows.append(NestedRowView(idx, tuple(display_text(item.get(h, MISSING)) for h in headers)))
        else:
            # Opaque item: shown as text in the first column, not editable.
            filler = ('',) * max(len(headers) - 1, 0)
            rows.append(NestedRowView(idx, (display_text(item),) + filler if headers else (), editable=False))
    return tuple(rows)


def _has_opaque_items(document: Sequence[Dict[str, Any]], key: str) -> bool:
    for record in document:
        value = record.get(key)
        if classify(value) is FieldKind.NESTED_LIST and any(not is_record(item) for item in value):
            return True
    return False


def project(document: Sequence[Dict[str, Any]]) -> GridProjection:
    headers = infer_columns(document)
    nested = nested_column_map(document, headers)
    for key, sub_headers in nested.items():
        if not sub_headers and _has_opaque_items(document, key):
            nested[key] = [OPAQUE_HEADER]
    rows: List[List[CellView]] = []

    for row_index, record in enumerate(document):
        cells: List[CellView] = []
        for key in headers:
            if key not in record:
                cells.append(CellView(row_index, key, FieldKind.PRIMITIVE))
                continue
            value = record[key]
            kind = classify(value)
            if kind is FieldKind.PRIMITIVE:
                cells.append(CellView(row_index, key, kind, value))
            else:
                sub_headers = tuple(nested.get(key, ()))
                cells.append(CellView(
                    row_index, key, kind, value,
                    nested_headers=sub_headers,
                    nested_rows=_nested_rows(value, kind, sub_headers),
                ))
        rows.append(cells)

    return GridProjection(headers=headers, rows=rows, nested_headers=nested)
