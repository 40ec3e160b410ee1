from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .classifier import FieldKind, classify, is_record


def infer_columns(records: Iterable[Any]) -> List[str]:
    """Ordered union of record keys, by first appearance.

    Records are visited in order and so are the keys of each record; a key is
    appended the first time it is seen. Non-record items are skipped.
    """
    seen: Dict[str, None] = {}
    for record in records:
        if not is_record(record):
            continue
        for key in record:
            if key not in seen:
                seen[key] = None
    return list(seen)


def nested_records(value: Any) -> List[Mapping[str, Any]]:
    """Records held by a nested field (the object itself for a nested object)."""
    kind = classify(value)
    if kind is FieldKind.NESTED_LIST:
        return [item for item in value if is_record(item)]
    if kind is FieldKind.NESTED_OBJECT:
        return [value]
    return []


def nested_columns(document: Sequence[Mapping[str, Any]], key: str) -> List[str]:
    """Sub-column set of one top-level column, unioned across all rows.

    Computed once per column so every row's nested table under `key` shares the
    same header set.
    """
    collected: List[Mapping[str, Any]] = []
    for record in document:
        if is_record(record) and key in record:
            collected.extend(nested_records(record[key]))
    return infer_columns(collected)


def nested_column_map(document: Sequence[Mapping[str, Any]], columns: Iterable[str] = None) -> Dict[str, List[str]]:
    """Map each nested-typed top-level column to its shared sub-column set."""
    if columns is None:
        columns = infer_columns(document)
    result: Dict[str, List[str]] = {}
    for key in columns:
        if any(is_record(rec) and key in rec and classify(rec[key]).is_nested for rec in document):
            result[key] = nested_columns(document, key)
    return result
