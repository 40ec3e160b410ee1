"""Structural mutations of a document.

Every function takes the current document and returns a new one; the input is
never modified, so a raised error leaves the caller's document untouched.
"""

from __future__ import annotations

from copy import deepcopy
from enum import Enum
from typing import Any, Dict, Iterable, List

from .accessors import check_index, get_record, nested_list_field
from .classifier import FieldKind, classify, is_record
from .config import DEFAULT_MAX_COLUMNS
from .errors import CapacityError, DuplicateKeyError, ValidationError

Document = List[Dict[str, Any]]


class ColumnKind(str, Enum):
    PRIMITIVE = 'primitive'
    NESTED = 'nested'


def blank_record(keys: Iterable[str]) -> Dict[str, Any]:
    return {key: '' for key in keys}


def clone_shape(value: Any) -> Any:
    """Empty value with the same shape as `value`."""
    kind = classify(value)
    if kind is FieldKind.NESTED_LIST:
        if value and is_record(value[0]):
            return [blank_record(value[0])]
        return []
    if kind is FieldKind.NESTED_OBJECT:
        return blank_record(value)
    return ''


def add_row(document: Document) -> Document:
    """Append a row shaped like the first one (or an empty row to an empty document)."""
    result = deepcopy(document)
    if not result:
        result.append({})
        return result
    first = result[0]
    result.append({key: clone_shape(value) for key, value in first.items()})
    return result


def delete_row(document: Document, row_index: int) -> Document:
    check_index(row_index, len(document))
    result = deepcopy(document)
    del result[row_index]
    return result


def normalize_sub_keys(sub_keys: Iterable[str]) -> List[str]:
    """De-duplicate sub-keys in order; keys are kept exactly as given."""
    keys: List[str] = []
    for key in sub_keys or []:
        if not isinstance(key, str) or not key.strip():
            raise ValidationError(f'Sub-column name must be a non-empty string, got {key!r}.')
        if key not in keys:
            keys.append(key)
    return keys


def add_column(
    document: Document,
    key: str,
    kind: ColumnKind = ColumnKind.PRIMITIVE,
    sub_keys: Iterable[str] = None,
    max_columns: int = DEFAULT_MAX_COLUMNS,
) -> Document:
    """Add `key` to every row.

    Primitive columns start as empty strings; nested columns start as a
    one-row nested table with `sub_keys`, each empty.
    """
    if not isinstance(key, str) or not key.strip():
        raise ValidationError('Column name must be a non-empty string.')
    try:
        kind = ColumnKind(kind)
    except ValueError:
        raise ValidationError(f'Unknown column kind {kind!r}.') from None

    if document:
        first = document[0]
        if key in first:
            raise DuplicateKeyError(f'Column {key!r} already exists.')
        if len(first) >= max_columns:
            raise CapacityError(f'Maximum {max_columns} columns allowed.')

    template: Any = ''
    if kind is ColumnKind.NESTED:
        keys = normalize_sub_keys(sub_keys)
        if not keys:
            raise ValidationError('A nested column needs at least one sub-column.')
        template = [blank_record(keys)]

    result = deepcopy(document)
    if not result:
        return [{key: deepcopy(template)}]
    for record in result:
        record[key] = deepcopy(template)
    return result


def delete_column(document: Document, key: str) -> Document:
    """Remove `key` from every row that has it."""
    result = deepcopy(document)
    for record in result:
        record.pop(key, None)
    return result


def add_nested_row(document: Document, row_index: int, key: str, sub_keys: Iterable[str]) -> Document:
    """Append a blank record to the nested list at (row_index, key)."""
    result = deepcopy(document)
    nested = nested_list_field(get_record(result, row_index), key)
    # Header set comes from the existing column; keep its keys verbatim.
    nested.append(blank_record(dict.fromkeys(sub_keys or [])))
    return result


def delete_nested_row(document: Document, row_index: int, key: str, nested_index: int) -> Document:
    result = deepcopy(document)
    nested = nested_list_field(get_record(result, row_index), key)
    del nested[check_index(nested_index, len(nested), 'nested row')]
    return result
