from __future__ import annotations

from typing import Any, MutableMapping, NamedTuple, Optional, Sequence, Union

from .classifier import FieldKind, classify, is_record
from .errors import MissingKeyError, RowIndexError, UnsupportedOperationError


class CellPath(NamedTuple):
    """Address of a nested cell.

    `nested_index` is None when the field is a single nested object.
    """

    key: str
    nested_index: Optional[int]
    nested_key: str

    def describe(self) -> str:
        if self.nested_index is None:
            return f'{self.key}.{self.nested_key}'
        return f'{self.key}[{self.nested_index}].{self.nested_key}'


ColumnPath = Union[str, CellPath]


def check_index(index: Any, size: int, label: str = 'row') -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise RowIndexError(f'{label} index must be an integer, got {index!r}')
    if index < 0 or index >= size:
        if not size:
            raise RowIndexError(f'{label} index {index} out of range (no {label}s)')
        raise RowIndexError(f'{label} index {index} out of range (0..{size - 1})')
    return index


def get_record(document: Sequence[MutableMapping[str, Any]], row_index: int) -> MutableMapping[str, Any]:
    return document[check_index(row_index, len(document))]


def get_field(record: MutableMapping[str, Any], key: str) -> Any:
    if key not in record:
        raise MissingKeyError(f'column {key!r} does not exist in this row')
    return record[key]


def nested_list_field(record: MutableMapping[str, Any], key: str) -> list:
    """Return the nested list at `key`, refusing single objects and primitives."""
    value = get_field(record, key)
    kind = classify(value)
    if kind is FieldKind.NESTED_OBJECT:
        raise UnsupportedOperationError(f'column {key!r} holds a single object; nested rows cannot be added or removed')
    if kind is not FieldKind.NESTED_LIST:
        raise UnsupportedOperationError(f'column {key!r} is not a nested table')
    return value


def resolve_cell_container(
    document: Sequence[MutableMapping[str, Any]],
    row_index: int,
    path: ColumnPath,
) -> tuple:
    """Resolve `path` to the (mapping, key) pair that holds the primitive cell.

    Raises RowIndexError, MissingKeyError or UnsupportedOperationError; never
    creates keys.
    """
    record = get_record(document, row_index)

    if isinstance(path, str):
        value = get_field(record, path)
        if classify(value).is_nested:
            raise UnsupportedOperationError(f'column {path!r} is a nested table; edit its cells instead')
        return record, path

    key, nested_index, nested_key = path
    value = get_field(record, key)
    kind = classify(value)

    if kind is FieldKind.PRIMITIVE:
        raise UnsupportedOperationError(f'column {key!r} is not a nested table')

    if kind is FieldKind.NESTED_OBJECT:
        if nested_index is not None:
            raise UnsupportedOperationError(f'column {key!r} holds a single object; address it without a row index')
        target = value
    else:
        if nested_index is None:
            raise UnsupportedOperationError(f'column {key!r} is a nested list; a nested row index is required')
        target = value[check_index(nested_index, len(value), 'nested row')]
        if not is_record(target):
            raise UnsupportedOperationError(f'{key}[{nested_index}] is not a record and cannot be edited')

    if nested_key not in target:
        raise MissingKeyError(f'column {nested_key!r} does not exist in {key!r}')
    if classify(target[nested_key]).is_nested:
        raise UnsupportedOperationError(f'{CellPath(key, nested_index, nested_key).describe()} is nested deeper than one level')
    return target, nested_key
