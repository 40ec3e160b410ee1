from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any


class FieldKind(str, Enum):
    PRIMITIVE = 'primitive'
    NESTED_LIST = 'nested_list'
    NESTED_OBJECT = 'nested_object'

    @property
    def is_nested(self) -> bool:
        return self is not FieldKind.PRIMITIVE


def classify(value: Any) -> FieldKind:
    """Classify a field value by structure alone.

    Any list/tuple is a nested list, even when empty or holding non-record items;
    any mapping is a single nested object; everything else is a primitive.
    """
    if isinstance(value, (list, tuple)):
        return FieldKind.NESTED_LIST
    if isinstance(value, Mapping):
        return FieldKind.NESTED_OBJECT
    return FieldKind.PRIMITIVE


def is_record(item: Any) -> bool:
    """True for nested-list items that can be edited as a row."""
    return isinstance(item, Mapping)
