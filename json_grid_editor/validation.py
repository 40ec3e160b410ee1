from __future__ import annotations

import re
from typing import Any

from .errors import ValidationError

DOCUMENT_ID_PATTERN = re.compile(r'[A-Za-z0-9_-]+')


def is_valid_document_id(doc_id: Any) -> bool:
    return isinstance(doc_id, str) and DOCUMENT_ID_PATTERN.fullmatch(doc_id) is not None


def _is_complex(value: Any) -> bool:
    return isinstance(value, (dict, list))


def validate_structure(data: Any, max_keys: int, max_nesting_level: int = 1) -> None:
    """Check key-count and nesting limits before a document is persisted.

    The top-level list and its records are level 0; an object or list held by a
    record field is level 1. List wrappers do not add a level of their own.
    """
    _validate(data, 0, max_keys, max_nesting_level)


def _validate(data: Any, level: int, max_keys: int, max_nesting_level: int) -> None:
    if level > max_nesting_level:
        raise ValidationError(f'nesting level exceeds maximum allowed ({max_nesting_level})')

    if isinstance(data, dict):
        if len(data) > max_keys:
            raise ValidationError(f'object has {len(data)} keys, maximum allowed is {max_keys}')
        for value in data.values():
            if _is_complex(value):
                _validate(value, level + 1, max_keys, max_nesting_level)
    elif isinstance(data, list):
        for value in data:
            if _is_complex(value):
                _validate(value, level, max_keys, max_nesting_level)
