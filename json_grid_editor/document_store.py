from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Iterable, List

from . import mutations
from .accessors import ColumnPath, resolve_cell_container
from .classifier import is_record
from .coercion import coerce
from .config import DEFAULT_MAX_COLUMNS
from .errors import ValidationError
from .log import get_logger
from .mutations import ColumnKind, Document
from .schema_utils import infer_columns, nested_column_map, nested_columns

logger = get_logger('document_store')


def ensure_document(data: Any) -> Document:
    """Check that `data` is a sequence of keyed records."""
    if not isinstance(data, (list, tuple)):
        raise ValidationError(f'Document must be a list of records, got {type(data).__name__}.')
    for idx, record in enumerate(data):
        if not is_record(record):
            raise ValidationError(f'Row {idx} is not a record (got {type(record).__name__}).')
        if not all(isinstance(key, str) for key in record):
            raise ValidationError(f'Row {idx} has non-string column keys.')
    return [dict(record) for record in deepcopy(list(data))]


class DocumentStore:
    """Owns the current document and applies every mutation to it.

    Consumers read through snapshot()/columns() and request changes through the
    mutation methods; a failed mutation leaves the document as it was.
    """

    def __init__(self, document: Iterable[Dict[str, Any]] = None, max_columns: int = DEFAULT_MAX_COLUMNS):
        self.max_columns = max_columns
        self._document: Document = []
        if document is not None:
            self.load(document)

    # --- lifecycle ---

    def load(self, document: Any) -> None:
        self._document = ensure_document(document)
        logger.debug("Loaded document with %d rows", len(self._document))

    def new_blank(self) -> None:
        self._document = []

    def snapshot(self) -> Document:
        return deepcopy(self._document)

    @property
    def row_count(self) -> int:
        return len(self._document)

    @property
    def is_empty(self) -> bool:
        return not self._document

    # --- schema ---

    def columns(self) -> List[str]:
        return infer_columns(self._document)

    def nested_columns(self, key: str) -> List[str]:
        return nested_columns(self._document, key)

    def nested_column_map(self) -> Dict[str, List[str]]:
        return nested_column_map(self._document)

    # --- mutations ---

    def set_cell(self, row_index: int, column_path: ColumnPath, raw_text: str) -> Any:
        """Write the coerced `raw_text` at an existing cell and return the stored value."""
        container, key = resolve_cell_container(self._document, row_index, column_path)
        value = coerce(raw_text)
        container[key] = value
        return value

    def add_row(self) -> None:
        self._document = mutations.add_row(self._document)

    def delete_row(self, row_index: int) -> None:
        self._document = mutations.delete_row(self._document, row_index)

    def add_column(self, key: str, kind: ColumnKind = ColumnKind.PRIMITIVE, sub_keys: Iterable[str] = None) -> None:
        self._document = mutations.add_column(
            self._document, key, kind, sub_keys, max_columns=self.max_columns
        )

    def delete_column(self, key: str) -> None:
        self._document = mutations.delete_column(self._document, key)

    def add_nested_row(self, row_index: int, key: str, sub_keys: Iterable[str]) -> None:
        self._document = mutations.add_nested_row(self._document, row_index, key, sub_keys)

    def delete_nested_row(self, row_index: int, key: str, nested_index: int) -> None:
        self._document = mutations.delete_nested_row(self._document, row_index, key, nested_index)
