from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, List

import pandas as pd

from .coercion import coerce
from .errors import ValidationError

SPREADSHEET_SUFFIXES = ('.xlsx', '.xls', '.csv')


def read_json_content(file_obj):
    """Read JSON content from an uploaded file or file path."""
    if file_obj is None:
        raise ValueError("No file uploaded.")

    if hasattr(file_obj, 'read'):
        if hasattr(file_obj, 'seek'):
            file_obj.seek(0)
        content = file_obj.read()
        if isinstance(content, bytes):
            content = content.decode('utf-8')
        return json.loads(content)

    path = file_obj.name if hasattr(file_obj, 'name') else file_obj
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def read_upload_bytes(file_obj) -> tuple:
    """Return (filename, content bytes) for a Gradio upload or a file path."""
    if file_obj is None:
        raise ValueError("No file uploaded.")
    path = Path(file_obj.name if hasattr(file_obj, 'name') else file_obj)
    return path.name, path.read_bytes()


def _cell_value(value: Any) -> Any:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ''
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        return value
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if hasattr(value, 'item'):
        # numpy scalar
        return _cell_value(value.item())
    return value


def frame_to_records(df: pd.DataFrame, coerce_text: bool = False) -> List[dict]:
    """Convert a sheet into records keyed by its header row; blank cells become ''.

    With `coerce_text`, string cells go through the same coercion as edited
    cells (CSV has no cell types of its own).
    """
    columns = [str(c).strip() for c in df.columns]
    records = []
    for row in df.itertuples(index=False, name=None):
        record = {}
        for key, value in zip(columns, row):
            value = _cell_value(value)
            if coerce_text and isinstance(value, str):
                value = coerce(value)
            record[key] = value
        records.append(record)
    return records


def parse_document_bytes(filename: str, content: bytes) -> Any:
    """Parse an uploaded payload into a JSON value (spreadsheets become a record list)."""
    suffix = Path(filename or '').suffix.lower()
    if suffix in SPREADSHEET_SUFFIXES:
        try:
            if suffix == '.csv':
                df = pd.read_csv(io.BytesIO(content), dtype=object, keep_default_na=False)
            else:
                df = pd.read_excel(io.BytesIO(content), sheet_name=0)
        except Exception as exc:
            raise ValidationError(f'Could not read spreadsheet: {exc}') from exc
        return frame_to_records(df, coerce_text=(suffix == '.csv'))

    try:
        return json.loads(content.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError('Invalid JSON format') from exc


def dump_document(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)
