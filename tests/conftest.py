from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from json_grid_editor.config import Settings
from json_grid_editor.document_store import DocumentStore
from json_grid_editor.storage import DocumentStorage


@pytest.fixture
def sample_document():
    return [
        {"a": "1", "b": [{"x": "1"}], "c": {"y": "1"}},
        {"a": 2, "b": [{"x": "2"}, {"x": "3", "z": 4}], "c": {"y": "2"}},
    ]


@pytest.fixture
def store(sample_document) -> DocumentStore:
    return DocumentStore(sample_document, max_columns=10)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data", log_dir=tmp_path / "logs", max_columns=10)


@pytest.fixture
def storage(settings: Settings) -> DocumentStorage:
    return DocumentStorage(settings)
