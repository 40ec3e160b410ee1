"""File-backed storage service.

Documents are kept as `data_<id>.json` under the data directory. Each save
keeps the previous file as a single `.bak` backup, which `revert_last` puts
back. Access to one identifier is serialized by a per-id lock.
"""

from __future__ import annotations

import secrets
import shutil
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Settings
from .errors import StorageError, ValidationError
from .io_utils import dump_document, parse_document_bytes, read_json_content
from .log import get_logger
from .validation import is_valid_document_id, validate_structure

logger = get_logger('storage')

DEMO_DOCUMENT = [
    {
        'id': 1,
        'name': 'Project Alpha',
        'kpis': [
            {'metric': 'Revenue', 'value': 100},
            {'metric': 'Cost', 'value': 50},
        ],
        'owner': 'Alice',
    },
    {
        'id': 2,
        'name': 'Project Beta',
        'owner': 'Bob',
        'kpis': [
            {'metric': 'Revenue', 'value': 200},
        ],
    },
]


@dataclass(frozen=True)
class UploadResult:
    id: str
    message: str


def generate_document_id() -> str:
    return secrets.token_hex(8)


class DocumentStorage:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.data_dir = Path(settings.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # --- helpers ---

    def _lock(self, doc_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(doc_id, threading.Lock())

    def path_for(self, doc_id: str) -> Path:
        if not is_valid_document_id(doc_id):
            raise StorageError(f"Invalid document id {doc_id!r}")
        return self.data_dir / f'data_{doc_id}.json'

    def backup_path_for(self, doc_id: str) -> Path:
        path = self.path_for(doc_id)
        return path.with_name(path.name + '.bak')

    def _validate(self, data: Any) -> None:
        if not isinstance(data, list):
            raise ValidationError('Document must be a list of records.')
        validate_structure(data, self.settings.max_columns, self.settings.max_nesting_level)

    def _write(self, path: Path, data: Any) -> None:
        tmp = path.with_name(path.name + '.tmp')
        try:
            tmp.write_text(dump_document(data), encoding='utf-8')
            tmp.replace(path)
        except OSError as exc:
            logger.error("Error saving %s: %s", path, exc)
            raise StorageError("Error saving file") from exc

    # --- boundary operations ---

    def fetch(self, doc_id: str) -> List[Any]:
        path = self.path_for(doc_id)
        with self._lock(doc_id):
            if not path.exists() or path.stat().st_size == 0:
                return []
            try:
                return read_json_content(path)
            except (OSError, ValueError) as exc:
                logger.error("Failed to read %s: %s", path, exc)
                raise StorageError(f"Error reading data: {exc}") from exc

    def save(self, doc_id: str, document: Any) -> None:
        path = self.path_for(doc_id)
        try:
            self._validate(document)
        except ValidationError as exc:
            raise StorageError(f"Validation Error: {exc}") from exc

        with self._lock(doc_id):
            if path.exists():
                shutil.copyfile(path, self.backup_path_for(doc_id))
            self._write(path, document)
        logger.info("Saved document %s (%d rows)", doc_id, len(document))

    def upload(self, filename: str, content: bytes) -> UploadResult:
        limit = self.settings.max_upload_size_bytes
        if len(content) > limit:
            raise StorageError(f"File too large (maximum {self.settings.max_upload_size_mb} MB)")
        try:
            data = parse_document_bytes(filename, content)
            self._validate(data)
        except ValidationError as exc:
            logger.warning("Rejected upload %s: %s", filename, exc)
            raise StorageError(f"Validation Error: {exc}") from exc

        doc_id = generate_document_id()
        with self._lock(doc_id):
            self._write(self.path_for(doc_id), data)
        logger.info("Uploaded %s as document %s", filename, doc_id)
        return UploadResult(id=doc_id, message="File uploaded and saved.")

    def download(self, doc_id: str) -> Path:
        path = self.path_for(doc_id)
        with self._lock(doc_id):
            if not path.exists():
                raise StorageError("File not found")
        return path

    def revert_last(self, doc_id: str) -> None:
        path = self.path_for(doc_id)
        backup = self.backup_path_for(doc_id)
        with self._lock(doc_id):
            if not backup.exists():
                raise StorageError("Nothing to revert")
            backup.replace(path)
        logger.info("Reverted document %s to its previous save", doc_id)

    # --- housekeeping ---

    def ensure_demo_document(self, doc_id: Optional[str] = None) -> None:
        doc_id = doc_id or self.settings.default_document_id
        path = self.path_for(doc_id)
        with self._lock(doc_id):
            if not path.exists():
                self._write(path, DEMO_DOCUMENT)
                logger.info("Created sample document %s", doc_id)

    def cleanup_old_files(self, now: Optional[float] = None) -> List[Path]:
        """Delete stored documents (and backups) older than the configured TTL."""
        now = time.time() if now is None else now
        max_age = self.settings.file_ttl_hours * 3600
        keep = self.path_for(self.settings.default_document_id).name
        removed: List[Path] = []
        files = sorted(self.data_dir.glob('data_*.json')) + sorted(self.data_dir.glob('data_*.json.bak'))
        for path in files:
            if path.name in (keep, keep + '.bak'):
                continue
            try:
                age = now - path.stat().st_mtime
                if age > max_age:
                    path.unlink()
                    removed.append(path)
                    logger.info("Removed old file: %s", path)
            except OSError as exc:
                logger.warning("Error removing old file %s: %s", path, exc)
        logger.info("Cleanup completed, checked %d files", len(files))
        return removed
