from __future__ import annotations

from .document_store import DocumentStore
from .errors import JsonGridError, StorageError
from .handlers_grid import render_editor
from .io_utils import read_upload_bytes
from .log import get_logger
from .storage import DocumentStorage

logger = get_logger('handlers_document')


def _clean_id(doc_id) -> str:
    return (doc_id or "").strip()


def load_document_handler(storage: DocumentStorage, store: DocumentStore, doc_id):
    """Fetch `doc_id` and replace the session document with it."""
    doc_id = _clean_id(doc_id)
    try:
        data = storage.fetch(doc_id)
        store.load(data)
    except JsonGridError as exc:
        # Store keeps its previous document.
        return render_editor(store, f"Error loading data: {exc}")
    return render_editor(store, f"Loaded {doc_id} ({store.row_count} rows).")


def new_document_handler(store: DocumentStore):
    store.new_blank()
    return render_editor(store, 'New blank document. Click "Add row" or "Add column" to start.')


def save_document_handler(storage: DocumentStorage, store: DocumentStore, doc_id):
    doc_id = _clean_id(doc_id)
    try:
        storage.save(doc_id, store.snapshot())
    except StorageError as exc:
        return f"Save failed: {exc}"
    return "Saved successfully!"


def revert_last_handler(storage: DocumentStorage, store: DocumentStore, doc_id):
    """Undo the last save on the server, then re-fetch to resynchronize."""
    doc_id = _clean_id(doc_id)
    try:
        storage.revert_last(doc_id)
    except StorageError as exc:
        return render_editor(store, f"Revert failed: {exc}")
    outputs = load_document_handler(storage, store, doc_id)
    return outputs[:-1] + (f"Reverted last save. {outputs[-1]}",)


def upload_handler(storage: DocumentStorage, store: DocumentStore, file_obj, doc_id):
    """Ingest an uploaded file under a new id and load it.

    Returns the document id box value followed by the editor outputs.
    """
    if file_obj is None:
        return (doc_id,) + render_editor(store, "No file uploaded.")
    try:
        filename, content = read_upload_bytes(file_obj)
        result = storage.upload(filename, content)
    except (OSError, ValueError, JsonGridError) as exc:
        logger.warning("Upload failed: %s", exc)
        return (doc_id,) + render_editor(store, f"Upload failed: {exc}")

    outputs = load_document_handler(storage, store, result.id)
    return (result.id,) + outputs[:-1] + (f"{result.message} {outputs[-1]}",)


def download_handler(storage: DocumentStorage, doc_id):
    doc_id = _clean_id(doc_id)
    try:
        path = storage.download(doc_id)
    except StorageError as exc:
        return None, f"Download failed: {exc}"
    return str(path), f"Ready: {path.name}"


def startup_handler(storage: DocumentStorage, store: DocumentStore, doc_id):
    """Page load: drop expired files, then load the requested document."""
    storage.cleanup_old_files()
    return load_document_handler(storage, store, doc_id)
