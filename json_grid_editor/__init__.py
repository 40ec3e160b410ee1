"""Core logic for the JSON Grid Editor.

The Gradio UI lives in `app.py`. This package contains the document model that:
- classifies and coerces cell values
- infers column sets across schema-less records
- applies cell edits and structural mutations
- projects a document onto an editable grid
- stores documents on disk by identifier
"""
