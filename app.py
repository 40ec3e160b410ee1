import gradio as gr
from functools import partial

from json_grid_editor.config import load_settings
from json_grid_editor.document_store import DocumentStore
from json_grid_editor.log import configure_logging, get_logger
from json_grid_editor.mutations import ColumnKind
from json_grid_editor.storage import DocumentStorage
from json_grid_editor.handlers_document import (
    download_handler,
    load_document_handler,
    new_document_handler,
    revert_last_handler,
    save_document_handler,
    startup_handler,
    upload_handler,
)
from json_grid_editor.handlers_grid import (
    add_column_handler,
    add_nested_row_handler,
    add_row_handler,
    apply_grid_edits,
    apply_nested_edits,
    delete_column_handler,
    delete_nested_row_handler,
    delete_row_handler,
    show_nested_table,
)

settings = load_settings()
configure_logging(settings.log_dir)
logger = get_logger("app")

storage = DocumentStorage(settings)
storage.ensure_demo_document()

# --- UI Definition ---
with gr.Blocks(title="JSON Grid Editor") as demo:
    gr.Markdown("# JSON Grid Editor")
    gr.Markdown("Edit a JSON list of records as a spreadsheet. Array and object fields open as nested tables.")

    # State: one document per browser session.
    store_state = gr.State(value=DocumentStore(max_columns=settings.max_columns))

    with gr.Row():
        doc_id_box = gr.Textbox(label="Document ID", value=settings.default_document_id, scale=2)
        load_btn = gr.Button("Load")
        new_btn = gr.Button("New blank")
        save_btn = gr.Button("Save", variant="primary")
        revert_btn = gr.Button("Revert last save")

    with gr.Row():
        with gr.Column(scale=1):
            file_input = gr.File(label="Upload JSON / spreadsheet", file_types=[".json", ".xlsx", ".xls", ".csv"])
        with gr.Column(scale=1):
            download_btn = gr.Button("Download")
            download_output = gr.File(label="Download Result")
    status_msg = gr.Textbox(label="Status", interactive=False)

    gr.Markdown("### 1. Grid")
    grid = gr.Dataframe(label="Records", interactive=True, wrap=True)

    gr.Markdown("### 2. Rows & Columns")
    with gr.Row():
        with gr.Column():
            add_row_btn = gr.Button("Add row")
            delete_row_index = gr.Number(label="Row index", precision=0, value=0)
            delete_row_btn = gr.Button("Delete row", variant="stop")
        with gr.Column():
            column_name = gr.Textbox(label="New column name")
            column_kind = gr.Radio(
                choices=[ColumnKind.PRIMITIVE.value, ColumnKind.NESTED.value],
                value=ColumnKind.PRIMITIVE.value,
                label="Column kind",
            )
            sub_keys_box = gr.Textbox(label="Sub-columns (nested only)", placeholder="metric, value")
            add_column_btn = gr.Button("Add column")
        with gr.Column():
            column_selector = gr.Dropdown(label="Column", choices=[], interactive=True)
            delete_column_btn = gr.Button("Delete column", variant="stop")
            confirm_delete = gr.Checkbox(label="Confirm delete", value=False)

    gr.Markdown("### 3. Nested table")
    with gr.Row():
        nested_row_box = gr.Number(label="Row index", precision=0, value=0)
        nested_column_selector = gr.Dropdown(label="Nested column", choices=[], interactive=True)
        show_nested_btn = gr.Button("Open")
    nested_grid = gr.Dataframe(label="Nested rows", interactive=True, wrap=True)
    with gr.Row():
        add_nested_row_btn = gr.Button("Add nested row")
        nested_index_box = gr.Number(label="Nested row index", precision=0, value=0)
        delete_nested_row_btn = gr.Button("Delete nested row", variant="stop")

    editor_outputs = [store_state, grid, column_selector, nested_column_selector, nested_grid, status_msg]
    nested_inputs = [nested_row_box, nested_column_selector]

    demo.load(
        fn=partial(startup_handler, storage),
        inputs=[store_state, doc_id_box],
        outputs=editor_outputs,
    )

    load_btn.click(
        fn=partial(load_document_handler, storage),
        inputs=[store_state, doc_id_box],
        outputs=editor_outputs,
    )

    new_btn.click(
        fn=new_document_handler,
        inputs=[store_state],
        outputs=editor_outputs,
    )

    save_btn.click(
        fn=partial(save_document_handler, storage),
        inputs=[store_state, doc_id_box],
        outputs=[status_msg],
    )

    revert_btn.click(
        fn=partial(revert_last_handler, storage),
        inputs=[store_state, doc_id_box],
        outputs=editor_outputs,
    )

    file_input.upload(
        fn=partial(upload_handler, storage),
        inputs=[store_state, file_input, doc_id_box],
        outputs=[doc_id_box] + editor_outputs,
    )

    download_btn.click(
        fn=partial(download_handler, storage),
        inputs=[doc_id_box],
        outputs=[download_output, status_msg],
    )

    grid.input(
        fn=apply_grid_edits,
        inputs=[store_state, grid] + nested_inputs,
        outputs=editor_outputs,
    )

    add_row_btn.click(
        fn=add_row_handler,
        inputs=[store_state] + nested_inputs,
        outputs=editor_outputs,
    )

    delete_row_btn.click(
        fn=delete_row_handler,
        inputs=[store_state, delete_row_index, confirm_delete] + nested_inputs,
        outputs=editor_outputs,
    )

    add_column_btn.click(
        fn=add_column_handler,
        inputs=[store_state, column_name, column_kind, sub_keys_box] + nested_inputs,
        outputs=editor_outputs,
    )

    delete_column_btn.click(
        fn=delete_column_handler,
        inputs=[store_state, column_selector, confirm_delete] + nested_inputs,
        outputs=editor_outputs,
    )

    show_nested_btn.click(
        fn=show_nested_table,
        inputs=[store_state] + nested_inputs,
        outputs=[nested_grid, status_msg],
    )

    nested_grid.input(
        fn=apply_nested_edits,
        inputs=[store_state, nested_grid] + nested_inputs,
        outputs=editor_outputs,
    )

    add_nested_row_btn.click(
        fn=add_nested_row_handler,
        inputs=[store_state] + nested_inputs,
        outputs=editor_outputs,
    )

    delete_nested_row_btn.click(
        fn=delete_nested_row_handler,
        inputs=[store_state, nested_index_box, confirm_delete] + nested_inputs,
        outputs=editor_outputs,
    )

if __name__ == "__main__":
    logger.info("Starting JSON Grid Editor on port %d", settings.server_port)
    demo.launch(server_port=settings.server_port)
