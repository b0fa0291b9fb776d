"""FastAPI router for the /console endpoints.

These endpoints drive the admin console's table view: vector store
selection, per-file edit/delete, CSV export/template/import and column
resizing. All of them act on the single ConsoleSession.

Errors are returned as ``{"error": "..."}`` with:
- 400 for invalid input or an aborted import (plus ``"kind"``)
- 404 for files not in the current listing
- 409 when no vector store is selected or no files are loaded
- 502 when the vector store service fails
- 503 when the console is not configured
"""
import logging

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse, Response

from app.vector_stores.errors import RemoteFailure

from . import csv_io
from .errors import ConsoleStateError, CsvImportError
from .schemas import EditAttributesRequest, ResizeColumnRequest, SelectVectorStoreRequest
from .session import get_console_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/console", tags=["console"])


def _unavailable() -> JSONResponse:
    logger.warning("[console] No console session configured")
    return JSONResponse({"error": "Console not available"}, status_code=503)


def _remote_error(action: str, exc: RemoteFailure) -> JSONResponse:
    logger.error("[console] %s failed: %s", action, exc)
    return JSONResponse({"error": f"{action} failed: {exc.message}"}, status_code=502)


def _csv_download(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=csv_io.CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/state")
async def get_state() -> JSONResponse:
    """Summarise the session: selection, file count, layout, pending summary."""
    session = get_console_session()
    if session is None:
        return _unavailable()
    return JSONResponse({
        "vector_store_id": session.vector_store_id,
        "file_count": len(session.files),
        "columns": session.columns.widths,
        "import_summary_pending": session.import_summary is not None,
    })


@router.put("/vector-store")
async def select_vector_store(body: SelectVectorStoreRequest) -> JSONResponse:
    """Select a vector store (or none) and load its files."""
    session = get_console_session()
    if session is None:
        return _unavailable()
    try:
        files = await session.select_vector_store(body.vector_store_id)
    except RemoteFailure as exc:
        return _remote_error("Loading files", exc)
    return JSONResponse({
        "vector_store_id": session.vector_store_id,
        "files": [f.model_dump() for f in files],
    })


@router.get("/files")
async def list_table_rows() -> JSONResponse:
    """Return the loaded files formatted for the table view."""
    session = get_console_session()
    if session is None:
        return _unavailable()
    return JSONResponse({
        "vector_store_id": session.vector_store_id,
        "columns": session.columns.widths,
        "rows": [row.model_dump() for row in session.table_rows()],
    })


@router.post("/files/refresh")
async def refresh_files() -> JSONResponse:
    session = get_console_session()
    if session is None:
        return _unavailable()
    try:
        files = await session.refresh()
    except ConsoleStateError as exc:
        return JSONResponse({"error": str(exc)}, status_code=409)
    except RemoteFailure as exc:
        return _remote_error("Loading files", exc)
    return JSONResponse({"files": [f.model_dump() for f in files]})


@router.get("/files/{file_id}/attributes")
async def get_attributes_text(file_id: str) -> JSONResponse:
    """Return a file's attributes as the edit dialog shows them."""
    session = get_console_session()
    if session is None:
        return _unavailable()
    try:
        text = session.attributes_text(file_id)
    except KeyError:
        return JSONResponse({"error": "File not found"}, status_code=404)
    return JSONResponse({"id": file_id, "attributes": text})


@router.put("/files/{file_id}/attributes")
async def save_attributes(file_id: str, body: EditAttributesRequest) -> JSONResponse:
    """Save the edit dialog's JSON text as the file's attributes."""
    session = get_console_session()
    if session is None:
        return _unavailable()
    try:
        record = await session.edit_attributes(file_id, body.attributes)
    except KeyError:
        return JSONResponse({"error": "File not found"}, status_code=404)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except RemoteFailure as exc:
        return _remote_error("Updating attributes", exc)
    logger.info("[console] Attributes updated on %s", file_id)
    return JSONResponse({
        "message": "Attributes updated successfully",
        "file": record.model_dump(),
    })


@router.delete("/files/{file_id}")
async def delete_file(file_id: str) -> JSONResponse:
    session = get_console_session()
    if session is None:
        return _unavailable()
    try:
        await session.delete_file(file_id)
    except KeyError:
        return JSONResponse({"error": "File not found"}, status_code=404)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except RemoteFailure as exc:
        return _remote_error("Deleting file", exc)
    return JSONResponse({"message": "File deleted successfully", "id": file_id})


@router.get("/export")
async def export_files() -> Response:
    """Download the loaded files as ``files_export_YYYY-MM-DD.csv``."""
    session = get_console_session()
    if session is None:
        return _unavailable()
    try:
        content = session.export_csv()
    except ConsoleStateError as exc:
        return JSONResponse({"error": str(exc)}, status_code=409)
    return _csv_download(content, csv_io.export_filename())


@router.get("/template")
async def download_template() -> Response:
    """Download the two-column import template with instructions."""
    return _csv_download(csv_io.template_csv(), csv_io.TEMPLATE_FILENAME)


@router.post("/import")
async def import_attributes(file: UploadFile = File(...)) -> JSONResponse:
    """Import attributes from an uploaded CSV sheet.

    Returns:
        The ImportSummary; 400 with ``{"error", "kind"}`` when the sheet is
        rejected before any update is sent.
    """
    session = get_console_session()
    if session is None:
        return _unavailable()

    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return JSONResponse({"error": "CSV file must be UTF-8 encoded"}, status_code=400)

    try:
        summary = await session.import_csv(text)
    except ConsoleStateError as exc:
        return JSONResponse({"error": str(exc)}, status_code=409)
    except CsvImportError as exc:
        return JSONResponse({"error": exc.message, "kind": exc.kind}, status_code=400)

    logger.info("[console] Imported %s", file.filename)
    return JSONResponse(summary.model_dump())


@router.get("/import-summary")
async def get_import_summary() -> JSONResponse:
    session = get_console_session()
    if session is None:
        return _unavailable()
    if session.import_summary is None:
        return JSONResponse({"error": "No import summary"}, status_code=404)
    return JSONResponse(session.import_summary.model_dump())


@router.delete("/import-summary", status_code=204)
async def dismiss_import_summary() -> Response:
    session = get_console_session()
    if session is None:
        return _unavailable()
    session.dismiss_import_summary()
    return Response(status_code=204)


@router.get("/columns")
async def get_columns() -> JSONResponse:
    session = get_console_session()
    if session is None:
        return _unavailable()
    return JSONResponse(session.columns.widths)


@router.post("/columns/resize")
async def resize_column(body: ResizeColumnRequest) -> JSONResponse:
    """Apply a finished drag on a column's resize handle."""
    session = get_console_session()
    if session is None:
        return _unavailable()
    try:
        width = session.columns.resize(body.column, body.start_x, body.end_x)
    except KeyError:
        return JSONResponse({"error": f"Unknown column: {body.column}"}, status_code=404)
    return JSONResponse({"column": body.column, "width": width})
