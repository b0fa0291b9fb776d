"""FastAPI router for the /api/vector_stores proxy endpoints.

Each endpoint forwards to the VectorStoreService with no state of its own.

Constraints
-----------
- Returns 400 with ``{"error": "..."}`` when the vector store id is missing,
  the attribute limits are exceeded or the upload is not valid base64.
- Returns 500 with ``{"error": "..."}`` when the vector store service fails.
- Returns 503 when no vector store service is configured.
"""
import base64
import binascii
import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .errors import RemoteFailure
from .schemas import UpdateAttributesRequest, UploadFileRequest
from .service import get_vector_store_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vector_stores", tags=["vector-stores"])


def _unavailable() -> JSONResponse:
    logger.warning("[vector-stores] No vector store service configured")
    return JSONResponse({"error": "Vector store service not available"}, status_code=503)


@router.get("/files")
async def list_files(vector_store_id: Optional[str] = None) -> JSONResponse:
    """List the files of a vector store.

    Example::

        GET /api/vector_stores/files?vector_store_id=vs_abc

        200 OK
        {"files": [{"id": "file-1", "filename": "AS_3740-2.pdf", "vectorStoreId": "vs_abc", ...}]}
    """
    service = get_vector_store_service()
    if service is None:
        return _unavailable()
    try:
        files = await service.list_files(vector_store_id)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except RemoteFailure as exc:
        logger.error("[vector-stores] Error fetching files: %s", exc)
        return JSONResponse({"error": "Failed to fetch files"}, status_code=500)
    return JSONResponse({"files": [f.model_dump(by_alias=True) for f in files]})


@router.patch("/files/{file_id}")
async def update_file_attributes(file_id: str, body: UpdateAttributesRequest) -> JSONResponse:
    """Replace a file's attribute map.

    Args:
        file_id: The file to update.
        body: ``{attributes: {...}, vectorStoreId: "vs_..."}``.

    Returns:
        The updated vector store file as reported by the service.
    """
    service = get_vector_store_service()
    if service is None:
        return _unavailable()
    try:
        updated = await service.update_attributes(file_id, body.attributes, body.vector_store_id)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except RemoteFailure as exc:
        return JSONResponse({"error": exc.message}, status_code=500)
    return JSONResponse(updated)


@router.delete("/files/{file_id}")
async def delete_file(file_id: str, vector_store_id: Optional[str] = None) -> JSONResponse:
    """Delete a file."""
    service = get_vector_store_service()
    if service is None:
        return _unavailable()
    try:
        await service.delete_file(file_id, vector_store_id)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except RemoteFailure as exc:
        logger.error("[vector-stores] Error deleting file %s: %s", file_id, exc)
        return JSONResponse({"error": exc.message}, status_code=500)
    return JSONResponse({"success": True})


@router.post("/upload_file")
async def upload_file(body: UploadFileRequest) -> JSONResponse:
    """Upload a base64-encoded file and attach it to a vector store.

    Example::

        POST /api/vector_stores/upload_file
        {
            "fileObject": {"name": "AS_1428.1.pdf", "content": "JVBERi0...", "metadata": {"year": 2023}},
            "vectorStoreId": "vs_abc"
        }

        200 OK
        {"id": "file-9", "file_id": "file-9", "name": "AS_1428.1.pdf", "status": "success"}
    """
    service = get_vector_store_service()
    if service is None:
        return _unavailable()
    try:
        content = base64.b64decode(body.file_object.content, validate=True)
    except (binascii.Error, ValueError) as exc:
        return JSONResponse({"error": f"Failed to process file: {exc}"}, status_code=400)

    try:
        result = await service.upload_file(
            body.vector_store_id,
            body.file_object.name,
            content,
            body.file_object.metadata,
        )
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except RemoteFailure as exc:
        return JSONResponse({"error": f"Failed to upload to OpenAI: {exc.message}"}, status_code=500)
    return JSONResponse(result.model_dump())
