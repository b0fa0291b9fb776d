"""VectorStoreService: pass-through layer over a VectorStoreProvider.

Validates attribute constraints and vector store ids, then forwards to the
provider. A module-level singleton is initialised in ``app/main.py`` from
config.
"""
import asyncio
import logging
from typing import List, Optional

from .errors import MissingVectorStoreError, RemoteFailure
from .provider import VectorStoreProvider
from .schemas import (
    AttributeSet,
    FileRecord,
    UploadFileResponse,
    validate_attributes,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_service: Optional["VectorStoreService"] = None


def get_vector_store_service() -> Optional["VectorStoreService"]:
    """Return the global VectorStoreService, or None if not yet initialised."""
    return _service


def set_vector_store_service(service: Optional["VectorStoreService"]) -> None:
    """Set (or replace) the global VectorStoreService instance."""
    global _service
    _service = service


def _require_vector_store(vector_store_id: Optional[str]) -> str:
    if not vector_store_id:
        raise MissingVectorStoreError()
    return vector_store_id


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class VectorStoreService:
    """Forwards console operations to a VectorStoreProvider.

    Args:
        provider: Concrete vector store provider to use.
        upload_purpose: Purpose tag for newly uploaded files.
        upload_settle_seconds: Pause between creating a file and attaching it
            to a vector store, giving the service time to process it.
        default_upload_name: Filename used when an upload has none.
    """

    def __init__(
        self,
        provider: VectorStoreProvider,
        upload_purpose: str = "assistants",
        upload_settle_seconds: float = 2.0,
        default_upload_name: str = "document.pdf",
    ) -> None:
        self._provider = provider
        self._upload_purpose = upload_purpose
        self._upload_settle_seconds = upload_settle_seconds
        self._default_upload_name = default_upload_name

    @property
    def provider(self) -> VectorStoreProvider:
        return self._provider

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def list_files(self, vector_store_id: Optional[str]) -> List[FileRecord]:
        """List a vector store's files with their stored-file details.

        Details are retrieved one file at a time, in listing order.

        Raises:
            MissingVectorStoreError: If ``vector_store_id`` is empty.
            RemoteFailure: On provider errors.
        """
        vector_store_id = _require_vector_store(vector_store_id)
        records: List[FileRecord] = []
        for vs_file in await self._provider.list_files(vector_store_id):
            details = await self._provider.retrieve_file(vs_file.id)
            records.append(
                FileRecord(
                    id=vs_file.id,
                    name=details.filename,
                    filename=details.filename,
                    attributes=vs_file.attributes or {},
                    vector_store_id=vector_store_id,
                    object=details.object,
                    bytes=details.bytes,
                    created_at=details.created_at,
                    purpose=details.purpose,
                )
            )
        logger.info("[vector-stores] Listed %d file(s) in %s", len(records), vector_store_id)
        return records

    async def update_attributes(
        self,
        file_id: str,
        attributes: AttributeSet,
        vector_store_id: Optional[str],
    ) -> dict:
        """Replace a file's attributes after checking the 16/256 limits.

        Raises:
            MissingVectorStoreError: If ``vector_store_id`` is empty.
            AttributeConstraintError: If the limits are exceeded. No remote
                call is made in that case.
            RemoteFailure: On provider errors.
        """
        vector_store_id = _require_vector_store(vector_store_id)
        validate_attributes(attributes)
        updated = await self._provider.update_file_attributes(vector_store_id, file_id, attributes)
        logger.info(
            "[vector-stores] Updated %d attribute(s) on %s in %s",
            len(attributes), file_id, vector_store_id,
        )
        return updated

    async def delete_file(self, file_id: str, vector_store_id: Optional[str]) -> None:
        """Delete a file.

        Raises:
            MissingVectorStoreError: If ``vector_store_id`` is empty.
            RemoteFailure: On provider errors.
        """
        vector_store_id = _require_vector_store(vector_store_id)
        await self._provider.delete_file(file_id)
        logger.info("[vector-stores] Deleted %s from %s", file_id, vector_store_id)

    async def upload_file(
        self,
        vector_store_id: Optional[str],
        name: Optional[str],
        content: bytes,
        attributes: Optional[AttributeSet] = None,
    ) -> UploadFileResponse:
        """Upload a new file and attach it to a vector store.

        If attaching fails, the freshly created file is deleted again before
        the error propagates.

        Raises:
            MissingVectorStoreError: If ``vector_store_id`` is empty.
            AttributeConstraintError: If ``attributes`` exceed the limits.
            RemoteFailure: On provider errors.
        """
        vector_store_id = _require_vector_store(vector_store_id)
        attributes = attributes or {}
        validate_attributes(attributes)
        filename = name or self._default_upload_name

        created = await self._provider.create_file(filename, content, self._upload_purpose)
        logger.info("[vector-stores] Uploaded %s as %s (%d bytes)", filename, created.id, len(content))

        if self._upload_settle_seconds > 0:
            await asyncio.sleep(self._upload_settle_seconds)

        try:
            vs_file_id = await self._provider.attach_file(vector_store_id, created.id, attributes)
        except RemoteFailure:
            try:
                await self._provider.delete_file(created.id)
            except RemoteFailure as cleanup_exc:
                logger.error("[vector-stores] Error cleaning up file %s: %s", created.id, cleanup_exc)
            raise

        logger.info("[vector-stores] Attached %s to %s", created.id, vector_store_id)
        return UploadFileResponse(id=vs_file_id, file_id=created.id, name=filename)
