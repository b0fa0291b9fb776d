"""OpenAI vector store provider implementation.

This module provides a VectorStoreProvider that talks to the OpenAI Files
and Vector Stores APIs using the official SDK's async client.

Usage:
    store = OpenAIVectorStore(api_key="sk-...")
    files = await store.list_files("vs_abc123")
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

import openai

from .errors import RemoteFailure
from .provider import VectorStoreProvider
from .schemas import AttributeSet, StoredFile, VectorStoreFile

logger = logging.getLogger(__name__)

UPLOAD_MIME_TYPE = "application/pdf"
LIST_PAGE_SIZE = 100


@contextmanager
def _remote_call(action: str) -> Iterator[None]:
    """Translate SDK errors raised inside the block into RemoteFailure."""
    try:
        yield
    except openai.OpenAIError as exc:
        message = getattr(exc, "message", None) or str(exc)
        logger.error("[openai-store] %s failed: %s", action, message)
        raise RemoteFailure(message) from exc


class OpenAIVectorStore(VectorStoreProvider):
    """VectorStoreProvider backed by OpenAI's hosted vector stores.

    Attributes:
        api_key: OpenAI API key for authentication.
        organization: Optional organization ID.
        base_url: Optional API base URL override.
        timeout: Optional request timeout in seconds (SDK default otherwise).
    """

    def __init__(
        self,
        api_key: str,
        organization: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key
        self.organization = organization
        self.base_url = base_url
        self.timeout = timeout
        self._client: Optional[openai.AsyncOpenAI] = None

    def _get_client(self) -> openai.AsyncOpenAI:
        """Get or create the async OpenAI client."""
        if self._client is None:
            kwargs = {"api_key": self.api_key}
            if self.organization:
                kwargs["organization"] = self.organization
            if self.base_url:
                kwargs["base_url"] = self.base_url
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            self._client = openai.AsyncOpenAI(**kwargs)
        return self._client

    # -----------------------------------------------------------------------
    # VectorStoreProvider
    # -----------------------------------------------------------------------

    async def list_files(self, vector_store_id: str) -> List[VectorStoreFile]:
        client = self._get_client()
        files: List[VectorStoreFile] = []
        with _remote_call(f"list files of {vector_store_id}"):
            async for f in client.vector_stores.files.list(
                vector_store_id=vector_store_id,
                limit=LIST_PAGE_SIZE,
            ):
                files.append(
                    VectorStoreFile(id=f.id, attributes=getattr(f, "attributes", None) or {})
                )
        logger.debug("[openai-store] %d file(s) in %s", len(files), vector_store_id)
        return files

    async def retrieve_file(self, file_id: str) -> StoredFile:
        client = self._get_client()
        with _remote_call(f"retrieve {file_id}"):
            details = await client.files.retrieve(file_id)
        return StoredFile(
            id=details.id,
            filename=details.filename or "",
            bytes=details.bytes,
            created_at=details.created_at,
            purpose=details.purpose,
            object=details.object,
        )

    async def update_file_attributes(
        self,
        vector_store_id: str,
        file_id: str,
        attributes: AttributeSet,
    ) -> dict:
        client = self._get_client()
        with _remote_call(f"update attributes of {file_id}"):
            updated = await client.vector_stores.files.update(
                file_id,
                vector_store_id=vector_store_id,
                attributes=attributes,
            )
        return updated.model_dump()

    async def delete_file(self, file_id: str) -> None:
        client = self._get_client()
        with _remote_call(f"delete {file_id}"):
            await client.files.delete(file_id)

    async def create_file(self, filename: str, content: bytes, purpose: str) -> StoredFile:
        client = self._get_client()
        with _remote_call(f"upload {filename}"):
            created = await client.files.create(
                file=(filename, content, UPLOAD_MIME_TYPE),
                purpose=purpose,
            )
        return StoredFile(
            id=created.id,
            filename=created.filename or filename,
            bytes=created.bytes,
            created_at=created.created_at,
            purpose=created.purpose,
            object=created.object,
        )

    async def attach_file(
        self,
        vector_store_id: str,
        file_id: str,
        attributes: AttributeSet,
    ) -> str:
        client = self._get_client()
        with _remote_call(f"attach {file_id} to {vector_store_id}"):
            attached = await client.vector_stores.files.create(
                vector_store_id,
                file_id=file_id,
                attributes=attributes,
            )
        return attached.id

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
