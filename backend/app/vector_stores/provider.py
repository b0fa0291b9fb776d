"""Abstract VectorStoreProvider interface.

Every vector store back-end must implement this interface so the service
layer stays provider-agnostic. Implementations wrap their own client errors
in ``RemoteFailure``.
"""
from abc import ABC, abstractmethod
from typing import List

from .schemas import AttributeSet, StoredFile, VectorStoreFile


class VectorStoreProvider(ABC):
    """Abstract base class for vector store providers.

    All calls are coroutines; the console awaits them one at a time.
    """

    @abstractmethod
    async def list_files(self, vector_store_id: str) -> List[VectorStoreFile]:
        """List every file in a vector store, following pagination to the end.

        Raises:
            RemoteFailure: On provider error.
        """

    @abstractmethod
    async def retrieve_file(self, file_id: str) -> StoredFile:
        """Fetch the stored-file details (filename, size, purpose, ...)."""

    @abstractmethod
    async def update_file_attributes(
        self,
        vector_store_id: str,
        file_id: str,
        attributes: AttributeSet,
    ) -> dict:
        """Replace a file's attribute map. Returns the updated vector store file."""

    @abstractmethod
    async def delete_file(self, file_id: str) -> None:
        """Delete the underlying file object."""

    @abstractmethod
    async def create_file(self, filename: str, content: bytes, purpose: str) -> StoredFile:
        """Upload raw content as a new file object."""

    @abstractmethod
    async def attach_file(
        self,
        vector_store_id: str,
        file_id: str,
        attributes: AttributeSet,
    ) -> str:
        """Attach an uploaded file to a vector store. Returns the vector store file id."""

    async def close(self) -> None:
        """Release any network resources held by the provider."""
