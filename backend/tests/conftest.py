"""Shared test fixtures and configuration for backend tests."""
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.console.session import ConsoleSession, get_console_session, set_console_session
from app.main import app
from app.vector_stores.errors import RemoteFailure
from app.vector_stores.provider import VectorStoreProvider
from app.vector_stores.schemas import AttributeSet, StoredFile, VectorStoreFile
from app.vector_stores.service import (
    VectorStoreService,
    get_vector_store_service,
    set_vector_store_service,
)

VECTOR_STORE_ID = "vs_test"


class FakeVectorStore(VectorStoreProvider):
    """In-memory VectorStoreProvider that records every call.

    ``fail_updates_for`` / ``fail_attach`` / ``fail_list`` make the matching
    calls raise RemoteFailure.
    """

    def __init__(self) -> None:
        self.stores: Dict[str, List[VectorStoreFile]] = {}
        self.stored: Dict[str, StoredFile] = {}
        self.calls: List[tuple] = []
        self.fail_updates_for: set = set()
        self.fail_attach = False
        self.fail_list = False
        self.fail_delete = False
        self._next_id = 100

    def add_file(
        self,
        vector_store_id: str,
        file_id: str,
        filename: str,
        attributes: Optional[AttributeSet] = None,
        size: int = 2048,
        created_at: int = 1714564800,
    ) -> None:
        self.stored[file_id] = StoredFile(
            id=file_id,
            filename=filename,
            bytes=size,
            created_at=created_at,
            purpose="assistants",
        )
        self.stores.setdefault(vector_store_id, []).append(
            VectorStoreFile(id=file_id, attributes=attributes or {})
        )

    def remote_writes(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in ("update", "delete", "create", "attach")]

    async def list_files(self, vector_store_id: str) -> List[VectorStoreFile]:
        self.calls.append(("list", vector_store_id))
        if self.fail_list:
            raise RemoteFailure("list unavailable")
        return [f.model_copy(deep=True) for f in self.stores.get(vector_store_id, [])]

    async def retrieve_file(self, file_id: str) -> StoredFile:
        self.calls.append(("retrieve", file_id))
        if file_id not in self.stored:
            raise RemoteFailure(f"No such File object: {file_id}")
        return self.stored[file_id]

    async def update_file_attributes(self, vector_store_id, file_id, attributes) -> dict:
        self.calls.append(("update", vector_store_id, file_id, dict(attributes)))
        if file_id in self.fail_updates_for:
            raise RemoteFailure(f"update rejected for {file_id}")
        for vs_file in self.stores.get(vector_store_id, []):
            if vs_file.id == file_id:
                vs_file.attributes = dict(attributes)
                return {"id": file_id, "vector_store_id": vector_store_id, "attributes": dict(attributes)}
        raise RemoteFailure(f"No file {file_id} in {vector_store_id}")

    async def delete_file(self, file_id: str) -> None:
        self.calls.append(("delete", file_id))
        if self.fail_delete:
            raise RemoteFailure("delete rejected")
        self.stored.pop(file_id, None)
        for files in self.stores.values():
            files[:] = [f for f in files if f.id != file_id]

    async def create_file(self, filename: str, content: bytes, purpose: str) -> StoredFile:
        self.calls.append(("create", filename, purpose))
        self._next_id += 1
        stored = StoredFile(
            id=f"file-{self._next_id}",
            filename=filename,
            bytes=len(content),
            created_at=1714564800,
            purpose=purpose,
        )
        self.stored[stored.id] = stored
        return stored

    async def attach_file(self, vector_store_id, file_id, attributes) -> str:
        self.calls.append(("attach", vector_store_id, file_id))
        if self.fail_attach:
            raise RemoteFailure("attach rejected")
        self.stores.setdefault(vector_store_id, []).append(
            VectorStoreFile(id=file_id, attributes=dict(attributes))
        )
        return file_id


@pytest.fixture
def api_client():
    """Provide a TestClient for the main FastAPI app.

    The lifespan is not run, so tests install the singletons they need.
    """
    return TestClient(app)


@pytest.fixture
def fake_store() -> FakeVectorStore:
    store = FakeVectorStore()
    store.add_file(VECTOR_STORE_ID, "file-1", "report.pdf", {"title": "old"})
    store.add_file(VECTOR_STORE_ID, "file-2", "AS_3740-2.pdf")
    return store


@pytest.fixture
def store_service(fake_store: FakeVectorStore) -> VectorStoreService:
    return VectorStoreService(fake_store, upload_settle_seconds=0)


@pytest.fixture
def session(store_service: VectorStoreService) -> ConsoleSession:
    return ConsoleSession(store_service)


@pytest.fixture
def installed(store_service: VectorStoreService, session: ConsoleSession):
    """Install the fake-backed service and session as app singletons."""
    original_service = get_vector_store_service()
    original_session = get_console_session()
    set_vector_store_service(store_service)
    set_console_session(session)
    yield session
    set_vector_store_service(original_service)
    set_console_session(original_session)
