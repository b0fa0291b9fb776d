"""Tests for the OpenAI vector store provider.

All tests mock the AsyncOpenAI client so no real API key is needed.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from app.vector_stores.errors import RemoteFailure
from app.vector_stores.openai_store import UPLOAD_MIME_TYPE, OpenAIVectorStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _AsyncPages:
    """Stand-in for the SDK's auto-paginating AsyncPaginator."""

    def __init__(self, items, error=None):
        self._items = items
        self._error = error

    async def __aiter__(self):
        for item in self._items:
            yield item
        if self._error is not None:
            raise self._error


def _file_object(**overrides):
    data = dict(
        id="file-1",
        filename="report.pdf",
        bytes=2048,
        created_at=1714564800,
        purpose="assistants",
        object="file",
    )
    data.update(overrides)
    return SimpleNamespace(**data)


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.files.retrieve = AsyncMock(return_value=_file_object())
    client.files.delete = AsyncMock()
    client.files.create = AsyncMock(return_value=_file_object(id="file-9", filename="new.pdf"))
    client.vector_stores.files.update = AsyncMock()
    client.vector_stores.files.create = AsyncMock(return_value=SimpleNamespace(id="file-9"))
    client.close = AsyncMock()
    return client


@pytest.fixture
def store(mock_client) -> OpenAIVectorStore:
    s = OpenAIVectorStore(api_key="sk-test")
    s._client = mock_client
    return s


# ---------------------------------------------------------------------------
# Client construction
# ---------------------------------------------------------------------------

class TestClientConstruction:
    def test_client_created_lazily(self):
        s = OpenAIVectorStore(api_key="sk-test", base_url="http://localhost:9999/v1", timeout=5.0)
        assert s._client is None
        client = s._get_client()
        assert isinstance(client, openai.AsyncOpenAI)
        assert s._get_client() is client

    def test_client_receives_settings(self, monkeypatch):
        created = MagicMock()
        monkeypatch.setattr(openai, "AsyncOpenAI", created)
        OpenAIVectorStore(api_key="sk-test", organization="org-1", timeout=5.0)._get_client()
        created.assert_called_once_with(api_key="sk-test", organization="org-1", timeout=5.0)


# ---------------------------------------------------------------------------
# Provider calls
# ---------------------------------------------------------------------------

class TestListFiles:
    @pytest.mark.asyncio
    async def test_collects_all_pages(self, store, mock_client):
        mock_client.vector_stores.files.list.return_value = _AsyncPages([
            SimpleNamespace(id="file-1", attributes={"year": 2021}),
            SimpleNamespace(id="file-2", attributes=None),
        ])
        files = await store.list_files("vs_1")
        assert [f.id for f in files] == ["file-1", "file-2"]
        assert files[0].attributes == {"year": 2021}
        assert files[1].attributes == {}
        mock_client.vector_stores.files.list.assert_called_once_with(vector_store_id="vs_1", limit=100)

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_remote_failure(self, store, mock_client):
        mock_client.vector_stores.files.list.return_value = _AsyncPages(
            [], error=openai.OpenAIError("quota exceeded")
        )
        with pytest.raises(RemoteFailure, match="quota exceeded"):
            await store.list_files("vs_1")


class TestFileCalls:
    @pytest.mark.asyncio
    async def test_retrieve_maps_fields(self, store, mock_client):
        stored = await store.retrieve_file("file-1")
        assert stored.filename == "report.pdf"
        assert stored.bytes == 2048
        mock_client.files.retrieve.assert_awaited_once_with("file-1")

    @pytest.mark.asyncio
    async def test_retrieve_connection_error(self, store, mock_client):
        request = httpx.Request("GET", "https://api.openai.com/v1/files/file-1")
        mock_client.files.retrieve.side_effect = openai.APIConnectionError(request=request)
        with pytest.raises(RemoteFailure):
            await store.retrieve_file("file-1")

    @pytest.mark.asyncio
    async def test_update_passes_vector_store(self, store, mock_client):
        mock_client.vector_stores.files.update.return_value = MagicMock(
            model_dump=MagicMock(return_value={"id": "file-1", "attributes": {"a": 1}})
        )
        result = await store.update_file_attributes("vs_1", "file-1", {"a": 1})
        assert result == {"id": "file-1", "attributes": {"a": 1}}
        mock_client.vector_stores.files.update.assert_awaited_once_with(
            "file-1", vector_store_id="vs_1", attributes={"a": 1}
        )

    @pytest.mark.asyncio
    async def test_delete(self, store, mock_client):
        await store.delete_file("file-1")
        mock_client.files.delete.assert_awaited_once_with("file-1")

    @pytest.mark.asyncio
    async def test_create_uploads_pdf(self, store, mock_client):
        stored = await store.create_file("new.pdf", b"%PDF", "assistants")
        assert stored.id == "file-9"
        mock_client.files.create.assert_awaited_once_with(
            file=("new.pdf", b"%PDF", UPLOAD_MIME_TYPE), purpose="assistants"
        )

    @pytest.mark.asyncio
    async def test_attach(self, store, mock_client):
        vs_file_id = await store.attach_file("vs_1", "file-9", {"year": 2024})
        assert vs_file_id == "file-9"
        mock_client.vector_stores.files.create.assert_awaited_once_with(
            "vs_1", file_id="file-9", attributes={"year": 2024}
        )

    @pytest.mark.asyncio
    async def test_close_releases_client(self, store, mock_client):
        await store.close()
        mock_client.close.assert_awaited_once()
        assert store._client is None
