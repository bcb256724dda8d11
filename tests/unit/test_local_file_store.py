"""Unit tests for LocalFileStore."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from src.providers.file_store.local_file_store import LocalFileStore
from src.utils.errors import FileStoreError


@pytest.fixture
def store(tmp_path: Path) -> LocalFileStore:
    return LocalFileStore(root_dir=tmp_path / "files")


class TestSaveAndFetch:
    @pytest.mark.asyncio
    async def test_save_resolve_fetch(self, store: LocalFileStore) -> None:
        storage_id = await store.save("doc-1.pdf", b"%PDF-bytes")
        url = await store.resolve_url(storage_id)

        assert url is not None
        assert url.startswith("file://")
        assert await store.fetch_bytes(url) == b"%PDF-bytes"

    @pytest.mark.asyncio
    async def test_resolve_missing_returns_none(self, store: LocalFileStore) -> None:
        assert await store.resolve_url("absent.pdf") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("storage_id", ["../escape.txt", "a/b.txt", ".hidden", ""])
    async def test_invalid_storage_ids(self, store: LocalFileStore, storage_id: str) -> None:
        with pytest.raises(FileStoreError):
            await store.save(storage_id, b"x")
        assert await store.resolve_url(storage_id) is None

    @pytest.mark.asyncio
    async def test_fetch_missing_file_url(self, store: LocalFileStore, tmp_path: Path) -> None:
        with pytest.raises(FileStoreError):
            await store.fetch_bytes((tmp_path / "files" / "gone.pdf").as_uri())

    @pytest.mark.asyncio
    async def test_unsupported_scheme(self, store: LocalFileStore) -> None:
        with pytest.raises(FileStoreError, match="scheme"):
            await store.fetch_bytes("ftp://host/file.pdf")


class TestRemoteFetch:
    @pytest.mark.asyncio
    async def test_http_url_uses_injected_client(self, tmp_path: Path) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/storage/abc123"
            return httpx.Response(200, content=b"remote bytes")

        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
            store = LocalFileStore(root_dir=tmp_path, http_client=client)
            data = await store.fetch_bytes("https://files.example.com/api/storage/abc123")

        assert data == b"remote bytes"

    @pytest.mark.asyncio
    async def test_http_error_becomes_file_store_error(self, tmp_path: Path) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            store = LocalFileStore(root_dir=tmp_path, http_client=client)
            with pytest.raises(FileStoreError):
                await store.fetch_bytes("https://files.example.com/api/storage/abc123")


class TestDeleteAndStorageIds:
    @pytest.mark.asyncio
    async def test_delete_removes_file(self, store: LocalFileStore) -> None:
        await store.save("doc-1.txt", b"x")
        await store.delete("doc-1.txt")
        assert await store.resolve_url("doc-1.txt") is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_quiet(self, store: LocalFileStore) -> None:
        await store.delete("never-saved.txt")

    @pytest.mark.asyncio
    async def test_storage_id_from_own_file_url(self, store: LocalFileStore) -> None:
        await store.save("doc-1.pdf", b"x")
        url = await store.resolve_url("doc-1.pdf")
        assert store.storage_id_from_url(url) == "doc-1.pdf"

    def test_storage_id_from_remote_url(self, store: LocalFileStore) -> None:
        assert store.storage_id_from_url("https://h.example/api/storage/kg2abc") == "kg2abc"

    def test_storage_id_outside_root(self, store: LocalFileStore) -> None:
        assert store.storage_id_from_url("file:///etc/passwd") is None

    def test_storage_id_unrecognised(self, store: LocalFileStore) -> None:
        assert store.storage_id_from_url("https://h.example/download/x") is None

    def test_provider_name(self, store: LocalFileStore) -> None:
        assert store.get_provider_name() == "local"
