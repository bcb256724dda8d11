"""Local-directory file object store.

Stores uploaded documents as plain files under ``data/files`` and hands out
``file://`` URLs for them.  Remote ``http(s)`` URLs (e.g. a storage
service's ``.../api/storage/<id>`` download links) are fetched with the
shared ``httpx.AsyncClient`` injected by main.py.

Blocking filesystem calls run through ``asyncio.to_thread`` so they never
stall the event loop.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
import structlog

from src.interfaces.file_store import IFileStore
from src.utils.errors import FileStoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_ROOT = Path("data/files")

# Remote storage download links end in /api/storage/<storage id>.
_REMOTE_STORAGE_PATTERN = re.compile(r"/api/storage/(.+)$")

# A storage id is a single path component: no separators, no traversal.
_VALID_STORAGE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class LocalFileStore(IFileStore):
    """File store backed by a directory on the local disk."""

    def __init__(
        self,
        root_dir: str | Path = _DEFAULT_ROOT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._root = Path(root_dir).resolve()
        self._http_client = http_client

    # ------------------------------------------------------------------
    # IFileStore implementation
    # ------------------------------------------------------------------

    async def save(self, storage_id: str, data: bytes) -> str:
        path = self._path_for(storage_id)
        try:
            await asyncio.to_thread(self._write_sync, path, data)
        except OSError as exc:
            raise FileStoreError(
                message=f"Could not write {storage_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("file_stored", storage_id=storage_id, size=len(data))
        return storage_id

    async def resolve_url(self, storage_id: str) -> str | None:
        try:
            path = self._path_for(storage_id)
        except FileStoreError:
            return None
        exists = await asyncio.to_thread(path.is_file)
        return path.as_uri() if exists else None

    async def fetch_bytes(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme == "file":
            path = Path(unquote(parsed.path))
            try:
                return await asyncio.to_thread(path.read_bytes)
            except OSError as exc:
                raise FileStoreError(
                    message=f"Could not read {url}: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

        if parsed.scheme in ("http", "https"):
            return await self._fetch_remote(url)

        raise FileStoreError(
            message=f"Unsupported file URL scheme: {parsed.scheme or '(none)'}",
            provider_name=self.get_provider_name(),
        )

    async def delete(self, storage_id: str) -> None:
        path = self._path_for(storage_id)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            logger.debug("file_already_absent", storage_id=storage_id)
        except OSError as exc:
            raise FileStoreError(
                message=f"Could not delete {storage_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        else:
            logger.info("file_deleted", storage_id=storage_id)

    def storage_id_from_url(self, url: str) -> str | None:
        """Recover the storage id from a ``file://`` URL under the root,
        or from a remote ``/api/storage/<id>`` link."""
        parsed = urlparse(url)
        if parsed.scheme == "file":
            path = Path(unquote(parsed.path))
            if path.parent == self._root and _VALID_STORAGE_ID.match(path.name):
                return path.name
            return None
        match = _REMOTE_STORAGE_PATTERN.search(parsed.path)
        if match and _VALID_STORAGE_ID.match(match.group(1)):
            return match.group(1)
        return None

    def get_provider_name(self) -> str:
        return "local"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _path_for(self, storage_id: str) -> Path:
        if not _VALID_STORAGE_ID.match(storage_id):
            raise FileStoreError(
                message=f"Invalid storage id: {storage_id!r}",
                provider_name=self.get_provider_name(),
            )
        return self._root / storage_id

    @staticmethod
    def _write_sync(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def _fetch_remote(self, url: str) -> bytes:
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FileStoreError(
                message=f"Could not download {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.debug("remote_file_fetched", url=url, size=len(response.content))
        return response.content
