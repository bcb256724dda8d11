"""Abstract base class for the file object store.

Files are addressed two ways: by an opaque *storage id* (used for writes
and deletes) and by a fetchable *URL* (stored on the document record and
used by ingestion to download bytes).
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IFileStore(ABC):
    """Contract for blob storage backing uploaded documents."""

    @abstractmethod
    async def save(self, storage_id: str, data: bytes) -> str:
        """Store *data* under *storage_id* and return the storage id."""

    @abstractmethod
    async def resolve_url(self, storage_id: str) -> str | None:
        """Return a fetchable URL for *storage_id*, or ``None`` if unknown."""

    @abstractmethod
    async def fetch_bytes(self, url: str) -> bytes:
        """Download the bytes at *url*.

        Raises
        ------
        src.utils.errors.FileStoreError
            If the URL cannot be read.
        """

    @abstractmethod
    async def delete(self, storage_id: str) -> None:
        """Delete the stored object. Raises FileStoreError on failure."""

    @abstractmethod
    def storage_id_from_url(self, url: str) -> str | None:
        """Derive the storage id from a URL this store produced, if possible."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"local"``."""
