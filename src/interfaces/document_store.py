"""Abstract base class for the document record store.

The record store owns :class:`~src.models.document.Document` rows.  Every
update is a single atomic patch: either all fields in the call are written
or none are.  Implementations may use SQLite (local) or any other backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.models.document import Document, DocumentStatus


class IDocumentStore(ABC):
    """Contract for document record persistence.

    All operations are async to support network-backed stores.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables / indexes if they do not exist. Safe to call twice."""

    @abstractmethod
    async def create(self, document: Document) -> Document:
        """Insert *document* and return the stored record."""

    @abstractmethod
    async def get(self, document_id: str) -> Document | None:
        """Return the record for *document_id*, or ``None`` if absent."""

    @abstractmethod
    async def update(
        self,
        document_id: str,
        fields: dict[str, Any],
        expected_status: DocumentStatus | None = None,
    ) -> bool:
        """Atomically patch *fields* on one record.

        Parameters
        ----------
        document_id:
            Record to patch.
        fields:
            Mapping of :class:`Document` field names to new values.
            ``updated_at`` is always bumped by the store.
        expected_status:
            When given, the patch is applied only if the record's current
            status equals this value (compare-and-swap).

        Returns
        -------
        bool
            ``True`` if a record was modified, ``False`` if the record is
            missing or the status precondition did not hold.
        """

    @abstractmethod
    async def delete(self, document_id: str) -> bool:
        """Delete the record. Returns ``False`` if it did not exist."""

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Document]:
        """Return the owner's documents, newest first."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the store identifier, e.g. ``"sqlite_documents"``."""
