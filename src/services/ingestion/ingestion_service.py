"""Orchestrator for the document ingestion pipeline.

Pipeline steps, strictly in order:
**fetch -> extract -> chunk -> persist content -> embed -> classify -> finalize**.

The :class:`IngestionService` implements the Orchestrator pattern: it
coordinates the file store, text extractor, chunker, embedding client,
legal classifier and record store without any of them knowing about each
other.  All collaborators are injected via the constructor.

Status handling:

* A run starts only on a record in ``processing``; anything else is a
  repeated trigger and returns outcome ``skipped`` without writing.
* Runs for one document id are serialised by a keyed lock, and every
  status write is conditional on the record still being ``processing``.
* Any exception marks the record ``failed`` (best effort) and is re-raised.
* A negative legal verdict deletes the record and its backing file; no
  terminal status is written on that path.
* A classifier error is non-fatal: the run completes and reports it.
"""

from __future__ import annotations

import asyncio
import re
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

import structlog

from src.interfaces.document_store import IDocumentStore
from src.interfaces.file_store import IFileStore
from src.models.document import Document, DocumentStatus
from src.models.ingestion import ClassificationResult, IngestionOutcome, IngestionResult
from src.services.classifier import LegalDocumentClassifier
from src.services.extraction.text_extractor import TextExtractor, normalize_media_type
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.embedding_client import EmbeddingClient
from src.utils.concurrency import KeyedLock, with_timeout
from src.utils.errors import (
    ClassifierServiceError,
    DocumentNotFoundError,
    EmptyContentError,
    FileStoreError,
    MissingFileLocationError,
    StatusConflictError,
)
from src.utils.logging import document_log_context

logger = structlog.get_logger(logger_name=__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def scratch_file_name(document_id: str, media_type: str) -> str:
    """``<document id>.<media subtype>``, ``bin`` when the type has no subtype."""
    subtype = normalize_media_type(media_type).partition("/")[2]
    extension = _UNSAFE_FILENAME_CHARS.sub("", subtype) or "bin"
    return f"{_UNSAFE_FILENAME_CHARS.sub('_', document_id)}.{extension}"


@dataclass
class _RunProgress:
    step: str = "start"
    chunk_count: int = 0
    embedded_chunk_count: int = 0


class IngestionService:
    """Runs the ingestion pipeline and owns document status transitions.

    Parameters
    ----------
    document_store:
        Record store holding the documents.
    file_store:
        Object store the uploaded files live in.
    extractor:
        Media-type aware text extractor.
    chunker:
        Splits extracted text into bounded overlapping chunks.
    embedding_client:
        Embeds the leading chunks of each document.
    classifier:
        Yes/no legal-document check.
    fetch_timeout:
        Seconds allowed for downloading the file (``None`` or 0 disables).
    """

    def __init__(
        self,
        document_store: IDocumentStore,
        file_store: IFileStore,
        extractor: TextExtractor,
        chunker: TextChunker,
        embedding_client: EmbeddingClient,
        classifier: LegalDocumentClassifier,
        fetch_timeout: float | None = 30.0,
    ) -> None:
        self._documents = document_store
        self._files = file_store
        self._extractor = extractor
        self._chunker = chunker
        self._embeddings = embedding_client
        self._classifier = classifier
        self._fetch_timeout = fetch_timeout
        self._locks = KeyedLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_document(
        self,
        title: str,
        owner_id: str,
        file_type: str,
        file_size: int = 0,
    ) -> Document:
        """Create a record in ``processing`` state, before its file exists."""
        document = await self._documents.create(
            Document(title=title, owner_id=owner_id, file_type=file_type, file_size=file_size)
        )
        logger.info("document_registered", document_id=document.id, file_type=file_type)
        return document

    async def attach_file(self, document_id: str, storage_id: str) -> str:
        """Point the record at a stored file and return the id to ingest.

        Raises
        ------
        FileStoreError
            If *storage_id* does not resolve to a URL.
        DocumentNotFoundError
            If the record does not exist.
        """
        with document_log_context(document_id):
            async with self._locks.hold(document_id):
                url = await self._files.resolve_url(storage_id)
                if not url:
                    raise FileStoreError(
                        message=f"Stored file not found: {storage_id}",
                        provider_name=self._files.get_provider_name(),
                    )
                updated = await self._documents.update(
                    document_id,
                    {"file_url": url, "status": DocumentStatus.PROCESSING},
                )
                if not updated:
                    raise DocumentNotFoundError(document_id)
                logger.info("file_attached", storage_id=storage_id)
        return document_id

    async def run_ingestion(self, document_id: str) -> IngestionResult:
        """Run the full pipeline for one document.

        Returns
        -------
        IngestionResult
            Outcome ``completed``, ``deleted`` or ``skipped``.

        Raises
        ------
        DocumentNotFoundError
            If the record does not exist on entry.
        LegalDocError
            Any fatal step failure, after the record was marked ``failed``.
        asyncio.CancelledError
            If the run is cancelled; the record is marked ``failed`` first.
        """
        started = time.monotonic()
        with document_log_context(document_id):
            async with self._locks.hold(document_id):
                document = await self._documents.get(document_id)
                if document is None:
                    raise DocumentNotFoundError(document_id)
                if document.status is not DocumentStatus.PROCESSING:
                    logger.info("ingestion_skipped", status=document.status.value)
                    return IngestionResult(
                        document_id=document_id,
                        outcome=IngestionOutcome.SKIPPED,
                        elapsed_seconds=time.monotonic() - started,
                    )

                progress = _RunProgress()
                try:
                    return await self._run_steps(document, progress, started)
                except asyncio.CancelledError:
                    # A cancelled run must not leave the record in processing.
                    await self._mark_failed(document_id)
                    logger.warning("ingestion_cancelled", step=progress.step)
                    raise
                except Exception as exc:
                    await self._mark_failed(document_id)
                    logger.error(
                        "ingestion_failed",
                        step=progress.step,
                        error=str(exc),
                        error_type=type(exc).__name__,
                        chunk_count=progress.chunk_count,
                    )
                    raise

    async def classify_document(self, document_id: str) -> ClassificationResult:
        """Run the legal check on a stored document, deleting it if negative.

        Classifier failures never delete; they come back as ``is_legal=True``
        with ``error`` set.
        """
        with document_log_context(document_id):
            async with self._locks.hold(document_id):
                document = await self._documents.get(document_id)
                if document is None:
                    raise DocumentNotFoundError(document_id)
                return await self._classify(document, document.content)

    async def delete_document(self, document_id: str) -> None:
        """Delete the backing file (best effort) and then the record."""
        with document_log_context(document_id):
            async with self._locks.hold(document_id):
                document = await self._documents.get(document_id)
                if document is None:
                    raise DocumentNotFoundError(document_id)
                if not await self._remove(document):
                    raise DocumentNotFoundError(document_id)

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    async def _run_steps(
        self,
        document: Document,
        progress: _RunProgress,
        started: float,
    ) -> IngestionResult:
        self._enter(progress, "fetch")
        if not document.file_url:
            raise MissingFileLocationError()

        with tempfile.TemporaryDirectory(prefix="legaldoc-") as scratch_dir:
            scratch_path = Path(scratch_dir) / scratch_file_name(document.id, document.file_type)
            data = await with_timeout(
                self._files.fetch_bytes(document.file_url),
                self._fetch_timeout,
                lambda seconds: FileStoreError(
                    message=f"File download timed out after {seconds:g}s",
                    provider_name=self._files.get_provider_name(),
                ),
            )
            await asyncio.to_thread(scratch_path.write_bytes, data)

            self._enter(progress, "extract")
            segments = await asyncio.to_thread(
                self._extractor.extract, scratch_path, document.file_type
            )

        self._enter(progress, "chunk")
        chunks = self._chunker.chunk(segments)
        if not chunks:
            raise EmptyContentError()
        progress.chunk_count = len(chunks)

        self._enter(progress, "persist_content")
        content = self._chunker.join_content(chunks)
        await self._conditional_update(document.id, {"content": content})

        self._enter(progress, "embed")
        vectors = await self._embeddings.embed_chunks([chunk.text for chunk in chunks])
        progress.embedded_chunk_count = len(vectors)
        flat_vector = self._embeddings.flatten(vectors)

        self._enter(progress, "classify")
        verdict = await self._classify(document, content)
        if not verdict.is_legal:
            logger.info(
                "document_deleted_non_legal",
                chunk_count=progress.chunk_count,
                record_deleted=verdict.deleted,
            )
            return IngestionResult(
                document_id=document.id,
                outcome=IngestionOutcome.DELETED,
                chunk_count=progress.chunk_count,
                embedded_chunk_count=progress.embedded_chunk_count,
                elapsed_seconds=time.monotonic() - started,
            )

        self._enter(progress, "finalize")
        await self._conditional_update(
            document.id,
            {"vector_embedding": flat_vector, "status": DocumentStatus.COMPLETED},
        )

        result = IngestionResult(
            document_id=document.id,
            outcome=IngestionOutcome.COMPLETED,
            chunk_count=progress.chunk_count,
            embedded_chunk_count=progress.embedded_chunk_count,
            vector_length=len(flat_vector),
            classifier_error=verdict.error,
            elapsed_seconds=time.monotonic() - started,
        )
        logger.info(
            "ingestion_completed",
            chunk_count=result.chunk_count,
            embedded_chunk_count=result.embedded_chunk_count,
            vector_length=result.vector_length,
            classifier_error=result.classifier_error,
            elapsed_s=round(result.elapsed_seconds, 2),
        )
        return result

    async def _classify(self, document: Document, content: str) -> ClassificationResult:
        if not content.strip():
            return ClassificationResult(is_legal=True, error="Document has no content to classify")

        try:
            is_legal = await self._classifier.classify(content)
        except ClassifierServiceError as exc:
            logger.warning("classifier_error_ignored", error=str(exc))
            return ClassificationResult(is_legal=True, error=str(exc))

        if is_legal:
            return ClassificationResult(is_legal=True)

        deleted = await self._remove(document)
        return ClassificationResult(is_legal=False, deleted=deleted)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _enter(progress: _RunProgress, step: str) -> None:
        progress.step = step
        logger.info("ingestion_step", step=step)

    async def _conditional_update(self, document_id: str, fields: dict) -> None:
        """Patch *fields* only while the record is still ``processing``."""
        if await self._documents.update(
            document_id, fields, expected_status=DocumentStatus.PROCESSING
        ):
            return
        if await self._documents.get(document_id) is None:
            raise DocumentNotFoundError(document_id)
        raise StatusConflictError(document_id)

    async def _mark_failed(self, document_id: str) -> None:
        """Best-effort ``failed`` write; a secondary failure is logged only."""
        try:
            await self._documents.update(
                document_id,
                {"status": DocumentStatus.FAILED},
                expected_status=DocumentStatus.PROCESSING,
            )
        except Exception as exc:  # noqa: BLE001 - the original error is re-raised by the caller
            logger.error("failed_status_write_error", error=str(exc))

    async def _remove(self, document: Document) -> bool:
        """Delete backing file (best effort) then the record."""
        storage_id = (
            self._files.storage_id_from_url(document.file_url) if document.file_url else None
        )
        if storage_id:
            try:
                await self._files.delete(storage_id)
            except Exception as exc:  # noqa: BLE001 - file removal never blocks record removal
                logger.warning("file_delete_failed", storage_id=storage_id, error=str(exc))
        deleted = await self._documents.delete(document.id)
        logger.info("document_deleted", record_deleted=deleted, storage_id=storage_id)
        return deleted
