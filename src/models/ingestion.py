"""Result payloads for ingestion runs and classification.

These are the values the outward operations return to the scheduler or
HTTP caller.  They are frozen so a result cannot be altered after the run
that produced it has finished.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class IngestionOutcome(str, Enum):
    """How an ingestion run ended.

    ``skipped`` is returned when the record was no longer in ``processing``
    on entry (a repeated trigger); nothing is written in that case.
    """

    COMPLETED = "completed"
    FAILED = "failed"
    DELETED = "deleted"
    SKIPPED = "skipped"


class IngestionResult(BaseModel):
    """Summary of one run of the ingestion pipeline."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    outcome: IngestionOutcome
    chunk_count: int = 0
    embedded_chunk_count: int = 0
    # Length of the stored flattened vector (embedded_chunk_count x dimension).
    vector_length: int = 0
    # Non-fatal classifier failure, reported alongside a completed run.
    classifier_error: str | None = None
    # Fatal error message for failed runs (the exception is still raised).
    error: str | None = None
    elapsed_seconds: float = 0.0


class ClassificationResult(BaseModel):
    """Outcome of the legal-document check.

    ``is_legal`` defaults to ``True`` whenever no verdict could be obtained;
    ``error`` then carries the reason.  ``deleted`` is set when a negative
    verdict caused the record to be removed.
    """

    model_config = ConfigDict(frozen=True)

    is_legal: bool
    deleted: bool = False
    error: str | None = None
