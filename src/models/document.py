"""Document record and extracted-text models.

Defines Pydantic v2 models for the persisted document record and the
transient text structures that flow through ingestion:

    1. A file is attached to a record in ``processing``  → Document
    2. The extractor reads the file                      → TextSegment (one per page)
    3. The chunker splits the segments                   → TextChunk

Document instances are frozen; stores return a fresh instance after every
update rather than mutating one in place.
"""

from __future__ import annotations

import time
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


class DocumentStatus(str, Enum):
    """Lifecycle states of a document record.

    ``processing`` is the only non-terminal state; each ingestion run moves
    a record to ``completed`` or ``failed`` at most once.  A document judged
    non-legal is deleted instead and has no terminal status.
    """

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Document - the persisted record owned by the record store.
# ---------------------------------------------------------------------------
class Document(BaseModel):
    """A stored legal document and its derived artifacts."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    # Reconstructed text (chunks joined with blank lines); empty until
    # ingestion step 4 writes it.
    content: str = ""
    owner_id: str
    # Declared media type (e.g. "application/pdf", "text/plain").
    file_type: str
    file_size: int = Field(default=0, ge=0)
    # Fetchable location of the backing file; empty until a file is attached.
    file_url: str = ""
    status: DocumentStatus = DocumentStatus.PROCESSING
    # Flattened concatenation of per-chunk vectors, in chunk order.
    vector_embedding: list[float] | None = None
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)

    @property
    def is_chat_ready(self) -> bool:
        """True when a non-empty vector is stored, whatever the status label says."""
        return bool(self.vector_embedding)


# ---------------------------------------------------------------------------
# Extraction / chunking structures (never persisted).
# ---------------------------------------------------------------------------
class TextSegment(BaseModel):
    """A contiguous run of extracted text attributed to one source page.

    Text-type sources have no page concept and report page 1.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    page_number: int | None = None


class TextChunk(BaseModel):
    """A bounded slice of one segment, the unit sent to the embedding service.

    ``start``/``end`` are character offsets into the source segment text.
    ``overlap`` counts the leading characters repeated from the previous
    chunk of the same segment (0 for the first chunk of a segment).
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    text: str
    page_number: int | None = None
    segment_index: int = Field(ge=0)
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    overlap: int = Field(default=0, ge=0)
