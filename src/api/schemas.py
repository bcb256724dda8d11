"""Pydantic request/response schemas for the legal document API.

Domain result models (IngestionResult, ClassificationResult, ChatMessage,
AnalysisResult, PartyExtractionResult) are returned as-is; the schemas here cover request bodies and the
API-only views.

# ─── HOW SCHEMAS WORK ─────────────────────────────────────────────────
#
# FastAPI uses these models to validate incoming JSON (invalid requests
# get a 422 with details), to serialise responses (response_model=...),
# and to generate the OpenAPI docs at /docs.
#
# Convention: request schemas end with "Request", response schemas end
# with "Response".
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.models.analysis import AnalysisBias
from src.models.chat import ChatMessage
from src.models.document import Document, DocumentStatus


class ChatRequest(BaseModel):
    """A question about one document plus the conversation so far."""

    message: str = Field(..., min_length=1, max_length=4000)
    previous_messages: list[ChatMessage] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    """Perspective and slant for a structured document analysis."""

    party_perspective: str = Field(..., min_length=1, max_length=200)
    analysis_bias: AnalysisBias = AnalysisBias.NEUTRAL


class DocumentSummaryResponse(BaseModel):
    """Document record without the vector body."""

    id: str
    title: str
    owner_id: str
    file_type: str
    file_size: int
    file_url: str
    status: DocumentStatus
    content_length: int
    vector_length: int
    chat_ready: bool
    created_at: int
    updated_at: int

    @classmethod
    def from_document(cls, document: Document) -> DocumentSummaryResponse:
        return cls(
            id=document.id,
            title=document.title,
            owner_id=document.owner_id,
            file_type=document.file_type,
            file_size=document.file_size,
            file_url=document.file_url,
            status=document.status,
            content_length=len(document.content),
            vector_length=len(document.vector_embedding or []),
            chat_ready=document.is_chat_ready,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class DeleteDocumentResponse(BaseModel):
    document_id: str
    deleted: bool = True


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
