"""FastAPI routes for the legal document service.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                               Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/documents/{id}                 GET     Document summary (no vector body)
# /api/v1/documents/{id}                 DELETE  Delete file + record
# /api/v1/documents/{id}/ingest          POST    Run the ingestion pipeline
# /api/v1/documents/{id}/classify        POST    Legal check (deletes if negative)
# /api/v1/documents/{id}/chat            POST    Ask a question about the document
# /api/v1/documents/{id}/analyze         POST    Structured analysis for one party
# /api/v1/documents/{id}/parties         POST    Extract the distinct parties
# /api/v1/health                         GET     Health check + provider names
#
# Errors are raised as LegalDocError subclasses and turned into JSON
# bodies by ErrorHandlingMiddleware.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request

from src.api.schemas import (
    AnalyzeRequest,
    ChatRequest,
    DeleteDocumentResponse,
    DocumentSummaryResponse,
    ErrorResponse,
    HealthResponse,
)
from src.interfaces.document_store import IDocumentStore
from src.models.analysis import AnalysisResult, PartyExtractionResult
from src.models.chat import ChatMessage
from src.models.ingestion import ClassificationResult, IngestionResult
from src.services.analysis_service import AnalysisService
from src.services.chat_service import ChatService
from src.services.ingestion.ingestion_service import IngestionService
from src.utils.errors import DocumentNotFoundError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependency injection helpers - resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def _get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def _get_document_store(request: Request) -> IDocumentStore:
    return request.app.state.document_store


IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
ChatDep = Annotated[ChatService, Depends(_get_chat_service)]
AnalysisDep = Annotated[AnalysisService, Depends(_get_analysis_service)]
DocumentStoreDep = Annotated[IDocumentStore, Depends(_get_document_store)]


# ---------------------------------------------------------------------------
# Document endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/documents/{document_id}",
    response_model=DocumentSummaryResponse,
    responses=_ERROR_RESPONSES,
    summary="Fetch a document summary",
)
async def get_document(document_id: str, store: DocumentStoreDep) -> DocumentSummaryResponse:
    document = await store.get(document_id)
    if document is None:
        raise DocumentNotFoundError(document_id)
    return DocumentSummaryResponse.from_document(document)


@router.delete(
    "/documents/{document_id}",
    response_model=DeleteDocumentResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a document and its stored file",
)
async def delete_document(document_id: str, service: IngestionDep) -> DeleteDocumentResponse:
    await service.delete_document(document_id)
    return DeleteDocumentResponse(document_id=document_id)


@router.post(
    "/documents/{document_id}/ingest",
    response_model=IngestionResult,
    responses=_ERROR_RESPONSES,
    summary="Run the ingestion pipeline for a document",
)
async def ingest_document(document_id: str, service: IngestionDep) -> IngestionResult:
    """Fetch, extract, chunk, embed and classify the document.

    A document no longer in ``processing`` returns outcome ``skipped``.
    """
    result = await service.run_ingestion(document_id)
    _logger.info("ingest_request_done", document_id=document_id, outcome=result.outcome.value)
    return result


@router.post(
    "/documents/{document_id}/classify",
    response_model=ClassificationResult,
    responses=_ERROR_RESPONSES,
    summary="Check whether a document is a legal document",
)
async def classify_document(document_id: str, service: IngestionDep) -> ClassificationResult:
    return await service.classify_document(document_id)


@router.post(
    "/documents/{document_id}/chat",
    response_model=ChatMessage,
    responses=_ERROR_RESPONSES,
    summary="Ask a question about a document",
)
async def chat_with_document(
    document_id: str,
    body: ChatRequest,
    service: ChatDep,
) -> ChatMessage:
    return await service.chat(document_id, body.message, body.previous_messages)


@router.post(
    "/documents/{document_id}/analyze",
    response_model=AnalysisResult,
    response_model_by_alias=True,
    responses=_ERROR_RESPONSES,
    summary="Analyse a document from one party's perspective",
)
async def analyze_document(
    document_id: str,
    body: AnalyzeRequest,
    service: AnalysisDep,
) -> AnalysisResult:
    """Risk score, key clauses, negotiable terms, red flags and recommendations.

    A document the model judges not legal comes back with ``is_legal`` false
    and a ``note``; the document itself is left alone.
    """
    return await service.analyze_document(document_id, body.party_perspective, body.analysis_bias)


@router.post(
    "/documents/{document_id}/parties",
    response_model=PartyExtractionResult,
    responses=_ERROR_RESPONSES,
    summary="Extract the parties named in a document",
)
async def extract_parties(document_id: str, service: AnalysisDep) -> PartyExtractionResult:
    return await service.extract_parties(document_id)


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and configured provider names."""
    providers: dict[str, Any] = dict(getattr(request.app.state, "provider_registry", {}))
    status = "healthy" if providers.get("llm") and providers.get("embedding") else "degraded"
    return HealthResponse(status=status, version="0.1.0", providers=providers)
