"""Domain models - re-exports all public model classes.

Import from ``src.models`` rather than the individual modules:

    - document.py   - Document record, status enum, extracted segments and chunks
    - chat.py       - Chat messages, references, and the model-answer schema
    - ingestion.py  - Ingestion run and classification result payloads
    - analysis.py   - Structured document analysis and extracted parties
"""

from __future__ import annotations

from src.models.analysis import (
    AnalysisBias,
    AnalysisResult,
    DocumentAnalysis,
    PartyExtractionResult,
)
from src.models.chat import ChatAnswer, ChatMessage, ChatRole, DocumentReference
from src.models.document import Document, DocumentStatus, TextChunk, TextSegment, now_ms
from src.models.ingestion import ClassificationResult, IngestionOutcome, IngestionResult

__all__ = [
    "AnalysisBias",
    "AnalysisResult",
    "ChatAnswer",
    "ChatMessage",
    "ChatRole",
    "ClassificationResult",
    "Document",
    "DocumentAnalysis",
    "DocumentReference",
    "DocumentStatus",
    "IngestionOutcome",
    "IngestionResult",
    "PartyExtractionResult",
    "TextChunk",
    "TextSegment",
    "now_ms",
]
