"""Shared pytest fixtures for the legal document test suite."""

from __future__ import annotations

import hashlib
import struct
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest

from src.config.settings import Settings
from src.interfaces.document_store import IDocumentStore
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.file_store import IFileStore
from src.interfaces.llm_provider import ILLMProvider
from src.models.document import Document, DocumentStatus, now_ms
from src.utils.errors import FileStoreError

# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Settings pointing every store at a temp directory, no credentials."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        anthropic_api_key="",
        document_db_path=str(tmp_path / "documents.db"),
        file_store_dir=str(tmp_path / "files"),
    )


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return a minimal resolved configuration for testing."""
    return {
        "app": {"host": "127.0.0.1", "port": 8000, "env": "development"},
        "chunking": {"chunk_size": 6000, "chunk_overlap": 200},
        "embedding": {"max_chunks": 10, "timeout": 5},
        "classifier": {"char_limit": 20000},
        "llm": {"timeout": 5},
        "storage": {"fetch_timeout": 5},
        "analysis": {"party_char_limit": 10000},
    }


# ---------------------------------------------------------------------------
# Sample text fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_contract_text() -> str:
    """A short multi-paragraph agreement."""
    return (
        "SERVICES AGREEMENT\n\n"
        "This Services Agreement is entered into on 1 March 2024 between Acme Corp. "
        "(the \"Client\") and Widget Ltd. (the \"Provider\").\n\n"
        "1. Services. The Provider shall deliver the services described in Sch. 1. "
        "The Client shall pay the fees set out in Sch. 2 within thirty days of invoice.\n\n"
        "2. Term. This Agreement commences on the Effective Date and continues for "
        "twelve months unless terminated earlier under Sec. 7.\n\n"
        "3. Governing Law. This Agreement is governed by the laws of England and Wales."
    )


@pytest.fixture
def sample_analysis_payload() -> dict[str, Any]:
    """A complete analysis reply for the services agreement, in the model's camelCase."""
    return {
        "document": {
            "id": "model-invented-id",
            "title": "Services Agreement",
            "type": "agreement",
            "status": "active",
            "parties": ["Acme Corp", "Widget Ltd"],
            "effectiveDate": "1 March 2024",
            "expirationDate": "28 February 2025",
        },
        "riskScore": 35,
        "keyClauses": [
            {
                "title": "Payment",
                "section": "1",
                "text": "The Client shall pay the fees set out in Sch. 2 within thirty days of invoice.",
                "importance": "high",
                "analysis": "Thirty-day terms are standard.",
            }
        ],
        "negotiableTerms": [
            {
                "title": "Payment window",
                "description": "Longer payment terms help the Client's cash flow.",
                "priority": "medium",
                "currentLanguage": "within thirty days of invoice",
                "suggestedLanguage": "within forty-five days of invoice",
            }
        ],
        "redFlags": [
            {
                "title": "No liability cap",
                "description": "Neither party limits its liability.",
                "severity": "high",
            }
        ],
        "recommendations": [
            {"title": "Add a liability cap", "description": "Cap liability at the annual fees."}
        ],
        "overallImpression": {
            "summary": "A short, balanced services agreement.",
            "pros": ["Clear term"],
            "cons": ["No liability cap"],
            "conclusion": "Acceptable with a liability cap.",
        },
    }


# ---------------------------------------------------------------------------
# PDF builder
# ---------------------------------------------------------------------------


def make_pdf_bytes(pages: list[str]) -> bytes:
    """Build a PDF with one page per entry; an empty string yields a blank page."""
    doc = fitz.open()
    try:
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text, fontsize=11)
        return doc.tobytes()
    finally:
        doc.close()


@pytest.fixture
def pdf_builder():  # noqa: ANN201
    return make_pdf_bytes


# ---------------------------------------------------------------------------
# Embedding fixtures
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 16


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Generate a deterministic fixed-length vector by hashing *text*.

    Uses SHA-256 to hash the text, then unpacks bytes into floats and
    normalises to unit length.  Same text always produces the same vector.
    """
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    raw = digest
    while len(raw) < dim * 4:
        raw += hashlib.sha256(raw).digest()
    raw = raw[: dim * 4]
    # Unsigned ints avoid NaN/inf bit patterns that raw floats can produce.
    values = [v / 2**32 - 0.5 for v in struct.unpack(f"<{dim}I", raw)]
    magnitude = max(sum(v * v for v in values) ** 0.5, 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider for tests."""

    def __init__(self, dim: int = _EMBEDDING_DIM) -> None:
        self.dim = dim
        self.calls: list[list[str]] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [_hash_to_vector(t, self.dim) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return _hash_to_vector(text, self.dim)

    def get_dimension(self) -> int:
        return self.dim

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


# ---------------------------------------------------------------------------
# LLM fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider whose complete() answers "yes" by default.

    Override with mock_llm_provider.complete.return_value = "..." or
    mock_llm_provider.complete.side_effect = [...] for specific tests.
    """
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.validate_credentials = AsyncMock(return_value=True)
    mock.complete = AsyncMock(return_value="yes")
    return mock


# ---------------------------------------------------------------------------
# In-memory stores
# ---------------------------------------------------------------------------


class InMemoryDocumentStore(IDocumentStore):
    """Dict-backed record store with the same compare-and-swap semantics."""

    def __init__(self) -> None:
        self.documents: dict[str, Document] = {}
        self.update_calls: list[tuple[str, dict[str, Any], DocumentStatus | None]] = []

    async def initialize(self) -> None:
        return None

    async def create(self, document: Document) -> Document:
        self.documents[document.id] = document
        return document

    async def get(self, document_id: str) -> Document | None:
        return self.documents.get(document_id)

    async def update(
        self,
        document_id: str,
        fields: dict[str, Any],
        expected_status: DocumentStatus | None = None,
    ) -> bool:
        self.update_calls.append((document_id, dict(fields), expected_status))
        current = self.documents.get(document_id)
        if current is None:
            return False
        if expected_status is not None and current.status != expected_status:
            return False
        self.documents[document_id] = current.model_copy(
            update={**fields, "updated_at": now_ms()}
        )
        return True

    async def delete(self, document_id: str) -> bool:
        return self.documents.pop(document_id, None) is not None

    async def list_by_owner(self, owner_id: str) -> list[Document]:
        return [d for d in self.documents.values() if d.owner_id == owner_id]

    def get_provider_name(self) -> str:
        return "memory"


class InMemoryFileStore(IFileStore):
    """Dict-backed file store addressing files as ``mem://<storage id>``."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []

    async def save(self, storage_id: str, data: bytes) -> str:
        self.files[storage_id] = data
        return storage_id

    async def resolve_url(self, storage_id: str) -> str | None:
        return f"mem://{storage_id}" if storage_id in self.files else None

    async def fetch_bytes(self, url: str) -> bytes:
        storage_id = self.storage_id_from_url(url)
        if storage_id is None or storage_id not in self.files:
            raise FileStoreError(message=f"Missing file: {url}", provider_name="memory")
        return self.files[storage_id]

    async def delete(self, storage_id: str) -> None:
        self.deleted.append(storage_id)
        self.files.pop(storage_id, None)

    def storage_id_from_url(self, url: str) -> str | None:
        if url.startswith("mem://"):
            return url[len("mem://") :]
        return None

    def get_provider_name(self) -> str:
        return "memory"


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def file_store() -> InMemoryFileStore:
    return InMemoryFileStore()
