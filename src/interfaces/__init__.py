"""Public interface definitions for all external collaborators.

Every external service the legal document pipeline touches is accessed
through the abstract base classes defined here.  Concrete adapters live in
``src/providers/`` and are wired together in ``src/main.py``; tests inject
fakes instead.

CONCRETE PROVIDER MAP:
    Interface            →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    ILLMProvider         →  AnthropicLLMProvider, OpenAILLMProvider,
                            OllamaLLMProvider
    IEmbeddingProvider   →  OpenAIEmbeddingProvider, NomicEmbeddingProvider
    IDocumentStore       →  SQLiteDocumentStore
    IFileStore           →  LocalFileStore
    IPromptProvider      →  StaticPromptProvider
"""

from src.interfaces.document_store import IDocumentStore
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.file_store import IFileStore
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.prompt_provider import (
    ANALYSIS_PROMPT_PLACEHOLDERS,
    CHAT_PROMPT_PLACEHOLDERS,
    PARTY_PROMPT_PLACEHOLDERS,
    IPromptProvider,
)

__all__ = [
    "ANALYSIS_PROMPT_PLACEHOLDERS",
    "CHAT_PROMPT_PLACEHOLDERS",
    "IDocumentStore",
    "IEmbeddingProvider",
    "IFileStore",
    "ILLMProvider",
    "IPromptProvider",
    "PARTY_PROMPT_PLACEHOLDERS",
]
