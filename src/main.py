"""Legal document service FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.

:func:`build_components` is shared with the CLI so both surfaces assemble
exactly the same object graph.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.llm_provider import ILLMProvider
from src.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from src.providers.file_store.local_file_store import LocalFileStore
from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.prompt.static_prompt_provider import StaticPromptProvider
from src.services.analysis_service import AnalysisService
from src.services.chat_service import ChatService
from src.services.classifier import LegalDocumentClassifier
from src.services.extraction.text_extractor import TextExtractor
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.embedding_client import EmbeddingClient
from src.services.ingestion.ingestion_service import IngestionService
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Select the first configured LLM provider.

    Priority order: Anthropic -> OpenAI -> Ollama (always configured).
    """
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    return OllamaLLMProvider(settings=app_settings)


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """OpenAI/OpenAI-compatible when an API key is set, else Nomic via Ollama."""
    if app_settings.openai_api_key:
        return OpenAIEmbeddingProvider(settings=app_settings)
    return NomicEmbeddingProvider(settings=app_settings)


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    return config.get(name) or {}


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_components(
    app_settings: Settings,
    config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Construct every provider and service once for this process.

    Values from the resolved YAML+env *config* take precedence over the
    raw Settings defaults.
    """
    config = config if config is not None else load_config(settings=app_settings)
    chunking = _section(config, "chunking")
    embedding = _section(config, "embedding")
    classifier_cfg = _section(config, "classifier")
    llm_cfg = _section(config, "llm")
    storage = _section(config, "storage")
    prompts = _section(config, "prompts")
    analysis_cfg = _section(config, "analysis")

    http_client = httpx.AsyncClient(timeout=float(storage.get("fetch_timeout", app_settings.fetch_timeout)))

    llm_provider = _build_llm_provider(app_settings)
    embedding_provider = _build_embedding_provider(app_settings)
    document_store = SQLiteDocumentStore(
        db_path=storage.get("document_db_path", app_settings.document_db_path)
    )
    file_store = LocalFileStore(
        root_dir=storage.get("file_store_dir", app_settings.file_store_dir),
        http_client=http_client,
    )
    prompt_provider = StaticPromptProvider(
        template_path=prompts.get("chat_prompt_path", app_settings.chat_prompt_path) or None,
        analysis_template_path=prompts.get("analysis_prompt_path", app_settings.analysis_prompt_path) or None,
        party_template_path=prompts.get("party_prompt_path", app_settings.party_prompt_path) or None,
    )

    llm_timeout = float(llm_cfg.get("timeout", app_settings.llm_timeout))
    embedding_client = EmbeddingClient(
        embedding_provider,
        max_chunks=int(embedding.get("max_chunks", app_settings.max_embedded_chunks)),
        timeout_seconds=float(embedding.get("timeout", app_settings.embedding_timeout)),
    )
    classifier = LegalDocumentClassifier(
        llm_provider,
        char_limit=int(classifier_cfg.get("char_limit", app_settings.classifier_char_limit)),
        timeout_seconds=llm_timeout,
    )
    chunker = TextChunker(
        chunk_size=int(chunking.get("chunk_size", app_settings.chunk_size)),
        overlap=int(chunking.get("chunk_overlap", app_settings.chunk_overlap)),
    )

    ingestion_service = IngestionService(
        document_store=document_store,
        file_store=file_store,
        extractor=TextExtractor(),
        chunker=chunker,
        embedding_client=embedding_client,
        classifier=classifier,
        fetch_timeout=float(storage.get("fetch_timeout", app_settings.fetch_timeout)),
    )
    chat_service = ChatService(
        document_store=document_store,
        embedding_client=embedding_client,
        llm=llm_provider,
        prompt_provider=prompt_provider,
        llm_timeout=llm_timeout,
    )
    analysis_service = AnalysisService(
        document_store=document_store,
        llm=llm_provider,
        prompt_provider=prompt_provider,
        llm_timeout=llm_timeout,
        party_char_limit=int(analysis_cfg.get("party_char_limit", app_settings.party_char_limit)),
    )

    provider_registry = {
        "llm": llm_provider.get_provider_name(),
        "embedding": embedding_provider.get_provider_name(),
        "document_store": document_store.get_provider_name(),
        "file_store": file_store.get_provider_name(),
    }

    return {
        "http_client": http_client,
        "llm_provider": llm_provider,
        "embedding_provider": embedding_provider,
        "document_store": document_store,
        "file_store": file_store,
        "ingestion_service": ingestion_service,
        "chat_service": chat_service,
        "analysis_service": analysis_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_components(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["document_store"].initialize()

    _logger.info(
        "app_startup",
        version="0.1.0",
        environment=settings.app_env,
        providers=components["provider_registry"],
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Legal Document API",
        version="0.1.0",
        description=(
            "Ingest legal documents into chat-ready text and vectors, and ask "
            "questions answered from the document content."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
