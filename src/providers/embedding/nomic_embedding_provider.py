"""Local embeddings with ``nomic-embed-text`` served by Ollama.

Used when no OpenAI key is configured, so document text never leaves the
host. Ollama exposes an OpenAI-compatible ``/v1`` surface, which the
``openai`` client talks to directly.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.utils.errors import EmbeddingServiceError

logger = structlog.get_logger(logger_name=__name__)

NOMIC_MODEL = "nomic-embed-text"
NOMIC_DIMENSION = 768

# Ollama handles large batches poorly; a document never exceeds ten chunks anyway.
_MAX_INPUTS_PER_REQUEST = 512
_PING_TIMEOUT_SECONDS = 3.0


class NomicEmbeddingProvider(IEmbeddingProvider):
    def __init__(self, settings: Settings) -> None:
        self._ollama_url = settings.ollama_base_url.rstrip("/")
        # Ollama ignores the key, the client refuses to start without one.
        self._client = openai.AsyncOpenAI(base_url=f"{self._ollama_url}/v1", api_key="ollama")

    async def embed(self, texts: list[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for offset in range(0, len(texts), _MAX_INPUTS_PER_REQUEST):
            chunk = texts[offset : offset + _MAX_INPUTS_PER_REQUEST]
            try:
                response = await self._client.embeddings.create(input=chunk, model=NOMIC_MODEL)
            except openai.APIError as exc:
                raise EmbeddingServiceError(
                    message=f"Ollama embedding request failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            vectors.extend(item.embedding for item in response.data)
            logger.info("embedding_request", provider="nomic_embedding", inputs=len(chunk))

        if len(vectors) != len(texts):
            raise EmbeddingServiceError(
                message=f"Ollama returned {len(vectors)} vectors for {len(texts)} inputs",
                provider_name=self.get_provider_name(),
            )
        return vectors

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    def get_dimension(self) -> int:
        return NOMIC_DIMENSION

    def get_provider_name(self) -> str:
        return "nomic_embedding"

    def is_available(self) -> bool:
        """Ping ``/api/tags``; an unreachable server means unavailable."""
        if not self._ollama_url:
            return False
        try:
            return httpx.get(f"{self._ollama_url}/api/tags", timeout=_PING_TIMEOUT_SECONDS).status_code == 200
        except (httpx.ConnectError, httpx.TimeoutException):
            return False
