"""Chunk and query embeddings through an OpenAI-compatible embeddings API.

The same adapter serves api.openai.com and any endpoint speaking the
OpenAI wire format (TogetherAI, Fireworks, vLLM); ``openai_base_url``
selects the endpoint and ``openai_embedding_model`` the model.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import openai
import structlog

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.utils.errors import EmbeddingServiceError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

# Upper bound on inputs per embeddings.create request.
_REQUEST_INPUT_LIMIT = 2048

# Rough chars-per-token ratio for contract prose; errs on the short side.
_CHARS_PER_TOKEN = 3.0


@dataclass(frozen=True)
class _ModelSpec:
    dimension: int
    # 0 means the model window exceeds any chunk the chunker emits.
    input_token_limit: int = 0


_KNOWN_MODELS: dict[str, _ModelSpec] = {
    "text-embedding-3-small": _ModelSpec(1536),
    "text-embedding-3-large": _ModelSpec(3072),
    "text-embedding-ada-002": _ModelSpec(1536),
    "BAAI/bge-base-en-v1.5": _ModelSpec(768, 512),
    "BAAI/bge-large-en-v1.5": _ModelSpec(1024, 512),
    "intfloat/multilingual-e5-large-instruct": _ModelSpec(1024, 512),
}
_FALLBACK_SPEC = _ModelSpec(768)


def _batches(texts: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for offset in range(0, len(texts), size):
        yield texts[offset : offset + size]


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """:class:`IEmbeddingProvider` over ``openai.AsyncOpenAI().embeddings``."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.openai_embedding_model or DEFAULT_EMBEDDING_MODEL
        self._spec = _KNOWN_MODELS.get(self._model, _FALLBACK_SPEC)
        self._name = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )
        self._client = openai.AsyncOpenAI(
            api_key=self._api_key,
            base_url=settings.openai_base_url or None,
        )

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts*, preserving input order.

        Inputs longer than a small-window model accepts are cut at a word
        boundary first; the caller never sees the cut.
        """
        if not texts:
            return []

        prepared = [self._fit_to_window(text) for text in texts]
        vectors: list[list[float]] = []
        for batch in _batches(prepared, _REQUEST_INPUT_LIMIT):
            vectors.extend(await self._request(batch))

        if len(vectors) != len(texts):
            raise EmbeddingServiceError(
                message=f"Expected {len(texts)} embeddings, received {len(vectors)}",
                provider_name=self._name,
            )
        return vectors

    async def embed_single(self, text: str) -> list[float]:
        (vector,) = await self.embed([text])
        return vector

    def get_dimension(self) -> int:
        return self._spec.dimension

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return bool(self._api_key)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(self, batch: Sequence[str]) -> list[list[float]]:
        try:
            response = await self._client.embeddings.create(input=list(batch), model=self._model)
        except openai.APIError as exc:
            raise EmbeddingServiceError(
                message=f"Embedding request to {self._model} failed: {exc}",
                provider_name=self._name,
            ) from exc

        logger.info(
            "embedding_request",
            provider=self._name,
            model=self._model,
            inputs=len(batch),
            tokens=response.usage.total_tokens if response.usage else None,
        )
        # Items carry their input position; the list itself may be reordered.
        return [item.embedding for item in sorted(response.data, key=lambda item: item.index)]

    def _fit_to_window(self, text: str) -> str:
        if not self._spec.input_token_limit:
            return text
        max_chars = int(self._spec.input_token_limit * _CHARS_PER_TOKEN)
        if len(text) <= max_chars:
            return text
        cut = text[:max_chars].rsplit(" ", 1)[0]
        logger.debug(
            "embedding_input_truncated",
            model=self._model,
            original_chars=len(text),
            kept_chars=len(cut),
        )
        return cut
