"""Bounded, time-limited access to the embedding provider.

:class:`EmbeddingClient` sits between the pipeline and an
:class:`~src.interfaces.embedding_provider.IEmbeddingProvider`:

* only the first ``max_chunks`` inputs are embedded (document order,
  trailing inputs dropped);
* every provider call runs under a timeout;
* any failure, including a timeout or a malformed response, surfaces as
  :class:`~src.utils.errors.EmbeddingServiceError` with the cause chained.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.utils.concurrency import with_timeout
from src.utils.errors import EmbeddingServiceError
from src.utils.vectors import flatten

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_MAX_CHUNKS = 10


class EmbeddingClient:
    """Wraps an embedding provider with batch bounds and timeouts."""

    def __init__(
        self,
        provider: IEmbeddingProvider,
        max_chunks: int = DEFAULT_MAX_CHUNKS,
        timeout_seconds: float | None = 60.0,
    ) -> None:
        if max_chunks <= 0:
            msg = f"max_chunks must be positive, got {max_chunks}"
            raise ValueError(msg)
        self._provider = provider
        self._max_chunks = max_chunks
        self._timeout = timeout_seconds

    @property
    def max_chunks(self) -> int:
        return self._max_chunks

    @property
    def provider_name(self) -> str:
        return self._provider.get_provider_name()

    async def embed_chunks(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed the first ``max_chunks`` of *texts*, one vector per input, in order."""
        batch = list(texts[: self._max_chunks])
        if not batch:
            return []

        vectors = await self._call(self._provider.embed(batch), operation="embed_chunks")
        if len(vectors) != len(batch):
            raise EmbeddingServiceError(
                message=f"Expected {len(batch)} vectors, received {len(vectors)}",
                provider_name=self.provider_name,
            )
        dimensions = {len(v) for v in vectors}
        if len(dimensions) != 1 or 0 in dimensions:
            raise EmbeddingServiceError(
                message=f"Inconsistent embedding dimensions: {sorted(dimensions)}",
                provider_name=self.provider_name,
            )

        logger.info(
            "chunks_embedded",
            provider=self.provider_name,
            requested=len(texts),
            embedded=len(batch),
            dimension=dimensions.pop(),
        )
        return vectors

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single chat query."""
        vector = await self._call(self._provider.embed_single(text), operation="embed_query")
        if not vector:
            raise EmbeddingServiceError(
                message="Embedding service returned an empty vector",
                provider_name=self.provider_name,
            )
        return vector

    @staticmethod
    def flatten(vectors: Sequence[Sequence[float]]) -> list[float]:
        """Concatenate per-chunk vectors into the stored document vector."""
        return flatten(vectors)

    async def _call(self, awaitable, operation: str):  # noqa: ANN001, ANN202
        def _timeout_error(seconds: float) -> EmbeddingServiceError:
            return EmbeddingServiceError(
                message=f"Embedding {operation} timed out after {seconds:g}s",
                provider_name=self.provider_name,
            )

        try:
            return await with_timeout(awaitable, self._timeout, _timeout_error)
        except EmbeddingServiceError:
            raise
        except Exception as exc:
            raise EmbeddingServiceError(
                message=f"Embedding {operation} failed: {exc}",
                provider_name=self.provider_name,
            ) from exc
