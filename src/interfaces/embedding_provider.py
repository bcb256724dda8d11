"""Embedding backend contract.

Ingestion embeds up to ten chunk texts per document in one call; chat
embeds the question with :meth:`IEmbeddingProvider.embed_single`. Timeouts,
the chunk bound and vector flattening live in ``EmbeddingClient``, not here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Implementations (src/providers/embedding/):
#   OpenAIEmbeddingProvider, NomicEmbeddingProvider
class IEmbeddingProvider(ABC):
    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per input, in input order.

        Request-size limits of the backend are the implementation's concern.

        Raises
        ------
        src.utils.errors.EmbeddingServiceError
            The request failed or returned the wrong number of vectors.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Vector for one text, typically a chat question."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Length of every vector this backend returns (1536, 768, ...)."""

    @abstractmethod
    def get_provider_name(self) -> str:
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Configured, and for local servers, reachable."""
