"""Embedding backends implementing ``IEmbeddingProvider``.

``OpenAIEmbeddingProvider`` is used when an OpenAI key is set; otherwise
``NomicEmbeddingProvider`` embeds locally through Ollama.
"""

from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["NomicEmbeddingProvider", "OpenAIEmbeddingProvider"]
