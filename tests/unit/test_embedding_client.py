"""Unit tests for EmbeddingClient - batch bound, timeouts, error wrapping."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.services.ingestion.embedding_client import EmbeddingClient
from src.utils.errors import EmbeddingServiceError


def _provider(**overrides) -> MagicMock:
    mock = MagicMock(spec=IEmbeddingProvider)
    mock.get_provider_name.return_value = "mock-embedding"
    mock.embed = AsyncMock(side_effect=lambda texts: [[0.5, 0.5] for _ in texts])
    mock.embed_single = AsyncMock(return_value=[1.0, 0.0])
    for name, value in overrides.items():
        setattr(mock, name, value)
    return mock


class TestEmbedChunks:
    @pytest.mark.asyncio
    async def test_only_first_max_chunks_are_sent(self) -> None:
        provider = _provider()
        client = EmbeddingClient(provider, max_chunks=10)
        texts = [f"chunk {i}" for i in range(13)]

        vectors = await client.embed_chunks(texts)

        assert len(vectors) == 10
        provider.embed.assert_awaited_once_with(texts[:10])

    @pytest.mark.asyncio
    async def test_fewer_chunks_than_limit(self) -> None:
        client = EmbeddingClient(_provider(), max_chunks=10)
        assert len(await client.embed_chunks(["a", "b", "c"])) == 3

    @pytest.mark.asyncio
    async def test_empty_input_skips_provider(self) -> None:
        provider = _provider()
        assert await EmbeddingClient(provider).embed_chunks([]) == []
        provider.embed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_count_mismatch_raises(self) -> None:
        provider = _provider(embed=AsyncMock(return_value=[[0.1, 0.2]]))
        with pytest.raises(EmbeddingServiceError):
            await EmbeddingClient(provider).embed_chunks(["a", "b"])

    @pytest.mark.asyncio
    async def test_inconsistent_dimensions_raise(self) -> None:
        provider = _provider(embed=AsyncMock(return_value=[[0.1, 0.2], [0.1]]))
        with pytest.raises(EmbeddingServiceError):
            await EmbeddingClient(provider).embed_chunks(["a", "b"])

    @pytest.mark.asyncio
    async def test_provider_exception_is_wrapped(self) -> None:
        provider = _provider(embed=AsyncMock(side_effect=RuntimeError("socket closed")))
        with pytest.raises(EmbeddingServiceError) as exc_info:
            await EmbeddingClient(provider).embed_chunks(["a"])
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.provider_name == "mock-embedding"

    @pytest.mark.asyncio
    async def test_timeout_becomes_embedding_error(self) -> None:
        async def _slow(texts):  # noqa: ANN001, ANN202
            await asyncio.sleep(5)
            return [[0.0] for _ in texts]

        provider = _provider(embed=AsyncMock(side_effect=_slow))
        client = EmbeddingClient(provider, timeout_seconds=0.01)
        with pytest.raises(EmbeddingServiceError, match="timed out"):
            await client.embed_chunks(["a"])


class TestEmbedQuery:
    @pytest.mark.asyncio
    async def test_returns_single_vector(self) -> None:
        client = EmbeddingClient(_provider())
        assert await client.embed_query("what is the term?") == [1.0, 0.0]

    @pytest.mark.asyncio
    async def test_empty_vector_rejected(self) -> None:
        client = EmbeddingClient(_provider(embed_single=AsyncMock(return_value=[])))
        with pytest.raises(EmbeddingServiceError):
            await client.embed_query("q")


class TestConfiguration:
    def test_flatten_concatenates_in_order(self) -> None:
        assert EmbeddingClient.flatten([[1.0, 2.0], [3.0, 4.0]]) == [1.0, 2.0, 3.0, 4.0]

    def test_max_chunks_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            EmbeddingClient(_provider(), max_chunks=0)

    def test_properties(self) -> None:
        client = EmbeddingClient(_provider(), max_chunks=3)
        assert client.max_chunks == 3
        assert client.provider_name == "mock-embedding"
