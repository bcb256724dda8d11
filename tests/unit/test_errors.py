"""Unit tests for the exception hierarchy and its HTTP status mapping."""

from __future__ import annotations

import pytest

from src.api.middleware import status_code_for
from src.utils.errors import (
    ClassifierServiceError,
    ConfigurationError,
    DimensionMismatchError,
    DocumentNotFoundError,
    DocumentNotReadyError,
    EmbeddingServiceError,
    EmptyContentError,
    ExtractionError,
    FileStoreError,
    InvalidModelResponseError,
    LegalDocError,
    MissingFileLocationError,
    StatusConflictError,
    UnsupportedMediaTypeError,
    UpstreamGenerationError,
)


class TestLegalDocError:
    def test_str_with_provider(self) -> None:
        assert str(LegalDocError("Rate limit", provider_name="openai")) == "[openai] Rate limit"

    def test_str_without_provider(self) -> None:
        assert str(LegalDocError("Plain")) == "Plain"

    @pytest.mark.parametrize(
        "error",
        [
            MissingFileLocationError(),
            UnsupportedMediaTypeError("image/png"),
            ExtractionError(),
            EmptyContentError(),
            EmbeddingServiceError(),
            ClassifierServiceError(),
            UpstreamGenerationError(),
            FileStoreError(),
            DocumentNotReadyError(),
            DimensionMismatchError(1, 2),
            InvalidModelResponseError("raw"),
            DocumentNotFoundError("d"),
            StatusConflictError("d"),
            ConfigurationError(),
        ],
    )
    def test_all_errors_share_the_base(self, error: LegalDocError) -> None:
        assert isinstance(error, LegalDocError)
        assert error.message

    def test_default_messages(self) -> None:
        assert DocumentNotReadyError().message == "Document not found or not processed"
        assert InvalidModelResponseError("x").message == "AI response was not valid JSON"
        assert UnsupportedMediaTypeError("image/png").message == "Unsupported file type: image/png"


class TestStatusMapping:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (DocumentNotFoundError("d"), 404),
            (DocumentNotReadyError(), 409),
            (StatusConflictError("d"), 409),
            (UnsupportedMediaTypeError("image/png"), 415),
            (DimensionMismatchError(3, 4), 422),
            (UpstreamGenerationError(), 502),
            (InvalidModelResponseError("raw"), 502),
            (EmbeddingServiceError(), 502),
            (ExtractionError(), 500),
            (EmptyContentError(), 500),
            (ConfigurationError(), 500),
        ],
    )
    def test_status_code_for(self, error: LegalDocError, status: int) -> None:
        assert status_code_for(error) == status
