"""Custom exception hierarchy for the legal document service.

All application exceptions inherit from :class:`LegalDocError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "ollama", "sqlite") caused the failure.

The hierarchy is organized by pipeline domain:

    LegalDocError  (base -- catch-all for any application error)
    +-- MissingFileLocationError   (ingestion entry: no file attached)
    +-- UnsupportedMediaTypeError  (extraction: unknown declared type)
    +-- ExtractionError            (extraction: file unreadable)
    +-- EmptyContentError          (chunking: nothing to embed)
    +-- EmbeddingServiceError      (embedding call failure or timeout)
    +-- ClassifierServiceError     (legal verdict call failure, non-fatal)
    +-- DocumentNotReadyError      (chat: no stored vector)
    +-- DimensionMismatchError     (chat: query/document vector lengths differ)
    +-- InvalidModelResponseError  (chat: model output is not the expected JSON)
    +-- UpstreamGenerationError    (any generative-text call failure)
    +-- DocumentNotFoundError      (record store lookup miss)
    +-- StatusConflictError        (conditional status write lost a race)
    +-- FileStoreError             (file object store failure)
    +-- ConfigurationError         (startup / missing config)

Ingestion treats every subclass except :class:`ClassifierServiceError` as
fatal to the run.  Chat errors propagate to the caller untouched.
"""


class LegalDocError(Exception):
    """Base exception for all application errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------

class MissingFileLocationError(LegalDocError):
    """Raised when a document enters ingestion without a file location."""

    def __init__(
        self,
        message: str = "Document has no file location",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnsupportedMediaTypeError(LegalDocError):
    """Raised when the declared media type has no extractor.

    The original type string is kept on ``media_type`` for diagnostics.
    """

    def __init__(
        self,
        media_type: str,
        message: str | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._media_type = media_type
        super().__init__(
            message=message or f"Unsupported file type: {media_type}",
            provider_name=provider_name,
        )

    @property
    def media_type(self) -> str:
        return self._media_type


class ExtractionError(LegalDocError):
    """Raised when text cannot be read out of a supported file."""

    def __init__(
        self,
        message: str = "Text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmptyContentError(LegalDocError):
    """Raised when extraction and chunking produce no usable text.

    Typical cause: a scanned PDF with no text layer.
    """

    def __init__(
        self,
        message: str = "No text content could be extracted",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class EmbeddingServiceError(LegalDocError):
    """Raised when an embedding call fails, times out, or returns a bad shape."""

    def __init__(
        self,
        message: str = "Embedding service call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ClassifierServiceError(LegalDocError):
    """Raised when the legal-document verdict could not be obtained.

    The ingestion pipeline catches this, keeps the document, and reports the
    error in its result payload.
    """

    def __init__(
        self,
        message: str = "Legal document classification failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UpstreamGenerationError(LegalDocError):
    """Raised when a generative-text (LLM) API call fails."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class FileStoreError(LegalDocError):
    """Raised when the file object store cannot resolve, fetch, or save a file."""

    def __init__(
        self,
        message: str = "File store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Chat errors
# ---------------------------------------------------------------------------

class DocumentNotReadyError(LegalDocError):
    """Raised when chat finds no stored vector, or analysis finds no content."""

    def __init__(
        self,
        message: str = "Document not found or not processed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DimensionMismatchError(LegalDocError):
    """Raised when two vectors passed to a similarity function differ in length."""

    def __init__(
        self,
        left: int,
        right: int,
        message: str | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._left = left
        self._right = right
        super().__init__(
            message=message or f"Vector dimensions differ: {left} != {right}",
            provider_name=provider_name,
        )

    @property
    def left(self) -> int:
        return self._left

    @property
    def right(self) -> int:
        return self._right


class InvalidModelResponseError(LegalDocError):
    """Raised when model output does not parse into the expected answer shape.

    ``raw_text`` holds the unmodified model output for diagnostics.
    """

    def __init__(
        self,
        raw_text: str,
        message: str = "AI response was not valid JSON",
        provider_name: str | None = None,
    ) -> None:
        self._raw_text = raw_text
        super().__init__(message=message, provider_name=provider_name)

    @property
    def raw_text(self) -> str:
        return self._raw_text


# ---------------------------------------------------------------------------
# Record store / configuration errors
# ---------------------------------------------------------------------------

class DocumentNotFoundError(LegalDocError):
    """Raised when a document id does not exist in the record store."""

    def __init__(
        self,
        document_id: str,
        message: str | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._document_id = document_id
        super().__init__(
            message=message or f"Document not found: {document_id}",
            provider_name=provider_name,
        )

    @property
    def document_id(self) -> str:
        return self._document_id


class StatusConflictError(LegalDocError):
    """Raised when a conditional status write finds the record no longer in
    the expected state (another writer finalised or changed it)."""

    def __init__(
        self,
        document_id: str,
        message: str | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._document_id = document_id
        super().__init__(
            message=message or f"Document {document_id} changed state during ingestion",
            provider_name=provider_name,
        )

    @property
    def document_id(self) -> str:
        return self._document_id


class ConfigurationError(LegalDocError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
