"""API middleware - CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and automatic
conversion of ``LegalDocError`` subclasses into JSON ``ErrorResponse``
bodies with a status code chosen per error class.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)   # added 1st → inner
#     app.add_middleware(RequestLoggingMiddleware)  # added 2nd → outermost
#
#   Request flow:
#     Client → RequestLogging → ErrorHandling → route handler
#
# RequestLoggingMiddleware therefore sees the *final* status code, after
# ErrorHandling has turned an exception into a structured JSON error.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import (
    DimensionMismatchError,
    DocumentNotFoundError,
    DocumentNotReadyError,
    EmbeddingServiceError,
    InvalidModelResponseError,
    LegalDocError,
    StatusConflictError,
    UnsupportedMediaTypeError,
    UpstreamGenerationError,
)
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# First matching class wins; unlisted LegalDocError subclasses map to 500.
_STATUS_BY_ERROR: tuple[tuple[type[LegalDocError], int], ...] = (
    (DocumentNotFoundError, 404),
    (DocumentNotReadyError, 409),
    (StatusConflictError, 409),
    (UnsupportedMediaTypeError, 415),
    (DimensionMismatchError, 422),
    (UpstreamGenerationError, 502),
    (InvalidModelResponseError, 502),
    (EmbeddingServiceError, 502),
)


def status_code_for(exc: LegalDocError) -> int:
    """Return the HTTP status code for an application error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Defaults to ``["*"]`` for development; pass explicit origins in
    production.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``LegalDocError`` subclasses and return structured JSON errors.

    The client sees the error class name and message only.  Raw model
    output carried by ``InvalidModelResponseError`` is logged (truncated)
    but never returned.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except LegalDocError as exc:
            status_code = status_code_for(exc)
            log_fields = {
                "error_type": type(exc).__name__,
                "message": exc.message,
                "provider": exc.provider_name,
                "path": str(request.url.path),
                "status": status_code,
            }
            if isinstance(exc, InvalidModelResponseError):
                log_fields["raw_preview"] = exc.raw_text[:200]
            if status_code >= 500:
                _logger.error("application_error", **log_fields)
            else:
                _logger.warning("application_error", **log_fields)

            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
