"""Legal document API layer - routes, schemas, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
from src.api.schemas import (
    ChatRequest,
    DeleteDocumentResponse,
    DocumentSummaryResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ChatRequest",
    "DeleteDocumentResponse",
    "DocumentSummaryResponse",
    "ErrorResponse",
    "HealthResponse",
]
