"""Utility modules for the legal document service.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain exception hierarchy rooted at LegalDocError; each
  pipeline stage raises its own subclass so callers (and the HTTP error
  middleware) can handle failures granularly.
- **concurrency** -- Per-call timeouts for external services and a keyed
  lock that serialises work on one document id.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **vectors** -- Flattening of per-chunk vectors and the strict dot product.
- **llm_response** -- Markdown code-fence stripping for model replies.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    ConfigurationError,
    DimensionMismatchError,
    DocumentNotFoundError,
    DocumentNotReadyError,
    LegalDocError,
)

# -- Async concurrency helpers ---------------------------------------------
from src.utils.concurrency import KeyedLock, with_timeout

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, document_log_context, get_logger

# -- Vector math and model-output cleanup ----------------------------------
from src.utils.llm_response import strip_code_fences
from src.utils.vectors import dot_product, flatten

__all__ = [
    "ConfigurationError",
    "DimensionMismatchError",
    "DocumentNotFoundError",
    "DocumentNotReadyError",
    "KeyedLock",
    "LegalDocError",
    "configure_logging",
    "document_log_context",
    "dot_product",
    "flatten",
    "get_logger",
    "strip_code_fences",
    "with_timeout",
]
