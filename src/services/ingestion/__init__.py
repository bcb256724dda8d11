"""Document ingestion pipeline.

Orchestrates **fetch -> extract -> chunk -> persist -> embed -> classify -> finalize**:

1. **Extract** (services/extraction/) -- PDF pages or a plain-text file
   become page-attributed text segments.

2. **Chunk** (chunker.py / TextChunker) -- segments are split into windows
   of at most 6000 characters with 200 characters of overlap, cut at
   paragraph, then sentence, then word boundaries.

3. **Embed** (embedding_client.py / EmbeddingClient) -- the first ten
   chunks are embedded and their vectors concatenated into one document
   vector.

4. **Classify** (services/classifier.py) -- a yes/no LLM check; documents
   judged non-legal are deleted.

IngestionService owns the status transitions of each document record.
"""

from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.embedding_client import EmbeddingClient
from src.services.ingestion.ingestion_service import IngestionService

__all__ = [
    "EmbeddingClient",
    "IngestionService",
    "TextChunker",
]
