"""Document record store providers.

SQLiteDocumentStore keeps document rows in data/documents.db, including
the extracted content and the flattened vector used by chat.
"""

from src.providers.document_store.sqlite_document_store import SQLiteDocumentStore

__all__ = ["SQLiteDocumentStore"]
