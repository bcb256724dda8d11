"""File object store providers.

LocalFileStore keeps uploaded documents in data/files and serves them via
file:// URLs; http(s) URLs are downloaded with httpx.
"""

from src.providers.file_store.local_file_store import LocalFileStore

__all__ = ["LocalFileStore"]
