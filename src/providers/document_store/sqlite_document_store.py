"""SQLite-backed document record store.

Persists :class:`~src.models.document.Document` rows to a local SQLite
database at ``data/documents.db``.  Uses ``aiosqlite`` for async I/O.

Each :meth:`update` is a single ``UPDATE`` statement, so a patch is never
half-applied.  Passing ``expected_status`` adds ``AND status = ?`` to the
``WHERE`` clause, which turns the patch into a compare-and-swap.

Vectors are stored as JSON text; timestamps as epoch milliseconds.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.interfaces.document_store import IDocumentStore
from src.models.document import Document, DocumentStatus, now_ms

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/documents.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    id                TEXT    PRIMARY KEY,
    title             TEXT    NOT NULL,
    content           TEXT    NOT NULL DEFAULT '',
    owner_id          TEXT    NOT NULL,
    file_type         TEXT    NOT NULL,
    file_size         INTEGER NOT NULL DEFAULT 0,
    file_url          TEXT    NOT NULL DEFAULT '',
    status            TEXT    NOT NULL,
    vector_embedding  TEXT,
    created_at        INTEGER NOT NULL,
    updated_at        INTEGER NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_owner ON documents(owner_id);",
    "CREATE INDEX IF NOT EXISTS idx_documents_status ON documents(status);",
]

_INSERT_SQL = """\
INSERT INTO documents (
    id, title, content, owner_id, file_type, file_size, file_url,
    status, vector_embedding, created_at, updated_at
)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_COLUMNS = (
    "id, title, content, owner_id, file_type, file_size, file_url, "
    "status, vector_embedding, created_at, updated_at"
)

# Fields callers may patch; id and created_at are immutable.
_UPDATABLE_FIELDS = frozenset(
    {"title", "content", "file_type", "file_size", "file_url", "status", "vector_embedding"}
)


def _encode(field: str, value: Any) -> Any:
    if field == "vector_embedding":
        return None if value is None else json.dumps([float(v) for v in value])
    if field == "status":
        return DocumentStatus(value).value
    return value


def _row_to_document(row: aiosqlite.Row) -> Document:
    data = dict(row)
    raw_vector = data.pop("vector_embedding")
    return Document(
        **data,
        vector_embedding=json.loads(raw_vector) if raw_vector is not None else None,
    )


class SQLiteDocumentStore(IDocumentStore):
    """SQLite-backed document persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the documents table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("document_db_initialized", path=str(self._db_path))

    async def create(self, document: Document) -> Document:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                _INSERT_SQL,
                (
                    document.id,
                    document.title,
                    document.content,
                    document.owner_id,
                    document.file_type,
                    document.file_size,
                    document.file_url,
                    document.status.value,
                    _encode("vector_embedding", document.vector_embedding),
                    document.created_at,
                    document.updated_at,
                ),
            )
            await db.commit()
        logger.info("document_created", document_id=document.id, owner_id=document.owner_id)
        return document

    async def get(self, document_id: str) -> Document | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {_SELECT_COLUMNS} FROM documents WHERE id = ?",
                (document_id,),
            )
            row = await cursor.fetchone()
        return _row_to_document(row) if row is not None else None

    async def update(
        self,
        document_id: str,
        fields: dict[str, Any],
        expected_status: DocumentStatus | None = None,
    ) -> bool:
        """Apply *fields* in one statement; optionally conditional on status."""
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Cannot update document fields: {sorted(unknown)}"
            raise ValueError(msg)

        assignments = [f"{name} = ?" for name in fields]
        params: list[Any] = [_encode(name, value) for name, value in fields.items()]
        assignments.append("updated_at = ?")
        params.append(now_ms())

        sql = f"UPDATE documents SET {', '.join(assignments)} WHERE id = ?"
        params.append(document_id)
        if expected_status is not None:
            sql += " AND status = ?"
            params.append(DocumentStatus(expected_status).value)

        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(sql, params)
            await db.commit()
            changed = cursor.rowcount > 0

        logger.debug(
            "document_updated",
            document_id=document_id,
            fields=sorted(fields),
            expected_status=expected_status.value if expected_status else None,
            changed=changed,
        )
        return changed

    async def delete(self, document_id: str) -> bool:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute("DELETE FROM documents WHERE id = ?", (document_id,))
            await db.commit()
            deleted = cursor.rowcount > 0
        logger.info("document_record_deleted", document_id=document_id, deleted=deleted)
        return deleted

    async def list_by_owner(self, owner_id: str) -> list[Document]:
        """Return all documents for an owner, newest first."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {_SELECT_COLUMNS} FROM documents "
                "WHERE owner_id = ? ORDER BY created_at DESC",
                (owner_id,),
            )
            rows = await cursor.fetchall()
        return [_row_to_document(r) for r in rows]

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return "sqlite_documents"
