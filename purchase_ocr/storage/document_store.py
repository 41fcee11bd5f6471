"""SQLite-backed document store with collection-scoped create and list.

Documents are JSON objects stored per collection (``products``,
``purchases``, ``purchaseTemplates``) and returned with their generated id.
"""

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentStoreError(Exception):
    """Raised when the underlying database operation fails."""


class DocumentStore:
    """Persistent JSON document collections in a single SQLite file.

    Args:
        db_path: Path to the SQLite database file, created on first use.
    """

    def __init__(self, db_path: str = "data/purchases.db") -> None:
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self) -> None:
        """Create the documents table if it doesn't exist."""
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    collection TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_collection
                ON documents(collection, created_at)
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise DocumentStoreError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        return conn

    def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Add a document to a collection.

        A ``createdAt`` timestamp is set on the stored document.

        Args:
            collection: Collection name.
            data: JSON-serialisable document body.

        Returns:
            The stored document including its ``id``.

        Raises:
            DocumentStoreError: If the document cannot be serialised or
                the insert fails.
        """
        doc_id = uuid.uuid4().hex
        created_at = datetime.now(timezone.utc).isoformat()
        document = {**data, "createdAt": created_at}

        try:
            body = json.dumps(document)
        except (TypeError, ValueError) as exc:
            raise DocumentStoreError(f"document is not JSON serialisable: {exc}") from exc

        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO documents (id, collection, data, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (doc_id, collection, body, created_at),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise DocumentStoreError(str(exc)) from exc
        finally:
            conn.close()

        logger.debug("Created %s/%s", collection, doc_id)
        return {"id": doc_id, **document}

    def list(self, collection: str) -> list[dict[str, Any]]:
        """List all documents in a collection, oldest first.

        Raises:
            DocumentStoreError: If the query fails.
        """
        conn = self._get_connection()
        try:
            rows = conn.execute(
                """
                SELECT id, data FROM documents
                WHERE collection = ?
                ORDER BY created_at, rowid
                """,
                (collection,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise DocumentStoreError(str(exc)) from exc
        finally:
            conn.close()

        return [{"id": row["id"], **json.loads(row["data"])} for row in rows]
