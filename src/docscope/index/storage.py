"""SQLite catalog of pages and their embedded sections."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

import numpy as np

from docscope.models import ChunkRecord, DocumentMetadata


class SQLiteCatalogStore:
    """Persistence layer for page metadata and section embeddings."""

    def __init__(self, db_path: Path, *, dimension: int) -> None:
        self.db_path = Path(db_path)
        self.dimension = dimension
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._conn.execute("PRAGMA foreign_keys=ON;")
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY,
                    path TEXT NOT NULL UNIQUE,
                    locale TEXT NOT NULL,
                    topic TEXT,
                    slug TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    sha256 TEXT NOT NULL,
                    mtime REAL NOT NULL,
                    size INTEGER NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TRIGGER IF NOT EXISTS documents_updated
                AFTER UPDATE ON documents
                BEGIN
                    UPDATE documents SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
                END;
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS chunks (
                    id INTEGER PRIMARY KEY,
                    document_id INTEGER NOT NULL,
                    chunk_index INTEGER NOT NULL,
                    text TEXT NOT NULL,
                    metadata TEXT,
                    embedding BLOB NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY(document_id) REFERENCES documents(id) ON DELETE CASCADE
                )
                """
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_chunks_document_id
                    ON chunks(document_id)
                """
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_documents_locale_topic
                    ON documents(locale, topic)
                """
            )

    def init_document(self, document: DocumentMetadata) -> tuple[int, str]:
        """Initialize a document for insertion.

        Returns:
            (doc_id, status) where status is 'inserted', 'updated', or 'skipped'.
            If skipped, doc_id is -1.
        """
        conn = self._conn

        existing = conn.execute(
            "SELECT id, sha256 FROM documents WHERE path = ?",
            (str(document.path),),
        ).fetchone()

        if existing and existing["sha256"] == document.sha256:
            return -1, "skipped"

        if existing:
            conn.execute("DELETE FROM chunks WHERE document_id = ?", (existing["id"],))
            conn.execute("DELETE FROM documents WHERE id = ?", (existing["id"],))

        doc_id = conn.execute(
            """
            INSERT INTO documents(path, locale, topic, slug, title, description, sha256, mtime, size)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(document.path),
                document.locale,
                document.topic,
                document.slug,
                document.title,
                document.description,
                document.sha256,
                document.mtime,
                document.size,
            ),
        ).lastrowid

        return doc_id, "updated" if existing else "inserted"

    def insert_chunks(
        self,
        doc_id: int,
        chunks: Sequence[ChunkRecord],
        embeddings: np.ndarray,
    ) -> None:
        """Insert a batch of chunks for a document."""
        if embeddings.shape[0] != len(chunks):
            raise ValueError("Embeddings and chunks length mismatch")

        conn = self._conn
        for chunk, vector in zip(chunks, embeddings):
            conn.execute(
                """
                INSERT INTO chunks(document_id, chunk_index, text, metadata, embedding)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    doc_id,
                    chunk.index,
                    chunk.text,
                    json.dumps(chunk.metadata, ensure_ascii=False),
                    sqlite3.Binary(np.asarray(vector, dtype="float32").tobytes()),
                ),
            )

    def upsert_document(
        self,
        document: DocumentMetadata,
        chunks: Sequence[ChunkRecord],
        embeddings: np.ndarray,
    ) -> str:
        with self.transaction():
            doc_id, status = self.init_document(document)
            if status == "skipped":
                return status

            self.insert_chunks(doc_id, chunks, embeddings)
            return status

    @staticmethod
    def _filters(locale: Optional[str], topic: Optional[str]) -> tuple[str, list[Any]]:
        clauses: List[str] = []
        params: List[Any] = []
        if locale:
            clauses.append("d.locale = ?")
            params.append(locale)
        if topic:
            clauses.append("d.topic = ?")
            params.append(topic)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def search(
        self,
        embedding: np.ndarray,
        *,
        top_k: int = 10,
        locale: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> List[dict]:
        if top_k < 1:
            return []
        query = np.asarray(embedding, dtype="float32")
        where, params = self._filters(locale, topic)
        rows = self._conn.execute(
            f"""
            SELECT
                d.path AS path,
                d.title AS title,
                d.locale AS locale,
                d.topic AS topic,
                d.slug AS slug,
                c.chunk_index AS chunk_index,
                c.text AS text,
                c.metadata AS metadata,
                c.embedding AS embedding
            FROM chunks c
            JOIN documents d ON d.id = c.document_id
            {where}
            """,
            params,
        ).fetchall()

        if not rows:
            return []

        embeddings = np.vstack([np.frombuffer(row["embedding"], dtype="float32") for row in rows])
        scores = embeddings @ query

        if top_k < len(scores):
            top_indices = np.argpartition(scores, -top_k)[-top_k:]
            top_indices = top_indices[np.argsort(scores[top_indices])[::-1]]
        else:
            top_indices = np.argsort(scores)[::-1]

        results: List[dict] = []
        for idx in top_indices:
            row = rows[idx]
            results.append(
                {
                    "path": row["path"],
                    "title": row["title"],
                    "locale": row["locale"],
                    "topic": row["topic"],
                    "slug": row["slug"],
                    "chunk_index": row["chunk_index"],
                    "text": row["text"],
                    "metadata": row["metadata"],
                    "score": float(scores[idx]),
                }
            )
        return results

    def list_documents(
        self, *, locale: Optional[str] = None, topic: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        where, params = self._filters(locale, topic)
        rows = self._conn.execute(
            f"""
            SELECT
                d.id AS id, d.path AS path, d.locale AS locale, d.topic AS topic,
                d.slug AS slug, d.title AS title, d.description AS description,
                d.size AS size, d.updated_at AS updated_at,
                COUNT(c.id) AS chunk_count
            FROM documents d
            LEFT JOIN chunks c ON c.document_id = d.id
            {where}
            GROUP BY d.id
            ORDER BY d.locale, d.path
            """,
            params,
        ).fetchall()
        return [dict(row) for row in rows]

    def get_stats(self) -> Dict[str, int]:
        row = self._conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM documents) AS document_count,
                (SELECT COUNT(*) FROM chunks) AS chunk_count,
                (SELECT COALESCE(SUM(size), 0) FROM documents) AS total_size_bytes
            """
        ).fetchone()
        return {
            "document_count": int(row["document_count"]),
            "chunk_count": int(row["chunk_count"]),
            "total_size_bytes": int(row["total_size_bytes"]),
        }

    def delete_document(self, doc_id: int) -> bool:
        with self.transaction() as conn:
            conn.execute("DELETE FROM chunks WHERE document_id = ?", (doc_id,))
            cursor = conn.execute("DELETE FROM documents WHERE id = ?", (doc_id,))
        return cursor.rowcount > 0

    def delete_document_by_path(self, path: str) -> bool:
        row = self._conn.execute("SELECT id FROM documents WHERE path = ?", (path,)).fetchone()
        if row is None:
            return False
        return self.delete_document(row["id"])

    def remove_missing_files(self) -> int:
        """Remove documents whose files no longer exist."""
        with self.transaction() as conn:
            rows = conn.execute("SELECT id, path FROM documents").fetchall()
            missing = [row for row in rows if not Path(row["path"]).exists()]
            for row in missing:
                conn.execute("DELETE FROM chunks WHERE document_id = ?", (row["id"],))
                conn.execute("DELETE FROM documents WHERE id = ?", (row["id"],))
        return len(missing)
