"""Catalog indexing pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from docscope.content.tree import ContentTree
from docscope.embedding.encoder import EmbeddingModel
from docscope.errors import DocumentError
from docscope.index.storage import SQLiteCatalogStore
from docscope.ingestion.markdown_loader import build_chunks
from docscope.models import ChunkRecord, Document, DocumentMetadata

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexStats:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    processed_files: list[Path] = field(default_factory=list)
    errors: list[DocumentError] = field(default_factory=list)

    def increment(self, status: str, path: Path) -> None:
        if status == "inserted":
            self.inserted += 1
        elif status == "updated":
            self.updated += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1
        self.processed_files.append(path)

    def fail(self, error: DocumentError) -> None:
        self.errors.append(error)
        self.increment("failed", error.path)


class Indexer:
    """Walks a content tree and persists its pages into the catalog."""

    def __init__(
        self,
        embedder: EmbeddingModel,
        store: SQLiteCatalogStore,
        *,
        chunk_chars: int = 1200,
        overlap: int = 200,
        batch_size: int = 32,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.chunk_chars = chunk_chars
        self.overlap = overlap
        self.batch_size = batch_size

    def index(self, tree: ContentTree) -> IndexStats:
        """Index every well-formed page of the tree.

        Documents that fail to load, or whose indexing fails, are counted as
        failed and do not interrupt the run.
        """
        stats = IndexStats()
        for item in tree.iter_documents():
            if isinstance(item, DocumentError):
                stats.fail(item)
                continue

            path = item.descriptor.path
            try:
                LOGGER.info("Processing: %s", item.descriptor.relative_path)
                status = self._index_single(item)
                stats.increment(status, path)
            except Exception as exc:
                LOGGER.error("Failed to index %s: %s", path, exc)
                stats.fail(DocumentError(path, str(exc)))

        if not stats.processed_files:
            LOGGER.warning("No documents found under %s", tree.root)
        return stats

    def _index_single(self, document: Document) -> str:
        descriptor = document.descriptor
        stat = descriptor.path.stat()
        metadata = DocumentMetadata(
            path=descriptor.path,
            locale=descriptor.locale,
            topic=descriptor.topic,
            slug=descriptor.slug,
            title=descriptor.title,
            description=descriptor.description,
            sha256=document.sha256,
            mtime=stat.st_mtime,
            size=stat.st_size,
        )

        with self.store.transaction():
            doc_id, status = self.store.init_document(metadata)
            if status == "skipped":
                return status

            batch: List[ChunkRecord] = []
            for chunk in build_chunks(document, max_chars=self.chunk_chars, overlap=self.overlap):
                batch.append(chunk)
                if len(batch) >= self.batch_size:
                    self._flush(doc_id, batch)
                    batch = []
            if batch:
                self._flush(doc_id, batch)

        return status

    def _flush(self, doc_id: int, batch: List[ChunkRecord]) -> None:
        embeddings = self.embedder.embed([chunk.text for chunk in batch])
        self.store.insert_chunks(doc_id, batch, embeddings)
