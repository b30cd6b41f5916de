"""Semantic search over the catalog."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from docscope.embedding.encoder import EmbeddingModel
from docscope.index.storage import SQLiteCatalogStore


@dataclass(slots=True)
class SearchResult:
    path: Path
    title: str
    locale: str
    topic: Optional[str]
    slug: str
    chunk_index: int
    score: float
    text: str
    metadata: dict

    @property
    def heading(self) -> str:
        return self.metadata.get("heading") or self.title


class Searcher:
    """High-level API to query the catalog."""

    def __init__(self, embedder: EmbeddingModel, store: SQLiteCatalogStore) -> None:
        self.embedder = embedder
        self.store = store

    def search(
        self,
        query: str,
        *,
        top_k: int = 10,
        locale: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> List[SearchResult]:
        embedding = self.embedder.embed_query(query)
        rows = self.store.search(embedding, top_k=top_k, locale=locale, topic=topic)
        results: List[SearchResult] = []
        for row in rows:
            metadata = json.loads(row["metadata"]) if row.get("metadata") else {}
            results.append(
                SearchResult(
                    path=Path(row["path"]),
                    title=row["title"],
                    locale=row["locale"],
                    topic=row.get("topic"),
                    slug=row.get("slug", ""),
                    chunk_index=row["chunk_index"],
                    score=float(row["score"]),
                    text=row["text"],
                    metadata=metadata,
                )
            )
        return results
