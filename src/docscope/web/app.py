"""FastAPI application exposing the content tree and its catalog."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from docscope.config import AppConfig, load_config
from docscope.content.tree import ContentTree
from docscope.embedding.encoder import EmbeddingConfig, EmbeddingModel
from docscope.errors import ConfigError, DocumentError
from docscope.index.indexer import Indexer
from docscope.index.search import Searcher, SearchResult
from docscope.index.storage import SQLiteCatalogStore
from docscope.navigation import build_sidebar
from docscope.validation.checks import validate_corpus
from docscope.validation.parity import coverage

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="docscope", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class SearchPayload(BaseModel):
    query: str
    db: Path | None = None
    top_k: int = 10
    locale: str | None = None
    topic: str | None = None


class IndexPayload(BaseModel):
    root: str | None = None
    db: str | None = None


def _load_config(config: Path | None = None) -> AppConfig:
    try:
        return load_config(config if config is not None else Path.cwd())
    except ConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _open_tree(root: Path | None, config: Path | None = None) -> ContentTree:
    app_config = _load_config(config)
    tree = ContentTree(root, app_config) if root is not None else ContentTree.from_config(app_config)
    if not tree.root.is_dir():
        raise HTTPException(status_code=404, detail=f"Content root not found: {tree.root}")
    return tree


def _resolve_db_path(db: Path | None) -> Path:
    config = _load_config()
    if db is not None:
        config.db_path = db
    return config.resolve_db_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _error_dict(error: DocumentError) -> dict[str, str]:
    return {"kind": type(error).__name__, "path": str(error.path), "reason": error.reason}


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/documents")
def list_documents(
    root: Path | None = None,
    locale: str | None = None,
    topic: str | None = None,
    config: Path | None = None,
) -> dict[str, Any]:
    """Traverse the content tree and list page descriptors."""
    tree = _open_tree(root, config)
    result = tree.scan()
    documents = [
        descriptor.to_dict()
        for descriptor in result.descriptors
        if (locale is None or descriptor.locale == locale)
        and (topic is None or descriptor.topic == topic)
    ]
    return {"documents": documents, "errors": [_error_dict(error) for error in result.errors]}


@app.get("/validate")
def validate(root: Path | None = None, strict: bool = False, config: Path | None = None) -> dict[str, Any]:
    tree = _open_tree(root, config)
    return validate_corpus(tree, strict=strict).to_dict()


@app.get("/coverage")
def topic_coverage(root: Path | None = None, config: Path | None = None) -> dict[str, Any]:
    tree = _open_tree(root, config)
    descriptors = tree.scan().descriptors
    return {"langs": tree.config.langs, "coverage": coverage(descriptors, tree.config.langs)}


@app.get("/sidebar/{locale}")
def sidebar(locale: str, root: Path | None = None, config: Path | None = None) -> dict[str, Any]:
    tree = _open_tree(root, config)
    if locale not in tree.config.langs:
        raise HTTPException(status_code=404, detail=f"Unknown locale: {locale}")
    groups = build_sidebar(tree.scan().descriptors, tree.config, locale)
    return {"locale": locale, "groups": [group.to_dict() for group in groups]}


@app.post("/search")
def search_documents(payload: SearchPayload) -> dict[str, List[SearchResult]]:
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    top_k = max(1, min(payload.top_k, 50))

    resolved_db = _resolve_db_path(payload.db)
    if not resolved_db.exists():
        raise HTTPException(
            status_code=404,
            detail=f"Catalog not found at {resolved_db}. Index the content tree first.",
        )

    config = _load_config()
    embedder = EmbeddingModel(EmbeddingConfig(model_name=config.model_name))
    store = SQLiteCatalogStore(resolved_db, dimension=embedder.dimension)
    try:
        results = Searcher(embedder, store).search(
            query, top_k=top_k, locale=payload.locale, topic=payload.topic
        )
    finally:
        store.close()
    return {"results": results}


@app.get("/catalog")
def catalog(db: Path | None = None, locale: str | None = None, topic: str | None = None) -> dict[str, Any]:
    """List the pages currently held in the catalog."""
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        return {"documents": [], "stats": {"document_count": 0, "chunk_count": 0, "total_size_bytes": 0}}

    store = SQLiteCatalogStore(resolved_db, dimension=0)
    try:
        documents = store.list_documents(locale=locale, topic=topic)
        stats = store.get_stats()
    finally:
        store.close()
    return {"documents": documents, "stats": stats}


@app.delete("/catalog/cleanup")
def cleanup_missing_files(db: Path | None = None) -> dict[str, Any]:
    """Remove catalog rows whose files no longer exist on disk."""
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        raise HTTPException(status_code=404, detail="Catalog not found")

    store = SQLiteCatalogStore(resolved_db, dimension=0)
    try:
        removed_count = store.remove_missing_files()
    finally:
        store.close()
    return {"status": "ok", "removed_count": removed_count}


def _run_index_job(tree: ContentTree, resolved_db: Path) -> dict[str, Any]:
    config = tree.config
    embedder = EmbeddingModel(EmbeddingConfig(model_name=config.model_name))
    store = SQLiteCatalogStore(resolved_db, dimension=embedder.dimension)
    indexer = Indexer(embedder, store, chunk_chars=config.chunk_chars, overlap=config.overlap)
    try:
        stats = indexer.index(tree)
    finally:
        store.close()

    return {
        "inserted": stats.inserted,
        "updated": stats.updated,
        "skipped": stats.skipped,
        "failed": stats.failed,
        "processed_files": [str(path) for path in stats.processed_files],
        "errors": [_error_dict(error) for error in stats.errors],
    }


@app.post("/index")
async def index_documents(payload: IndexPayload) -> dict[str, Any]:
    root: Optional[Path] = None
    if payload.root is not None:
        clean = payload.root.strip().replace("\r", "").replace("\n", "")
        if not clean or "\0" in clean:
            raise HTTPException(status_code=400, detail="Invalid content root")
        root = Path(clean).expanduser()

    tree = _open_tree(root)
    resolved_db = _resolve_db_path(Path(payload.db) if payload.db else None)
    _ensure_db_parent(resolved_db)

    try:
        stats = await asyncio.to_thread(_run_index_job, tree, resolved_db)
    except Exception as exc:
        LOGGER.exception("Indexing failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {"status": "ok", "db": str(resolved_db), "stats": stats}
