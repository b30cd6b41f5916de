"""Tests for Indexer."""

from pathlib import Path
from unittest.mock import Mock, patch

import numpy as np
import pytest

from docscope.errors import DocumentError, MalformedDocument
from docscope.index.indexer import Indexer, IndexStats
from docscope.index.storage import SQLiteCatalogStore
from tests._fixtures.content_builder import page

DIM = 4


class TestIndexStats:
    """Test IndexStats tracking."""

    def test_init_defaults(self):
        stats = IndexStats()
        assert (stats.inserted, stats.updated, stats.skipped, stats.failed) == (0, 0, 0, 0)
        assert stats.processed_files == []
        assert stats.errors == []

    def test_increment_each_status(self):
        stats = IndexStats()

        stats.increment("inserted", Path("/tmp/a.md"))
        stats.increment("updated", Path("/tmp/b.md"))
        stats.increment("skipped", Path("/tmp/c.md"))
        stats.increment("failed", Path("/tmp/d.md"))

        assert (stats.inserted, stats.updated, stats.skipped, stats.failed) == (1, 1, 1, 1)
        assert len(stats.processed_files) == 4

    def test_unknown_status_counts_as_failed(self):
        stats = IndexStats()

        stats.increment("unknown_status", Path("/tmp/a.md"))

        assert stats.failed == 1

    def test_fail_records_error(self):
        stats = IndexStats()
        error = MalformedDocument(Path("/tmp/a.md"), "missing 'title'")

        stats.fail(error)

        assert stats.failed == 1
        assert stats.errors == [error]
        assert stats.processed_files == [Path("/tmp/a.md")]


@pytest.fixture
def mock_embedder():
    """Embedder returning one unit-ish vector per input text."""
    embedder = Mock()
    embedder.embed.side_effect = lambda texts: np.ones((len(texts), DIM), dtype="float32")
    return embedder


@pytest.fixture
def store(tmp_path):
    store = SQLiteCatalogStore(tmp_path / "catalog.db", dimension=DIM)
    yield store
    store.close()


class TestIndexer:
    """Test the indexing pipeline over a real content tree."""

    def test_init_default_params(self, mock_embedder, store):
        indexer = Indexer(mock_embedder, store)

        assert indexer.embedder is mock_embedder
        assert indexer.store is store
        assert indexer.chunk_chars == 1200
        assert indexer.overlap == 200

    def test_index_inserts_pages(self, content, mock_embedder, store):
        content.write(
            {
                "java/naming.md": page("Naming", "Java naming", "## Classes\n\nUse PascalCase.\n"),
                "fr/java/naming.md": page("Nommage", "Nommage Java", "## Classes\n\nPascalCase.\n"),
            }
        )

        stats = Indexer(mock_embedder, store).index(content.tree())

        assert stats.inserted == 2
        assert stats.failed == 0
        documents = store.list_documents()
        assert {(d["locale"], d["slug"]) for d in documents} == {("en", "java/naming"), ("fr", "java/naming")}
        assert all(d["chunk_count"] == 2 for d in documents)

    def test_reindex_skips_unchanged(self, content, mock_embedder, store):
        content.write({"java/naming.md": page("Naming", "Java naming", "Body")})
        indexer = Indexer(mock_embedder, store)
        indexer.index(content.tree())

        stats = indexer.index(content.tree())

        assert stats.skipped == 1
        assert stats.inserted == 0

    def test_reindex_updates_changed(self, content, mock_embedder, store):
        content.write({"java/naming.md": page("Naming", "Java naming", "Body")})
        indexer = Indexer(mock_embedder, store)
        indexer.index(content.tree())

        content.write({"java/naming.md": page("Naming rules", "Java naming", "New body")})
        stats = indexer.index(content.tree())

        assert stats.updated == 1
        assert store.list_documents()[0]["title"] == "Naming rules"

    def test_malformed_pages_are_failed_not_fatal(self, content, mock_embedder, store):
        content.write(
            {
                "java/broken.md": "no frontmatter here",
                "java/naming.md": page("Naming", "Java naming"),
            }
        )

        stats = Indexer(mock_embedder, store).index(content.tree())

        assert stats.inserted == 1
        assert stats.failed == 1
        assert isinstance(stats.errors[0], MalformedDocument)
        assert stats.errors[0].path.name == "broken.md"

    def test_embedding_failure_is_recorded(self, content, store):
        content.write({"java/naming.md": page("Naming", "Java naming")})
        embedder = Mock()
        embedder.embed.side_effect = RuntimeError("model exploded")

        stats = Indexer(embedder, store).index(content.tree())

        assert stats.failed == 1
        assert isinstance(stats.errors[0], DocumentError)
        assert "model exploded" in stats.errors[0].reason
        assert store.get_stats()["document_count"] == 0

    def test_batches_chunks(self, content, mock_embedder, store):
        body = "\n".join(f"## Section {i}\n\nText {i}.\n" for i in range(5))
        content.write({"java/long.md": page("Long", "Many sections", body)})

        Indexer(mock_embedder, store, batch_size=2).index(content.tree())

        assert mock_embedder.embed.call_count == 3
        assert store.get_stats()["chunk_count"] == 6

    def test_empty_tree_logs_warning(self, content, mock_embedder, store):
        with patch("docscope.index.indexer.LOGGER") as mock_logger:
            stats = Indexer(mock_embedder, store).index(content.tree())

        assert stats.processed_files == []
        mock_logger.warning.assert_called_once()
