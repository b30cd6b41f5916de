"""Section-aware chunking of Markdown pages for the search catalog."""

from __future__ import annotations

import logging
from typing import Iterator

from docscope.content.markdown import iter_sections
from docscope.models import ChunkRecord, Document
from docscope.utils.text import chunk_text, normalize_whitespace

LOGGER = logging.getLogger(__name__)


def build_chunks(document: Document, *, max_chars: int = 1200, overlap: int = 200) -> Iterator[ChunkRecord]:
    """Produce chunk records for a page lazily, one or more per section.

    The page title and description form the first chunk so that a page can be
    found by what its frontmatter says it is about.
    """
    descriptor = document.descriptor
    base_metadata = {
        "locale": descriptor.locale,
        "topic": descriptor.topic,
        "slug": descriptor.slug,
    }

    index = 0
    yield ChunkRecord(
        document_path=descriptor.path,
        index=index,
        text=f"{descriptor.title}\n{descriptor.description}",
        metadata={**base_metadata, "heading": descriptor.title},
    )

    for heading, text in iter_sections(document.body):
        normalized = normalize_whitespace(text.splitlines())
        if not normalized:
            continue
        for piece in chunk_text(normalized, max_chars=max_chars, overlap=overlap):
            index += 1
            body = f"{heading}\n{piece}" if heading else piece
            yield ChunkRecord(
                document_path=descriptor.path,
                index=index,
                text=body,
                metadata={**base_metadata, "heading": heading or descriptor.title},
            )
    LOGGER.debug("Built %d chunks for %s", index + 1, descriptor.relative_path)
