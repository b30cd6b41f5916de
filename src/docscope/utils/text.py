"""Text helpers including simple character chunking."""

from __future__ import annotations

from typing import Iterable, Iterator


def chunk_text(text: str, *, max_chars: int = 1200, overlap: int = 200) -> Iterator[str]:
    """Split text into overlapping character chunks.

    Text no longer than ``max_chars`` comes back as a single chunk.
    """
    if not text:
        return
    if len(text) <= max_chars:
        yield text
        return

    step = max(max_chars - overlap, 1)
    for start in range(0, len(text), step):
        yield text[start : start + max_chars]
        if start + max_chars >= len(text):
            break


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Strip lines, drop blank ones and join the rest."""
    return "\n".join(line.strip() for line in lines if line.strip())
