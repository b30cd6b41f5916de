"""Utility helpers for working with files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable, Iterator

DEFAULT_EXTENSIONS = (".md", ".mdx")


def _is_hidden(path: Path, root: Path) -> bool:
    # "_" marks partials, which content collections never publish.
    return any(part.startswith((".", "_")) for part in path.relative_to(root).parts)


def iter_document_paths(root: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> Iterator[Path]:
    """Yield Markdown paths below ``root`` in sorted order.

    Entries whose name starts with ``.`` or ``_`` at any depth are skipped.
    """
    suffixes = {ext.lower() for ext in extensions}
    candidates = sorted(
        root.rglob("*"), key=lambda item: item.relative_to(root).as_posix()
    )
    for item in candidates:
        if item.suffix.lower() not in suffixes or _is_hidden(item, root):
            continue
        if item.is_file():
            yield item


def compute_sha256(path: Path) -> str:
    """Compute SHA256 hash for a file."""
    sha = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1 << 20), b""):
            sha.update(chunk)
    return sha.hexdigest()


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
