"""Core docscope data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from docscope.errors import DocumentError


@dataclass(slots=True, frozen=True)
class DocumentDescriptor:
    """Minimal metadata describing a page of the content tree."""

    path: Path
    locale: str
    topic: Optional[str]
    title: str
    description: str
    relative_path: str = ""
    slug: str = ""
    sidebar_label: Optional[str] = None
    sidebar_order: Optional[int] = None
    sidebar_hidden: bool = False
    draft: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "locale": self.locale,
            "topic": self.topic,
            "title": self.title,
            "description": self.description,
            "relative_path": self.relative_path,
            "slug": self.slug,
            "draft": self.draft,
        }


@dataclass(slots=True)
class Document:
    """A parsed page: its descriptor, Markdown body and content hash."""

    descriptor: DocumentDescriptor
    body: str
    sha256: str


@dataclass(slots=True)
class ScanResult:
    """Outcome of a full traversal, split into good and bad documents."""

    descriptors: List[DocumentDescriptor] = field(default_factory=list)
    errors: List[DocumentError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class DocumentMetadata:
    """Catalog row for an indexed document."""

    path: Path
    locale: str
    topic: Optional[str]
    slug: str
    title: str
    description: str
    sha256: str
    mtime: float
    size: int


@dataclass(slots=True)
class ChunkRecord:
    """Section of document text paired with metadata."""

    document_path: Path
    index: int
    text: str
    metadata: Dict[str, Any]
