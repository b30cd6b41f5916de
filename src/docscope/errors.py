"""Error types raised or reported by docscope."""

from __future__ import annotations

from pathlib import Path


class DocscopeError(Exception):
    """Base class for docscope errors."""


class ConfigError(DocscopeError):
    """Raised when the configuration file cannot be parsed."""


class DocumentError(DocscopeError):
    """A problem confined to a single document of the content tree."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = Path(path)
        self.reason = reason

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentError):
            return NotImplemented
        return type(self) is type(other) and self.path == other.path and self.reason == other.reason

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.path, self.reason))


class MalformedDocument(DocumentError):
    """Frontmatter is missing, unparsable or lacks required fields."""


class IOFailure(DocumentError):
    """The document file could not be read."""
