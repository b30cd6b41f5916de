"""Traversal of a documentation content tree."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Optional, Union

from docscope.config import AppConfig
from docscope.content.frontmatter import parse_frontmatter
from docscope.errors import DocumentError, IOFailure
from docscope.models import Document, DocumentDescriptor, ScanResult
from docscope.utils.files import iter_document_paths, sha256_bytes

LOGGER = logging.getLogger(__name__)

DescriptorOrError = Union[DocumentDescriptor, DocumentError]
DocumentOrError = Union[Document, DocumentError]


def split_location(
    relative: PurePosixPath, prefixes: dict[str, str], default_lang: str
) -> tuple[str, Optional[str], str]:
    """Return ``(locale, topic, slug)`` for a path relative to the content root."""
    parts = list(relative.parts)
    locale = default_lang
    if len(parts) > 1 and parts[0] in prefixes:
        locale = prefixes[parts[0]]
        parts = parts[1:]

    topic = parts[0] if len(parts) > 1 else None

    stem_parts = parts[:-1] + [PurePosixPath(parts[-1]).stem]
    if stem_parts[-1] == "index":
        stem_parts = stem_parts[:-1]
    slug = "/".join(stem_parts)
    return locale, topic, slug


class ContentTree:
    """Restartable, lazy view over the documents below a content root.

    Every iteration walks the filesystem again, so two passes over an
    unchanged tree produce identical sequences. Per-document problems are
    yielded as :class:`DocumentError` values instead of being raised.
    """

    def __init__(self, root: Path, config: AppConfig | None = None) -> None:
        self.root = Path(root)
        self.config = config or AppConfig()

    @classmethod
    def from_config(cls, config: AppConfig, base_dir: Path | None = None) -> "ContentTree":
        return cls(config.resolve_content_root(base_dir), config)

    def _check_root(self) -> None:
        if not self.root.exists():
            raise FileNotFoundError(f"Content root not found: {self.root}")
        if not self.root.is_dir():
            raise NotADirectoryError(f"Content root is not a directory: {self.root}")

    def paths(self) -> Iterator[Path]:
        return iter_document_paths(self.root, self.config.extensions)

    def iter_documents(self) -> Iterator[DocumentOrError]:
        """Yield parsed documents, or the error that prevented parsing them."""
        self._check_root()
        prefixes = self.config.locale_prefixes()
        default_lang = self.config.default_lang
        for path in self.paths():
            try:
                yield self._load(path, prefixes, default_lang)
            except DocumentError as exc:
                LOGGER.warning("Skipping %s", exc)
                yield exc

    def __iter__(self) -> Iterator[DescriptorOrError]:
        for item in self.iter_documents():
            yield item.descriptor if isinstance(item, Document) else item

    def scan(self) -> ScanResult:
        result = ScanResult()
        for item in self:
            if isinstance(item, DocumentError):
                result.errors.append(item)
            else:
                result.descriptors.append(item)
        return result

    def _load(self, path: Path, prefixes: dict[str, str], default_lang: str) -> Document:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise IOFailure(path, f"cannot read file: {exc.strerror or exc}") from exc
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise IOFailure(path, f"not valid UTF-8: {exc.reason}") from exc

        frontmatter, body = parse_frontmatter(text, path)

        relative = PurePosixPath(path.relative_to(self.root).as_posix())
        locale, topic, slug = split_location(relative, prefixes, default_lang)
        sidebar = frontmatter.sidebar
        descriptor = DocumentDescriptor(
            path=path,
            locale=locale,
            topic=topic,
            title=frontmatter.title,
            description=frontmatter.description,
            relative_path=relative.as_posix(),
            slug=slug,
            sidebar_label=sidebar.label if sidebar else None,
            sidebar_order=sidebar.order if sidebar else None,
            sidebar_hidden=sidebar.hidden if sidebar else False,
            draft=frontmatter.draft,
        )
        LOGGER.debug("Loaded %s (%s, topic=%s)", relative, locale, topic)
        return Document(descriptor=descriptor, body=body, sha256=sha256_bytes(raw))


def iter_descriptors(root: Path, config: AppConfig | None = None) -> Iterator[DescriptorOrError]:
    """Convenience wrapper around :class:`ContentTree` iteration."""
    return iter(ContentTree(root, config))


def only_descriptors(items: Iterable[DescriptorOrError]) -> list[DocumentDescriptor]:
    return [item for item in items if isinstance(item, DocumentDescriptor)]


__all__ = [
    "ContentTree",
    "DescriptorOrError",
    "DocumentOrError",
    "iter_descriptors",
    "only_descriptors",
    "split_location",
]
