"""Corpus validation: frontmatter, code fences and locale parity."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from docscope.content.markdown import has_unclosed_fence, outline
from docscope.content.tree import ContentTree
from docscope.errors import IOFailure, MalformedDocument
from docscope.models import Document
from docscope.validation.parity import group_variants

LOGGER = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"


@dataclass(slots=True, frozen=True)
class Issue:
    severity: str
    code: str
    path: Path
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "path": str(self.path),
            "message": self.message,
        }


@dataclass(slots=True)
class ValidationReport:
    checked: int = 0
    issues: List[Issue] = field(default_factory=list)
    strict: bool = False

    @property
    def errors(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity == ERROR]

    @property
    def warnings(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity == WARNING]

    @property
    def ok(self) -> bool:
        if self.strict:
            return not self.issues
        return not self.errors

    def add(self, severity: str, code: str, path: Path, message: str) -> None:
        self.issues.append(Issue(severity=severity, code=code, path=path, message=message))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "checked": self.checked,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [issue.to_dict() for issue in self.issues],
        }


def validate_corpus(tree: ContentTree, *, strict: bool = False) -> ValidationReport:
    """Run every check over the tree and collect the issues found."""
    report = ValidationReport(strict=strict)
    documents: List[Document] = []

    for item in tree.iter_documents():
        report.checked += 1
        if isinstance(item, MalformedDocument):
            report.add(ERROR, "malformed-frontmatter", item.path, item.reason)
        elif isinstance(item, IOFailure):
            report.add(ERROR, "unreadable", item.path, item.reason)
        else:
            documents.append(item)

    _check_fences(documents, report)
    _check_duplicate_slugs(documents, report)
    _check_locale_parity(documents, tree, report)

    LOGGER.info(
        "Validated %d documents: %d errors, %d warnings",
        report.checked,
        len(report.errors),
        len(report.warnings),
    )
    return report


def _check_fences(documents: List[Document], report: ValidationReport) -> None:
    for document in documents:
        if has_unclosed_fence(document.body):
            report.add(
                ERROR,
                "unclosed-code-fence",
                document.descriptor.path,
                "fenced code block is never closed",
            )


def _check_duplicate_slugs(documents: List[Document], report: ValidationReport) -> None:
    seen: Dict[tuple[str, str], Path] = {}
    for document in documents:
        descriptor = document.descriptor
        key = (descriptor.locale, descriptor.slug)
        if key in seen:
            report.add(
                ERROR,
                "duplicate-slug",
                descriptor.path,
                f"slug '{descriptor.slug or '/'}' already used by {seen[key].name}",
            )
        else:
            seen[key] = descriptor.path


def _check_locale_parity(
    documents: List[Document], tree: ContentTree, report: ValidationReport
) -> None:
    default_lang = tree.config.default_lang
    langs = tree.config.langs
    by_path = {document.descriptor.path: document for document in documents}

    for group in group_variants(document.descriptor for document in documents):
        default = group.variants.get(default_lang)
        if default is None:
            for lang, variant in sorted(group.variants.items()):
                report.add(
                    WARNING,
                    "orphan-translation",
                    variant.path,
                    f"no {default_lang} page for '{group.slug or '/'}' ({lang} variant only)",
                )
            continue

        for lang in group.missing(langs):
            report.add(
                WARNING,
                "missing-translation",
                default.path,
                f"no {lang} translation of '{group.slug or '/'}'",
            )

        reference = [heading.level for heading in outline(by_path[default.path].body)]
        for lang, variant in sorted(group.variants.items()):
            if lang == default_lang:
                continue
            levels = [heading.level for heading in outline(by_path[variant.path].body)]
            if levels != reference:
                report.add(
                    WARNING,
                    "structure-mismatch",
                    variant.path,
                    f"{len(levels)} headings vs {len(reference)} in the {default_lang} page",
                )
