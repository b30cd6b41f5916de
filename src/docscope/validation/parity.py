"""Locale parity: pairing pages with their translated variants."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from docscope.models import DocumentDescriptor


@dataclass(slots=True)
class LocaleGroup:
    """All locale variants of one page, keyed by language."""

    slug: str
    topic: Optional[str]
    variants: Dict[str, DocumentDescriptor] = field(default_factory=dict)

    def missing(self, langs: Sequence[str]) -> List[str]:
        return [lang for lang in langs if lang not in self.variants]


def group_variants(descriptors: Iterable[DocumentDescriptor]) -> List[LocaleGroup]:
    """Group descriptors that share a slug across locales, sorted by slug."""
    groups: Dict[str, LocaleGroup] = {}
    for descriptor in descriptors:
        group = groups.get(descriptor.slug)
        if group is None:
            group = groups[descriptor.slug] = LocaleGroup(slug=descriptor.slug, topic=descriptor.topic)
        group.variants.setdefault(descriptor.locale, descriptor)
    return [groups[slug] for slug in sorted(groups)]


def coverage(
    descriptors: Iterable[DocumentDescriptor], langs: Sequence[str]
) -> Dict[str, Dict[str, int]]:
    """Count pages per topic and locale.

    Pages outside any topic are counted under ``""``.
    """
    matrix: Dict[str, Dict[str, int]] = defaultdict(lambda: {lang: 0 for lang in langs})
    for descriptor in descriptors:
        row = matrix[descriptor.topic or ""]
        row[descriptor.locale] = row.get(descriptor.locale, 0) + 1
    return {topic: dict(matrix[topic]) for topic in sorted(matrix)}
