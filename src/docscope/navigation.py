"""Page URLs and sidebar generation for the documentation site."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from docscope.config import AppConfig, SidebarGroupConfig
from docscope.models import DocumentDescriptor


@dataclass(slots=True)
class SidebarEntry:
    label: str
    url: str
    slug: str
    locale: str
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "url": self.url,
            "slug": self.slug,
            "locale": self.locale,
            "fallback": self.fallback,
        }


@dataclass(slots=True)
class SidebarGroup:
    label: str
    directory: str
    entries: List[SidebarEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "directory": self.directory,
            "entries": [entry.to_dict() for entry in self.entries],
        }


def page_url(descriptor: DocumentDescriptor, config: AppConfig, locale: str | None = None) -> str:
    """Build the public URL of a page as the site generator would."""
    segments = [segment for segment in config.base.split("/") if segment]
    prefix = config.prefix_for(locale or descriptor.locale)
    if prefix:
        segments.append(prefix)
    segments.extend(segment for segment in descriptor.slug.split("/") if segment)

    url = "/" + "/".join(segments)
    if config.trailing_slash == "always" and not url.endswith("/"):
        url += "/"
    return url


def _sort_key(descriptor: DocumentDescriptor) -> tuple[bool, int, str]:
    order = descriptor.sidebar_order
    return (order is None, order if order is not None else 0, descriptor.slug)


def _groups(descriptors: List[DocumentDescriptor], config: AppConfig) -> List[SidebarGroupConfig]:
    if config.sidebar:
        return list(config.sidebar)
    topics = sorted({descriptor.topic for descriptor in descriptors if descriptor.topic})
    return [SidebarGroupConfig(label=topic.capitalize(), directory=topic) for topic in topics]


def build_sidebar(
    descriptors: Iterable[DocumentDescriptor], config: AppConfig, locale: str | None = None
) -> List[SidebarGroup]:
    """Autogenerate sidebar groups from topic directories.

    Pages missing from ``locale`` fall back to the default-locale page and are
    flagged as such. Hidden and draft pages are left out.
    """
    locale = locale or config.default_lang
    if locale not in config.langs:
        raise KeyError(locale)
    default_lang = config.default_lang
    pool = list(descriptors)

    sidebar: List[SidebarGroup] = []
    for group_config in _groups(pool, config):
        directory = group_config.directory
        members = [
            descriptor
            for descriptor in pool
            if descriptor.slug == directory or descriptor.slug.startswith(f"{directory}/")
        ]
        by_slug: Dict[str, DocumentDescriptor] = {}
        for descriptor in members:
            if descriptor.locale == locale:
                by_slug[descriptor.slug] = descriptor
        for descriptor in members:
            if descriptor.locale == default_lang and descriptor.slug not in by_slug:
                by_slug[descriptor.slug] = descriptor

        group = SidebarGroup(label=group_config.label, directory=directory)
        for descriptor in sorted(by_slug.values(), key=_sort_key):
            if descriptor.sidebar_hidden or descriptor.draft:
                continue
            group.entries.append(
                SidebarEntry(
                    label=descriptor.sidebar_label or descriptor.title,
                    url=page_url(descriptor, config, locale),
                    slug=descriptor.slug,
                    locale=descriptor.locale,
                    fallback=descriptor.locale != locale,
                )
            )
        sidebar.append(group)
    return sidebar
