"""YAML frontmatter parsing and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from docscope.errors import MalformedDocument

_DELIMITER = "---"
_CLOSERS = ("---", "...")


class SidebarMeta(BaseModel):
    """Per-page sidebar hints."""

    model_config = ConfigDict(extra="allow")

    label: Optional[str] = None
    order: Optional[int] = None
    hidden: bool = False


class Frontmatter(BaseModel):
    """Frontmatter every page must carry."""

    model_config = ConfigDict(extra="allow", frozen=True)

    title: str
    description: str
    sidebar: Optional[SidebarMeta] = None
    draft: bool = False

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


def split_frontmatter(text: str) -> tuple[Optional[str], str]:
    """Split raw page text into ``(frontmatter, body)``.

    Returns ``(None, text)`` when the text does not open with a frontmatter
    block. An opening delimiter without a closing one is treated the same way.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != _DELIMITER:
        return None, text

    for index in range(1, len(lines)):
        if lines[index].strip() in _CLOSERS:
            header = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return header, body
    return None, text


def parse_frontmatter(text: str, path: Path) -> tuple[Frontmatter, str]:
    """Parse and validate a page's frontmatter, returning it with the body."""
    header, body = split_frontmatter(text)
    if header is None:
        raise MalformedDocument(path, "missing frontmatter block")

    try:
        data: Any = yaml.safe_load(header)
    except yaml.YAMLError as exc:
        raise MalformedDocument(path, f"invalid YAML frontmatter: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedDocument(path, "frontmatter must be a mapping")

    try:
        frontmatter = Frontmatter.model_validate(data)
    except ValidationError as exc:
        raise MalformedDocument(path, _describe(exc)) from exc
    return frontmatter, body


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "frontmatter"
        if error.get("type") == "missing":
            problems.append(f"missing '{location}'")
        else:
            problems.append(f"'{location}' {error.get('msg', 'is invalid')}")
    return "; ".join(problems)
