"""Lightweight Markdown body inspection: headings, code fences, sections."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")


@dataclass(slots=True, frozen=True)
class Heading:
    level: int
    text: str


@dataclass(slots=True, frozen=True)
class CodeBlock:
    language: Optional[str]
    code: str


@dataclass(slots=True)
class _Line:
    text: str
    in_code: bool
    fence: bool


def _scan(body: str) -> tuple[List[_Line], bool]:
    """Tag each line with whether it sits inside a fenced code block.

    The second element is true when the last fence is never closed.
    """
    tagged: List[_Line] = []
    open_fence: Optional[str] = None
    for line in body.splitlines():
        match = _FENCE.match(line)
        if open_fence is None:
            if match:
                open_fence = match.group(1)
                tagged.append(_Line(line, True, True))
                continue
            tagged.append(_Line(line, False, False))
            continue

        if (
            match
            and match.group(1)[0] == open_fence[0]
            and len(match.group(1)) >= len(open_fence)
            and not match.group(2).strip()
        ):
            open_fence = None
            tagged.append(_Line(line, True, True))
            continue
        tagged.append(_Line(line, True, False))
    return tagged, open_fence is not None


def outline(body: str) -> List[Heading]:
    """Return the ATX headings of a body, ignoring fenced code."""
    headings: List[Heading] = []
    lines, _ = _scan(body)
    for line in lines:
        if line.in_code:
            continue
        match = _HEADING.match(line.text)
        if match:
            headings.append(Heading(level=len(match.group(1)), text=(match.group(2) or "").strip()))
    return headings


def code_blocks(body: str) -> List[CodeBlock]:
    """Return fenced code blocks with their (illustrative) language tags."""
    blocks: List[CodeBlock] = []
    language: Optional[str] = None
    current: List[str] = []
    inside = False
    lines, unclosed = _scan(body)
    for line in lines:
        if line.fence and not inside:
            info = _FENCE.match(line.text).group(2).strip()  # type: ignore[union-attr]
            language = info.split()[0] if info else None
            current = []
            inside = True
        elif line.fence and inside:
            blocks.append(CodeBlock(language=language, code="\n".join(current)))
            inside = False
        elif inside:
            current.append(line.text)
    if inside and unclosed:
        blocks.append(CodeBlock(language=language, code="\n".join(current)))
    return blocks


def has_unclosed_fence(body: str) -> bool:
    _, unclosed = _scan(body)
    return unclosed


def iter_sections(body: str) -> Iterator[tuple[str, str]]:
    """Yield ``(heading, text)`` pairs, splitting the body at every heading.

    Text before the first heading is yielded under an empty heading. Sections
    with no text are skipped.
    """
    heading = ""
    buffer: List[str] = []
    lines, _ = _scan(body)
    for line in lines:
        match = None if line.in_code else _HEADING.match(line.text)
        if match:
            text = "\n".join(buffer).strip()
            if text:
                yield heading, text
            heading = (match.group(2) or "").strip()
            buffer = []
            continue
        buffer.append(line.text)
    text = "\n".join(buffer).strip()
    if text:
        yield heading, text
