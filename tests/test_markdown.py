"""Tests for Markdown body helpers."""

from __future__ import annotations

from docscope.content.markdown import (
    CodeBlock,
    Heading,
    code_blocks,
    has_unclosed_fence,
    iter_sections,
    outline,
)

BODY = """\
Intro paragraph.

## Naming

Use `PascalCase` for classes.

```dart
// # not a heading
class UserRepository {}
```

### Files ###

~~~bash
flutter create app
~~~

## C#
"""


class TestOutline:
    def test_headings_skip_code(self) -> None:
        assert outline(BODY) == [
            Heading(level=2, text="Naming"),
            Heading(level=3, text="Files"),
            Heading(level=2, text="C#"),
        ]

    def test_hash_without_space_is_not_a_heading(self) -> None:
        assert outline("#hashtag\n") == []

    def test_empty_body(self) -> None:
        assert outline("") == []


class TestCodeBlocks:
    def test_languages_and_code(self) -> None:
        blocks = code_blocks(BODY)
        assert blocks == [
            CodeBlock(language="dart", code="// # not a heading\nclass UserRepository {}"),
            CodeBlock(language="bash", code="flutter create app"),
        ]

    def test_block_without_language(self) -> None:
        assert code_blocks("```\nplain\n```\n") == [CodeBlock(language=None, code="plain")]

    def test_longer_fence_contains_shorter(self) -> None:
        body = "````md\n```tsx\n<App />\n```\n````\n"
        (block,) = code_blocks(body)
        assert block.language == "md"
        assert "<App />" in block.code


class TestUnclosedFence:
    def test_closed(self) -> None:
        assert has_unclosed_fence(BODY) is False

    def test_unclosed(self) -> None:
        assert has_unclosed_fence("```java\nclass A {}\n") is True

    def test_mismatched_fence_char_does_not_close(self) -> None:
        assert has_unclosed_fence("```java\nclass A {}\n~~~\n") is True


class TestIterSections:
    def test_sections(self) -> None:
        sections = list(iter_sections(BODY))
        headings = [heading for heading, _ in sections]
        assert headings == ["", "Naming", "Files"]
        assert sections[0][1] == "Intro paragraph."
        assert "class UserRepository" in sections[1][1]

    def test_empty_sections_are_skipped(self) -> None:
        assert list(iter_sections("## A\n\n## B\ntext\n")) == [("B", "text")]
