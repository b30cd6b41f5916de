"""Tests for frontmatter parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from docscope.content.frontmatter import Frontmatter, parse_frontmatter, split_frontmatter
from docscope.errors import MalformedDocument

PATH = Path("docs/java/code-style.md")


class TestSplitFrontmatter:
    def test_split(self) -> None:
        header, body = split_frontmatter("---\ntitle: A\n---\n# Body\n")
        assert header == "title: A\n"
        assert body == "# Body\n"

    def test_no_block(self) -> None:
        header, body = split_frontmatter("# Just a heading\n")
        assert header is None
        assert body == "# Just a heading\n"

    def test_unterminated_block(self) -> None:
        text = "---\ntitle: A\n# Body\n"
        assert split_frontmatter(text) == (None, text)

    def test_byte_order_mark_and_crlf(self) -> None:
        header, body = split_frontmatter("\ufeff---\r\ntitle: A\r\n---\r\nBody\r\n")
        assert header == "title: A\r\n"
        assert body == "Body\r\n"

    def test_dots_close_the_block(self) -> None:
        header, body = split_frontmatter("---\ntitle: A\n...\nBody")
        assert header == "title: A\n"
        assert body == "Body"

    def test_empty_text(self) -> None:
        assert split_frontmatter("") == (None, "")


class TestParseFrontmatter:
    def test_valid(self) -> None:
        frontmatter, body = parse_frontmatter(
            "---\ntitle: Code style\ndescription: Java rules\n---\nText\n", PATH
        )
        assert isinstance(frontmatter, Frontmatter)
        assert frontmatter.title == "Code style"
        assert frontmatter.description == "Java rules"
        assert frontmatter.sidebar is None
        assert body == "Text\n"

    def test_values_are_stripped(self) -> None:
        frontmatter, _ = parse_frontmatter(
            "---\ntitle: '  Spaced  '\ndescription: x\n---\n", PATH
        )
        assert frontmatter.title == "Spaced"

    def test_extra_keys_allowed(self) -> None:
        frontmatter, _ = parse_frontmatter(
            "---\ntitle: A\ndescription: B\ntemplate: splash\n---\n", PATH
        )
        assert frontmatter.model_extra == {"template": "splash"}

    def test_sidebar_metadata(self) -> None:
        frontmatter, _ = parse_frontmatter(
            "---\ntitle: A\ndescription: B\nsidebar:\n  order: 3\n  label: Short\n---\n", PATH
        )
        assert frontmatter.sidebar is not None
        assert frontmatter.sidebar.order == 3
        assert frontmatter.sidebar.label == "Short"
        assert frontmatter.sidebar.hidden is False

    def test_missing_block(self) -> None:
        with pytest.raises(MalformedDocument) as excinfo:
            parse_frontmatter("# No frontmatter\n", PATH)
        assert excinfo.value.path == PATH
        assert "missing frontmatter" in excinfo.value.reason

    def test_missing_description(self) -> None:
        with pytest.raises(MalformedDocument) as excinfo:
            parse_frontmatter("---\ntitle: A\n---\n", PATH)
        assert "missing 'description'" in excinfo.value.reason

    def test_missing_both_fields(self) -> None:
        with pytest.raises(MalformedDocument) as excinfo:
            parse_frontmatter("---\n---\nBody\n", PATH)
        assert "title" in excinfo.value.reason
        assert "description" in excinfo.value.reason

    def test_blank_title(self) -> None:
        with pytest.raises(MalformedDocument) as excinfo:
            parse_frontmatter("---\ntitle: '   '\ndescription: B\n---\n", PATH)
        assert "title" in excinfo.value.reason

    def test_invalid_yaml(self) -> None:
        with pytest.raises(MalformedDocument) as excinfo:
            parse_frontmatter("---\ntitle: [oops\ndescription: B\n---\n", PATH)
        assert "invalid YAML" in excinfo.value.reason

    def test_non_mapping(self) -> None:
        with pytest.raises(MalformedDocument) as excinfo:
            parse_frontmatter("---\n- a\n- b\n---\n", PATH)
        assert "mapping" in excinfo.value.reason

    def test_non_string_title(self) -> None:
        with pytest.raises(MalformedDocument):
            parse_frontmatter("---\ntitle: [a, b]\ndescription: B\n---\n", PATH)
