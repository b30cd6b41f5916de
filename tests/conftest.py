from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.content_builder import ContentBuilder


@pytest.fixture
def content(tmp_path: Path) -> ContentBuilder:
    """Provide an empty content root under the pytest tmp_path."""
    return ContentBuilder(tmp_path)
