"""Shared pytest fixtures for slocscan tests."""

from pathlib import Path

import pytest

from slocscan.languages.models import BlockComment, LanguageDefinition
from slocscan.languages.registry import build_registry


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def c_like():
    return LanguageDefinition(
        name="C",
        extensions=["c", "h"],
        line_comments=("//",),
        block_comments=(BlockComment(start="/*", end="*/"),),
        preprocessor_prefix="#",
    )


@pytest.fixture
def nested_lang():
    return LanguageDefinition(
        name="Rust",
        extensions=["rs"],
        line_comments=("//",),
        block_comments=(BlockComment(start="/*", end="*/"),),
        nested=True,
    )


@pytest.fixture
def make_tree(tmp_path: Path):
    """Write ``{relative_path: content}`` under tmp_path and return the paths."""

    def _make(files: dict[str, str]) -> list[str]:
        paths = []
        for rel, content in files.items():
            target = tmp_path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            paths.append(str(target))
        return paths

    return _make
