"""Tests for language definitions and the extension registry."""

import pytest
from pydantic import ValidationError

from slocscan.exceptions import UnknownLanguageOverride
from slocscan.languages.models import BlockComment, LanguageDefinition, normalize_extension
from slocscan.languages.registry import (
    LanguageRegistry,
    build_registry,
    normalize_overrides,
    normalize_path,
    parse_override,
)


class TestLanguageDefinition:
    def test_extensions_normalized(self):
        lang = LanguageDefinition(name="Kotlin", extensions=[".KT", "kts"])
        assert lang.extensions == frozenset({"kt", "kts"})

    def test_config_spelling_aliases(self):
        lang = LanguageDefinition.model_validate(
            {
                "name": "Kotlin",
                "extensions": ["kt"],
                "single_line_comment": ["//"],
                "multi_line_comment": [["/*", "*/"]],
                "nested_comments": True,
            }
        )
        assert lang.line_comments == ("//",)
        assert lang.block_comments == (BlockComment(start="/*", end="*/"),)
        assert lang.nested is True

    def test_bad_block_pair_rejected(self):
        with pytest.raises(ValidationError):
            LanguageDefinition(name="X", block_comments=[["/*"]])

    def test_empty_line_token_rejected(self):
        with pytest.raises(ValidationError):
            LanguageDefinition(name="X", line_comments=("",))

    def test_frozen(self):
        lang = LanguageDefinition(name="X")
        with pytest.raises(ValidationError):
            lang.name = "Y"

    def test_lookup_names(self):
        lang = LanguageDefinition(name="C++", aliases=("cpp", "CPP"))
        assert lang.lookup_names == ("c++", "cpp")

    def test_normalize_extension(self):
        assert normalize_extension(".RS") == "rs"
        assert normalize_extension(" py ") == "py"


class TestParseOverride:
    def test_valid(self):
        assert parse_override("h=cpp") == ("h", "cpp")
        assert parse_override(" .inc = C ") == (".inc", "C")

    @pytest.mark.parametrize("bad", ["h", "=cpp", "h=", "a=b=c"])
    def test_invalid(self, bad):
        with pytest.raises(ValueError, match="ext=language"):
            parse_override(bad)

    def test_normalize_overrides(self):
        result = normalize_overrides({".H": "cpp", "src/./gen.txt": "c"})
        assert result["h"] == "cpp"
        assert result[".H"] == "cpp"
        assert result["src/gen.txt"] == "c"
        assert "txt" not in result


class TestResolve:
    def test_builtin_extension(self, registry):
        assert registry.resolve("src/main.rs").name == "Rust"
        assert registry.resolve("include/x.H").name == "C"
        assert registry.resolve("a/b/c.py").name == "Python"

    def test_unsupported(self, registry):
        assert registry.resolve("data.xyz") is None
        assert registry.resolve("Makefile") is None

    def test_extension_override(self, registry):
        overrides = normalize_overrides({"h": "cpp"})
        assert registry.resolve("x.h", overrides).name == "C++"
        assert registry.resolve("x.c", overrides).name == "C"

    def test_override_makes_unknown_extension_supported(self, registry):
        overrides = normalize_overrides({"xyz": "python"})
        assert registry.resolve("data.xyz", overrides).name == "Python"

    def test_path_override_beats_extension_override(self, registry):
        overrides = normalize_overrides({"h": "cpp", "legacy/old.h": "c"})
        assert registry.resolve("legacy/old.h", overrides).name == "C"
        assert registry.resolve("legacy/new.h", overrides).name == "C++"

    def test_path_override_without_extension(self, registry):
        overrides = normalize_overrides({"Makefile": "shell"})
        assert registry.resolve("Makefile", overrides).name == "Shell"

    def test_unknown_override_language(self, registry):
        overrides = normalize_overrides({"h": "klingon"})
        with pytest.raises(UnknownLanguageOverride) as exc_info:
            registry.resolve("x.h", overrides)
        assert exc_info.value.language == "klingon"
        # Files the override does not touch still resolve.
        assert registry.resolve("x.c", overrides).name == "C"

    def test_lookup_by_alias(self, registry):
        assert registry.get("CPP").name == "C++"
        assert registry.get("js").name == "JavaScript"
        assert registry.get("nope") is None


class TestRegistryMerge:
    def test_config_adds_language(self):
        kotlin = LanguageDefinition(name="Kotlin", extensions=["kt"], line_comments=("//",))
        reg = build_registry([kotlin])
        assert reg.resolve("a.kt") is kotlin
        assert reg.resolve("a.rs").name == "Rust"

    def test_last_extension_claim_wins(self):
        first = LanguageDefinition(name="A", extensions=["x"])
        second = LanguageDefinition(name="B", extensions=["x"])
        reg = LanguageRegistry([first, second])
        assert reg.for_extension(".x") is second
        assert reg.get("a") is first

    def test_config_redefinition_replaces_builtin(self):
        custom = LanguageDefinition(name="rust", extensions=["rs2"], line_comments=("#",))
        reg = build_registry([custom])
        assert reg.get("Rust") is custom
        assert reg.for_extension("rs2") is custom
        assert reg.for_extension("rs") is None

    def test_list_all_unique_and_sorted(self, registry):
        names = [d.name for d in registry.list_all()]
        assert names == sorted(names, key=str.lower)
        assert len(names) == len(set(names))
        assert "Rust" in names

    def test_extensions_view_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.extensions["rs"] = None


def test_normalize_path():
    assert normalize_path("a/./b/../c.rs") == "a/c.rs"
    assert normalize_path("./x.py") == "x.py"
