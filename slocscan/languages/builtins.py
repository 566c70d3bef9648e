"""Built-in language definitions."""

from __future__ import annotations

from slocscan.languages.models import BlockComment, LanguageDefinition

_C_BLOCK = (BlockComment(start="/*", end="*/"),)


def _lang(name: str, aliases: tuple[str, ...], extensions: list[str], **kwargs) -> LanguageDefinition:
    return LanguageDefinition(name=name, aliases=aliases, extensions=extensions, **kwargs)


BUILTIN_LANGUAGES: tuple[LanguageDefinition, ...] = (
    _lang("Rust", ("rust",), ["rs"], line_comments=("//",), block_comments=_C_BLOCK, nested=True),
    _lang(
        "C",
        ("c",),
        ["c", "h"],
        line_comments=("//",),
        block_comments=_C_BLOCK,
        preprocessor_prefix="#",
    ),
    _lang(
        "C++",
        ("cpp",),
        ["cpp", "cc", "cxx", "hpp", "hh", "hxx"],
        line_comments=("//",),
        block_comments=_C_BLOCK,
        preprocessor_prefix="#",
    ),
    _lang(
        "Python",
        ("python",),
        ["py", "pyw"],
        line_comments=("#",),
        block_comments=(
            BlockComment(start="'''", end="'''"),
            BlockComment(start='"""', end='"""'),
        ),
    ),
    _lang("JavaScript", ("javascript", "js"), ["js", "jsx", "mjs"], line_comments=("//",), block_comments=_C_BLOCK),
    _lang("TypeScript", ("typescript", "ts"), ["ts", "tsx"], line_comments=("//",), block_comments=_C_BLOCK),
    _lang("Java", ("java",), ["java"], line_comments=("//",), block_comments=_C_BLOCK),
    _lang("Go", ("go",), ["go"], line_comments=("//",), block_comments=_C_BLOCK),
    _lang(
        "Ruby",
        ("ruby",),
        ["rb"],
        line_comments=("#",),
        block_comments=(BlockComment(start="=begin", end="=end"),),
    ),
    _lang("Shell", ("shell", "sh"), ["sh", "bash", "zsh"], line_comments=("#",)),
    _lang("SQL", ("sql",), ["sql"], line_comments=("--",), block_comments=_C_BLOCK),
    _lang("HTML", ("html",), ["html", "htm"], block_comments=(BlockComment(start="<!--", end="-->"),)),
    # "//" is for SCSS/Sass; plain CSS never produces it outside strings.
    _lang("CSS", ("css",), ["css", "scss", "sass"], line_comments=("//",), block_comments=_C_BLOCK),
    _lang("YAML", ("yaml",), ["yaml", "yml"], line_comments=("#",)),
    _lang("TOML", ("toml",), ["toml"], line_comments=("#",)),
)
