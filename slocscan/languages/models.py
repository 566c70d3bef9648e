"""Data models for language comment grammars."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class BlockComment(BaseModel):
    """A block-comment delimiter pair, e.g. ``/*`` and ``*/``."""

    model_config = ConfigDict(frozen=True)

    start: str = Field(min_length=1)
    end: str = Field(min_length=1)


class LanguageDefinition(BaseModel):
    """Comment grammar for one language.

    Immutable once built; a single instance is shared by every worker.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    aliases: tuple[str, ...] = ()
    extensions: frozenset[str] = frozenset()
    line_comments: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("line_comments", "single_line_comment")
    )
    block_comments: tuple[BlockComment, ...] = Field(
        default=(), validation_alias=AliasChoices("block_comments", "multi_line_comment")
    )
    nested: bool = Field(default=False, validation_alias=AliasChoices("nested", "nested_comments"))
    preprocessor_prefix: str | None = None

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value):
        if isinstance(value, str):
            value = [value]
        return frozenset(normalize_extension(ext) for ext in value)

    @field_validator("block_comments", mode="before")
    @classmethod
    def _coerce_pairs(cls, value):
        # Config files may spell a pair as ["/*", "*/"] instead of a table.
        pairs = []
        for item in value:
            if isinstance(item, (list, tuple)):
                if len(item) != 2:
                    raise ValueError(f"block comment pair needs 2 items, got {len(item)}")
                item = {"start": item[0], "end": item[1]}
            pairs.append(item)
        return tuple(pairs)

    @model_validator(mode="after")
    def _check_tokens(self) -> LanguageDefinition:
        if any(not token for token in self.line_comments):
            raise ValueError("line comment tokens must be non-empty")
        if self.preprocessor_prefix == "":
            raise ValueError("preprocessor_prefix must be non-empty when set")
        return self

    @property
    def lookup_names(self) -> tuple[str, ...]:
        """Lowercase names this language can be looked up by."""
        return tuple(dict.fromkeys(k.lower() for k in (self.name, *self.aliases)))


def normalize_extension(ext: str) -> str:
    """``".RS"`` -> ``"rs"``."""
    return ext.strip().lstrip(".").lower()
