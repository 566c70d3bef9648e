"""Report entities: per-file, per-language and global SLOC statistics."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator
from pydantic.alias_generators import to_camel

REPORT_FORMAT_VERSION = "1.0"

COUNT_FIELDS = ("total", "logical", "comment", "empty")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FileStat(_Frozen):
    """Line counts for one successfully classified file."""

    path: str
    language: str
    total: NonNegativeInt
    logical: NonNegativeInt
    comment: NonNegativeInt
    empty: NonNegativeInt

    @model_validator(mode="after")
    def _check_total(self) -> FileStat:
        if self.total != self.logical + self.comment + self.empty:
            raise ValueError(
                f"total ({self.total}) != logical + comment + empty "
                f"({self.logical} + {self.comment} + {self.empty}) for {self.path}"
            )
        return self


class UnsupportedFile(_Frozen):
    """A file whose extension matches no language definition."""

    path: str


class FileError(_Frozen):
    """A file that could not be classified; excluded from every statistic."""

    path: str
    kind: Literal["path", "encoding", "unknown_override", "io"]
    reason: str


class LanguageSummary(_Frozen):
    language: str
    file_count: NonNegativeInt
    total: NonNegativeInt
    logical: NonNegativeInt
    comment: NonNegativeInt
    empty: NonNegativeInt


class GlobalSummary(_Frozen):
    total_files: NonNegativeInt
    total: NonNegativeInt
    logical: NonNegativeInt
    comment: NonNegativeInt
    empty: NonNegativeInt
    languages_count: NonNegativeInt


class Report(_Frozen):
    """A replayable snapshot.

    ``languages`` and ``summary`` are always derivable from ``files`` alone;
    see :func:`slocscan.report.builder.build_report`.
    """

    report_format_version: str = Field(pattern=r"^\d+\.\d+$")
    generated_at: datetime
    files: tuple[FileStat, ...]
    languages: tuple[LanguageSummary, ...]
    summary: GlobalSummary
    unsupported_files: tuple[UnsupportedFile, ...]
    checksum: str | None = None

    def language(self, name: str) -> LanguageSummary | None:
        for entry in self.languages:
            if entry.language == name:
                return entry
        return None

    def to_dict(self, exclude_checksum: bool = False) -> dict:
        exclude = {"checksum"} if exclude_checksum else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude, exclude_none=True)
