"""Report differ: field-wise deltas between two reports.

A pure function of its two inputs: no I/O, no source re-reads, and the
input reports are never modified.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict

from slocscan.report.models import FileStat, LanguageSummary, Report


class DeltaStatus(str, enum.Enum):
    APPEARED = "appeared"
    DISAPPEARED = "disappeared"
    CHANGED = "changed"


class _Delta(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    logical: int = 0
    comment: int = 0
    empty: int = 0

    @property
    def is_zero(self) -> bool:
        return not any(value for value in self.model_dump().values() if isinstance(value, int))


class LanguageDelta(_Delta):
    language: str
    status: DeltaStatus
    file_count: int = 0


class GlobalDelta(_Delta):
    total_files: int = 0
    languages_count: int = 0


class FileDelta(_Delta):
    path: str


class ReportDiff(BaseModel):
    model_config = ConfigDict(frozen=True)

    old_generated_at: str
    new_generated_at: str
    language_deltas: tuple[LanguageDelta, ...]
    global_delta: GlobalDelta
    new_files: tuple[str, ...] = ()
    removed_files: tuple[str, ...] = ()
    modified_files: tuple[FileDelta, ...] = ()

    @property
    def appeared(self) -> list[str]:
        return [d.language for d in self.language_deltas if d.status is DeltaStatus.APPEARED]

    @property
    def disappeared(self) -> list[str]:
        return [d.language for d in self.language_deltas if d.status is DeltaStatus.DISAPPEARED]

    @property
    def is_empty(self) -> bool:
        return (
            self.global_delta.is_zero
            and all(d.is_zero for d in self.language_deltas)
            and not self.appeared
            and not self.disappeared
            and not (self.new_files or self.removed_files or self.modified_files)
        )


_ZERO = LanguageSummary(language="", file_count=0, total=0, logical=0, comment=0, empty=0)


def _language_delta(name: str, old: LanguageSummary | None, new: LanguageSummary | None) -> LanguageDelta:
    if old is None:
        status = DeltaStatus.APPEARED
    elif new is None:
        status = DeltaStatus.DISAPPEARED
    else:
        status = DeltaStatus.CHANGED
    before = old or _ZERO
    after = new or _ZERO
    return LanguageDelta(
        language=name,
        status=status,
        file_count=after.file_count - before.file_count,
        total=after.total - before.total,
        logical=after.logical - before.logical,
        comment=after.comment - before.comment,
        empty=after.empty - before.empty,
    )


def _file_delta(old: FileStat, new: FileStat) -> FileDelta:
    return FileDelta(
        path=new.path,
        total=new.total - old.total,
        logical=new.logical - old.logical,
        comment=new.comment - old.comment,
        empty=new.empty - old.empty,
    )


def diff(old: Report, new: Report) -> ReportDiff:
    """Compute ``new - old`` per language, globally and per file.

    A language missing on one side counts as all zeros there and is tagged
    appeared or disappeared.
    """
    old_langs = {entry.language: entry for entry in old.languages}
    new_langs = {entry.language: entry for entry in new.languages}
    language_deltas = tuple(
        _language_delta(name, old_langs.get(name), new_langs.get(name))
        for name in sorted(old_langs.keys() | new_langs.keys())
    )

    global_delta = GlobalDelta(
        total_files=new.summary.total_files - old.summary.total_files,
        total=new.summary.total - old.summary.total,
        logical=new.summary.logical - old.summary.logical,
        comment=new.summary.comment - old.summary.comment,
        empty=new.summary.empty - old.summary.empty,
        languages_count=new.summary.languages_count - old.summary.languages_count,
    )

    old_files = {stat.path: stat for stat in old.files}
    new_files = {stat.path: stat for stat in new.files}
    modified = []
    for path in sorted(old_files.keys() & new_files.keys()):
        before, after = old_files[path], new_files[path]
        if (before.language, before.total, before.logical, before.comment, before.empty) != (
            after.language,
            after.total,
            after.logical,
            after.comment,
            after.empty,
        ):
            modified.append(_file_delta(before, after))

    return ReportDiff(
        old_generated_at=old.generated_at.isoformat(),
        new_generated_at=new.generated_at.isoformat(),
        language_deltas=language_deltas,
        global_delta=global_delta,
        new_files=tuple(sorted(new_files.keys() - old_files.keys())),
        removed_files=tuple(sorted(old_files.keys() - new_files.keys())),
        modified_files=tuple(modified),
    )
