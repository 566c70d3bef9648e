"""Deterministic reduction of per-file statistics into a Report."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from slocscan.exceptions import MalformedReport
from slocscan.report.models import (
    REPORT_FORMAT_VERSION,
    FileStat,
    GlobalSummary,
    LanguageSummary,
    Report,
    UnsupportedFile,
)

SUPPORTED_MAJOR_VERSION = REPORT_FORMAT_VERSION.split(".")[0]


def summarize_languages(files: Iterable[FileStat]) -> list[LanguageSummary]:
    """Group *files* (already path-sorted) by language, in first-seen order."""
    sums: dict[str, list[int]] = {}
    for stat in files:
        row = sums.setdefault(stat.language, [0, 0, 0, 0, 0])
        row[0] += 1
        row[1] += stat.total
        row[2] += stat.logical
        row[3] += stat.comment
        row[4] += stat.empty
    return [
        LanguageSummary(
            language=name,
            file_count=row[0],
            total=row[1],
            logical=row[2],
            comment=row[3],
            empty=row[4],
        )
        for name, row in sums.items()
    ]


def summarize_global(languages: Iterable[LanguageSummary]) -> GlobalSummary:
    languages = list(languages)
    return GlobalSummary(
        total_files=sum(entry.file_count for entry in languages),
        total=sum(entry.total for entry in languages),
        logical=sum(entry.logical for entry in languages),
        comment=sum(entry.comment for entry in languages),
        empty=sum(entry.empty for entry in languages),
        languages_count=len(languages),
    )


def build_report(
    files: Iterable[FileStat],
    unsupported: Iterable[UnsupportedFile] = (),
    generated_at: datetime | None = None,
) -> Report:
    """Sort by path, then reduce to language and global summaries.

    The result depends only on the set of inputs, never on their order.
    """
    sorted_files = sorted(files, key=lambda stat: stat.path)
    sorted_unsupported = sorted(
        {entry.path: entry for entry in unsupported}.values(), key=lambda entry: entry.path
    )
    languages = summarize_languages(sorted_files)
    return Report(
        report_format_version=REPORT_FORMAT_VERSION,
        generated_at=generated_at or datetime.now(timezone.utc),
        files=tuple(sorted_files),
        languages=tuple(languages),
        summary=summarize_global(languages),
        unsupported_files=tuple(sorted_unsupported),
    )


def reprocess(report: Report) -> Report:
    """Re-run the reduction over ``report.files`` without touching disk.

    The generation timestamp is kept; a stale checksum is dropped.
    """
    return build_report(report.files, report.unsupported_files, generated_at=report.generated_at)


def validate_report(report: Report) -> Report:
    """Check a reloaded report against the rules every report must satisfy.

    Raises :class:`MalformedReport` naming the first failing field.
    """
    major = report.report_format_version.split(".")[0]
    if major != SUPPORTED_MAJOR_VERSION:
        raise MalformedReport(
            "reportFormatVersion",
            f"unsupported version {report.report_format_version} "
            f"(expected {SUPPORTED_MAJOR_VERSION}.x)",
        )

    paths = [stat.path for stat in report.files]
    if paths != sorted(paths):
        raise MalformedReport("files", "entries are not in ascending path order")
    if len(set(paths)) != len(paths):
        raise MalformedReport("files", "duplicate file paths")

    derived = summarize_languages(report.files)
    if list(report.languages) != derived:
        raise MalformedReport("languages", "language summaries do not match the per-file entries")
    if report.summary != summarize_global(derived):
        raise MalformedReport("summary", "global summary does not match the language summaries")
    return report
