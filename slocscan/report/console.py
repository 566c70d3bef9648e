"""Plain-text console rendering for reports and comparisons."""

from __future__ import annotations

from collections.abc import Sequence

import click

from slocscan.report.differ import DeltaStatus, ReportDiff
from slocscan.report.models import FileError, FileStat, LanguageSummary, Report

SORT_KEYS = ("total", "logical", "comment", "empty", "name", "language")

_RULE = "=" * 78
_MAX_LISTED = 10


def _num(value: int) -> str:
    return f"{value:,}"


def _delta(value: int) -> str:
    return f"+{value:,}" if value > 0 else f"{value:,}"


def _pct(part: int, whole: int) -> str:
    return f"{part / whole * 100:.2f} %" if whole else "0.00 %"


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    def fmt(cells: Sequence[str]) -> str:
        # First column left-aligned, numbers right-aligned.
        return "  ".join(
            c.ljust(w) if i == 0 else c.rjust(w) for i, (c, w) in enumerate(zip(cells, widths))
        )

    lines = [fmt(headers), "  ".join("-" * w for w in widths)]
    lines.extend(fmt(row) for row in rows)
    return lines


def sort_languages(languages: Sequence[LanguageSummary], key: str | None) -> list[LanguageSummary]:
    if key in ("total", "logical", "comment", "empty"):
        return sorted(languages, key=lambda entry: (-getattr(entry, key), entry.language))
    if key in ("name", "language"):
        return sorted(languages, key=lambda entry: entry.language)
    return list(languages)


def sort_files(files: Sequence[FileStat], key: str | None) -> list[FileStat]:
    if key in ("total", "logical", "comment", "empty"):
        return sorted(files, key=lambda stat: (-getattr(stat, key), stat.path))
    if key == "language":
        return sorted(files, key=lambda stat: (stat.language, stat.path))
    return list(files)


def render_report(
    report: Report,
    sort: str | None = None,
    details: bool = False,
    errors: Sequence[FileError] = (),
) -> str:
    s = report.summary
    lines = [_RULE, "Source Lines of Code (SLOC) Report", _RULE, "", "Global Summary"]
    lines += _table(
        ["Metric", "Value", "%"],
        [
            ["Total Files", _num(s.total_files), ""],
            ["Unsupported Files", _num(len(report.unsupported_files)), ""],
            ["Total Lines", _num(s.total), _pct(s.total, s.total)],
            ["Logical Lines", _num(s.logical), _pct(s.logical, s.total)],
            ["Comment Lines", _num(s.comment), _pct(s.comment, s.total)],
            ["Empty Lines", _num(s.empty), _pct(s.empty, s.total)],
            ["Languages", _num(s.languages_count), ""],
        ],
    )

    if report.languages:
        lines += ["", "Languages"]
        lines += _table(
            ["Language", "Files", "Total", "Logical", "Comment", "Empty"],
            [
                [e.language, _num(e.file_count), _num(e.total), _num(e.logical), _num(e.comment), _num(e.empty)]
                for e in sort_languages(report.languages, sort)
            ],
        )

    if details:
        lines += ["", "Files"]
        lines += _table(
            ["Path", "Language", "Total", "Logical", "Comment", "Empty"],
            [
                [f.path, f.language, _num(f.total), _num(f.logical), _num(f.comment), _num(f.empty)]
                for f in sort_files(report.files, sort)
            ],
        )
        if report.unsupported_files:
            lines += ["", "Unsupported Files (not counted):"]
            lines += [f"  - {entry.path}" for entry in report.unsupported_files]

    if errors:
        lines += ["", f"Errors ({len(errors)} file(s) skipped):"]
        lines += [f"  ! {e.path} [{e.kind}] {e.reason}" for e in errors]

    if report.checksum:
        lines += ["", f"Checksum: {report.checksum}"]
    return "\n".join(lines)


def _file_list(title: str, marker: str, items: Sequence[str]) -> list[str]:
    if not items:
        return []
    lines = ["", f"{title}: {len(items)}"]
    if len(items) <= _MAX_LISTED:
        lines += [f"  {marker} {item}" for item in items]
    return lines


def render_diff(result: ReportDiff) -> str:
    g = result.global_delta
    lines = [
        _RULE,
        "Report Comparison",
        _RULE,
        "",
        f"  Old report: {result.old_generated_at}",
        f"  New report: {result.new_generated_at}",
        "",
        "Global Changes",
    ]
    lines += _table(
        ["Metric", "Delta"],
        [
            ["Files", _delta(g.total_files)],
            ["Total Lines", _delta(g.total)],
            ["Logical Lines", _delta(g.logical)],
            ["Comment Lines", _delta(g.comment)],
            ["Empty Lines", _delta(g.empty)],
            ["Languages", _delta(g.languages_count)],
        ],
    )

    changed = [
        d
        for d in result.language_deltas
        if not d.is_zero or d.status is not DeltaStatus.CHANGED
    ]
    if changed:
        lines += ["", "Language Changes"]
        lines += _table(
            ["Language", "Status", "Files", "Total", "Logical", "Comment", "Empty"],
            [
                [
                    d.language,
                    d.status.value,
                    _delta(d.file_count),
                    _delta(d.total),
                    _delta(d.logical),
                    _delta(d.comment),
                    _delta(d.empty),
                ]
                for d in changed
            ],
        )

    lines += _file_list("New Files", "+", result.new_files)
    lines += _file_list("Removed Files", "-", result.removed_files)
    lines += _file_list(
        "Modified Files", "~", [f"{f.path} ({_delta(f.total)})" for f in result.modified_files]
    )
    if result.is_empty:
        lines += ["", "No differences."]
    return "\n".join(lines)


def echo_report(report: Report, **kwargs) -> None:
    click.echo(render_report(report, **kwargs))


def echo_diff(result: ReportDiff) -> None:
    click.echo(render_diff(result))
