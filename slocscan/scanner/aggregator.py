"""Parallel scanner: classify many files and reduce to one Report."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import structlog

from slocscan.classifier import classify_lines
from slocscan.exceptions import (
    AllFilesFailed,
    EmptyInput,
    EncodingError,
    PathError,
    UnknownLanguageOverride,
)
from slocscan.languages.registry import LanguageRegistry, normalize_overrides, normalize_path
from slocscan.metrics import RunMetrics
from slocscan.report.builder import build_report
from slocscan.report.models import FileError, FileStat, Report, UnsupportedFile
from slocscan.scanner.reader import read_lines as default_read_lines

log = structlog.get_logger("slocscan.scanner")

LineReader = Callable[[str], Sequence[str]]


@dataclass
class ScanResult:
    """Result of a scan: the report plus every file that could not be classified."""

    report: Report
    errors: list[FileError] = field(default_factory=list)


@dataclass
class _WorkerBuffer:
    """Results owned by a single worker until the final merge."""

    stats: list[FileStat] = field(default_factory=list)
    unsupported: list[UnsupportedFile] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)


def default_thread_count() -> int:
    return os.cpu_count() or 1


def _scan_partition(
    paths: Sequence[str],
    registry: LanguageRegistry,
    overrides: Mapping[str, str],
    exclude_preprocessor: bool,
    read_lines: LineReader,
) -> _WorkerBuffer:
    buf = _WorkerBuffer()
    for path in paths:
        try:
            definition = registry.resolve(path, overrides)
            if definition is None:
                buf.unsupported.append(UnsupportedFile(path=path))
                continue
            lines = read_lines(path)
            buf.stats.append(classify_lines(path, lines, definition, exclude_preprocessor))
        except UnknownLanguageOverride as e:
            buf.errors.append(FileError(path=path, kind="unknown_override", reason=str(e)))
        except PathError as e:
            buf.errors.append(FileError(path=path, kind="path", reason=e.reason))
        except EncodingError as e:
            buf.errors.append(FileError(path=path, kind="encoding", reason=e.reason))
        except OSError as e:
            buf.errors.append(FileError(path=path, kind="io", reason=str(e)))
    return buf


def run(
    paths: Sequence[str],
    registry: LanguageRegistry,
    overrides: Mapping[str, str] | None = None,
    thread_count: int | None = None,
    chunk_size: int | None = None,
    exclude_preprocessor: bool = False,
    read_lines: LineReader = default_read_lines,
    metrics: RunMetrics | None = None,
) -> ScanResult:
    """Classify *paths* on a worker pool and merge the results deterministically.

    Workers share only the frozen *registry*; each fills its own buffer. The
    merge sorts by normalized path, so the report does not depend on thread
    count or completion order. Per-file failures are collected in
    ``ScanResult.errors`` and never abort sibling work.

    Raises :class:`EmptyInput` for an empty path list and
    :class:`AllFilesFailed` when no file could be read.
    """
    unique = sorted({normalize_path(p) for p in paths})
    if not unique:
        raise EmptyInput("no input files to scan")

    workers = max(1, min(thread_count or default_thread_count(), len(unique)))
    normalized_overrides = normalize_overrides(overrides)
    # At least one partition per worker; more when chunk_size caps partition length.
    n_parts = workers if not chunk_size else max(workers, -(-len(unique) // chunk_size))
    partitions = [unique[i::n_parts] for i in range(n_parts)]

    if metrics is not None:
        metrics.start_phase("scan")
        metrics.record("thread_count", workers)
        metrics.record("partition_count", n_parts)
        metrics.record("total_files_to_process", len(unique))

    log.debug("scanner.started", files=len(unique), workers=workers, partitions=n_parts)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="slocscan") as pool:
        futures = [
            pool.submit(
                _scan_partition,
                part,
                registry,
                normalized_overrides,
                exclude_preprocessor,
                read_lines,
            )
            for part in partitions
        ]
        buffers = [f.result() for f in futures]

    stats = [s for b in buffers for s in b.stats]
    unsupported = [u for b in buffers for u in b.unsupported]
    errors = sorted((e for b in buffers for e in b.errors), key=lambda e: e.path)

    for err in errors:
        log.warning("scanner.file_failed", path=err.path, kind=err.kind, reason=err.reason)

    if metrics is not None:
        metrics.record("files_processed_successfully", len(stats))
        metrics.record("unsupported_files", len(unsupported))
        metrics.record("file_errors", len(errors))
        for err in errors:
            metrics.increment(f"file_errors_{err.kind}")

    if len(errors) == len(unique):
        if metrics is not None:
            metrics.fail_phase("scan", "all files failed")
        raise AllFilesFailed(errors)

    report = build_report(stats, unsupported)

    if metrics is not None:
        metrics.record("total_lines_processed", report.summary.total)
        metrics.record("logical_lines_processed", report.summary.logical)
        metrics.record("comment_lines_processed", report.summary.comment)
        metrics.record("empty_lines_processed", report.summary.empty)
        metrics.complete_phase("scan", detail=f"{len(stats)} files")
        elapsed = next((p.duration for p in metrics.phases if p.phase == "scan"), None)
        if elapsed:
            metrics.record("overall_throughput_lines_per_sec", report.summary.total / elapsed)

    log.info(
        "scanner.finished",
        files=len(stats),
        unsupported=len(unsupported),
        errors=len(errors),
        languages=report.summary.languages_count,
    )
    return ScanResult(report=report, errors=errors)
