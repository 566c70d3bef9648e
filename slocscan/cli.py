"""CLI entry point: slocscan.

Subcommands:
    slocscan count src/ -r                    # Count lines and print a summary
    slocscan report src/ -r -o report.json    # Count lines and save a report
    slocscan process report.json              # Re-derive summaries from a saved report
    slocscan compare old.json new.json        # Diff two saved reports
    slocscan languages                        # List known languages and extensions
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
import structlog

from slocscan.core.config import AppConfig, load_config
from slocscan.core.logging import setup_logging
from slocscan.exceptions import AllFilesFailed, SlocError
from slocscan.languages.registry import build_registry, parse_override
from slocscan.metrics import RunMetrics, append_metrics_log
from slocscan.report.builder import reprocess
from slocscan.report.console import SORT_KEYS, echo_diff, echo_report
from slocscan.report.differ import diff
from slocscan.report.storage import (
    FORMATS,
    detect_format,
    load_report,
    save_diff,
    save_report,
    with_checksum,
)
from slocscan.scanner.aggregator import ScanResult, run
from slocscan.scanner.paths import collect_paths

log = structlog.get_logger("slocscan.cli")


def _parse_overrides(
    _ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for value in values:
        try:
            key, language = parse_override(value)
        except ValueError as e:
            raise click.BadParameter(str(e)) from e
        overrides[key] = language
    return overrides


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _finish_metrics(metrics: RunMetrics, config: AppConfig) -> None:
    metrics.end_run()
    log.debug("cli.run_summary", **metrics.get_summary())
    if config.performance.enable_metrics:
        append_metrics_log(metrics, config.performance.metrics_file)
        log.info("cli.metrics_written", path=config.performance.metrics_file)


def _scan(
    paths: tuple[str, ...],
    recursive: bool,
    use_stdin: bool,
    overrides: dict[str, str],
    config: AppConfig,
    threads: int,
    ignore_preprocessor: bool,
    metrics: RunMetrics,
) -> ScanResult:
    metrics.start_phase("collect")
    stdin_lines = click.get_text_stream("stdin").readlines() if use_stdin else []
    files = collect_paths(paths, recursive or config.defaults.recursive, stdin_lines)
    metrics.complete_phase("collect", detail=f"{len(files)} paths")

    registry = build_registry(config.language_definitions())
    metrics.record("language_overrides_count", len(overrides))
    return run(
        files,
        registry,
        overrides=overrides,
        thread_count=config.thread_count(threads),
        chunk_size=config.performance.chunk_size,
        exclude_preprocessor=ignore_preprocessor,
        metrics=metrics,
    )


def _export(report, output: str, fmt: str | None, config: AppConfig, metrics: RunMetrics) -> None:
    metrics.start_phase("export")
    fmt = fmt or detect_format(output, default=config.defaults.output_format)
    save_report(report, output, fmt)
    metrics.complete_phase("export", detail=fmt)


@click.group()
@click.version_option(package_name="slocscan")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """slocscan: comment-aware source line counter."""
    setup_logging("DEBUG" if verbose else None)


_scan_options = [
    click.argument("paths", nargs=-1),
    click.option("-r", "--recursive", is_flag=True, help="Recurse into directories"),
    click.option("--config", "config_path", type=click.Path(), default=None, help="TOML configuration file"),
    click.option("-j", "--threads", type=click.IntRange(min=0), default=0, help="Worker threads (0 = auto)"),
    click.option("--checksum", is_flag=True, help="Attach a SHA-256 checksum to the report"),
    click.option("--ignore-preprocessor", is_flag=True, help="Leave preprocessor lines out of every count"),
    click.option(
        "--language-override",
        "overrides",
        multiple=True,
        callback=_parse_overrides,
        metavar="EXT=LANG",
        help="Force a language for an extension or file path",
    ),
    click.option("--enable-metrics", is_flag=True, help="Append run metrics to the metrics file"),
    click.option("--metrics-file", default=None, help="Metrics log path"),
]


def scan_options(func):
    for option in reversed(_scan_options):
        func = option(func)
    return func


@main.command("count")
@scan_options
@click.option("--stdin", "use_stdin", is_flag=True, help="Read file paths from stdin")
@click.option(
    "-f", "--format", "fmt", type=click.Choice(FORMATS), default=None,
    help="Report format; without -o the report goes to sloc-report.<format>",
)
@click.option("-o", "--output", default=None, help="Save the report to this file")
@click.option("-s", "--sort", type=click.Choice(SORT_KEYS), default=None, help="Sort tables by metric")
@click.option("--details", is_flag=True, help="List every file and the unsupported files")
def count(
    paths: tuple[str, ...],
    recursive: bool,
    config_path: str | None,
    threads: int,
    checksum: bool,
    ignore_preprocessor: bool,
    overrides: dict[str, str],
    enable_metrics: bool,
    metrics_file: str | None,
    use_stdin: bool,
    fmt: str | None,
    output: str | None,
    sort: str | None,
    details: bool,
) -> None:
    """Count lines in files and directories."""
    if not paths and not use_stdin:
        _fail("no paths given (pass PATHS or --stdin)")

    metrics = RunMetrics(operation="count")
    try:
        config = load_config(config_path, enable_metrics, metrics_file)
        metrics.begin_run(paths=len(paths), recursive=recursive, threads=threads)
        result = _scan(
            paths, recursive, use_stdin, overrides, config, threads, ignore_preprocessor, metrics
        )
        report = with_checksum(result.report) if checksum else result.report
        echo_report(report, sort=sort, details=details, errors=result.errors)
        if fmt and not output:
            output = config.defaults.output_path(fmt)
        if output:
            _export(report, output, fmt, config, metrics)
            click.echo(f"\nReport saved to: {output}")
        _finish_metrics(metrics, config)
    except AllFilesFailed as e:
        for err in e.errors:
            click.echo(f"  ! {err.path} [{err.kind}] {err.reason}", err=True)
        _fail(str(e))
    except SlocError as e:
        _fail(str(e))

    elapsed = metrics.elapsed or 0.0
    rate = report.summary.total / elapsed if elapsed > 0 else 0.0
    click.echo(f"\nPerformance: {rate:,.0f} lines/sec ({int(metrics.values.get('thread_count', 1))} threads)")


@main.command("report")
@scan_options
@click.option("-o", "--output", required=True, help="Report file path")
@click.option("-f", "--format", "fmt", type=click.Choice(FORMATS), default=None, help="Report format")
def report_cmd(
    paths: tuple[str, ...],
    recursive: bool,
    config_path: str | None,
    threads: int,
    checksum: bool,
    ignore_preprocessor: bool,
    overrides: dict[str, str],
    enable_metrics: bool,
    metrics_file: str | None,
    output: str,
    fmt: str | None,
) -> None:
    """Count lines and write a report file."""
    if not paths:
        _fail("no paths given")

    metrics = RunMetrics(operation="report")
    try:
        config = load_config(config_path, enable_metrics, metrics_file)
        metrics.begin_run(paths=len(paths), recursive=recursive, threads=threads)
        result = _scan(
            paths, recursive, False, overrides, config, threads, ignore_preprocessor, metrics
        )
        report = with_checksum(result.report) if checksum else result.report
        _export(report, output, fmt, config, metrics)
        _finish_metrics(metrics, config)
    except SlocError as e:
        _fail(str(e))

    for err in result.errors:
        click.echo(f"  ! {err.path} [{err.kind}] {err.reason}", err=True)
    click.echo(
        f"Report generated successfully: {output} "
        f"({report.summary.total_files} files, {len(report.unsupported_files)} unsupported, "
        f"{len(result.errors)} errors)"
    )


@main.command("process")
@click.argument("report_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-s", "--sort", type=click.Choice(SORT_KEYS), default=None, help="Sort tables by metric")
@click.option("-e", "--export", "export_path", default=None, help="Write the processed report here")
@click.option("-f", "--format", "fmt", type=click.Choice(FORMATS), default=None, help="Export format")
@click.option("--details", is_flag=True, help="List every file")
def process(
    report_path: str, sort: str | None, export_path: str | None, fmt: str | None, details: bool
) -> None:
    """Recompute summaries from a saved report without rescanning."""
    try:
        report = reprocess(load_report(report_path))
        echo_report(report, sort=sort, details=details)
        if export_path:
            save_report(report, export_path, fmt or detect_format(export_path))
            click.echo(f"\nProcessed report exported to: {export_path}")
    except SlocError as e:
        _fail(str(e))


@main.command("compare")
@click.argument("old_report", type=click.Path(exists=True, dir_okay=False))
@click.argument("new_report", type=click.Path(exists=True, dir_okay=False))
@click.option("-e", "--export", "export_path", default=None, help="Write the comparison here")
@click.option("-f", "--format", "fmt", type=click.Choice(FORMATS), default=None, help="Export format")
def compare(old_report: str, new_report: str, export_path: str | None, fmt: str | None) -> None:
    """Compare two saved reports."""
    try:
        old = load_report(old_report)
        new = load_report(new_report)
        result = diff(old, new)
        echo_diff(result)
        if export_path:
            save_diff(result, Path(export_path), fmt)
            click.echo(f"\nComparison exported to: {export_path}")
    except SlocError as e:
        _fail(str(e))


@main.command("languages")
@click.option("--config", "config_path", type=click.Path(), default=None, help="TOML configuration file")
def languages(config_path: str | None) -> None:
    """List the languages the registry knows, with the extensions each one owns."""
    try:
        registry = build_registry(load_config(config_path).language_definitions())
    except SlocError as e:
        _fail(str(e))

    owned: dict[str, list[str]] = {}
    for ext, definition in sorted(registry.extensions.items()):
        owned.setdefault(definition.name, []).append(ext)
    for definition in registry.list_all():
        exts = ", ".join(f".{ext}" for ext in owned.get(definition.name, [])) or "(none)"
        nested = "  [nested]" if definition.nested else ""
        click.echo(f"{definition.name:<12} {exts}{nested}")


if __name__ == "__main__":
    main()
