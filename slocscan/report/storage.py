"""Report persistence: JSON, CSV and XML save/load, plus integrity checksum."""

from __future__ import annotations

import csv
import hashlib
import io
import json
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from slocscan.exceptions import MalformedReport, PathError
from slocscan.report.builder import build_report, validate_report
from slocscan.report.differ import ReportDiff
from slocscan.report.models import FileStat, Report, UnsupportedFile

log = structlog.get_logger("slocscan.storage")

FORMATS = ("json", "csv", "xml")

_CSV_COLUMNS = ["kind", "path", "language", "total", "logical", "comment", "empty"]

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# List containers and the tag of each item inside them.
_REPORT_ITEMS = {"files": "file", "languages": "language", "unsupportedFiles": "unsupportedFile"}
_DIFF_ITEMS = {
    "language_deltas": "language_delta",
    "new_files": "path",
    "removed_files": "path",
    "modified_files": "file",
}


def detect_format(path: str | Path, default: str = "json") -> str:
    """Pick a format from the file extension."""
    suffix = Path(path).suffix.lower().lstrip(".")
    return suffix if suffix in FORMATS else default


def _write(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise PathError(str(path), e.strerror or str(e), action="write") from e


# ── xml ──────────────────────────────────────────────────────────────────


def _to_element(tag: str, value: Any, items: dict[str, str]) -> ET.Element:
    el = ET.Element(tag)
    if isinstance(value, dict):
        for key, child in value.items():
            el.append(_to_element(key, child, items))
    elif isinstance(value, list):
        for child in value:
            el.append(_to_element(items[tag], child, items))
    elif value is not None:
        el.text = str(value)
    return el


def _from_element(el: ET.Element, items: dict[str, str]) -> Any:
    if el.tag in items:
        return [_from_element(child, items) for child in el]
    if len(el):
        return {child.tag: _from_element(child, items) for child in el}
    return el.text.strip() if el.text else ""


def _xml_text(root_tag: str, data: dict, items: dict[str, str]) -> str:
    root = _to_element(root_tag, data, items)
    ET.indent(root)
    return _XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


# ── checksum ─────────────────────────────────────────────────────────────


def canonical_bytes(report: Report) -> bytes:
    """Canonical serialization: sorted keys, compact separators, checksum excluded."""
    return json.dumps(
        report.to_dict(exclude_checksum=True), sort_keys=True, separators=(",", ":")
    ).encode("utf-8")


def compute_checksum(report: Report) -> str:
    return hashlib.sha256(canonical_bytes(report)).hexdigest()


def with_checksum(report: Report) -> Report:
    return report.model_copy(update={"checksum": compute_checksum(report)})


def verify_checksum(report: Report) -> None:
    """Raise :class:`MalformedReport` if a stored checksum does not match."""
    if report.checksum is None:
        return
    expected = compute_checksum(report)
    if report.checksum != expected:
        raise MalformedReport("checksum", f"stored {report.checksum} does not match {expected}")


# ── save ─────────────────────────────────────────────────────────────────


def dumps_report(report: Report, fmt: str = "json") -> str:
    if fmt == "json":
        return json.dumps(report.to_dict(), indent=2) + "\n"
    if fmt == "csv":
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(_CSV_COLUMNS)
        for stat in report.files:
            writer.writerow(
                ["file", stat.path, stat.language, stat.total, stat.logical, stat.comment, stat.empty]
            )
        for entry in report.unsupported_files:
            writer.writerow(["unsupported", entry.path, "", "", "", "", ""])
        return buf.getvalue()
    if fmt == "xml":
        return _xml_text("report", report.to_dict(), _REPORT_ITEMS)
    raise ValueError(f"unsupported report format: {fmt}")


def save_report(report: Report, path: str | Path, fmt: str | None = None) -> Path:
    path = Path(path)
    fmt = fmt or detect_format(path)
    _write(path, dumps_report(report, fmt))
    log.info("storage.report_saved", path=str(path), format=fmt, files=len(report.files))
    return path


def dumps_diff(result: ReportDiff, fmt: str = "json") -> str:
    if fmt == "json":
        return result.model_dump_json(indent=2) + "\n"
    if fmt == "csv":
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(["type", "name", "status", "files", "total", "logical", "comment", "empty"])
        g = result.global_delta
        writer.writerow(["global", "summary", "", g.total_files, g.total, g.logical, g.comment, g.empty])
        for d in result.language_deltas:
            writer.writerow(
                ["language", d.language, d.status.value, d.file_count, d.total, d.logical, d.comment, d.empty]
            )
        for f in result.modified_files:
            writer.writerow(["file", f.path, "modified", "", f.total, f.logical, f.comment, f.empty])
        for p in result.new_files:
            writer.writerow(["file", p, "new", "", "", "", "", ""])
        for p in result.removed_files:
            writer.writerow(["file", p, "removed", "", "", "", "", ""])
        return buf.getvalue()
    if fmt == "xml":
        return _xml_text("comparison", result.model_dump(mode="json"), _DIFF_ITEMS)
    raise ValueError(f"unsupported comparison format: {fmt}")


def save_diff(result: ReportDiff, path: str | Path, fmt: str | None = None) -> Path:
    path = Path(path)
    fmt = fmt or detect_format(path)
    _write(path, dumps_diff(result, fmt))
    log.info("storage.diff_saved", path=str(path), format=fmt)
    return path


# ── load ─────────────────────────────────────────────────────────────────


def _validation_field(exc: ValidationError) -> str:
    err = exc.errors()[0]
    return ".".join(str(part) for part in err["loc"]) or "report"


def _report_from_data(data: Any) -> Report:
    if not isinstance(data, dict):
        raise MalformedReport("report", "top-level value must be an object")
    try:
        report = Report.model_validate(data)
    except ValidationError as e:
        raise MalformedReport(_validation_field(e), e.errors()[0]["msg"]) from e
    validate_report(report)
    verify_checksum(report)
    return report


def _report_from_csv(text: str) -> Report:
    reader = csv.DictReader(io.StringIO(text))
    missing = [c for c in _CSV_COLUMNS if c not in (reader.fieldnames or [])]
    if missing:
        raise MalformedReport(missing[0], "missing CSV column")
    files: list[FileStat] = []
    unsupported: list[UnsupportedFile] = []
    for lineno, row in enumerate(reader, start=2):
        try:
            if row["kind"] == "unsupported":
                unsupported.append(UnsupportedFile(path=row["path"]))
            elif row["kind"] == "file":
                files.append(
                    FileStat(
                        path=row["path"],
                        language=row["language"],
                        total=row["total"],
                        logical=row["logical"],
                        comment=row["comment"],
                        empty=row["empty"],
                    )
                )
            else:
                raise MalformedReport("kind", f"line {lineno}: unknown row kind {row['kind']!r}")
        except ValidationError as e:
            raise MalformedReport(
                _validation_field(e), f"line {lineno}: {e.errors()[0]['msg']}"
            ) from e
    return build_report(files, unsupported)


def loads_report(text: str, fmt: str = "json") -> Report:
    """Parse and validate a persisted report.

    JSON and XML keep every field. CSV carries only per-file rows, so
    summaries are re-derived and the generation time is the load time.
    """
    if fmt == "json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedReport("json", str(e)) from e
        return _report_from_data(data)

    if fmt == "xml":
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise MalformedReport("xml", str(e)) from e
        if root.tag != "report":
            raise MalformedReport("report", f"root element is <{root.tag}>, expected <report>")
        return _report_from_data(_from_element(root, _REPORT_ITEMS))

    if fmt == "csv":
        return _report_from_csv(text)

    raise ValueError(f"unsupported report format: {fmt}")


def load_report(path: str | Path, fmt: str | None = None) -> Report:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PathError(str(path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise MalformedReport("encoding", str(e)) from e
    report = loads_report(text, fmt or detect_format(path))
    log.info("storage.report_loaded", path=str(path), files=len(report.files))
    return report
