"""slocscan: comment-aware source line counter with report diffing."""

__version__ = "0.1.0"

from slocscan.classifier import LineClassifier, LineKind, classify_lines
from slocscan.languages.models import BlockComment, LanguageDefinition
from slocscan.languages.registry import LanguageRegistry, build_registry
from slocscan.report.builder import build_report, reprocess
from slocscan.report.differ import DeltaStatus, ReportDiff, diff
from slocscan.report.models import (
    FileError,
    FileStat,
    GlobalSummary,
    LanguageSummary,
    Report,
    UnsupportedFile,
)
from slocscan.scanner.aggregator import ScanResult, run

__all__ = [
    "BlockComment",
    "DeltaStatus",
    "FileError",
    "FileStat",
    "GlobalSummary",
    "LanguageDefinition",
    "LanguageRegistry",
    "LanguageSummary",
    "LineClassifier",
    "LineKind",
    "Report",
    "ReportDiff",
    "ScanResult",
    "UnsupportedFile",
    "build_registry",
    "build_report",
    "classify_lines",
    "diff",
    "reprocess",
    "run",
]
