"""Scanner: read, classify and aggregate many files."""

from slocscan.scanner.aggregator import ScanResult, run

__all__ = ["ScanResult", "run"]
