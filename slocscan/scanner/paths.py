"""Input expansion: turn command-line arguments into a file list."""

from __future__ import annotations

import glob
import os
from collections.abc import Iterable
from pathlib import Path

import structlog

from slocscan.languages.registry import normalize_path

log = structlog.get_logger("slocscan.paths")


def _walk(directory: Path) -> list[str]:
    found: list[str] = []
    for root, dirs, files in os.walk(directory, followlinks=True):
        dirs.sort()
        for name in sorted(files):
            found.append(os.path.join(root, name))
    return found


def collect_paths(
    inputs: Iterable[str],
    recursive: bool = False,
    stdin_lines: Iterable[str] = (),
) -> list[str]:
    """Expand files, directories and glob patterns into a sorted, deduplicated list.

    A plain argument that does not exist is kept so the scan reports it as a
    per-file error. Directories are only entered when *recursive* is set.
    """
    paths: list[str] = []

    for raw in stdin_lines:
        candidate = raw.strip()
        if not candidate:
            continue
        if Path(candidate).exists():
            paths.append(candidate)
        else:
            log.warning("paths.stdin_missing", path=candidate)

    for arg in inputs:
        if glob.has_magic(arg):
            matches = sorted(glob.glob(arg, recursive=recursive))
            if not matches:
                log.warning("paths.glob_no_match", pattern=arg)
            targets = matches
        else:
            targets = [arg]

        for target in targets:
            p = Path(target)
            if p.is_dir():
                if recursive:
                    paths.extend(_walk(p))
                else:
                    log.warning("paths.directory_skipped", path=target, hint="use -r to recurse")
            else:
                paths.append(target)

    return sorted({normalize_path(p) for p in paths})
