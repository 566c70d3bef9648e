"""File reading: bytes to an ordered list of decoded lines."""

from __future__ import annotations

import codecs
from pathlib import Path

from slocscan.exceptions import EncodingError, PathError

_BOMS = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def decode(path: str, data: bytes) -> str:
    """Decode *data*, honouring a UTF-8 or UTF-16 BOM; UTF-8 otherwise."""
    encoding = "utf-8"
    for bom, name in _BOMS:
        if data.startswith(bom):
            encoding = name
            break
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise EncodingError(path, f"{e.reason} at byte {e.start} ({encoding})") from e


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, dropping a trailing ``\\r``; a final newline adds no line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def read_lines(path: str) -> list[str]:
    """Read and decode one file. Raises :class:`PathError` or :class:`EncodingError`."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise PathError(path, e.strerror or str(e)) from e
    return split_lines(decode(path, data))
