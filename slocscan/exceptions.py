"""Custom exceptions for slocscan."""

from __future__ import annotations


class SlocError(Exception):
    """Base exception for all slocscan errors."""


class PathError(SlocError):
    """Raised when a file is missing or cannot be read or written."""

    def __init__(self, path: str, reason: str, action: str = "read"):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot {action} {path}: {reason}")


class EncodingError(SlocError):
    """Raised when a file's bytes cannot be decoded as text."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode {path}: {reason}")


class UnknownLanguageOverride(SlocError):
    """Raised when an override names a language the registry does not know."""

    def __init__(self, key: str, language: str):
        self.key = key
        self.language = language
        super().__init__(f"Override '{key}={language}' names an unknown language '{language}'")


class MalformedReport(SlocError):
    """Raised when a reloaded report is missing fields or violates an invariant."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Malformed report ({field}): {message}")


class EmptyInput(SlocError):
    """Raised when there are no paths to scan."""


class AllFilesFailed(SlocError):
    """Raised when every input file failed to read or decode."""

    def __init__(self, errors: list):
        self.errors = errors
        super().__init__(f"All {len(errors)} input file(s) failed")


class InvalidConfig(SlocError):
    """Raised when the configuration file is unreadable or invalid."""
