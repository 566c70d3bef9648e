"""Language registry: map file paths to comment grammars."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import PurePath
from types import MappingProxyType

import structlog

from slocscan.exceptions import UnknownLanguageOverride
from slocscan.languages.builtins import BUILTIN_LANGUAGES
from slocscan.languages.models import LanguageDefinition, normalize_extension

log = structlog.get_logger("slocscan.registry")


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Normalized, forward-slash form of *path*; the identity and sort key for a file."""
    return PurePath(os.path.normpath(os.fspath(path))).as_posix()


def parse_override(spec: str) -> tuple[str, str]:
    """Parse a command-line override ``"ext=language"``.

    The left side is either an extension (with or without the dot) or a
    literal file path.
    """
    parts = spec.split("=")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise ValueError(f"Invalid override {spec!r}. Use: ext=language")
    return parts[0].strip(), parts[1].strip()


def normalize_overrides(overrides: Mapping[str, str] | None) -> dict[str, str]:
    """Normalize override keys.

    A key with a path separator is only a literal path. Any other key is
    registered both as a lowercase extension and as a literal path.
    """
    result: dict[str, str] = {}
    for key, language in (overrides or {}).items():
        result[normalize_path(key)] = language
        if "/" not in key and os.sep not in key:
            result.setdefault(normalize_extension(key), language)
    return result


class LanguageRegistry:
    """Frozen mapping from extension to language definition.

    Built once from built-ins plus configured definitions and shared by every
    worker; nothing mutates it after construction.
    """

    def __init__(self, definitions: Iterable[LanguageDefinition]) -> None:
        by_name: dict[str, LanguageDefinition] = {}
        by_ext: dict[str, LanguageDefinition] = {}
        for definition in definitions:
            replaced = by_name.get(definition.name.lower())
            if replaced is not None:
                # A redefinition drops every claim the old definition held.
                for key in replaced.lookup_names:
                    if by_name.get(key) is replaced:
                        del by_name[key]
                for ext in [e for e, d in by_ext.items() if d is replaced]:
                    del by_ext[ext]
            for key in definition.lookup_names:
                by_name[key] = definition
            for ext in sorted(definition.extensions):
                previous = by_ext.get(ext)
                if previous is not None and previous is not definition:
                    log.debug(
                        "registry.extension_reassigned",
                        extension=ext,
                        old=previous.name,
                        new=definition.name,
                    )
                by_ext[ext] = definition
        self._by_name = MappingProxyType(by_name)
        self._by_ext = MappingProxyType(by_ext)

    def get(self, name: str) -> LanguageDefinition | None:
        """Look up a language by name or alias (case-insensitive)."""
        return self._by_name.get(name.lower())

    def for_extension(self, ext: str) -> LanguageDefinition | None:
        return self._by_ext.get(normalize_extension(ext))

    def list_all(self) -> list[LanguageDefinition]:
        seen: dict[str, LanguageDefinition] = {}
        for definition in self._by_name.values():
            seen.setdefault(definition.name, definition)
        return sorted(seen.values(), key=lambda d: d.name.lower())

    @property
    def extensions(self) -> Mapping[str, LanguageDefinition]:
        return self._by_ext

    def resolve(
        self,
        path: str | os.PathLike[str],
        overrides: Mapping[str, str] | None = None,
    ) -> LanguageDefinition | None:
        """Resolve the language for *path*, or ``None`` when unsupported.

        *overrides* must already be normalized (see :func:`normalize_overrides`).
        A literal path override beats an extension override, and either one
        beats the extension map. An override naming an unknown language
        raises :class:`UnknownLanguageOverride`.
        """
        norm = normalize_path(path)
        ext = normalize_extension(PurePath(norm).suffix)

        if overrides:
            for key in (norm, ext):
                if key and key in overrides:
                    language = overrides[key]
                    definition = self.get(language)
                    if definition is None:
                        raise UnknownLanguageOverride(key, language)
                    log.debug("registry.override_applied", path=norm, key=key, language=definition.name)
                    return definition

        if not ext:
            return None
        return self.for_extension(ext)


def build_registry(
    config_languages: Iterable[LanguageDefinition] = (),
) -> LanguageRegistry:
    """Merge built-ins first, then configured definitions; last claim on an extension wins."""
    return LanguageRegistry([*BUILTIN_LANGUAGES, *config_languages])
