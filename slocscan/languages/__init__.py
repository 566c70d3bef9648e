"""Language definitions and the extension registry."""

from slocscan.languages.models import BlockComment, LanguageDefinition
from slocscan.languages.registry import LanguageRegistry, build_registry

__all__ = ["BlockComment", "LanguageDefinition", "LanguageRegistry", "build_registry"]
