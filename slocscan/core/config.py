"""Application configuration: TOML file plus command-line overrides."""

from __future__ import annotations

import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from slocscan.exceptions import InvalidConfig
from slocscan.languages.models import LanguageDefinition

DEFAULT_OUTPUT_FILE_BASE = "sloc-report"


class PerformanceConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_threads: int = Field(default=0, ge=0)  # 0 = one per CPU
    chunk_size: int = Field(default=1000, ge=1)  # max paths per scan task
    enable_metrics: bool = False
    metrics_file: str = "sloc_metrics.log"


class DefaultsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    recursive: bool = False
    no_progress: bool = False  # read but unused: no progress bar is drawn
    output_format: str = "json"
    output_file: str = DEFAULT_OUTPUT_FILE_BASE

    @field_validator("output_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "csv", "xml"):
            raise ValueError(f"output_format must be json, csv or xml, got {value!r}")
        return value

    def output_path(self, fmt: str | None = None) -> str:
        """Auto-generated report name, e.g. ``sloc-report.json``."""
        return f"{self.output_file}.{fmt or self.output_format}"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    languages: dict[str, LanguageDefinition] = Field(default_factory=dict)

    @field_validator("languages", mode="before")
    @classmethod
    def _default_names(cls, value):
        # [languages.kotlin] without a name uses the table key.
        if not isinstance(value, dict):
            return value
        result = {}
        for key, spec in value.items():
            if isinstance(spec, dict):
                spec = {"name": key, **spec}
                aliases = list(spec.get("aliases", []))
                if key.lower() != spec["name"].lower() and key not in aliases:
                    aliases.append(key)
                spec["aliases"] = aliases
            result[key] = spec
        return result

    def language_definitions(self) -> list[LanguageDefinition]:
        """Configured definitions in file order, the merge order used by the registry."""
        return list(self.languages.values())

    def thread_count(self, cli_threads: int | None = None) -> int | None:
        """Effective worker count; ``None`` lets the scanner pick one per CPU."""
        threads = cli_threads if cli_threads else self.performance.default_threads
        return threads or None


def load_config(
    path: str | Path | None = None,
    enable_metrics: bool | None = None,
    metrics_file: str | None = None,
) -> AppConfig:
    """Load *path* (or defaults when ``None``) and apply command-line overrides."""
    if path is None:
        config = AppConfig()
    else:
        try:
            data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise InvalidConfig(f"cannot read {path}: {e.strerror or e}") from e
        except tomllib.TOMLDecodeError as e:
            raise InvalidConfig(f"{path}: {e}") from e
        try:
            config = AppConfig.model_validate(data)
        except ValidationError as e:
            err = e.errors()[0]
            loc = ".".join(str(part) for part in err["loc"])
            raise InvalidConfig(f"{path}: {loc}: {err['msg']}") from e

    if enable_metrics:
        config.performance.enable_metrics = True
    if metrics_file:
        config.performance.metrics_file = metrics_file
    return config
