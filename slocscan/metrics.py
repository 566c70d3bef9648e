"""Run metrics: phase timings and counters for one command invocation.

A :class:`RunMetrics` value is created by the invoking command, passed
explicitly to the scanner, and closed with :meth:`RunMetrics.end_run`.
There is no module-level metrics state.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from slocscan.exceptions import PathError

log = structlog.get_logger("slocscan.metrics")


@dataclass
class PhaseTiming:
    phase: str
    status: str = "pending"  # "pending" | "running" | "completed" | "failed"
    start_time: float | None = None
    end_time: float | None = None
    detail: str = ""
    error: str | None = None

    @property
    def duration(self) -> float | None:
        if self.start_time is not None and self.end_time is not None:
            return round(self.end_time - self.start_time, 4)
        return None


@dataclass
class RunMetrics:
    """Metrics context for one run of a command."""

    operation: str
    phases: list[PhaseTiming] = field(default_factory=list)
    values: dict[str, float] = field(default_factory=dict)
    started_at: datetime | None = None
    _start: float | None = field(default=None, init=False, repr=False)
    _end: float | None = field(default=None, init=False, repr=False)
    _by_name: dict[str, PhaseTiming] = field(default_factory=dict, init=False, repr=False)

    def begin_run(self, **context: Any) -> None:
        self.started_at = datetime.now(timezone.utc)
        self._start = time.monotonic()
        self.record("system_cpu_count", os.cpu_count() or 1)
        log.debug("metrics.run_started", operation=self.operation, **context)

    def end_run(self) -> None:
        self._end = time.monotonic()
        if self.elapsed is not None:
            self.record("elapsed_seconds", self.elapsed)
        log.debug("metrics.run_finished", operation=self.operation, elapsed=self.elapsed)

    @property
    def elapsed(self) -> float | None:
        if self._start is None:
            return None
        end = self._end if self._end is not None else time.monotonic()
        return round(end - self._start, 4)

    def start_phase(self, phase: str) -> None:
        p = PhaseTiming(phase=phase, status="running", start_time=time.monotonic())
        self.phases.append(p)
        self._by_name[phase] = p

    def complete_phase(self, phase: str, detail: str = "") -> None:
        p = self._by_name.get(phase)
        if p:
            p.status = "completed"
            p.end_time = time.monotonic()
            p.detail = detail
            if p.duration is not None:
                self.record(f"{phase}_time", p.duration)

    def fail_phase(self, phase: str, error: str) -> None:
        p = self._by_name.get(phase)
        if p:
            p.status = "failed"
            p.end_time = time.monotonic()
            p.error = error

    def record(self, name: str, value: float) -> None:
        self.values[name] = float(value)

    def increment(self, name: str, amount: float = 1) -> None:
        self.values[name] = self.values.get(name, 0.0) + amount

    def get_summary(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "elapsed": self.elapsed,
            "phases": [
                {
                    "phase": p.phase,
                    "status": p.status,
                    "duration": p.duration,
                    "detail": p.detail,
                    "error": p.error,
                }
                for p in self.phases
            ],
            "values": dict(self.values),
        }

    def to_log_lines(self) -> list[str]:
        started = self.started_at.strftime("%Y-%m-%d %H:%M:%S UTC") if self.started_at else "?"
        lines = [f"=== slocscan metrics: {self.operation} @ {started} ==="]
        for name in sorted(self.values):
            lines.append(f"{name}: {self.values[name]:.3f}")
        lines.append("=== end ===")
        return lines


def append_metrics_log(metrics: RunMetrics, path: str | Path) -> None:
    """Append a finished run's metrics to *path*."""
    try:
        with open(path, "a", encoding="utf-8") as fh:
            fh.write("\n".join(metrics.to_log_lines()) + "\n\n")
    except OSError as e:
        raise PathError(str(path), e.strerror or str(e), action="write") from e
