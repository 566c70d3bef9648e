"""Tests for RunMetrics."""

from __future__ import annotations

import time

from slocscan.metrics import RunMetrics, append_metrics_log


class TestRunMetrics:
    def test_basic_flow(self):
        metrics = RunMetrics(operation="count")
        metrics.start_phase("collect")
        metrics.complete_phase("collect", detail="12 paths")

        summary = metrics.get_summary()
        assert summary["operation"] == "count"
        assert len(summary["phases"]) == 1
        assert summary["phases"][0]["status"] == "completed"
        assert summary["phases"][0]["detail"] == "12 paths"
        assert "collect_time" in summary["values"]

    def test_fail_phase(self):
        metrics = RunMetrics(operation="count")
        metrics.start_phase("scan")
        metrics.fail_phase("scan", "all files failed")

        summary = metrics.get_summary()
        assert summary["phases"][0]["status"] == "failed"
        assert summary["phases"][0]["error"] == "all files failed"
        assert "scan_time" not in summary["values"]

    def test_unknown_phase_ignored(self):
        metrics = RunMetrics(operation="count")
        metrics.complete_phase("never_started")
        assert metrics.phases == []

    def test_duration(self):
        metrics = RunMetrics(operation="count")
        metrics.start_phase("scan")
        time.sleep(0.01)
        metrics.complete_phase("scan")

        p = metrics.phases[0]
        assert p.duration is not None
        assert p.duration >= 0.01

    def test_elapsed(self):
        metrics = RunMetrics(operation="report")
        assert metrics.elapsed is None
        metrics.begin_run()
        metrics.end_run()
        assert metrics.elapsed is not None
        assert metrics.values["elapsed_seconds"] == metrics.elapsed
        assert metrics.values["system_cpu_count"] >= 1

    def test_record_and_increment(self):
        metrics = RunMetrics(operation="count")
        metrics.record("thread_count", 4)
        metrics.increment("retries")
        metrics.increment("retries", 2)
        assert metrics.values == {"thread_count": 4.0, "retries": 3.0}

    def test_instances_are_independent(self):
        a = RunMetrics(operation="count")
        b = RunMetrics(operation="count")
        a.record("x", 1)
        assert b.values == {}


def test_append_metrics_log(tmp_path):
    path = tmp_path / "metrics.log"
    for threads in (1, 2):
        metrics = RunMetrics(operation="count")
        metrics.begin_run()
        metrics.record("thread_count", threads)
        metrics.end_run()
        append_metrics_log(metrics, path)

    text = path.read_text()
    assert text.count("=== slocscan metrics: count @") == 2
    assert "thread_count: 1.000" in text
    assert "thread_count: 2.000" in text
