"""Tests for CLI commands."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from slocscan.cli import main
from slocscan.report.storage import load_report

SOURCES = {
    "src/main.rs": "// entry\nfn main() {}\n",
    "src/util.c": "#include <stdio.h>\n/* doc */\nint x;\n\n",
    "src/notes.txt": "plain\n",
}


@pytest.fixture
def tree(make_tree, tmp_path):
    make_tree(SOURCES)
    return tmp_path / "src"


@pytest.fixture
def runner():
    return CliRunner()


class TestCount:
    def test_summary(self, runner, tree):
        result = runner.invoke(main, ["count", str(tree), "-r"])
        assert result.exit_code == 0, result.output
        assert "Source Lines of Code (SLOC) Report" in result.output
        assert "Rust" in result.output
        assert "lines/sec" in result.output

    def test_details_lists_files_and_unsupported(self, runner, tree):
        result = runner.invoke(main, ["count", str(tree), "-r", "--details"])
        assert result.exit_code == 0, result.output
        assert "main.rs" in result.output
        assert "Unsupported Files (not counted):" in result.output
        assert "notes.txt" in result.output

    def test_no_paths(self, runner):
        result = runner.invoke(main, ["count"])
        assert result.exit_code == 1
        assert "Error: no paths given" in result.output

    def test_output_file(self, runner, tree, tmp_path):
        out = tmp_path / "out.json"
        result = runner.invoke(main, ["count", str(tree), "-r", "-o", str(out), "--checksum"])
        assert result.exit_code == 0, result.output
        assert f"Report saved to: {out}" in result.output
        report = load_report(out)
        assert report.checksum is not None
        assert report.summary.total_files == 2

    def test_format_without_output_uses_default_name(self, runner, tree, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(main, ["count", str(tree), "-r", "-f", "csv"])
        assert result.exit_code == 0, result.output
        assert "Report saved to: sloc-report.csv" in result.output
        assert (tmp_path / "sloc-report.csv").exists()

    def test_stdin(self, runner, tree):
        result = runner.invoke(main, ["count", "--stdin", "--details"], input=f"{tree / 'main.rs'}\n")
        assert result.exit_code == 0, result.output
        assert "main.rs" in result.output
        assert "util.c" not in result.output

    def test_bad_override(self, runner, tree):
        result = runner.invoke(main, ["count", str(tree), "--language-override", "nonsense"])
        assert result.exit_code == 2
        assert "ext=language" in result.output

    def test_unknown_override_language_is_reported(self, runner, tree):
        result = runner.invoke(
            main, ["count", str(tree), "-r", "--language-override", "c=klingon"]
        )
        assert result.exit_code == 0, result.output
        assert "unknown_override" in result.output

    def test_all_files_failed(self, runner, tmp_path):
        result = runner.invoke(main, ["count", str(tmp_path / "gone.rs")])
        assert result.exit_code == 1
        assert "All 1 input file(s) failed" in result.output

    def test_ignore_preprocessor(self, runner, tree, tmp_path):
        out = tmp_path / "r.json"
        runner.invoke(main, ["count", str(tree), "-r", "--ignore-preprocessor", "-o", str(out)])
        util = next(f for f in load_report(out).files if f.path.endswith("util.c"))
        assert (util.total, util.logical) == (3, 1)

    def test_metrics_file(self, runner, tree, tmp_path):
        metrics_file = tmp_path / "metrics.log"
        result = runner.invoke(
            main,
            ["count", str(tree), "-r", "--enable-metrics", "--metrics-file", str(metrics_file)],
        )
        assert result.exit_code == 0, result.output
        text = metrics_file.read_text()
        assert "=== slocscan metrics: count" in text
        assert "thread_count:" in text

    def test_config_file(self, runner, tree, tmp_path):
        config = tmp_path / "slocscan.toml"
        config.write_text('[languages.text]\nname = "Text"\nextensions = ["txt"]\nline_comments = ["#"]\n')
        result = runner.invoke(main, ["count", str(tree), "-r", "--config", str(config), "--details"])
        assert result.exit_code == 0, result.output
        assert "Text" in result.output
        assert "Unsupported Files (not counted):" not in result.output

    def test_invalid_config(self, runner, tree, tmp_path):
        config = tmp_path / "bad.toml"
        config.write_text("[performance]\nbogus = 1\n")
        result = runner.invoke(main, ["count", str(tree), "--config", str(config)])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestReport:
    def test_json(self, runner, tree, tmp_path):
        out = tmp_path / "report.json"
        result = runner.invoke(main, ["report", str(tree), "-r", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "Report generated successfully" in result.output
        data = json.loads(out.read_text())
        assert data["reportFormatVersion"] == "1.0"
        assert data["summary"]["totalFiles"] == 2

    def test_csv_by_extension(self, runner, tree, tmp_path):
        out = tmp_path / "report.csv"
        result = runner.invoke(main, ["report", str(tree), "-r", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("kind,path,language")

    def test_output_required(self, runner, tree):
        result = runner.invoke(main, ["report", str(tree)])
        assert result.exit_code == 2

    def test_xml(self, runner, tree, tmp_path):
        out = tmp_path / "report.xml"
        result = runner.invoke(main, ["report", str(tree), "-r", "-f", "xml", "-o", str(out), "--checksum"])
        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("<?xml")
        report = load_report(out)
        assert report.checksum is not None
        assert report.summary.total_files == 2

    def test_unwritable_output(self, runner, tree, tmp_path):
        out = tmp_path / "nope" / "r.json"
        result = runner.invoke(main, ["report", str(tree), "-r", "-o", str(out)])
        assert result.exit_code == 1
        assert "Error: Cannot write" in result.output
        assert "Report generated successfully" not in result.output

    def test_unwritable_metrics_file(self, runner, tree, tmp_path):
        result = runner.invoke(
            main,
            [
                "report", str(tree), "-r", "-o", str(tmp_path / "r.json"),
                "--enable-metrics", "--metrics-file", str(tmp_path / "nope" / "m.log"),
            ],
        )
        assert result.exit_code == 1
        assert "Error: Cannot write" in result.output


class TestProcess:
    def test_process_and_export(self, runner, tree, tmp_path):
        saved = tmp_path / "r.json"
        runner.invoke(main, ["report", str(tree), "-r", "-o", str(saved)])
        exported = tmp_path / "p.csv"
        result = runner.invoke(main, ["process", str(saved), "-s", "total", "-e", str(exported)])
        assert result.exit_code == 0, result.output
        assert "Processed report exported to:" in result.output
        assert load_report(exported).summary == load_report(saved).summary

    def test_malformed(self, runner, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"reportFormatVersion": "1.0"}')
        result = runner.invoke(main, ["process", str(bad)])
        assert result.exit_code == 1
        assert "Malformed report" in result.output


class TestCompare:
    def test_same_report(self, runner, tree, tmp_path):
        saved = tmp_path / "r.json"
        runner.invoke(main, ["report", str(tree), "-r", "-o", str(saved)])
        result = runner.invoke(main, ["compare", str(saved), str(saved)])
        assert result.exit_code == 0, result.output
        assert "No differences." in result.output

    def test_changes_and_export(self, runner, tree, tmp_path):
        old = tmp_path / "old.json"
        new = tmp_path / "new.json"
        runner.invoke(main, ["report", str(tree), "-r", "-o", str(old)])
        (tree / "extra.py").write_text("x = 1\n")
        runner.invoke(main, ["report", str(tree), "-r", "-o", str(new)])

        exported = tmp_path / "diff.json"
        result = runner.invoke(main, ["compare", str(old), str(new), "-e", str(exported)])
        assert result.exit_code == 0, result.output
        assert "Python" in result.output
        assert "appeared" in result.output
        data = json.loads(exported.read_text())
        assert data["global_delta"]["total_files"] == 1

    def test_unwritable_export(self, runner, tree, tmp_path):
        saved = tmp_path / "r.json"
        runner.invoke(main, ["report", str(tree), "-r", "-o", str(saved)])
        result = runner.invoke(main, ["compare", str(saved), str(saved), "-e", str(tmp_path / "nope" / "d.xml")])
        assert result.exit_code == 1
        assert "Error: Cannot write" in result.output

    def test_xml_reports(self, runner, tree, tmp_path):
        old = tmp_path / "old.xml"
        runner.invoke(main, ["report", str(tree), "-r", "-o", str(old)])
        exported = tmp_path / "diff.xml"
        result = runner.invoke(main, ["compare", str(old), str(old), "-e", str(exported)])
        assert result.exit_code == 0, result.output
        assert "<comparison>" in exported.read_text()


class TestLanguages:
    def test_builtins(self, runner):
        result = runner.invoke(main, ["languages"])
        assert result.exit_code == 0, result.output
        rust = next(line for line in result.output.splitlines() if line.startswith("Rust "))
        assert ".rs" in rust
        assert "[nested]" in rust

    def test_configured_language_listed(self, runner, tmp_path):
        config = tmp_path / "slocscan.toml"
        config.write_text('[languages.kotlin]\nname = "Kotlin"\nextensions = ["kt"]\nline_comments = ["//"]\n')
        result = runner.invoke(main, ["languages", "--config", str(config)])
        assert result.exit_code == 0, result.output
        assert any(line.startswith("Kotlin") and ".kt" in line for line in result.output.splitlines())

    def test_invalid_config(self, runner, tmp_path):
        result = runner.invoke(main, ["languages", "--config", str(tmp_path / "missing.toml")])
        assert result.exit_code == 1
        assert "Error:" in result.output
