"""Integration tests for the auditgate CLI."""

import json

import pytest
from typer.testing import CliRunner

from auditgate.cli.main import app

runner = CliRunner()


@pytest.fixture
def export_file(tmp_path, make_record):
    """An export with two valid records and one malformed one."""
    bad = make_record(issue="bad-1", severity="Urgent")
    records = [
        make_record(issue="minor-1", severity="Minor"),
        bad,
        make_record(issue="crit-1", severity="Critical", fix={"before": "b", "after": "a", "effort": "High"}),
    ]
    path = tmp_path / "issues.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


class TestValidateCommand:
    """Test cases for `auditgate validate`."""

    def test_all_valid(self, tmp_path, make_record):
        path = tmp_path / "ok.json"
        path.write_text(json.dumps([make_record()]), encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0
        assert "1 valid, 0 rejected" in result.stdout

    def test_rejection_exit_code(self, export_file):
        result = runner.invoke(app, ["validate", str(export_file)])

        assert result.exit_code == 1
        assert "2 valid, 1 rejected" in result.stdout

    def test_json_output(self, export_file):
        result = runner.invoke(app, ["validate", str(export_file), "--format", "json"])

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["valid"] == 2
        assert report["verdicts"][1]["issue"] == "bad-1"
        assert report["verdicts"][1]["reasons"] == ["severity not in enumerated set"]

    def test_domain_option(self, tmp_path, make_record):
        path = tmp_path / "a11y.json"
        path.write_text(json.dumps([make_record(wcag=["2.4.7"])]), encoding="utf-8")

        assert runner.invoke(app, ["validate", str(path), "-d", "accessibility"]).exit_code == 0
        assert runner.invoke(app, ["validate", str(path), "-d", "security"]).exit_code == 1

    def test_domain_from_settings(self, tmp_path, make_record, monkeypatch):
        path = tmp_path / "a11y.json"
        path.write_text(json.dumps([make_record(wcag=["2.4.7"])]), encoding="utf-8")
        monkeypatch.setenv("AUDITGATE_AUDIT_DOMAIN", "security")

        result = runner.invoke(app, ["validate", str(path), "--format", "json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["domain"] == "security"

    def test_unknown_domain(self, export_file):
        result = runner.invoke(app, ["validate", str(export_file), "-d", "performance"])

        assert result.exit_code == 2

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_bytes(b'[{"issue": "\xff"}]')

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 2

    def test_unknown_format(self, export_file):
        result = runner.invoke(app, ["validate", str(export_file), "--format", "yaml"])

        assert result.exit_code == 2

    def test_unloadable_file(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_text("No findings today.", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 2


class TestReviewCommand:
    """Test cases for `auditgate review`."""

    def test_approve_all_sorted(self, export_file, tmp_path):
        output = tmp_path / "approved.json"

        result = runner.invoke(app, [
            "review", str(export_file),
            "--output", str(output),
            "--approve-all",
            "--sort", "severity",
        ])

        assert result.exit_code == 0
        exported = json.loads(output.read_text(encoding="utf-8"))
        assert [r["issue"] for r in exported] == ["crit-1", "minor-1"]

    def test_interactive_decisions(self, export_file, tmp_path):
        output = tmp_path / "approved.json"

        # minor-1: reject with reason; crit-1: downgrade severity, then approve
        result = runner.invoke(
            app,
            ["review", str(export_file), "--output", str(output)],
            input="r\nnot reachable\ns\nSerious\na\n",
        )

        assert result.exit_code == 0
        exported = json.loads(output.read_text(encoding="utf-8"))
        assert len(exported) == 1
        assert exported[0]["issue"] == "crit-1"
        assert exported[0]["severity"] == "Serious"

    def test_quit_drops_undecided(self, export_file, tmp_path):
        output = tmp_path / "approved.json"

        result = runner.invoke(
            app,
            ["review", str(export_file), "--output", str(output)],
            input="a\nq\n",
        )

        assert result.exit_code == 0
        exported = json.loads(output.read_text(encoding="utf-8"))
        assert [r["issue"] for r in exported] == ["minor-1"]

    def test_unknown_sort(self, export_file, tmp_path):
        result = runner.invoke(app, [
            "review", str(export_file), "-o", str(tmp_path / "x.json"), "--sort", "random",
        ])

        assert result.exit_code == 2


class TestSummaryCommand:
    """Test cases for `auditgate summary`."""

    def test_summary(self, export_file):
        result = runner.invoke(app, ["summary", str(export_file)])

        assert result.exit_code == 0
        assert "2 valid, 1 rejected" in result.stdout
        assert "Critical" in result.stdout
