"""Tests for the vibes CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from vibes_update._version import __version__
from vibes_update.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, *args: str, plugin_root: Path | None = None, input: str | None = None):
    argv = list(args)
    if plugin_root is not None:
        argv += ["--plugin-root", str(plugin_root)]
    return runner.invoke(cli, argv, input=input)


class TestGroup:
    def test_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "update" in result.output
        assert "backups" in result.output


class TestUpdateCommand:
    def test_dry_run(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        before = app_file.read_bytes()

        result = _invoke(runner, "update", str(app_file), plugin_root=plugin_root)

        assert result.exit_code == 0, result.output
        assert "Update import map" in result.output
        assert app_file.read_bytes() == before

    def test_dry_run_json(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        result = _invoke(runner, "update", str(app_file), "--json", plugin_root=plugin_root)

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["plan"]["templateType"] == "vibes-basic"
        assert data["plan"]["versions"]["react"] == {
            "current": "18.2.0",
            "target": "18.3.1",
            "status": "outdated",
            "needsUpdate": True,
        }
        assert [u["id"] for u in data["plan"]["updates"]] == ["import-map"]
        assert data["plan"]["updates"][0]["number"] == 1

    def test_dry_run_json_includes_analysis_and_summary(
        self, runner: CliRunner, app_file: Path, plugin_root: Path
    ):
        result = _invoke(runner, "update", str(app_file), "--json", plugin_root=plugin_root)

        plan = json.loads(result.stdout)["plan"]
        analysis = plan["analysis"]
        assert analysis["templateType"] == "vibes-basic"
        assert analysis["versions"]["use-vibes"] == "0.18.9"
        assert analysis["patterns"]["hasImportMap"] is True
        assert analysis["patterns"]["usesExternal"] is True
        assert analysis["patterns"]["usesDeps"] is False
        assert analysis["components"] == {}
        assert plan["summary"] == {
            "outdatedLibs": 3,
            "patternIssueCount": 0,
            "availableUpdateCount": 1,
            "hasRecommendedUpdates": True,
            "hasImportantUpdates": False,
        }

    def test_apply_with_force(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        result = _invoke(runner, "update", str(app_file), "--apply", "--force", plugin_root=plugin_root)

        assert result.exit_code == 0, result.output
        assert "Applied" in result.output
        assert "react@18.3.1" in app_file.read_text()
        assert len(list(app_file.parent.glob("app.*.bak.html"))) == 1

    def test_apply_selection_json(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        result = _invoke(runner, "update", str(app_file), "--apply=1", "--json", plugin_root=plugin_root)

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [a["id"] for a in data["applied"]] == ["import-map"]
        assert data["failed"] == []
        assert data["validationWarnings"] == []
        assert Path(data["backupPath"]).exists()

    def test_apply_declined(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        before = app_file.read_bytes()

        result = _invoke(runner, "update", str(app_file), "--apply", plugin_root=plugin_root, input="n\n")

        assert result.exit_code == 0
        assert "Skipped" in result.output
        assert app_file.read_bytes() == before

    def test_rollback(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        original = app_file.read_bytes()
        _invoke(runner, "update", str(app_file), "--apply", "--force", plugin_root=plugin_root)

        result = _invoke(runner, "update", "--rollback", str(app_file))

        assert result.exit_code == 0
        assert "Restored from backup" in result.output
        assert app_file.read_bytes() == original

    def test_rollback_without_backup(self, runner: CliRunner, app_file: Path):
        result = _invoke(runner, "update", "--rollback", str(app_file))
        assert result.exit_code == 1

    def test_missing_path(self, runner: CliRunner, tmp_path: Path, plugin_root: Path):
        result = _invoke(runner, "update", str(tmp_path / "nope.html"), plugin_root=plugin_root)

        assert result.exit_code == 1
        assert "Path not found" in result.output

    def test_target_unavailable(self, runner: CliRunner, app_file: Path, tmp_path: Path):
        result = _invoke(runner, "update", str(app_file), "--json", plugin_root=tmp_path / "no-plugin")

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["success"] is False
        assert "vibes sync" in data["error"]

    def test_batch_json(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        result = _invoke(runner, "update", str(app_file.parent), "--json", plugin_root=plugin_root)

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["mode"] == "batch-analyze"
        assert data["fileCount"] == 1
        assert data["needingUpdates"] == 1

    def test_batch_with_unparseable_file_still_succeeds(
        self, runner: CliRunner, app_file: Path, plugin_root: Path
    ):
        (app_file.parent / "plain.html").write_text("<html><body>not a vibes app</body></html>")

        result = _invoke(runner, "update", str(app_file.parent), "--json", plugin_root=plugin_root)

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["fileCount"] == 2
        assert data["failures"] == 1
        failed = next(r for r in data["results"] if not r["success"])
        assert failed["error"].startswith("plain.html: ")

    def test_batch_apply(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        result = _invoke(runner, "update", str(app_file.parent), "--apply", "--force", plugin_root=plugin_root)

        assert result.exit_code == 0, result.output
        assert "react@18.3.1" in app_file.read_text()


class TestBackupsCommand:
    def test_lists_backups(self, runner: CliRunner, app_file: Path, plugin_root: Path):
        _invoke(runner, "update", str(app_file), "--apply", "--force", plugin_root=plugin_root)

        result = runner.invoke(cli, ["backups", str(app_file), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["backups"]) == 1
        assert data["backups"][0]["legacy"] is False

    def test_no_backups(self, runner: CliRunner, app_file: Path):
        result = runner.invoke(cli, ["backups", str(app_file)])

        assert result.exit_code == 0
        assert "No backups found" in result.output
