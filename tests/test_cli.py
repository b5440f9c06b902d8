"""End-to-end tests for the snapkeep CLI.

This module drives the CLI through Typer's CliRunner against a real
configuration file, project tree and backup directory.
"""

import json
from pathlib import Path
from typing import List

import pytest
from typer.testing import CliRunner

from snapkeep import __version__
from snapkeep.cli import app
from snapkeep.models import LocalTarget


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a CliRunner instance for testing."""
    return CliRunner()


@pytest.fixture
def second_project(temp_dir: Path) -> Path:
    root = temp_dir / "api"
    root.mkdir()
    (root / "server.py").write_text("app = None\n")
    return root


@pytest.fixture
def config_file(temp_dir: Path, project_dir: Path, second_project: Path, backup_root: Path) -> Path:
    """Write a config with two projects, a local and a remote target.

    Returns:
        Path to the config file.
    """
    data = {
        "projects": [
            {"name": "web", "path": str(project_dir), "exclude": ["node_modules", "**/*.log"]},
            {"name": "api", "path": str(second_project)},
        ],
        "backupTargets": [
            {"name": "local", "type": "local", "path": str(backup_root)},
            {
                "name": "nas",
                "type": "remote",
                "path": "/srv/backups",
                "ssh": {"host": "nas.local", "user": "backup"},
            },
        ],
        "retention": {"maxBackupsPerProject": 2},
    }
    path = temp_dir / "snapkeep.config.json"
    path.write_text(json.dumps(data))
    return path


def backup_ids(backup_root: Path, project: str) -> List[str]:
    project_dir = backup_root / project
    if not project_dir.exists():
        return []
    return sorted(child.name for child in project_dir.iterdir())


@pytest.mark.integration
class TestVersionAndHelp:
    """Tests for --version and --help."""

    def test_version(self, cli_runner: CliRunner):
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"snapkeep v{__version__}" in result.output

    def test_short_version(self, cli_runner: CliRunner):
        result = cli_runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, cli_runner: CliRunner):
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("backup", "restore", "list", "check"):
            assert command in result.output


@pytest.mark.integration
class TestBackupCommand:
    """Tests for the backup command."""

    def test_requires_project_or_all(self, cli_runner: CliRunner, config_file: Path):
        result = cli_runner.invoke(app, ["backup", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "--all must be specified" in result.output

    def test_backs_up_one_project(self, cli_runner, config_file, backup_root):
        result = cli_runner.invoke(app, ["backup", "-p", "web", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Backup completed successfully" in result.output
        ids = backup_ids(backup_root, "web")
        assert len(ids) == 1
        backup = backup_root / "web" / ids[0]
        assert (backup / "src" / "main.py").exists()
        assert not (backup / "node_modules").exists()
        assert not (backup / "logs" / "app.log").exists()
        assert backup_ids(backup_root, "api") == []

    def test_backs_up_all_projects(self, cli_runner, config_file, backup_root):
        result = cli_runner.invoke(app, ["backup", "--all", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert len(backup_ids(backup_root, "web")) == 1
        assert len(backup_ids(backup_root, "api")) == 1

    def test_prunes_to_retention_limit(self, cli_runner, config_file, backup_root, create_backup_dirs):
        create_backup_dirs(
            LocalTarget("local", backup_root),
            "web",
            ["2020-01-01T00-00-00Z", "2020-01-02T00-00-00Z", "2020-01-03T00-00-00Z"],
        )

        result = cli_runner.invoke(app, ["backup", "-p", "web", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        ids = backup_ids(backup_root, "web")
        assert len(ids) == 2
        assert "2020-01-03T00-00-00Z" in ids
        assert "2020-01-01T00-00-00Z" not in ids

    def test_dry_run_writes_nothing(self, cli_runner, config_file, backup_root):
        result = cli_runner.invoke(app, ["backup", "-a", "-n", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert list(backup_root.iterdir()) == []

    def test_unknown_project(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["backup", "-p", "ghost", "--config", str(config_file)])
        assert result.exit_code == 1
        assert '"ghost" not found' in result.output

    def test_remote_target_rejected(self, cli_runner, config_file, backup_root):
        result = cli_runner.invoke(
            app, ["backup", "-p", "web", "-t", "nas", "--config", str(config_file)]
        )
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert list(backup_root.iterdir()) == []

    def test_writes_log_file(self, cli_runner, config_file, temp_dir):
        log_path = temp_dir / "run.log"

        result = cli_runner.invoke(
            app,
            ["backup", "-p", "web", "--config", str(config_file), "--log-file", str(log_path)],
        )

        assert result.exit_code == 0, result.output
        content = log_path.read_text(encoding="utf-8")
        assert "Mode: LIVE BACKUP" in content
        assert "Project 1: web" in content
        assert "SUMMARY" in content

    def test_bad_log_location(self, cli_runner, config_file, temp_dir):
        result = cli_runner.invoke(
            app,
            ["backup", "-a", "--config", str(config_file), "-l", str(temp_dir / "no" / "run.log")],
        )
        assert result.exit_code == 1
        assert "Failed to create log file" in result.output

    def test_missing_config(self, cli_runner, temp_dir):
        result = cli_runner.invoke(
            app, ["backup", "-a", "--config", str(temp_dir / "missing.json")]
        )
        assert result.exit_code == 1
        assert "Config file not found" in result.output


@pytest.mark.integration
class TestListCommand:
    """Tests for the list command."""

    def test_lists_newest_first(self, cli_runner, config_file, backup_root, create_backup_dirs):
        create_backup_dirs(
            LocalTarget("local", backup_root),
            "web",
            ["2025-01-01T00-00-00Z", "2025-02-01T00-00-00Z"],
        )

        result = cli_runner.invoke(app, ["list", "-p", "web", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert result.output.index("2025-02-01T00-00-00Z") < result.output.index(
            "2025-01-01T00-00-00Z"
        )
        assert "Total: 2 backup(s)" in result.output

    def test_all_projects_without_backups(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["list", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert result.output.count("No backups found") == 2

    def test_remote_target_warns(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app, ["list", "-p", "web", "-t", "nas", "--config", str(config_file)]
        )

        assert result.exit_code == 0, result.output
        assert "not yet implemented" in result.output
        assert "No backups found" in result.output


@pytest.mark.integration
class TestRestoreCommand:
    """Tests for the restore command."""

    BACKUP_ID = "2025-01-15T10-30-00Z"

    @pytest.fixture
    def existing_backup(self, backup_root, create_backup_dirs) -> Path:
        return create_backup_dirs(LocalTarget("local", backup_root), "web", [self.BACKUP_ID])[0]

    def test_restores_into_new_directory(self, cli_runner, config_file, existing_backup, temp_dir):
        dest = temp_dir / "restored"

        result = cli_runner.invoke(
            app,
            ["restore", "-p", "web", "-b", self.BACKUP_ID, "-d", str(dest), "--config", str(config_file)],
        )

        assert result.exit_code == 0, result.output
        assert (dest / "marker.txt").read_text() == self.BACKUP_ID

    def test_refuses_existing_destination(
        self, cli_runner, config_file, existing_backup, temp_dir, snapshot
    ):
        dest = temp_dir / "occupied"
        dest.mkdir()
        (dest / "keep.txt").write_text("mine")
        before = snapshot(dest)

        result = cli_runner.invoke(
            app,
            ["restore", "-p", "web", "-b", self.BACKUP_ID, "-d", str(dest), "--config", str(config_file)],
        )

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert snapshot(dest) == before

    def test_dry_run_restore(self, cli_runner, config_file, existing_backup, temp_dir):
        dest = temp_dir / "restored"

        result = cli_runner.invoke(
            app,
            ["restore", "-p", "web", "-b", self.BACKUP_ID, "-d", str(dest), "-n", "--config", str(config_file)],
        )

        assert result.exit_code == 0, result.output
        assert "Would restore 1 files" in result.output
        assert not dest.exists()

    def test_unknown_backup(self, cli_runner, config_file, temp_dir):
        result = cli_runner.invoke(
            app,
            [
                "restore", "-p", "web", "-b", "1999-01-01T00-00-00Z",
                "-d", str(temp_dir / "restored"), "--config", str(config_file),
            ],
        )

        assert result.exit_code == 1
        assert "not found" in result.output
        assert not (temp_dir / "restored").exists()


@pytest.mark.integration
class TestCheckCommand:
    """Tests for the check command."""

    def test_valid_config(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["check", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Configuration file is valid" in result.output
        assert "Max backups per project: 2" in result.output
        assert "All checks passed" in result.output

    def test_invalid_config(self, cli_runner, temp_dir):
        path = temp_dir / "bad.json"
        path.write_text(json.dumps({"projects": [], "backupTargets": []}))

        result = cli_runner.invoke(app, ["check", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid config file" in result.output

    def test_target_inside_project_rejected(self, cli_runner, temp_dir, project_dir):
        path = temp_dir / "nested.json"
        path.write_text(json.dumps({
            "projects": [{"name": "web", "path": str(project_dir)}],
            "backupTargets": [{"name": "local", "type": "local", "path": str(project_dir / ".backups")}],
        }))

        result = cli_runner.invoke(app, ["check", "--config", str(path)])

        assert result.exit_code == 1
        assert "inside" in result.output
        assert not (project_dir / ".backups").exists()
