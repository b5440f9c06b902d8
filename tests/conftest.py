"""Pytest fixtures for snapkeep tests."""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Generator, Iterable, List

import pytest

from snapkeep.models import LocalTarget, ProjectSpec, RemoteTarget
from snapkeep.orchestration import BackupOrchestrator
from snapkeep.reporting import RecordingReporter


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests spanning several components")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
    """Create a small project tree.

    Creates:
        project/
        ├── a.txt              (5 bytes)
        ├── b.txt              (7 bytes)
        ├── node_modules/
        │   └── x.json
        ├── logs/
        │   └── app.log
        └── src/
            ├── main.py
            └── util/
                └── helpers.py

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path to the project root.
    """
    root = temp_dir / "project"
    root.mkdir()
    (root / "a.txt").write_text("alpha")
    (root / "b.txt").write_text("bravo!!")

    (root / "node_modules").mkdir()
    (root / "node_modules" / "x.json").write_text('{"x": 1}')

    (root / "logs").mkdir()
    (root / "logs" / "app.log").write_text("started\n")

    (root / "src" / "util").mkdir(parents=True)
    (root / "src" / "main.py").write_text("print('hi')\n")
    (root / "src" / "util" / "helpers.py").write_text("def helper():\n    pass\n")

    return root


@pytest.fixture
def backup_root(temp_dir: Path) -> Path:
    """Directory used as the base path of a local target."""
    root = temp_dir / "backups"
    root.mkdir()
    return root


@pytest.fixture
def local_target(backup_root: Path) -> LocalTarget:
    """A LocalTarget rooted at backup_root."""
    return LocalTarget(name="local", base_path=backup_root)


@pytest.fixture
def remote_target() -> RemoteTarget:
    """A RemoteTarget; the engine supports none of its operations."""
    return RemoteTarget(
        name="nas",
        base_path="/srv/backups",
        connection_info={"host": "nas.local", "user": "backup"},
    )


@pytest.fixture
def make_project(project_dir: Path) -> Callable[..., ProjectSpec]:
    """Return a factory building a ProjectSpec for project_dir."""

    def _make(name: str = "demo", exclude: Iterable[str] = ()) -> ProjectSpec:
        return ProjectSpec(name=name, root_path=project_dir, exclude_patterns=tuple(exclude))

    return _make


@pytest.fixture
def recording_reporter() -> RecordingReporter:
    """Reporter capturing (severity, message) pairs."""
    return RecordingReporter()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock always returning 2025-01-15 10:30:00.750 UTC."""
    moment = datetime(2025, 1, 15, 10, 30, 0, 750000, tzinfo=timezone.utc)
    return lambda: moment


@pytest.fixture
def orchestrator(recording_reporter: RecordingReporter, fixed_clock) -> BackupOrchestrator:
    """BackupOrchestrator over the real filesystem with a fixed clock."""
    return BackupOrchestrator(reporter=recording_reporter, clock=fixed_clock)


@pytest.fixture
def create_backup_dirs() -> Callable[[LocalTarget, str, List[str]], List[Path]]:
    """Return a helper that creates backup directories with a marker file each."""

    def _create(target: LocalTarget, project_name: str, backup_ids: List[str]) -> List[Path]:
        paths = []
        for backup_id in backup_ids:
            path = target.base_path / project_name / backup_id
            path.mkdir(parents=True)
            (path / "marker.txt").write_text(backup_id)
            paths.append(path)
        return paths

    return _create


@pytest.fixture
def snapshot() -> Callable[[Path], Dict[str, object]]:
    """Return a helper capturing the complete state of a directory tree."""

    def _snapshot(path: Path) -> Dict[str, object]:
        state: Dict[str, object] = {"files": {}, "dirs": set()}
        if not path.exists():
            return state

        for root, dirs, files in os.walk(path):
            root_path = Path(root)
            rel_root = root_path.relative_to(path)
            for d in dirs:
                state["dirs"].add((rel_root / d).as_posix())
            for f in files:
                file_path = root_path / f
                state["files"][(rel_root / f).as_posix()] = file_path.read_bytes()
        return state

    return _snapshot


@pytest.fixture
def write_config(temp_dir: Path) -> Callable[..., Path]:
    """Return a helper writing a JSON config file into temp_dir."""
    def _write(data: object, name: str = "snapkeep.config.json") -> Path:
        path = temp_dir / name
        if isinstance(data, str):
            path.write_text(data)
        else:
            path.write_text(json.dumps(data, indent=2))
        return path

    return _write
