"""Backup record repositories.

A backup is nothing more than a directory named after its id; there is no
separate index. The repository abstraction hides how those directories are
enumerated and removed so catalog and retention logic can be exercised
without touching disk.

Two implementations are provided:
- FilesystemBackupRepository: scans and deletes real directories.
- InMemoryBackupRepository: keeps a set of paths, for tests.
"""

import shutil
from pathlib import Path
from typing import List, Protocol, Set

from snapkeep.exceptions import BackupIOError


class BackupRepository(Protocol):
    """Storage operations the catalog and retention policy depend on."""

    def list_ids(self, project_dir: Path) -> List[str]:
        """Return the names of backup directories directly under `project_dir`.

        A missing `project_dir` means "no backups yet" and yields an empty list.
        """
        ...

    def exists(self, path: Path) -> bool:
        """Return True if a backup directory exists at `path`."""
        ...

    def remove(self, path: Path) -> None:
        """Delete the backup directory at `path` with all of its contents."""
        ...


class FilesystemBackupRepository:
    """Repository backed by the local filesystem."""

    def list_ids(self, project_dir: Path) -> List[str]:
        try:
            return [child.name for child in Path(project_dir).iterdir() if child.is_dir()]
        except FileNotFoundError:
            return []
        except OSError as e:
            raise BackupIOError(
                f"Failed to list backups in {project_dir}: {e}",
                path=project_dir,
                operation="list",
            ) from e

    def exists(self, path: Path) -> bool:
        return Path(path).is_dir()

    def remove(self, path: Path) -> None:
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise BackupIOError(
                f"Failed to remove backup {path}: {e}", path=path, operation="remove"
            ) from e


class InMemoryBackupRepository:
    """Repository holding backup directory paths in memory.

    Example:
        >>> repo = InMemoryBackupRepository()
        >>> repo.add(Path("/b/web/2025-01-01T00-00-00Z"))
        >>> repo.list_ids(Path("/b/web"))
        ['2025-01-01T00-00-00Z']
    """

    def __init__(self) -> None:
        self._paths: Set[Path] = set()
        self.removed: List[Path] = []

    def add(self, path: Path) -> None:
        """Register a backup directory."""
        self._paths.add(Path(path))

    def list_ids(self, project_dir: Path) -> List[str]:
        project_dir = Path(project_dir)
        return [path.name for path in self._paths if path.parent == project_dir]

    def exists(self, path: Path) -> bool:
        return Path(path) in self._paths

    def remove(self, path: Path) -> None:
        path = Path(path)
        if path not in self._paths:
            raise BackupIOError(
                f"Failed to remove backup {path}: not found", path=path, operation="remove"
            )
        self._paths.discard(path)
        self.removed.append(path)
