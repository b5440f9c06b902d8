"""Backup discovery and path derivation.

Layout on a local target::

    <base_path>/<project_name>/<backup_id>/<mirrored project tree>

Backup ids are zero-padded UTC timestamps, so sorting directory names in
descending lexicographic order lists backups newest first.
"""

from pathlib import Path
from typing import List, Optional

from snapkeep.exceptions import BackupNotFoundError, ConfigurationError, UnsupportedTargetError
from snapkeep.models import BackupRecord, BackupTarget, LocalTarget, RemoteTarget

from .repository import BackupRepository, FilesystemBackupRepository


def require_local(target: BackupTarget) -> LocalTarget:
    """Return `target` if it is local; raise for every other kind.

    Raises:
        UnsupportedTargetError: If the target is a RemoteTarget.
        ConfigurationError: If the target is of an unknown kind.
    """
    if isinstance(target, LocalTarget):
        return target
    if isinstance(target, RemoteTarget):
        raise UnsupportedTargetError(
            f'Remote target "{target.name}" is not supported yet. Use a local target.'
        )
    raise ConfigurationError(f"Unknown backup target kind: {type(target).__name__}")


class BackupCatalog:
    """Lists and locates the backups of a project on a target.

    Attributes:
        repository: Storage used to enumerate backup directories.

    Example:
        >>> catalog = BackupCatalog()
        >>> for record in catalog.list(target, "web"):
        ...     print(record.backup_id, record.storage_path)
    """

    def __init__(self, repository: Optional[BackupRepository] = None) -> None:
        self.repository = repository if repository is not None else FilesystemBackupRepository()

    def project_dir(self, target: BackupTarget, project_name: str) -> Path:
        """Directory holding all backups of `project_name` on `target`."""
        return require_local(target).base_path / project_name

    def path(self, target: BackupTarget, project_name: str, backup_id: str) -> Path:
        """Derive the storage path of a backup. Performs no I/O."""
        return self.project_dir(target, project_name) / backup_id

    def list(self, target: BackupTarget, project_name: str) -> List[BackupRecord]:
        """List the backups of a project, newest first.

        Returns:
            Records for every subdirectory of ``<base_path>/<project_name>``;
            an empty list when that directory does not exist yet.

        Raises:
            UnsupportedTargetError: For remote targets.
            BackupIOError: If the project directory exists but cannot be read.
        """
        project_dir = self.project_dir(target, project_name)
        backup_ids = sorted(self.repository.list_ids(project_dir), reverse=True)
        return [
            BackupRecord(
                backup_id=backup_id,
                storage_path=project_dir / backup_id,
                project_name=project_name,
            )
            for backup_id in backup_ids
        ]

    def find(self, target: BackupTarget, project_name: str, backup_id: str) -> BackupRecord:
        """Return the record for `backup_id`.

        Raises:
            BackupNotFoundError: If no backup with that id exists.
        """
        for record in self.list(target, project_name):
            if record.backup_id == backup_id:
                return record
        raise BackupNotFoundError(project_name, backup_id)
