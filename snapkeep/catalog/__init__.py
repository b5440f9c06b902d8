"""Backup catalog package for snapkeep.

This package discovers backups on a target and prunes old ones:

- BackupRepository: Protocol for enumerating and removing backup directories,
  with FilesystemBackupRepository and InMemoryBackupRepository implementations.
- BackupCatalog: Lists a project's backups newest first and derives paths.
- RetentionPolicy: Removes backups beyond a maximum count.

Example:
    >>> from snapkeep.catalog import BackupCatalog, RetentionPolicy
    >>> catalog = BackupCatalog()
    >>> removed = RetentionPolicy(catalog).apply(target, "web", max_count=5)
"""

from .backup_catalog import BackupCatalog, require_local
from .repository import (
    BackupRepository,
    FilesystemBackupRepository,
    InMemoryBackupRepository,
)
from .retention import RetentionPolicy

__all__ = [
    "BackupCatalog",
    "BackupRepository",
    "FilesystemBackupRepository",
    "InMemoryBackupRepository",
    "RetentionPolicy",
    "require_local",
]
