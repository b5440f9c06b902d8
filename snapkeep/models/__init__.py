"""
Models package for snapkeep.

This package provides convenient imports for all data models:
- TargetKind: Enum of backup target kinds
- ProjectSpec: Project to back up
- LocalTarget, RemoteTarget, BackupTarget: Backup destinations
- BackupRecord: Backup generation on a target
- CopyStats: Tree copy statistics
- BackupResult: Outcome of one backup
- BackupSummary: Outcome of a multi-project run
"""

from .target_kind import TargetKind
from .data_models import (
    BACKUP_ID_FORMAT,
    BackupRecord,
    BackupResult,
    BackupSummary,
    BackupTarget,
    CopyStats,
    LocalTarget,
    ProjectSpec,
    RemoteTarget,
    is_valid_backup_id,
)

__all__ = [
    "BACKUP_ID_FORMAT",
    "TargetKind",
    "ProjectSpec",
    "LocalTarget",
    "RemoteTarget",
    "BackupTarget",
    "BackupRecord",
    "CopyStats",
    "BackupResult",
    "BackupSummary",
    "is_valid_backup_id",
]
