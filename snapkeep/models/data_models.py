"""
Core data models for snapkeep.

This module contains the following dataclasses:
- ProjectSpec: A project directory to back up, with its exclusion patterns
- LocalTarget / RemoteTarget: The two variants of BackupTarget
- BackupRecord: One backup generation discovered on a target
- CopyStats: Statistics produced by a tree copy
- BackupResult: Outcome of a single create_backup call
- BackupSummary: Aggregated outcome of a multi-project backup run
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

from .target_kind import TargetKind

# YYYY-MM-DDTHH-mm-ssZ, UTC, second precision
BACKUP_ID_FORMAT = "%Y-%m-%dT%H-%M-%SZ"
_BACKUP_ID_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}Z$")


def is_valid_backup_id(value: str) -> bool:
    """Return True if `value` has the backup id format `YYYY-MM-DDTHH-mm-ssZ`."""
    return bool(_BACKUP_ID_PATTERN.match(value))


@dataclass(frozen=True)
class ProjectSpec:
    """A project directory tree to back up."""
    name: str                                  # Unique, non-empty
    root_path: Path                            # Absolute source directory
    exclude_patterns: Tuple[str, ...] = ()     # Glob/substring exclusions


@dataclass(frozen=True)
class LocalTarget:
    """A backup destination on a mounted filesystem."""
    name: str
    base_path: Path

    @property
    def kind(self) -> TargetKind:
        return TargetKind.LOCAL


@dataclass(frozen=True)
class RemoteTarget:
    """A network backup destination. Recognized but not implemented."""
    name: str
    base_path: str
    connection_info: Optional[Mapping[str, Any]] = None

    @property
    def kind(self) -> TargetKind:
        return TargetKind.REMOTE


BackupTarget = Union[LocalTarget, RemoteTarget]


@dataclass(frozen=True)
class BackupRecord:
    """One backup generation. Exists exactly as long as its directory does."""
    backup_id: str                    # Directory name, sortable timestamp
    storage_path: Path                # <base>/<project>/<backup_id>
    project_name: str


@dataclass
class CopyStats:
    """Statistics for one tree copy (real or simulated)."""
    files_copied: int = 0
    directories_created: int = 0
    bytes_copied: int = 0
    skipped_paths: List[str] = field(default_factory=list)   # Excluded by pattern
    ignored_paths: List[str] = field(default_factory=list)   # Symlinks, special files


@dataclass
class BackupResult:
    """Result of creating one backup."""
    storage_path: Path
    stats: CopyStats
    simulated: bool = False


@dataclass
class BackupSummary:
    """Summary of a multi-project backup run returned by BackupOrchestrator."""
    projects_backed_up: int = 0       # Projects whose backup completed
    files_copied: int = 0             # Total files copied across projects
    bytes_copied: int = 0             # Total bytes copied across projects
    backups_removed: int = 0          # Backups pruned (or that would be)
    errors: List[str] = field(default_factory=list)  # One entry per failed project
    duration: float = 0.0             # Total run duration in seconds
    dry_run: bool = False
