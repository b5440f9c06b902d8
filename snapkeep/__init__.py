"""snapkeep - timestamped project backups.

A Python application that copies project directory trees into timestamped
backup directories, with pattern-based exclusion, retention pruning and
guarded restore.
"""

__version__ = "1.0.0"

from .exceptions import (
    BackupIOError,
    BackupNotFoundError,
    ConfigurationError,
    DestinationExistsError,
    SnapkeepError,
    UnsupportedTargetError,
)
from .models import (
    BackupRecord,
    BackupResult,
    BackupSummary,
    BackupTarget,
    CopyStats,
    LocalTarget,
    ProjectSpec,
    RemoteTarget,
    TargetKind,
)

__all__ = [
    "__version__",
    "BackupIOError",
    "BackupNotFoundError",
    "ConfigurationError",
    "DestinationExistsError",
    "SnapkeepError",
    "UnsupportedTargetError",
    "BackupRecord",
    "BackupResult",
    "BackupSummary",
    "BackupTarget",
    "CopyStats",
    "LocalTarget",
    "ProjectSpec",
    "RemoteTarget",
    "TargetKind",
]


def main() -> None:
    """Entry point for the snapkeep CLI application.

    Imports and runs the Typer app from the snapkeep.cli module.
    """
    from snapkeep.cli import app
    app()
