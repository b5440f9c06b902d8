"""Exception hierarchy for snapkeep.

All errors raised by the backup engine derive from SnapkeepError so the CLI
can report them uniformly. None of them are retried internally.
"""

from pathlib import Path
from typing import Optional, Union


class SnapkeepError(Exception):
    """Base class for all snapkeep errors."""

    pass


class ConfigurationError(SnapkeepError):
    """Raised for invalid configuration or unknown project/target references."""

    pass


class UnsupportedTargetError(ConfigurationError):
    """Raised when an operation is attempted against a remote target."""

    pass


class BackupIOError(SnapkeepError):
    """Raised when a filesystem read, copy or delete fails.

    Attributes:
        path: The path the failing operation was working on.
        operation: Short name of the operation (e.g. "copy", "read", "remove").
    """

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.operation = operation


class DestinationExistsError(SnapkeepError):
    """Raised by the restore guard when the destination directory exists."""

    def __init__(self, destination: Path) -> None:
        super().__init__(
            f"Destination directory already exists: {destination}. "
            "Choose a different destination."
        )
        self.destination = destination


class BackupNotFoundError(SnapkeepError):
    """Raised when a backup id is not present in the catalog."""

    def __init__(self, project_name: str, backup_id: str) -> None:
        super().__init__(
            f'Backup "{backup_id}" not found for project "{project_name}". '
            "Use the 'list' command to see available backups."
        )
        self.project_name = project_name
        self.backup_id = backup_id
