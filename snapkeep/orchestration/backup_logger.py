"""BackupLogger for writing a structured log of a backup run.

This module provides the BackupLogger class that writes a plain-text log file
with a header, one section per project and a closing summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from snapkeep.models import BackupRecord, BackupResult, BackupSummary, ProjectSpec
from snapkeep.operations import format_bytes


class BackupLogger:
    """Logger for backup runs with structured output format.

    Usage:
        with BackupLogger(log_path, dry_run=True) as logger:
            logger.log_header()
            for project in projects:
                # ... back up and prune ...
                logger.log_project(project, result, removed)
            logger.log_summary(summary)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(self, log_file_path: Optional[Path] = None, dry_run: bool = False) -> None:
        """Initialize the BackupLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                a timestamped filename in the current directory is used.
            dry_run: Whether this run makes no changes.

        Raises:
            OSError: If the log file location is not writable.
        """
        self._dry_run = dry_run
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None
        self._project_counter = 0

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"backup_log_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Check that the log file's parent directory exists and is writable.

        Raises:
            OSError: If the parent directory doesn't exist or is not writable.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")
        try:
            test_file = parent / f".snapkeep_test_{id(self)}"
            test_file.touch()
            test_file.unlink()
        except PermissionError:
            raise OSError(f"Permission denied: cannot write to {parent}")

    def __enter__(self) -> "BackupLogger":
        """Open the log file for writing.

        Raises:
            OSError: If the file cannot be opened.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the log file, even if an exception occurred."""
        self.close()

    def close(self) -> None:
        """Close the log file if it is open."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        """Get the path to the log file."""
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp and mode (LIVE BACKUP or DRY RUN)."""
        self._write_separator()
        self._write_line("snapkeep - Backup Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        mode = "DRY RUN" if self._dry_run else "LIVE BACKUP"
        self._write_line(f"Mode: {mode}")
        self._write_line("")

    def log_project(
        self,
        project: ProjectSpec,
        result: BackupResult,
        removed: List[BackupRecord],
        retention_error: Optional[str] = None,
    ) -> None:
        """Write the section for one successfully backed-up project.

        Args:
            project: The project that was backed up.
            result: Outcome of the backup copy.
            removed: Backups pruned by retention afterwards.
            retention_error: Set when pruning failed after the backup completed.
        """
        self._start_project(project)
        stats = result.stats
        self._write_line(f"Backup path: {result.storage_path}", indent=2)
        self._write_line(f"Files copied: {stats.files_copied:,}", indent=2)
        self._write_line(f"Directories created: {stats.directories_created:,}", indent=2)
        self._write_line(f"Bytes copied: {format_bytes(stats.bytes_copied)}", indent=2)
        self._write_line(f"Paths excluded: {len(stats.skipped_paths)}", indent=2)
        for skipped in stats.skipped_paths:
            self._write_line(f"- {skipped}", indent=4)
        if stats.ignored_paths:
            self._write_line(f"Links/special files ignored: {len(stats.ignored_paths)}", indent=2)
            for ignored in stats.ignored_paths:
                self._write_line(f"- {ignored}", indent=4)

        if retention_error is not None:
            self._write_line(f"! Retention failed: {retention_error}", indent=2)

        verb = "Would remove" if self._dry_run else "Removed"
        self._write_line(f"{verb} old backups: {len(removed)}", indent=2)
        for record in removed:
            self._write_line(f"- {record.backup_id}", indent=4)
        self._write_line("")

    def log_project_failure(self, project: ProjectSpec, error: str) -> None:
        """Write the section for a project whose backup failed."""
        self._start_project(project)
        self._write_line(f"! Failed: {error}", indent=2)
        self._write_line("")

    def log_summary(self, summary: BackupSummary) -> None:
        """Write the summary section.

        Args:
            summary: Aggregated statistics of the run.
        """
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Projects backed up: {summary.projects_backed_up}")
        self._write_line(f"Files copied: {summary.files_copied:,}")
        self._write_line(f"Bytes copied: {format_bytes(summary.bytes_copied)}")
        self._write_line(f"Old backups removed: {summary.backups_removed}")

        if summary.errors:
            self._write_line(f"Total errors: {len(summary.errors)}")
            self._write_line("Errors:")
            for error in summary.errors:
                self._write_line(f"  - {error}")

        self._write_line(f"Duration: {self._format_duration(summary.duration)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _start_project(self, project: ProjectSpec) -> None:
        """Write the project heading, opening the section on first use."""
        if self._project_counter == 0:
            self._write_separator()
            self._write_line("PROJECTS")
            self._write_separator()
            self._write_line("")

        self._project_counter += 1
        now = self._format_timestamp(datetime.now())
        self._write_line(f"[{now}] Project {self._project_counter}: {project.name}")
        self._write_line(f"Source: {project.root_path}", indent=2)

    def _format_duration(self, seconds: float) -> str:
        """Format a duration as "45s", "5m 23s" or "1h 5m 30s"."""
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        """Format a datetime as 'YYYY-MM-DD HH:MM:SS'."""
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line with optional indentation."""
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
