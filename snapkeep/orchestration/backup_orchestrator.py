"""BackupOrchestrator for coordinating backup, retention and restore.

This module provides the BackupOrchestrator class, the single entry point the
CLI and tests use to drive the backup engine. It coordinates TreeCopier,
BackupCatalog and RetentionPolicy and exposes six operations:

- generate_backup_id
- get_backup_path
- list_backups
- create_backup
- apply_retention
- restore_backup

plus backup_projects, which runs create-then-prune for several projects.

Example:
    from snapkeep.orchestration import BackupOrchestrator

    orchestrator = BackupOrchestrator()
    result = orchestrator.create_backup(project, target)
    orchestrator.apply_retention(target, project.name, max_count=10)
"""

import errno
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from snapkeep.catalog import (
    BackupCatalog,
    BackupRepository,
    RetentionPolicy,
    require_local,
)
from snapkeep.exceptions import BackupIOError, DestinationExistsError, UnsupportedTargetError
from snapkeep.models import (
    BACKUP_ID_FORMAT,
    BackupRecord,
    BackupResult,
    BackupSummary,
    BackupTarget,
    CopyStats,
    ProjectSpec,
)
from snapkeep.operations import TreeCopier, format_bytes
from snapkeep.orchestration.backup_logger import BackupLogger
from snapkeep.reporting import NullReporter, Reporter

# Skipped paths echoed at debug level after a backup
_SKIPPED_PREVIEW = 10


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BackupOrchestrator:
    """Coordinates the backup engine components.

    Every operation runs synchronously to completion or to the first I/O
    failure. There is no internal locking: callers must not run two backups
    of the same project against the same target at once, since both would
    race on the same directories.

    Backup ids have one-second granularity. A second backup of a project
    within the same second targets the same directory and merges into it;
    this is reported as a warning, not prevented.

    Attributes:
        reporter: Sink for progress notices.
        catalog: BackupCatalog over the configured repository.
        copier: TreeCopier used for backup and restore.
        retention: RetentionPolicy sharing the catalog.
    """

    def __init__(
        self,
        reporter: Optional[Reporter] = None,
        repository: Optional[BackupRepository] = None,
        copier: Optional[TreeCopier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize the BackupOrchestrator.

        Args:
            reporter: Sink for progress notices. Defaults to a silent reporter.
            repository: Backup repository. Defaults to the filesystem.
            copier: Tree copier. Defaults to a TreeCopier sharing `reporter`.
            clock: Callable returning the current time, used for backup ids.
                Defaults to the UTC wall clock.
        """
        self.reporter = reporter if reporter is not None else NullReporter()
        self.catalog = BackupCatalog(repository)
        self.copier = copier if copier is not None else TreeCopier(self.reporter)
        self.retention = RetentionPolicy(self.catalog, self.reporter)
        self._clock = clock if clock is not None else _utc_now

    def generate_backup_id(self, now: Optional[datetime] = None) -> str:
        """Return the backup id for `now` (default: the clock's current time).

        The id is ``YYYY-MM-DDTHH-mm-ssZ`` in UTC; sub-second precision is
        discarded. Naive datetimes are taken to be UTC already.
        """
        moment = now if now is not None else self._clock()
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.strftime(BACKUP_ID_FORMAT)

    def get_backup_path(self, target: BackupTarget, project_name: str, backup_id: str) -> Path:
        """Derive where a backup is (or would be) stored. No I/O."""
        return self.catalog.path(target, project_name, backup_id)

    def list_backups(self, target: BackupTarget, project_name: str) -> List[BackupRecord]:
        """List a project's backups, newest first.

        Remote targets yield an empty list and a warning so that listing
        several projects keeps going.
        """
        try:
            return self.catalog.list(target, project_name)
        except UnsupportedTargetError:
            self.reporter.warn("Listing remote backups is not yet implemented")
            return []

    def find_backup(self, target: BackupTarget, project_name: str, backup_id: str) -> BackupRecord:
        """Look up one backup by id.

        Raises:
            BackupNotFoundError: If the backup does not exist.
            UnsupportedTargetError: For remote targets.
        """
        return self.catalog.find(target, project_name, backup_id)

    def create_backup(
        self,
        project: ProjectSpec,
        target: BackupTarget,
        backup_id: Optional[str] = None,
        simulate: bool = False,
    ) -> BackupResult:
        """Copy a project into a new timestamped backup directory.

        Retention is not applied here; call apply_retention separately.

        Args:
            project: Project to back up.
            target: Destination; must be a LocalTarget.
            backup_id: Id to use. Generated from the clock when omitted.
            simulate: If True, compute statistics without writing anything.

        Returns:
            BackupResult with the storage path and copy statistics.

        Raises:
            UnsupportedTargetError: For remote targets, before any work.
            BackupIOError: On any filesystem failure during the copy.
        """
        local_target = require_local(target)
        if backup_id is None:
            backup_id = self.generate_backup_id()
        storage_path = self.catalog.path(local_target, project.name, backup_id)

        self.reporter.info(
            f"Backing up {project.name} from {project.root_path} to {storage_path}"
        )

        if not simulate and self.catalog.repository.exists(storage_path):
            self.reporter.warn(
                f"Backup {backup_id} already exists; merging into {storage_path}"
            )

        stats = self._copy(
            f"Backing up {project.name}",
            project.root_path,
            storage_path,
            project.exclude_patterns,
            simulate,
        )

        self._report_copy(stats, simulate)
        return BackupResult(storage_path=storage_path, stats=stats, simulated=simulate)

    def apply_retention(
        self,
        target: BackupTarget,
        project_name: str,
        max_count: int,
        simulate: bool = False,
    ) -> List[BackupRecord]:
        """Prune a project's backups down to `max_count`.

        Returns:
            The removed (or, when simulating, removable) records. Remote
            targets yield an empty list and a warning.
        """
        try:
            return self.retention.apply(target, project_name, max_count, simulate)
        except UnsupportedTargetError:
            self.reporter.warn("Retention for remote backups is not yet implemented")
            return []

    def restore_backup(
        self, storage_path: Path, destination: Path, simulate: bool = False
    ) -> CopyStats:
        """Restore a backup into a new directory.

        The destination guard runs first, in simulate mode too, and nothing
        is written before it passes. The whole backup is copied with no
        exclusions. A failure mid-copy is raised and may leave a partially
        populated destination; it is not rolled back.

        Args:
            storage_path: Backup directory to restore from.
            destination: Directory to create and fill.
            simulate: If True, report what would be restored without writing.

        Returns:
            CopyStats of the (possibly simulated) restore.

        Raises:
            DestinationExistsError: If `destination` is an existing directory.
            BackupIOError: If reading the backup or writing the destination fails,
                or if `destination` exists as something other than a directory.
        """
        destination = Path(destination)
        if destination.is_dir():
            raise DestinationExistsError(destination)
        if destination.exists():
            raise BackupIOError(
                f"Restore destination exists and is not a directory: {destination}",
                path=destination,
                operation="mkdir",
            )

        self.reporter.info(f"Restoring backup from {storage_path} to {destination}")

        stats = self._copy("Restoring", Path(storage_path), destination, (), simulate)

        if simulate:
            self.reporter.info(
                f"[DRY RUN] Would restore {stats.files_copied} files to {destination}"
            )
        else:
            self.reporter.success(f"Restored backup to {destination}")
        return stats

    def backup_projects(
        self,
        projects: Sequence[ProjectSpec],
        target: BackupTarget,
        max_count: int,
        simulate: bool = False,
        backup_logger: Optional[BackupLogger] = None,
    ) -> BackupSummary:
        """Back up several projects, pruning each one after its backup.

        A filesystem failure on one project is recorded and the next project
        is attempted, except for a full disk, which stops the run.
        A failure while pruning is recorded as a retention error; the backup
        that preceded it still counts.
        Configuration errors (including a remote target) propagate.

        Args:
            projects: Projects to back up, in order.
            target: Destination for all of them.
            max_count: Retention limit per project (>= 1).
            simulate: Dry-run mode for both backup and retention.
            backup_logger: Optional open BackupLogger receiving the results.

        Returns:
            BackupSummary aggregating the run.
        """
        start_time = time.time()
        summary = BackupSummary(dry_run=simulate)

        for project in projects:
            self.reporter.info(f"Processing project: {project.name}")
            try:
                result = self.create_backup(project, target, simulate=simulate)
            except BackupIOError as e:
                error_msg = f"Backup of {project.name} failed: {e}"
                summary.errors.append(error_msg)
                self.reporter.warn(error_msg)
                if backup_logger is not None:
                    backup_logger.log_project_failure(project, str(e))
                if _is_disk_full(e):
                    self.reporter.warn("Disk full - skipping remaining projects")
                    break
                continue

            summary.projects_backed_up += 1
            summary.files_copied += result.stats.files_copied
            summary.bytes_copied += result.stats.bytes_copied

            retention_error: Optional[str] = None
            try:
                removed = self.apply_retention(target, project.name, max_count, simulate)
            except BackupIOError as e:
                removed = []
                retention_error = str(e)
                error_msg = f"Retention for {project.name} failed: {e}"
                summary.errors.append(error_msg)
                self.reporter.warn(error_msg)
            summary.backups_removed += len(removed)

            if backup_logger is not None:
                backup_logger.log_project(project, result, removed, retention_error)

        summary.duration = time.time() - start_time
        if backup_logger is not None:
            backup_logger.log_summary(summary)
        return summary

    def _copy(
        self,
        description: str,
        source: Path,
        destination: Path,
        exclude_patterns: Sequence[str],
        simulate: bool,
    ) -> CopyStats:
        """Run the copier, driving the reporter's progress display on real copies."""
        if simulate:
            return self.copier.copy(source, destination, exclude_patterns, simulate=True)

        total = self.copier.count_files(source, exclude_patterns, destination)

        def on_file(completed: int) -> None:
            self.reporter.progress(description, completed, total)

        try:
            return self.copier.copy(
                source, destination, exclude_patterns, progress_callback=on_file
            )
        finally:
            self.reporter.progress_done()

    def _report_copy(self, stats: CopyStats, simulate: bool) -> None:
        """Emit the outcome of a backup copy."""
        if simulate:
            self.reporter.info(
                f"[DRY RUN] Would copy {stats.files_copied} files "
                f"({format_bytes(stats.bytes_copied)})"
            )
            if stats.skipped_paths:
                self.reporter.info(f"[DRY RUN] Would skip {len(stats.skipped_paths)} paths")
        else:
            self.reporter.success(
                f"Backed up {stats.files_copied} files ({format_bytes(stats.bytes_copied)})"
            )
            if stats.skipped_paths:
                self.reporter.info(f"Skipped {len(stats.skipped_paths)} paths (excluded)")

        for skipped in stats.skipped_paths[:_SKIPPED_PREVIEW]:
            self.reporter.debug(f"  Skipped: {skipped}")
        if len(stats.skipped_paths) > _SKIPPED_PREVIEW:
            self.reporter.debug(
                f"  ... and {len(stats.skipped_paths) - _SKIPPED_PREVIEW} more"
            )


def _is_disk_full(error: BackupIOError) -> bool:
    cause = error.__cause__
    return isinstance(cause, OSError) and cause.errno == errno.ENOSPC
