"""
Retention policy enforcement for backups.

Keeps at most a fixed number of backups per project on a target by removing
the oldest generations.
"""

from typing import List, Optional

from snapkeep.models import BackupRecord, BackupTarget
from snapkeep.reporting import NullReporter, Reporter

from .backup_catalog import BackupCatalog


class RetentionPolicy:
    """
    Removes backups beyond the configured maximum count.

    The catalog list is already newest first, so the excess is exactly the
    tail past `max_count`. Each excess directory is deleted with a single
    recursive remove; a failure propagates as BackupIOError and no partial
    delete is rolled back.
    """

    def __init__(self, catalog: BackupCatalog, reporter: Optional[Reporter] = None):
        """
        Initialize the retention policy.

        Args:
            catalog: Catalog used to list and remove backups.
            reporter: Sink for progress notices.
        """
        self.catalog = catalog
        self.reporter = reporter if reporter is not None else NullReporter()

    def apply(
        self,
        target: BackupTarget,
        project_name: str,
        max_count: int,
        simulate: bool = False,
    ) -> List[BackupRecord]:
        """
        Enforce the policy for one project.

        Args:
            target: Backup target holding the project's backups.
            project_name: Project whose backups are pruned.
            max_count: Number of newest backups to keep. Callers validate it is >= 1.
            simulate: If True, report what would be removed without deleting.

        Returns:
            Records removed (or that would be removed), newest first.
        """
        records = self.catalog.list(target, project_name)
        if len(records) <= max_count:
            return []

        excess = records[max_count:]
        for record in excess:
            if simulate:
                self.reporter.info(f"[DRY RUN] Would remove old backup: {record.backup_id}")
            else:
                self.catalog.repository.remove(record.storage_path)
                self.reporter.info(f"Removed old backup: {record.backup_id}")

        return excess
