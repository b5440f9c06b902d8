"""Rich output for snapkeep commands.

This module provides the BackupDisplay class, which renders backup listings,
run summaries and configuration overviews.

Example:
    from snapkeep.ui import BackupDisplay

    display = BackupDisplay()
    display.display_backup_list("web", records, sizes)
    display.display_backup_summary(summary)
"""

from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from snapkeep.config import LoadedConfig
from snapkeep.models import BackupRecord, BackupSummary, LocalTarget, RemoteTarget
from snapkeep.operations import format_bytes


class BackupDisplay:
    """Renders command output on a Rich console.

    Args:
        console: Optional Rich Console for output. Defaults to a new Console().

    Attributes:
        console: The Rich Console instance used for all output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_backup_list(
        self,
        project_name: str,
        records: List[BackupRecord],
        sizes: Optional[Sequence[Optional[int]]] = None,
    ) -> None:
        """Show the backups of one project, newest first.

        Args:
            project_name: Project the backups belong to.
            records: Backups as returned by list_backups.
            sizes: Optional byte size per record; None entries show "unknown".
        """
        if not records:
            self.console.print(f"\n[bold]Backups for project: {escape(project_name)}[/bold]")
            self.console.print("  No backups found")
            return

        table = Table(title=f"Backups for project: {project_name}", title_justify="left")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Backup", style="cyan")
        table.add_column("Size", justify="right")

        for index, record in enumerate(records, start=1):
            size = sizes[index - 1] if sizes is not None else None
            size_text = format_bytes(size) if size is not None else "unknown"
            table.add_row(str(index), record.backup_id, size_text)

        self.console.print()
        self.console.print(table)
        self.console.print(f"  Total: {len(records)} backup(s)")

    def display_backup_summary(self, summary: BackupSummary) -> None:
        """Show the aggregated result of a backup run."""
        title = "Backup Summary (dry run)" if summary.dry_run else "Backup Summary"
        removed_label = "Backups that would be removed" if summary.dry_run else "Old backups removed"
        body = (
            f"Projects backed up: {summary.projects_backed_up}\n"
            f"Files copied: {summary.files_copied:,}\n"
            f"Data copied: {format_bytes(summary.bytes_copied)}\n"
            f"{removed_label}: {summary.backups_removed}\n"
            f"Duration: {summary.duration:.1f}s"
        )
        border = "red" if summary.errors else "green"
        self.console.print(Panel(body, title=title, border_style=border))

        if summary.errors:
            self.console.print(f"[red]Errors ({len(summary.errors)}):[/red]")
            for error in summary.errors:
                self.console.print(f"  - {escape(error)}")

    def display_config(self, config: LoadedConfig) -> None:
        """Show the projects, targets and settings of a validated config."""
        self.console.print(f"[dim]Config file: {escape(str(config.config_path))}[/dim]\n")

        projects = Table(title="Projects", title_justify="left")
        projects.add_column("Name", style="cyan")
        projects.add_column("Path")
        projects.add_column("Excludes", style="dim")
        for project in config.projects:
            projects.add_row(
                project.name,
                str(project.root_path),
                ", ".join(project.exclude_patterns) or "-",
            )
        self.console.print(projects)

        targets = Table(title="Backup Targets", title_justify="left")
        targets.add_column("Name", style="cyan")
        targets.add_column("Type")
        targets.add_column("Path")
        for target in config.targets:
            if isinstance(target, LocalTarget):
                targets.add_row(target.name, target.kind.value, str(target.base_path))
            elif isinstance(target, RemoteTarget):
                targets.add_row(target.name, target.kind.value, target.base_path)
        self.console.print(targets)

        for target in config.targets:
            if isinstance(target, RemoteTarget):
                self.console.print(
                    f"[yellow]⚠[/yellow] Remote target {escape(target.name)}: "
                    "remote backups are not yet implemented"
                )

        self.console.print("\n[bold]Retention Policy:[/bold]")
        self.console.print(f"  Max backups per project: {config.max_backups}")

        if config.compression:
            self.console.print("\n[bold]Compression:[/bold] Enabled (not yet implemented)")
