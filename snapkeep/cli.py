"""
snapkeep - CLI Interface.

A command-line interface for taking timestamped backups of project
directories, pruning old backups and restoring them.

Usage Examples:
    # Back up one project to the first configured target
    snapkeep backup --project web

    # Back up every project, previewing only
    snapkeep backup --all --dry-run

    # List backups of all projects
    snapkeep list

    # Restore a backup into a new directory
    snapkeep restore -p web -b 2025-01-15T10-30-00Z -d ./web-restored

    # Validate the configuration file
    snapkeep check --config ./snapkeep.config.json
"""

from contextlib import nullcontext
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from snapkeep.config import ConfigLoader, LoadedConfig
from snapkeep.exceptions import SnapkeepError
from snapkeep.operations import get_directory_size
from snapkeep.orchestration import BackupLogger, BackupOrchestrator
from snapkeep.reporting import Reporter
from snapkeep.ui import BackupDisplay, ConsoleReporter

__version__ = "1.0.0"

# Initialize Typer app
app = typer.Typer(
    name="snapkeep",
    help="A pragmatic backup & restore tool for code projects.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"snapkeep v{__version__}")
        raise typer.Exit()


def print_error(message: str) -> None:
    """Print an error message in the standard format."""
    console.print(f"[red]Error:[/red] {escape(message)}")


def load_config(config_path: Optional[Path], reporter: Reporter) -> LoadedConfig:
    """Load the configuration, searching the default locations if no path is given."""
    return ConfigLoader(reporter).load(config_path)


ConfigOption = typer.Option(
    None,
    "--config",
    help="Path to config file.",
)

VerboseOption = typer.Option(
    False,
    "--verbose",
    "-V",
    help="Enable verbose output.",
)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """A pragmatic backup & restore tool for code projects."""
    pass


@app.command()
def backup(
    project: Optional[str] = typer.Option(
        None,
        "--project",
        "-p",
        help="Project name to back up.",
    ),
    all_projects: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Back up all projects.",
    ),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="Backup target name (default: first target).",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would be backed up without writing anything.",
    ),
    config: Optional[Path] = ConfigOption,
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = VerboseOption,
) -> None:
    """
    Back up a project (or all projects) and prune old backups.

    Each project is copied into a new timestamped directory on the target,
    then backups beyond the configured retention count are removed.
    """
    if not project and not all_projects:
        print_error("Either --project <name> or --all must be specified")
        raise typer.Exit(1)

    reporter = ConsoleReporter(console, verbose=verbose)

    backup_logger: Optional[BackupLogger] = None
    if log_file:
        try:
            backup_logger = BackupLogger(log_file, dry_run=dry_run)
        except OSError as e:
            print_error(f"Failed to create log file: {e}")
            raise typer.Exit(1)

    try:
        loaded = load_config(config, reporter)
        projects = loaded.projects if all_projects else [loaded.get_project(project)]
        backup_target = loaded.get_target(target)

        if dry_run:
            console.print("[yellow][DRY RUN MODE][/yellow] No files will be modified.\n")

        orchestrator = BackupOrchestrator(reporter=reporter)

        with backup_logger if backup_logger is not None else nullcontext():
            if backup_logger is not None:
                backup_logger.log_header()
            summary = orchestrator.backup_projects(
                projects,
                backup_target,
                loaded.max_backups,
                simulate=dry_run,
                backup_logger=backup_logger,
            )

        BackupDisplay(console).display_backup_summary(summary)

        if backup_logger is not None:
            console.print(f"[dim]Log written to: {backup_logger.get_log_path()}[/dim]")

        if summary.errors:
            raise typer.Exit(1)

        reporter.success("Backup completed successfully")

    except KeyboardInterrupt:
        console.print("\n[yellow]Backup interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except SnapkeepError as e:
        print_error(str(e))
        raise typer.Exit(1)

    except OSError as e:
        if "No space left on device" in str(e) or getattr(e, "errno", None) == 28:
            print_error("Disk full - backup aborted.")
        else:
            print_error(str(e))
        raise typer.Exit(1)

    finally:
        if backup_logger is not None:
            backup_logger.close()


@app.command()
def restore(
    project: str = typer.Option(
        ...,
        "--project",
        "-p",
        help="Project name.",
    ),
    backup_id: str = typer.Option(
        ...,
        "--backup",
        "-b",
        help="Backup id (from the list command).",
    ),
    dest: Path = typer.Option(
        ...,
        "--dest",
        "-d",
        help="Destination directory for restored files. Must not exist.",
    ),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="Backup target name (default: first target).",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would be restored without writing anything.",
    ),
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Restore a backup into a new directory.

    The destination must not exist yet; existing directories are never
    overwritten.
    """
    reporter = ConsoleReporter(console, verbose=verbose)

    try:
        loaded = load_config(config, reporter)
        project_spec = loaded.get_project(project)
        backup_target = loaded.get_target(target)

        if dry_run:
            console.print("[yellow][DRY RUN MODE][/yellow] No files will be modified.\n")

        orchestrator = BackupOrchestrator(reporter=reporter)
        record = orchestrator.find_backup(backup_target, project_spec.name, backup_id)
        orchestrator.restore_backup(
            record.storage_path,
            dest.expanduser().resolve(),
            simulate=dry_run,
        )

    except KeyboardInterrupt:
        console.print("\n[yellow]Restore interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except SnapkeepError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.command("list")
def list_backups(
    project: Optional[str] = typer.Option(
        None,
        "--project",
        "-p",
        help="Project name (default: all projects).",
    ),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="Backup target name (default: first target).",
    ),
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """List available backups, newest first, with their sizes."""
    reporter = ConsoleReporter(console, verbose=verbose)

    try:
        loaded = load_config(config, reporter)
        backup_target = loaded.get_target(target)
        projects = [loaded.get_project(project)] if project else loaded.projects

        orchestrator = BackupOrchestrator(reporter=reporter)
        display = BackupDisplay(console)

        for project_spec in projects:
            records = orchestrator.list_backups(backup_target, project_spec.name)
            sizes = [get_directory_size(record.storage_path) for record in records]
            display.display_backup_list(project_spec.name, records, sizes)

    except SnapkeepError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.command()
def check(
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Validate the configuration file and show what it defines."""
    reporter = ConsoleReporter(console, verbose=verbose)
    reporter.info("Validating configuration...")

    try:
        loaded = load_config(config, reporter)
    except SnapkeepError as e:
        print_error(str(e))
        raise typer.Exit(1)

    reporter.success("Configuration file is valid")
    BackupDisplay(console).display_config(loaded)
    reporter.success("All checks passed")


if __name__ == "__main__":
    app()
