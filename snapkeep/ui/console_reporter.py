"""Rich console implementation of the Reporter interface."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)


class ConsoleReporter:
    """Prints engine notices to a Rich console.

    Long-running steps are shown as a Rich progress bar on the same console,
    so notices printed meanwhile appear above the bar. The bar is transient
    and leaves nothing behind once the step ends.

    Args:
        console: Optional Rich Console. Pass one writing to a StringIO to
            capture output in tests.
        verbose: If True, debug notices are shown as well.
    """

    def __init__(self, console: Optional[Console] = None, verbose: bool = False) -> None:
        self.console = console or Console()
        self.verbose = verbose
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None
        self._description: Optional[str] = None

    def info(self, message: str) -> None:
        self.console.print(f"[blue]ℹ[/blue] {escape(message)}")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def debug(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[dim]→ {escape(message)}[/dim]")

    def progress(self, description: str, completed: int, total: int) -> None:
        """Start or advance the progress bar for `description`."""
        if self._progress is None or description != self._description:
            self.progress_done()
            self._progress = Progress(
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeRemainingColumn(),
                console=self.console,
                transient=True,
            )
            self._task_id = self._progress.add_task(escape(description), total=total)
            self._description = description
            self._progress.start()

        self._progress.update(self._task_id, completed=completed, total=total)

    def progress_done(self) -> None:
        """Stop and remove the progress bar, if one is showing."""
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task_id = None
        self._description = None
