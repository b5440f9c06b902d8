"""Reporting sink used by the backup engine.

The engine never prints or logs on its own. Every component takes a Reporter
at construction and emits (message, severity) pairs through it; formatting
is the caller's concern. NullReporter is the default so library use and
tests stay silent.
"""

from typing import List, Protocol, Tuple


class Reporter(Protocol):
    """Receives human-readable progress and result notices."""

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...

    def progress(self, description: str, completed: int, total: int) -> None:
        """Report `completed` of `total` units of a long-running step."""

    def progress_done(self) -> None:
        """End the current long-running step, if any."""


class NullReporter:
    """Reporter that discards everything."""

    def info(self, message: str) -> None:
        pass

    def warn(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def debug(self, message: str) -> None:
        pass

    def progress(self, description: str, completed: int, total: int) -> None:
        pass

    def progress_done(self) -> None:
        pass


class RecordingReporter:
    """Reporter that keeps every notice in memory as (severity, message)."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warn(self, message: str) -> None:
        self.records.append(("warn", message))

    def success(self, message: str) -> None:
        self.records.append(("success", message))

    def debug(self, message: str) -> None:
        self.records.append(("debug", message))

    def progress(self, description: str, completed: int, total: int) -> None:
        self.records.append(("progress", f"{description}: {completed}/{total}"))

    def progress_done(self) -> None:
        pass

    def messages(self, severity: str) -> List[str]:
        """Return the messages recorded at `severity`, in order."""
        return [message for level, message in self.records if level == severity]
