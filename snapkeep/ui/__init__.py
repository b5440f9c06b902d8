"""Console output package for snapkeep.

- ConsoleReporter: Reporter that prints engine notices with Rich.
- BackupDisplay: Tables and panels for the CLI commands.
"""

from .backup_display import BackupDisplay
from .console_reporter import ConsoleReporter

__all__ = ["BackupDisplay", "ConsoleReporter"]
