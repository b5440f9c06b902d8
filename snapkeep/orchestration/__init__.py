"""Workflow orchestration package for snapkeep.

This package contains the components that drive a backup run:
- BackupLogger: Structured run log written to a timestamped file.
- BackupOrchestrator: Façade over copy, catalog, retention and restore.
"""

from snapkeep.orchestration.backup_logger import BackupLogger
from snapkeep.orchestration.backup_orchestrator import BackupOrchestrator

__all__ = ["BackupLogger", "BackupOrchestrator"]
