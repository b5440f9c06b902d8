"""
TargetKind enum for the two kinds of backup destination.

Only LOCAL targets are backed by an implementation. REMOTE targets are
recognized by the data model so configuration can describe them, but every
engine operation reports them as unsupported.
"""

from enum import Enum


class TargetKind(Enum):
    """Encodes the kind of a backup target."""
    LOCAL = "local"      # Directory on a mounted filesystem
    REMOTE = "remote"    # Network destination (no transport implemented)
