"""Copy operations package for snapkeep.

This package provides the TreeCopier class that mirrors a project tree into
a backup directory (and a backup back out during restore), plus size helpers
for reporting.

Example:
    >>> from snapkeep.operations import TreeCopier
    >>> copier = TreeCopier()
    >>> stats = copier.copy(source, destination, ["node_modules"], simulate=True)
    >>> print(f"Would copy {stats.files_copied} files")
"""

from .tree_copier import TreeCopier, format_bytes, get_directory_size

__all__ = ["TreeCopier", "format_bytes", "get_directory_size"]
