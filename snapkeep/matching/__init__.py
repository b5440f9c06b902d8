"""Exclusion matching package for snapkeep.

This package contains the PathMatcher implementation used by the tree copier
to decide which entries of a project are left out of a backup.

Example:
    >>> from snapkeep.matching import PathMatcher
    >>> PathMatcher().matches("build/out.o", ["build"])
    True
"""

from .path_matcher import PathMatcher, matches, normalize_path

__all__ = [
    "PathMatcher",
    "matches",
    "normalize_path",
]
