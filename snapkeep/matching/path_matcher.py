"""Exclusion pattern matching for snapkeep.

This module provides the PathMatcher class which decides whether a path,
relative to the root of a copy, is excluded by any of a project's patterns.

Each pattern is tried two ways, and either one is enough to exclude:
    1. Glob match against the whole relative path. ``**`` matches zero or
       more path segments and ``*`` matches any run of characters except
       ``/``. All other characters are literal.
    2. Substring match: the pattern text occurring anywhere in the path.

The substring rule is deliberately broad and kept for compatibility with
existing exclude lists: ``"log"`` excludes ``access.log``, ``logs/`` and
``catalog/file.txt`` alike. Pick patterns that are not accidental
substrings of paths you want to keep.

Example:
    >>> from snapkeep.matching import PathMatcher
    >>> matcher = PathMatcher()
    >>> matcher.matches("src/node_modules/x.json", ["node_modules"])
    True
    >>> matcher.matches("src/app.py", ["*.log"])
    False
"""

import re
from functools import lru_cache
from typing import Iterable, Pattern


def normalize_path(path: str) -> str:
    """Convert Windows separators to forward slashes."""
    return path.replace("\\", "/")


@lru_cache(maxsize=512)
def _compile_glob(pattern: str) -> Pattern[str]:
    """Translate a normalized glob pattern into an anchored regex."""
    parts = []
    i = 0
    length = len(pattern)

    while i < length:
        if pattern.startswith("**", i):
            i += 2
            if i < length and pattern[i] == "/":
                # "**/" may also stand for no directory at all
                parts.append("(?:.*/)?")
                i += 1
            else:
                parts.append(".*")
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1

    return re.compile("".join(parts), re.DOTALL)


class PathMatcher:
    """Evaluates relative paths against a set of exclusion patterns.

    Matching is a pure function of its arguments; compiled glob regexes are
    cached at module level and shared between instances.
    """

    def matches(self, relative_path: str, patterns: Iterable[str]) -> bool:
        """Return True if any pattern excludes `relative_path`.

        Args:
            relative_path: Path relative to the copy root, with either
                separator style.
            patterns: Exclusion patterns. Blank patterns are ignored, and an
                empty collection never excludes anything.

        Returns:
            True on the first matching pattern, False if none match.
        """
        path = normalize_path(relative_path)

        for pattern in patterns:
            if self.matches_pattern(path, pattern):
                return True

        return False

    def matches_pattern(self, relative_path: str, pattern: str) -> bool:
        """Return True if a single pattern excludes `relative_path`."""
        if not pattern or not pattern.strip():
            return False

        path = normalize_path(relative_path)
        normalized = normalize_path(pattern)

        glob = normalized.rstrip("/") or normalized
        if _compile_glob(glob).fullmatch(path):
            return True

        # Substring fallback (see module docstring)
        return normalized in path


_default_matcher = PathMatcher()


def matches(relative_path: str, patterns: Iterable[str]) -> bool:
    """Module-level shortcut for PathMatcher().matches()."""
    return _default_matcher.matches(relative_path, patterns)
