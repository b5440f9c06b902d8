"""
Unit tests for PathMatcher exclusion semantics.

Tests cover:
- Glob translation of * and **
- Substring fallback
- Separator normalization
- Empty and blank pattern handling
- Purity of matching
"""

import pytest

from snapkeep.matching import PathMatcher, matches, normalize_path


@pytest.fixture
def matcher() -> PathMatcher:
    return PathMatcher()


@pytest.mark.unit
class TestGlobMatching:
    """Tests for glob-style patterns."""

    @pytest.mark.parametrize("path,pattern", [
        ("app.log", "*.log"),
        ("src/main.py", "src/*.py"),
        ("src/a/b/c.py", "src/**"),
        ("src/pkg/mod.py", "src/**/*.py"),
        ("src/mod.py", "src/**/*.py"),
        ("deep/a/b/node_modules", "**/node_modules"),
        ("node_modules", "**/node_modules"),
    ])
    def test_glob_matches(self, matcher: PathMatcher, path: str, pattern: str):
        """Glob patterns match the whole relative path."""
        assert matcher.matches(path, [pattern])

    def test_single_star_does_not_cross_directories(self, matcher: PathMatcher):
        """'*' stops at '/'."""
        assert not matcher.matches("src/pkg/mod.py", ["src/*.py"])

    def test_double_star_matches_zero_segments(self, matcher: PathMatcher):
        """'a/**/b' matches 'a/b' directly."""
        assert matcher.matches("a/b", ["a/**/b"])
        assert matcher.matches("a/x/y/b", ["a/**/b"])

    def test_dot_is_literal(self, matcher: PathMatcher):
        """A '.' in a pattern does not match arbitrary characters."""
        assert not matcher.matches("appxlog", ["*.log"])

    def test_trailing_slash_pattern_matches_directory(self, matcher: PathMatcher):
        """'build/' excludes the directory entry 'build'."""
        assert matcher.matches("build", ["build/"])


@pytest.mark.unit
class TestSubstringFallback:
    """Tests for the broad substring rule."""

    @pytest.mark.parametrize("path", ["access.log", "logs", "catalog/file.txt"])
    def test_plain_word_matches_anywhere(self, matcher: PathMatcher, path: str):
        """'log' excludes every path containing it."""
        assert matcher.matches(path, ["log"])

    def test_directory_name_matches_nested_path(self, matcher: PathMatcher):
        assert matcher.matches("packages/web/node_modules", ["node_modules"])

    def test_unrelated_path_not_matched(self, matcher: PathMatcher):
        assert not matcher.matches("src/main.py", ["node_modules", "*.log", "dist"])


@pytest.mark.unit
class TestNormalization:
    """Tests for separator handling."""

    def test_normalize_path(self):
        assert normalize_path("a\\b\\c.txt") == "a/b/c.txt"

    def test_backslash_path_matches_forward_slash_pattern(self, matcher: PathMatcher):
        assert matcher.matches("src\\gen\\out.py", ["src/gen/*.py"])

    def test_backslash_pattern_matches_forward_slash_path(self, matcher: PathMatcher):
        assert matcher.matches("src/gen/out.py", ["src\\gen\\*.py"])


@pytest.mark.unit
class TestPatternLists:
    """Tests for empty lists, blank patterns and purity."""

    def test_empty_pattern_list_never_excludes(self, matcher: PathMatcher):
        assert not matcher.matches("anything/at/all.txt", [])

    def test_blank_patterns_ignored(self, matcher: PathMatcher):
        assert not matcher.matches("a.txt", ["", "   "])

    def test_union_of_patterns(self, matcher: PathMatcher):
        """Any single matching pattern is enough, regardless of order."""
        patterns = ["dist", "*.tmp"]
        assert matcher.matches("cache.tmp", patterns)
        assert matcher.matches("cache.tmp", list(reversed(patterns)))

    def test_matching_is_pure(self, matcher: PathMatcher):
        """Repeated calls give the same answer."""
        patterns = ["**/build", "log"]
        results = {matcher.matches("pkg/build", patterns) for _ in range(5)}
        assert results == {True}
        results = {matcher.matches("pkg/src.py", patterns) for _ in range(5)}
        assert results == {False}

    def test_module_level_shortcut(self):
        assert matches("node_modules", ["node_modules"])
        assert not matches("src", ["node_modules"])
