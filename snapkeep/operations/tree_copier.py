"""
Tree copy module for snapkeep.

This module contains the TreeCopier class, which mirrors a directory tree
into a backup (or back out of one) while applying exclusion patterns, plus
the small size helpers used when reporting on backups.
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from snapkeep.exceptions import BackupIOError
from snapkeep.matching import PathMatcher
from snapkeep.models import CopyStats
from snapkeep.reporting import NullReporter, Reporter


@dataclass
class _CopyRun:
    """State shared by one recursive copy."""

    patterns: Sequence[str]
    simulate: bool
    nested_destination: Optional[str] = None  # destination relative to source, if inside it
    progress_callback: Optional[Callable[[int], None]] = None
    stats: CopyStats = field(default_factory=CopyStats)


class TreeCopier:
    """
    Recursively copies a directory tree, honouring exclusion patterns.

    The walk is depth-first in name order. Every entry's path relative to
    the source root is checked against the patterns; an excluded directory
    is pruned with its whole subtree and recorded once in `skipped_paths`.

    Symbolic links and special files (FIFOs, sockets, devices) are never
    copied. They are recorded in `ignored_paths` and reported as warnings.
    Unreadable entries are not skipped: any OSError surfaces as
    BackupIOError and stops the copy, possibly leaving a partial
    destination behind.

    In simulate mode nothing on disk is touched, yet every counter advances
    exactly as it would during a real copy.

    A destination inside the source tree is never walked into: when the walk
    reaches it, it is recorded in `skipped_paths` like an excluded entry.
    Copying a directory onto itself is refused.
    """

    def __init__(
        self,
        reporter: Optional[Reporter] = None,
        matcher: Optional[PathMatcher] = None,
    ) -> None:
        """
        Create a TreeCopier.

        Parameters:
            reporter (Reporter): Sink for progress notices. Defaults to a silent reporter.
            matcher (PathMatcher): Exclusion matcher. Defaults to a new PathMatcher.
        """
        self.reporter = reporter if reporter is not None else NullReporter()
        self.matcher = matcher if matcher is not None else PathMatcher()

    def copy(
        self,
        source: Path,
        destination: Path,
        exclude_patterns: Sequence[str] = (),
        simulate: bool = False,
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> CopyStats:
        """
        Copy the tree under `source` into `destination`.

        Parameters:
            source (Path): Root of the tree to copy. Must be an existing directory.
            destination (Path): Directory to copy into; created if missing.
            exclude_patterns (Sequence[str]): Patterns evaluated against paths relative to `source`.
            simulate (bool): If True, count what would be copied without writing anything.
            progress_callback (Callable[[int], None]): Optional; called with the running
                count of copied files after each file.

        Returns:
            CopyStats: Counters and skipped/ignored relative paths.

        Raises:
            BackupIOError: If the source root is missing or unreadable, if
                `destination` is `source` itself, or if a write fails.
        """
        source = Path(source)
        destination = Path(destination)
        _require_directory(source)

        nested_destination = _relative_inside(destination, source)
        if nested_destination == ".":
            raise BackupIOError(
                f"Cannot copy a directory into itself: {source}",
                path=destination,
                operation="copy",
            )

        run = _CopyRun(
            patterns=tuple(exclude_patterns),
            simulate=simulate,
            nested_destination=nested_destination,
            progress_callback=progress_callback,
        )

        if simulate:
            self.reporter.debug(f"[DRY RUN] Would copy {source} to {destination}")
        else:
            self._make_directory(destination)
        run.stats.directories_created += 1

        self._copy_directory(source, destination, "", run)
        return run.stats

    def count_files(
        self,
        source: Path,
        exclude_patterns: Sequence[str] = (),
        destination: Optional[Path] = None,
    ) -> int:
        """Return how many files a copy of `source` would write. Emits no notices."""
        source = Path(source)
        _require_directory(source)
        nested_destination = None
        if destination is not None:
            nested_destination = _relative_inside(Path(destination), source)
        run = _CopyRun(
            patterns=tuple(exclude_patterns),
            simulate=True,
            nested_destination=nested_destination,
        )
        TreeCopier(NullReporter(), self.matcher)._copy_directory(source, source, "", run)
        return run.stats.files_copied

    def _copy_directory(
        self,
        source_dir: Path,
        dest_dir: Path,
        relative_dir: str,
        run: "_CopyRun",
    ) -> None:
        """Copy the entries of one directory, recursing into subdirectories."""
        try:
            with os.scandir(source_dir) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as e:
            raise BackupIOError(
                f"Failed to read directory {source_dir}: {e}",
                path=source_dir,
                operation="read",
            ) from e

        stats = run.stats
        for entry in entries:
            relative_path = f"{relative_dir}/{entry.name}" if relative_dir else entry.name
            source_path = Path(entry.path)
            dest_path = dest_dir / entry.name

            if relative_path == run.nested_destination:
                stats.skipped_paths.append(relative_path)
                self.reporter.debug(f"Excluding copy destination: {relative_path}")
                continue

            if self.matcher.matches(relative_path, run.patterns):
                stats.skipped_paths.append(relative_path)
                self.reporter.debug(f"Excluding: {relative_path}")
                continue

            kind = self._entry_kind(entry)

            if kind == "dir":
                if not run.simulate:
                    self._make_directory(dest_path)
                stats.directories_created += 1
                self._copy_directory(source_path, dest_path, relative_path, run)
            elif kind == "file":
                stats.bytes_copied += self._copy_file(source_path, dest_path, run.simulate)
                stats.files_copied += 1
                if run.progress_callback is not None:
                    run.progress_callback(stats.files_copied)
            else:
                stats.ignored_paths.append(relative_path)
                self.reporter.warn(f"Skipping {kind}: {relative_path}")

    def _entry_kind(self, entry: "os.DirEntry[str]") -> str:
        """Classify a directory entry as 'dir', 'file', 'symlink' or 'special file'."""
        try:
            if entry.is_symlink():
                return "symlink"
            if entry.is_dir(follow_symlinks=False):
                return "dir"
            if entry.is_file(follow_symlinks=False):
                return "file"
        except OSError as e:
            raise BackupIOError(
                f"Failed to inspect {entry.path}: {e}",
                path=entry.path,
                operation="stat",
            ) from e
        return "special file"

    def _copy_file(self, source: Path, dest: Path, simulate: bool) -> int:
        """Copy one regular file's content and return its size in bytes."""
        try:
            size = source.stat().st_size
        except OSError as e:
            raise BackupIOError(
                f"Failed to read {source}: {e}", path=source, operation="stat"
            ) from e

        if simulate:
            return size

        try:
            shutil.copyfile(source, dest)
        except OSError as e:
            raise BackupIOError(
                f"Failed to copy {source} to {dest}: {e}", path=dest, operation="copy"
            ) from e
        return size

    def _make_directory(self, path: Path) -> None:
        """Create `path` and any missing parents; an existing directory is fine."""
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupIOError(
                f"Failed to create directory {path}: {e}", path=path, operation="mkdir"
            ) from e


def _require_directory(source: Path) -> None:
    if not source.is_dir():
        raise BackupIOError(
            f"Source directory does not exist or is not a directory: {source}",
            path=source,
            operation="read",
        )

def _relative_inside(path: Path, root: Path) -> Optional[str]:
    """Return `path` relative to `root` as a '/'-separated string, or None if outside."""
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return None


def get_directory_size(path: Path) -> int:
    """
    Sum the sizes of all regular files below `path`.

    Unreadable entries are left out of the total; a missing path counts as 0.
    Symlinks are not followed.
    """
    total = 0
    for root, _dirs, files in os.walk(path):
        for filename in files:
            file_path = os.path.join(root, filename)
            try:
                if not os.path.islink(file_path):
                    total += os.stat(file_path).st_size
            except OSError:
                continue
    return total


_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    """Format a byte count for display, e.g. 0 B, 1.5 KB, 2 MB."""
    if size <= 0:
        return "0 B"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    value = round(value, 2)
    return f"{value:g} {_SIZE_UNITS[index]}"

