"""Depth-first search for Gradle project roots."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Callable, Iterator

from gdc.errors import FilesystemError
from gdc.models.search_result import SearchResult

log = logging.getLogger(__name__)

WRAPPER_NAME = "gradlew"
BUILD_FILE_NAME = "build.gradle"
SKIPPED_DIR_NAMES = frozenset({"node_modules"})

WarningCallback = Callable[[Path, OSError], None]
DirectoryCallback = Callable[[Path], None]


def is_hidden(entry: os.DirEntry) -> bool:
    """Check whether the filesystem reports a directory entry as hidden."""
    if entry.name.startswith("."):
        return True
    if os.name == "nt":
        # DirEntry caches the stat result from the listing on Windows
        attributes = entry.stat(follow_symlinks=False).st_file_attributes
        return bool(attributes & stat.FILE_ATTRIBUTE_HIDDEN)
    return False


def is_skipped(entry: os.DirEntry) -> bool:
    """Directories that are never listed, searched or reported."""
    return entry.name in SKIPPED_DIR_NAMES or is_hidden(entry)


def list_directory(path: Path) -> SearchResult:
    """List *path* once and decide whether it is a project root.

    A ``gradlew`` file ends the listing immediately. A ``build.gradle``
    file becomes the match but the listing continues, so a ``gradlew``
    seen later in the same directory still replaces it. Either way the
    directory's children are not searched.

    Raises:
        PermissionError: If the directory cannot be read.
        OSError: On any other listing failure.
    """
    result = SearchResult()
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            if not is_skipped(entry):
                result.add_subdirectory(Path(entry.path))
        elif entry.is_file(follow_symlinks=False):
            if entry.name == WRAPPER_NAME:
                result.match = Path(entry.path)
                break
            if entry.name == BUILD_FILE_NAME:
                result.match = Path(entry.path)
    return result.finish()


class ProjectSearch:
    """Lazy iterator over Gradle project matches below a root directory.

    The frontier is an explicit stack seeded with the root, so deep trees
    never hit the recursion limit. The search is finite and cannot be
    restarted: iterating again resumes from the current frontier, and an
    exhausted search stays exhausted.
    """

    def __init__(
        self,
        root: Path | str,
        on_warning: WarningCallback | None = None,
        on_directory: DirectoryCallback | None = None,
    ) -> None:
        self.root = Path(root)
        self._frontier: list[Path] = [self.root]
        self._on_warning = on_warning
        self._on_directory = on_directory
        self.visited = 0

    def __iter__(self) -> Iterator[Path]:
        return self

    def __next__(self) -> Path:
        while self._frontier:
            directory = self._frontier.pop()
            result = self._list(directory)
            if result.match is not None:
                return result.match
            # Reversed so siblings come off the stack in name order
            self._frontier.extend(reversed(result.subdirectories))
        raise StopIteration

    def _list(self, directory: Path) -> SearchResult:
        if self._on_directory:
            self._on_directory(directory)
        self.visited += 1
        try:
            return list_directory(directory)
        except PermissionError as exc:
            log.warning("Access denied, skipping %s", directory)
            if self._on_warning:
                self._on_warning(directory, exc)
            return SearchResult()
        except OSError as exc:
            raise FilesystemError(directory, exc) from exc
