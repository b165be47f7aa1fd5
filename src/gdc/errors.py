"""Error types shared across gdc."""

from __future__ import annotations

from pathlib import Path


class FilesystemError(Exception):
    """Raised when a filesystem operation fails for any reason other than a skippable one.

    Wraps the underlying ``OSError`` so callers only need to tell
    "access denied" (handled where it happens) from everything else.
    """

    def __init__(self, path: Path | str, cause: OSError) -> None:
        super().__init__(f"{path}: {cause.strerror or cause}")
        self.path = Path(path)
        self.cause = cause


class TaskLaunchError(Exception):
    """Raised when a clean task's process cannot be started."""
