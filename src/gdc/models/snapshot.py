"""Directory snapshot dataclass."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from gdc.errors import FilesystemError

_U64_MAX = 2**64 - 1


@dataclass(frozen=True, slots=True)
class DirectorySnapshot:
    """Point-in-time file count and total size of a directory tree.

    Only regular files are counted. Symbolic links are neither followed
    nor counted, and no names are filtered out: the snapshot measures the
    tree exactly as it sits on disk.
    """

    file_count: int = 0
    size: int = 0

    def __post_init__(self) -> None:
        for name in ("file_count", "size"):
            value = getattr(self, name)
            if not 0 <= value <= _U64_MAX:
                raise OverflowError(f"{name} out of unsigned 64-bit range: {value}")

    @classmethod
    def make(cls, path: Path | str) -> DirectorySnapshot:
        """Walk *path* and return its snapshot.

        Raises:
            FilesystemError: On any I/O failure while walking, including
                permission errors.
        """
        total = 0
        count = 0
        stack: list[Path | str] = [path]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as it:
                    for entry in it:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                            count += 1
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
            except OSError as exc:
                raise FilesystemError(current, exc) from exc
        return cls(file_count=count, size=total)
