"""Aggregate accounting over finished clean tasks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from gdc.core.task import TaskResult

log = logging.getLogger(__name__)

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_BYTES_PER_MB = 1_048_576


def checked_add(a: int, b: int) -> int:
    """Add two signed 64-bit values, raising OverflowError instead of wrapping."""
    total = a + b
    if not _I64_MIN <= total <= _I64_MAX:
        raise OverflowError(f"64-bit overflow adding {a} and {b}")
    return total


def format_megabytes(size_bytes: int) -> str:
    """Render a byte count as ``"1.50 MB (1572864 bytes)"``."""
    return f"{size_bytes / _BYTES_PER_MB:.2f} MB ({size_bytes} bytes)"


class Summary:
    """Running totals folded from task results, one at a time.

    Deltas are signed: a task that leaves more files behind than it found
    reduces the totals. Results are kept in the order they were added so
    failures can be reported in detail later.
    """

    def __init__(self) -> None:
        self._results: list[TaskResult] = []
        self._files_deleted = 0
        self._bytes_saved = 0

    @classmethod
    def partition(cls, results: Iterable[TaskResult]) -> tuple[Summary, Summary]:
        """Fold *results* into (successes, failures)."""
        successes, failures = cls(), cls()
        for result in results:
            (successes if result.was_successful() else failures).add(result)
        return successes, failures

    def add(self, result: TaskResult) -> None:
        """Fold one finished result into the totals.

        Blocks until the result's post-run snapshot is available.

        Raises:
            OverflowError: If a running total leaves the signed 64-bit range.
        """
        pre = result.dir_snap_pre_run()
        post = result.dir_snap_post_run()
        files_deleted = checked_add(self._files_deleted, pre.file_count - post.file_count)
        bytes_saved = checked_add(self._bytes_saved, pre.size - post.size)
        self._files_deleted = files_deleted
        self._bytes_saved = bytes_saved
        self._results.append(result)
        log.debug(
            "Folded %s: %d files, %d bytes",
            result.task,
            pre.file_count - post.file_count,
            pre.size - post.size,
        )

    def combine(self, other: Summary) -> Summary:
        """Return a new summary holding this one's results followed by *other*'s."""
        combined = Summary()
        combined._files_deleted = checked_add(self._files_deleted, other._files_deleted)
        combined._bytes_saved = checked_add(self._bytes_saved, other._bytes_saved)
        combined._results = [*self._results, *other._results]
        return combined

    def is_empty(self) -> bool:
        return not self._results

    @property
    def count(self) -> int:
        return len(self._results)

    @property
    def results(self) -> tuple[TaskResult, ...]:
        return tuple(self._results)

    @property
    def files_deleted(self) -> int:
        return self._files_deleted

    @property
    def bytes_saved(self) -> int:
        return self._bytes_saved

    def human_readable_size(self) -> str:
        return format_megabytes(self._bytes_saved)
