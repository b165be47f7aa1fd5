"""Search and clean orchestration engine."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from gdc.core.search import DirectoryCallback, ProjectSearch, WarningCallback
from gdc.core.summary import Summary
from gdc.core.task import CleanTask, OutputObserver, TaskResult
from gdc.errors import TaskLaunchError

log = logging.getLogger(__name__)

TaskCallback = Callable[[CleanTask], None]
ResultCallback = Callable[[TaskResult], None]
LaunchErrorCallback = Callable[[CleanTask, str], None]


@dataclass(slots=True)
class RunReport:
    """Outcome of one full search-and-clean run."""

    root: Path
    successes: Summary = field(default_factory=Summary)
    failures: Summary = field(default_factory=Summary)
    launch_errors: list[tuple[CleanTask, str]] = field(default_factory=list)
    directories_searched: int = 0
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        """True when every task started and exited successfully."""
        return self.failures.is_empty() and not self.launch_errors


class CleanEngine:
    """Runs the clean task of every Gradle project under a root, one at a time."""

    def __init__(
        self,
        on_task: TaskCallback | None = None,
        on_output: OutputObserver | None = None,
        on_result: ResultCallback | None = None,
        on_launch_error: LaunchErrorCallback | None = None,
        on_warning: WarningCallback | None = None,
        on_directory: DirectoryCallback | None = None,
    ) -> None:
        self.on_task = on_task
        self.on_output = on_output
        self.on_result = on_result
        self.on_launch_error = on_launch_error
        self.on_warning = on_warning
        self.on_directory = on_directory

    def search(self, root: Path | str) -> ProjectSearch:
        """Start a fresh search below *root*."""
        return ProjectSearch(root, on_warning=self.on_warning, on_directory=self.on_directory)

    def find(self, root: Path | str) -> list[Path]:
        """Return every match below *root* without running anything."""
        return list(self.search(root))

    def run(self, root: Path | str) -> RunReport:
        """Search *root* and clean each project as it is found.

        The next match is only searched for after the current task has
        finished and been folded into the report.

        Raises:
            FilesystemError: On an unrecoverable I/O error while searching
                or snapshotting.
            OverflowError: If the accumulated totals overflow.
        """
        started = time.monotonic()
        report = RunReport(root=Path(root))
        observers = (self.on_output,) if self.on_output else ()

        search = self.search(root)
        for match in search:
            task = CleanTask.derive(match)
            if self.on_task:
                self.on_task(task)

            try:
                result = task.start(observers)
            except TaskLaunchError as exc:
                log.error("%s", exc)
                report.launch_errors.append((task, str(exc)))
                if self.on_launch_error:
                    self.on_launch_error(task, str(exc))
                continue

            result.wait()
            if result.was_successful():
                report.successes.add(result)
            else:
                log.warning("%s failed with status %d", task, result.exit_code())
                report.failures.add(result)
            if self.on_result:
                self.on_result(result)

        report.directories_searched = search.visited
        report.elapsed = time.monotonic() - started
        log.info(
            "Searched %d directories: %d succeeded, %d failed, %d not started",
            report.directories_searched,
            report.successes.count,
            report.failures.count,
            len(report.launch_errors),
        )
        return report
