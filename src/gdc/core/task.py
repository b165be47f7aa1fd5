"""Clean task invocation and result tracking."""

from __future__ import annotations

import logging
import os
import subprocess
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from gdc.core.search import WRAPPER_NAME
from gdc.errors import TaskLaunchError
from gdc.models.snapshot import DirectorySnapshot

log = logging.getLogger(__name__)

GRADLE_EXECUTABLE = "gradle"
CLEAN_TASK = "clean"

OutputObserver = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class CleanTask:
    """A single ``clean`` invocation for one Gradle project."""

    directory: Path
    command: tuple[str, ...]

    @classmethod
    def derive(cls, match: Path) -> CleanTask:
        """Build the task for a matched ``gradlew`` or ``build.gradle`` file.

        The wrapper script is preferred when it matched; otherwise the
        ``gradle`` executable from PATH is used.
        """
        if match.name == WRAPPER_NAME:
            executable = f"{WRAPPER_NAME}.bat" if os.name == "nt" else f"./{WRAPPER_NAME}"
        else:
            executable = GRADLE_EXECUTABLE
        return cls(directory=match.parent, command=(executable, CLEAN_TASK))

    def __str__(self) -> str:
        return f"{' '.join(self.command)} in {self.directory}"

    def start(self, observers: Iterable[OutputObserver] = ()) -> TaskResult:
        """Snapshot the project directory and launch the task without waiting.

        Args:
            observers: Called with every output line, in order, from the
                thread draining the process output.

        Raises:
            FilesystemError: If the pre-run snapshot fails.
            TaskLaunchError: If the process cannot be started.
        """
        pre_run = DirectorySnapshot.make(self.directory)
        log.info("Starting %s", self)
        try:
            process = subprocess.Popen(
                self._argv(),
                cwd=self.directory,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            raise TaskLaunchError(f"Could not start {self}: {exc}") from exc
        return TaskResult(self, process, pre_run, observers)

    def _argv(self) -> list[str]:
        executable, *args = self.command
        if os.name == "nt" and executable == f"{WRAPPER_NAME}.bat":
            # CreateProcess does not look in cwd for the executable
            executable = str(self.directory / executable)
        return [executable, *args]


class TaskResult:
    """A started clean task.

    Two background workers run per task: one drains the merged
    stdout/stderr stream line by line, the other waits for the process to
    exit and then takes the post-run snapshot. Everything else blocks the
    caller until the relevant piece is ready.
    """

    def __init__(
        self,
        task: CleanTask,
        process: subprocess.Popen,
        pre_run: DirectorySnapshot,
        observers: Iterable[OutputObserver] = (),
    ) -> None:
        self.task = task
        self._process = process
        self._pre_run = pre_run
        self._observers = tuple(observers)
        # Appended only by the drain thread; readers copy it
        self._lines: list[str] = []

        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="gdc-task")
        self._drained: Future[None] = executor.submit(self._drain_output)
        self._post_run: Future[DirectorySnapshot] = executor.submit(self._snapshot_after_exit)
        executor.shutdown(wait=False)

    def was_successful(self) -> bool:
        """Block until the process exits; True iff it exited with status 0."""
        return self.exit_code() == 0

    def exit_code(self) -> int:
        return self._process.wait()

    def dir_snap_pre_run(self) -> DirectorySnapshot:
        return self._pre_run

    def dir_snap_post_run(self) -> DirectorySnapshot:
        """Block until the process exits and the post-run snapshot is done."""
        return self._post_run.result()

    def output(self) -> str:
        """Captured output so far, joined with the platform line separator."""
        return os.linesep.join(list(self._lines))

    def wait(self) -> None:
        """Block until output is fully drained and the post-run snapshot is done."""
        self._drained.result()
        self._post_run.result()

    def _drain_output(self) -> None:
        stream = self._process.stdout
        if stream is None:
            return
        with stream:
            for raw in stream:
                line = raw.rstrip("\r\n")
                self._lines.append(line)
                for observer in self._observers:
                    try:
                        observer(line)
                    except Exception:
                        log.exception("Output observer failed for %s", self.task)

    def _snapshot_after_exit(self) -> DirectorySnapshot:
        code = self._process.wait()
        log.debug("%s exited with status %d", self.task, code)
        return DirectorySnapshot.make(self.task.directory)
