"""Failure log written after a run with failed tasks."""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from gdc.errors import FilesystemError

if TYPE_CHECKING:
    from gdc.core.task import CleanTask, TaskResult

log = logging.getLogger(__name__)

START_DELIMITER = "---------START---------"
END_DELIMITER = "----------END----------"


def log_file_name(now: datetime) -> str:
    return f"gdc-err-{now:%Y%m%dT%H%M%S}.log"


def format_record(description: str, output: str) -> str:
    return os.linesep.join((description, START_DELIMITER, output, END_DELIMITER))


def write_failure_log(
    failures: Iterable[TaskResult],
    launch_errors: Iterable[tuple[CleanTask, str]] = (),
    directory: Path | None = None,
    now: datetime | None = None,
) -> Path | None:
    """Write captured output of every failed task to a timestamped log file.

    Args:
        failures: Results of tasks that exited with a nonzero status.
        launch_errors: Tasks that could not be started, with the error message.
        directory: Where to write the log. Defaults to the system temp dir.
        now: Timestamp used in the file name. Defaults to the current time.

    Returns:
        Path of the written log, or None when there was nothing to report.

    Raises:
        FilesystemError: The directory could not be created or the file written.
    """
    records = [format_record(str(r.task), r.output()) for r in failures]
    records.extend(format_record(str(task), message) for task, message in launch_errors)
    if not records:
        return None

    directory = directory or Path(tempfile.gettempdir())
    path = directory / log_file_name(now or datetime.now())
    try:
        directory.mkdir(parents=True, exist_ok=True)
        # newline="" keeps os.linesep exactly as written
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(os.linesep.join(records))
            f.write(os.linesep)
    except OSError as exc:
        raise FilesystemError(path, exc) from exc
    log.info("Wrote %d failure record(s) to %s", len(records), path)
    return path
