"""Tests for the failure log."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import pytest

from gdc.core.report import END_DELIMITER, START_DELIMITER, log_file_name, write_failure_log
from gdc.core.task import CleanTask
from gdc.errors import FilesystemError

from test_summary import FakeResult

NOW = datetime(2026, 10, 19, 8, 5, 3)


class TestFailureLog:
    def test_file_name(self):
        assert log_file_name(NOW) == "gdc-err-20261019T080503.log"

    def test_nothing_written_without_failures(self, tmp_path):
        assert write_failure_log([], directory=tmp_path, now=NOW) is None
        assert list(tmp_path.iterdir()) == []

    def test_records_each_failure(self, tmp_path):
        first = FakeResult(pre=(1, 1), post=(1, 1), success=False, name="one")
        second = FakeResult(pre=(1, 1), post=(1, 1), success=False, name="two")

        path = write_failure_log([first, second], directory=tmp_path, now=NOW)

        assert path == tmp_path / "gdc-err-20261019T080503.log"
        with open(path, encoding="utf-8", newline="") as f:
            content = f.read()
        sep = os.linesep
        expected = sep.join([
            str(first.task), START_DELIMITER, "output of one", END_DELIMITER,
            str(second.task), START_DELIMITER, "output of two", END_DELIMITER,
        ]) + sep
        assert content == expected

    def test_launch_errors_are_recorded(self, tmp_path):
        task = CleanTask.derive(Path("/projects/lib/build.gradle"))

        path = write_failure_log([], [(task, "gradle not found")], directory=tmp_path, now=NOW)

        content = path.read_text(encoding="utf-8")
        assert str(task) in content
        assert "gradle not found" in content

    def test_defaults_to_temp_directory(self, tmp_path, monkeypatch):
        monkeypatch.setattr("tempfile.gettempdir", lambda: str(tmp_path))
        failure = FakeResult(pre=(1, 1), post=(1, 1), success=False)

        path = write_failure_log([failure], now=NOW)

        assert path.parent == tmp_path
        assert path.exists()

    def test_unwritable_directory_raises_filesystem_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        failure = FakeResult(pre=(1, 1), post=(1, 1), success=False)

        with pytest.raises(FilesystemError) as info:
            write_failure_log([failure], directory=blocker / "logs", now=NOW)

        assert info.value.path == blocker / "logs" / log_file_name(NOW)
        assert isinstance(info.value.cause, OSError)
