"""Tests for the search-and-clean engine."""

from __future__ import annotations

import errno

import pytest

import gdc.core.search as search_module
from conftest import make_project, posix_only
from gdc.core.engine import CleanEngine
from gdc.errors import FilesystemError


class TestFind:
    def test_find_lists_matches_without_running(self, tmp_path):
        project = make_project(tmp_path, "app")
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib" / "build.gradle").touch()

        matches = CleanEngine().find(tmp_path)

        assert matches == [project / "gradlew", tmp_path / "lib" / "build.gradle"]
        assert (project / "build").is_dir()


@posix_only
class TestRun:
    def test_cleans_every_project(self, tmp_path):
        make_project(tmp_path, "one", artifacts=2)
        make_project(tmp_path, "two", artifacts=3)

        report = CleanEngine().run(tmp_path)

        assert report.ok
        assert report.successes.count == 2
        assert report.failures.is_empty()
        assert report.successes.files_deleted == 5
        assert report.successes.bytes_saved == 500
        assert not (tmp_path / "one" / "build").exists()
        assert report.directories_searched == 3

    def test_failures_are_split_out(self, tmp_path):
        make_project(tmp_path, "good")
        make_project(tmp_path, "bad", exit_code=1)

        report = CleanEngine().run(tmp_path)

        assert not report.ok
        assert [r.task.directory.name for r in report.successes.results] == ["good"]
        assert [r.task.directory.name for r in report.failures.results] == ["bad"]

    def test_nonzero_exit_logged_as_warning(self, tmp_path, caplog):
        make_project(tmp_path, "bad", exit_code=3)

        with caplog.at_level("WARNING", logger="gdc.core.engine"):
            CleanEngine().run(tmp_path)

        records = [r for r in caplog.records if "failed with status 3" in r.getMessage()]
        assert len(records) == 1
        assert records[0].levelname == "WARNING"

    def test_tasks_run_sequentially_in_search_order(self, tmp_path):
        for name in ("a", "b", "c"):
            make_project(tmp_path, name)
        events: list[str] = []

        CleanEngine(
            on_task=lambda task: events.append(f"start {task.directory.name}"),
            on_result=lambda result: events.append(f"done {result.task.directory.name}"),
        ).run(tmp_path)

        assert events == ["start a", "done a", "start b", "done b", "start c", "done c"]

    def test_output_forwarded_to_observer(self, tmp_path):
        make_project(tmp_path, "app")
        lines: list[str] = []

        CleanEngine(on_output=lines.append).run(tmp_path)

        assert lines == ["> Task :clean"]

    def test_launch_errors_do_not_stop_the_run(self, tmp_path, no_gradle_on_path):
        (tmp_path / "a_lib").mkdir()
        (tmp_path / "a_lib" / "build.gradle").touch()
        make_project(tmp_path, "b_app")
        failed: list[str] = []

        report = CleanEngine(on_launch_error=lambda task, msg: failed.append(task.directory.name)).run(tmp_path)

        assert failed == ["a_lib"]
        assert [t.directory.name for t, _ in report.launch_errors] == ["a_lib"]
        assert report.successes.count == 1
        assert not report.ok

    def test_search_errors_abort_the_run(self, tmp_path, monkeypatch):
        make_project(tmp_path, "a_app")
        (tmp_path / "z_broken").mkdir()
        real_list = search_module.list_directory

        def failing(path):
            if path.name == "z_broken":
                raise OSError(errno.EIO, "Input/output error", str(path))
            return real_list(path)

        monkeypatch.setattr(search_module, "list_directory", failing)

        with pytest.raises(FilesystemError):
            CleanEngine().run(tmp_path)
