"""Shared test fixtures."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

import gdc.core.tracker as tracker

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell scripts")


@pytest.fixture
def isolate_storage(tmp_path, monkeypatch):
    """Redirect the run history to a temp directory."""
    data_dir = tmp_path / "gdc_data"
    data_dir.mkdir()
    history_file = data_dir / "history.json"
    monkeypatch.setattr(tracker, "HISTORY_FILE", history_file)
    monkeypatch.setattr(tracker, "_DATA_DIR", data_dir)
    return history_file


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Point the settings file at a temp config directory."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "gdc" / "settings.json"


def write_script(path: Path, body: str) -> Path:
    """Write an executable /bin/sh script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def make_project(root: Path, name: str, *, exit_code: int = 0, artifacts: int = 3) -> Path:
    """Create a project with a fake gradlew that removes its build directory."""
    project = root / name
    build = project / "build"
    build.mkdir(parents=True)
    for i in range(artifacts):
        (build / f"out{i}.class").write_bytes(b"x" * 100)
    write_script(
        project / "gradlew",
        'echo "> Task :$1"\n'
        "/bin/rm -rf build\n"
        f"exit {exit_code}\n",
    )
    return project


@pytest.fixture
def fake_gradle_bin(tmp_path, monkeypatch):
    """Put a fake ``gradle`` executable first on PATH."""
    bin_dir = tmp_path / "bin"
    write_script(bin_dir / "gradle", 'echo "gradle $1"\n/bin/rm -rf build\n')
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return bin_dir


@pytest.fixture
def no_gradle_on_path(tmp_path, monkeypatch):
    """Leave nothing on PATH so a bare ``gradle`` cannot be found."""
    empty = tmp_path / "empty_bin"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    return empty
