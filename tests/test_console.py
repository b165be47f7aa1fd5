"""Tests for the console writer."""

from __future__ import annotations

import io

from gdc.console import ConsoleWriter


def _writer() -> tuple[ConsoleWriter, io.StringIO]:
    buffer = io.StringIO()
    return ConsoleWriter(file=buffer, color=False), buffer


class TestConsoleWriter:
    def test_progress_overwrites_and_pads_to_widest(self):
        console, buffer = _writer()
        console.progress("Searching /long/path")
        console.progress("Searching /a")

        assert buffer.getvalue() == "\rSearching /long/path\rSearching /a        "
        assert console.width == len("Searching /long/path")

    def test_width_never_shrinks(self):
        console, _ = _writer()
        console.progress("x" * 30)
        console.progress("y")
        console.line("done")
        console.progress("z")
        assert console.width == 30

    def test_line_clears_pending_progress(self):
        console, buffer = _writer()
        console.progress("abc")
        console.line("result")

        assert buffer.getvalue() == "\rabc" + "\r   \r" + "result\n"

    def test_line_without_progress(self):
        console, buffer = _writer()
        console.success("ok")
        console.failure("bad")
        console.working("busy")
        assert buffer.getvalue() == "ok\nbad\nbusy\n"

    def test_colors_when_enabled(self):
        buffer = io.StringIO()
        console = ConsoleWriter(file=buffer, color=True)
        console.success("ok")
        console.failure("bad")
        out = buffer.getvalue()
        assert "\x1b[32mok" in out
        assert "\x1b[31mbad" in out
