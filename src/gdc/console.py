"""Console output with a single overwritable progress line."""

from __future__ import annotations

from typing import IO

import click


class ConsoleWriter:
    """Writes progress updates and status lines to the terminal.

    Progress updates overwrite each other in place and are padded to the
    widest progress line written so far, so a shorter update fully hides
    a longer one. Create one writer per invocation.
    """

    def __init__(self, file: IO[str] | None = None, color: bool | None = None) -> None:
        self._file = file
        self._color = color
        self._width = 0
        self._pending = False

    @property
    def width(self) -> int:
        return self._width

    def progress(self, text: str) -> None:
        self._width = max(self._width, len(text))
        padded = text.ljust(self._width)
        self._echo("\r" + click.style(padded, fg="cyan"), nl=False)
        self._pending = True

    def line(self, text: str = "") -> None:
        """Print a newline-terminated message below any progress line."""
        self.clear_progress()
        self._echo(text)

    def success(self, text: str) -> None:
        self.line(click.style(text, fg="green"))

    def failure(self, text: str) -> None:
        self.line(click.style(text, fg="red"))

    def working(self, text: str) -> None:
        self.line(click.style(text, fg="cyan"))

    def clear_progress(self) -> None:
        if self._pending:
            self._echo("\r" + " " * self._width + "\r", nl=False)
            self._pending = False

    def _echo(self, message: str, nl: bool = True) -> None:
        click.echo(message, file=self._file, nl=nl, color=self._color)
