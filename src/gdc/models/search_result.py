"""Per-listing search result."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class SearchResult:
    """Outcome of listing a single directory.

    Once ``match`` is set, no further subdirectories are recorded, so a
    matched listing never contributes anything to the frontier.
    """

    match: Path | None = None
    subdirectories: list[Path] = field(default_factory=list)

    def add_subdirectory(self, path: Path) -> None:
        if self.match is None:
            self.subdirectories.append(path)

    def finish(self) -> SearchResult:
        """Drop candidates collected before a match was found."""
        if self.match is not None:
            self.subdirectories.clear()
        return self
