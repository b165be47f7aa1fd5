"""Run history: one entry per clean run, persisted as JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from gdc.utils import xdg_data_home

if TYPE_CHECKING:
    from gdc.core.engine import RunReport

log = logging.getLogger(__name__)

PERIODS = ("today", "week", "month", "all")

_DATA_DIR = xdg_data_home() / "gdc"

HISTORY_FILE = _DATA_DIR / "history.json"

_COUNTERS = ("succeeded", "failed", "files_deleted", "bytes_saved")


@dataclass(frozen=True, slots=True)
class RunEntry:
    """What one clean run left behind.

    ``files_deleted`` and ``bytes_saved`` cover successful tasks only;
    ``failed`` includes tasks that could not be started.
    """

    timestamp: datetime
    root: str
    succeeded: int = 0
    failed: int = 0
    files_deleted: int = 0
    bytes_saved: int = 0

    @classmethod
    def from_report(cls, report: RunReport) -> RunEntry:
        return cls(
            timestamp=datetime.now(timezone.utc),
            root=str(report.root),
            succeeded=report.successes.count,
            failed=report.failures.count + len(report.launch_errors),
            files_deleted=report.successes.files_deleted,
            bytes_saved=report.successes.bytes_saved,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunEntry:
        """Build an entry from its JSON form.

        Raises:
            ValueError: The timestamp is missing or unparseable, or a counter
                is not an integer.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        raw = data.get("timestamp")
        if not isinstance(raw, str):
            raise ValueError("missing timestamp")
        timestamp = datetime.fromisoformat(raw)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        counters = {}
        for name in _COUNTERS:
            value = data.get(name, 0)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} is not an integer: {value!r}")
            counters[name] = value
        return cls(timestamp=timestamp, root=str(data.get("root", "")), **counters)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


def _load_entries() -> list[RunEntry]:
    """Read the history file; a missing or unreadable file is an empty history."""
    if not HISTORY_FILE.exists():
        return []
    try:
        with open(HISTORY_FILE, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        log.exception("Failed to load history file: %s", HISTORY_FILE)
        return []

    runs = data.get("runs", []) if isinstance(data, dict) else []
    entries = []
    for i, raw in enumerate(runs):
        try:
            entries.append(RunEntry.from_dict(raw))
        except ValueError as exc:
            log.warning("Skipping malformed history entry %d: %s", i, exc)
    return entries


def _save_entries(entries: list[RunEntry]) -> None:
    try:
        _DATA_DIR.mkdir(parents=True, exist_ok=True)
        with open(HISTORY_FILE, "w", encoding="utf-8") as f:
            json.dump({"runs": [e.to_dict() for e in entries]}, f, indent=2)
    except OSError:
        log.exception("Failed to save history file: %s", HISTORY_FILE)


class Tracker:
    """Persists one history entry per run and aggregates them on request."""

    def record(self, report: RunReport) -> RunEntry:
        """Append *report* to the run history and return the new entry."""
        entries = _load_entries()
        entry = RunEntry.from_report(report)
        entries.append(entry)
        _save_entries(entries)
        log.info("Saved run: %d bytes saved in %s", entry.bytes_saved, entry.root)
        return entry

    def get_stats(self, period: str = "all") -> dict[str, Any]:
        """Get aggregated statistics for a time period.

        Args:
            period: One of 'today', 'week', 'month', 'all'.
        """
        all_runs = _load_entries()

        match period:
            case "today":
                cutoff = _start_of_today()
            case "week":
                cutoff = _start_of_today() - timedelta(days=7)
            case "month":
                cutoff = _start_of_today() - timedelta(days=30)
            case _:
                cutoff = None

        runs = [r for r in all_runs if cutoff is None or r.timestamp >= cutoff]

        return {
            "period": period,
            "run_count": len(runs),
            "projects_cleaned": sum(r.succeeded for r in runs),
            "projects_failed": sum(r.failed for r in runs),
            "files_deleted": sum(r.files_deleted for r in runs),
            "bytes_saved": sum(r.bytes_saved for r in runs),
            "lifetime_bytes_saved": sum(r.bytes_saved for r in all_runs),
        }


def _start_of_today() -> datetime:
    """Return the start of the current UTC day."""
    now = datetime.now(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)
