"""CLI interface for gdc."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from gdc.console import ConsoleWriter
from gdc.core.engine import CleanEngine, RunReport
from gdc.core.report import write_failure_log
from gdc.core.summary import format_megabytes
from gdc.core.task import CleanTask, TaskResult
from gdc.core.tracker import PERIODS, Tracker
from gdc.errors import FilesystemError
from gdc.settings import KNOWN_KEYS, Settings
from gdc.utils import format_elapsed

_DIR_TYPE = click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _resolve_root(directory: Path | None, settings: Settings) -> Path:
    """Pick the search root: --dir, then the search.root setting, then cwd."""
    if directory is None:
        directory = settings.get_path("search.root")
        if directory is not None and not directory.is_dir():
            raise click.BadParameter(
                f"Configured search.root '{directory}' is not an existing directory.",
                param_hint="search.root",
            )
    return (directory or Path.cwd()).absolute()


def _report_to_dict(report: RunReport, log_path: Path | None) -> dict:
    return {
        "root": str(report.root),
        "directories_searched": report.directories_searched,
        "elapsed_seconds": round(report.elapsed, 3),
        "succeeded": {
            "count": report.successes.count,
            "files_deleted": report.successes.files_deleted,
            "bytes_saved": report.successes.bytes_saved,
            "projects": [str(r.task.directory) for r in report.successes.results],
        },
        "failed": {
            "count": report.failures.count,
            "files_deleted": report.failures.files_deleted,
            "bytes_saved": report.failures.bytes_saved,
            "projects": [str(r.task.directory) for r in report.failures.results],
        },
        "not_started": [str(task.directory) for task, _ in report.launch_errors],
        "log_file": str(log_path) if log_path else None,
    }


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.pass_context
def main(ctx: click.Context, verbose: int) -> None:
    """gdc: find Gradle projects and run their clean task.

    Without a subcommand, cleans every project below the current directory.
    """
    _setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        ctx.invoke(clean)


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--dir", "-d", "directory", type=_DIR_TYPE, default=None,
              help="Directory to search (default: search.root setting or current directory)")
@click.option("--report-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Where to write the failure log (default: system temp directory)")
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
def clean(directory: Path | None, report_dir: Path | None, as_json: bool) -> None:
    """Run 'clean' in every Gradle project found."""
    settings = Settings()
    root = _resolve_root(directory, settings)
    # Keep stdout clean for JSON; progress and task output go to stderr
    console = ConsoleWriter(file=sys.stderr if as_json else None)

    def on_result(result: TaskResult) -> None:
        if result.was_successful():
            console.success(f"  ✓ {result.task.directory}")
        else:
            console.failure(f"  ✗ {result.task.directory} (exit {result.exit_code()})")

    def on_launch_error(task: CleanTask, message: str) -> None:
        console.failure(f"  ✗ {task.directory} (could not start)")

    def on_warning(path: Path, exc: OSError) -> None:
        console.failure(f"  ! Access denied, skipped {path}")

    engine = CleanEngine(
        on_directory=lambda path: console.progress(f"Searching {path}"),
        on_task=lambda task: console.working(f"Running {task}"),
        on_output=lambda line: console.line(click.style(f"    {line}", dim=True)),
        on_result=on_result,
        on_launch_error=on_launch_error,
        on_warning=on_warning,
    )

    try:
        report = engine.run(root)
    except (FilesystemError, OverflowError) as exc:
        console.failure(f"Error: {exc}")
        sys.exit(1)
    console.clear_progress()
    Tracker().record(report)

    log_dir = report_dir or settings.get_path("report.directory")
    try:
        log_path = write_failure_log(report.failures.results, report.launch_errors, directory=log_dir)
    except FilesystemError as exc:
        console.failure(f"Could not write failure log: {exc}")
        log_path = None

    if as_json:
        click.echo(json.dumps(_report_to_dict(report, log_path), indent=2))
        sys.exit(0 if report.ok else 1)

    successes = report.successes
    failed_count = report.failures.count + len(report.launch_errors)
    console.line()
    console.success(
        f"{successes.count} project(s) cleaned: {successes.files_deleted:,} files deleted, "
        f"{successes.human_readable_size()} saved"
    )
    failure_line = f"{failed_count} project(s) failed"
    if log_path:
        failure_line += f", details in {log_path}"
    if failed_count:
        console.failure(failure_line)
    else:
        console.line(failure_line)
    console.line(
        f"Searched {report.directories_searched:,} directories in {format_elapsed(report.elapsed)}"
    )
    sys.exit(0 if report.ok else 1)


# ── find ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--dir", "-d", "directory", type=_DIR_TYPE, default=None,
              help="Directory to search (default: search.root setting or current directory)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def find(directory: Path | None, as_json: bool) -> None:
    """List Gradle projects without cleaning them."""
    root = _resolve_root(directory, Settings())
    console = ConsoleWriter(file=sys.stderr if as_json else None)
    engine = CleanEngine(
        on_directory=lambda path: console.progress(f"Searching {path}"),
        on_warning=lambda path, exc: console.failure(f"  ! Access denied, skipped {path}"),
    )

    try:
        matches = engine.find(root)
    except FilesystemError as exc:
        console.failure(f"Error: {exc}")
        sys.exit(1)
    console.clear_progress()

    if as_json:
        data = [{"project": str(m.parent), "match": str(m), "command": list(CleanTask.derive(m).command)}
                for m in matches]
        click.echo(json.dumps(data, indent=2))
        return

    if not matches:
        console.line("No Gradle projects found.")
        return
    for match in matches:
        console.line(f"  {click.style(str(match.parent), fg='cyan')}  ({match.name})")
    console.line(f"\n{len(matches)} project(s) found")


# ── stats ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--period", "-p", default="all", type=click.Choice(PERIODS))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(period: str, as_json: bool) -> None:
    """Show space saved by previous runs."""
    data = Tracker().get_stats(period)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"\nStatistics ({period})\n")
    click.echo(f"  Runs:             {data['run_count']}")
    click.echo(f"  Projects cleaned: {data['projects_cleaned']:,}")
    click.echo(f"  Projects failed:  {data['projects_failed']:,}")
    click.echo(f"  Files deleted:    {data['files_deleted']:,}")
    click.echo(f"  Space saved:      {click.style(format_megabytes(data['bytes_saved']), fg='green', bold=True)}")
    click.echo(f"  Lifetime total:   {click.style(format_megabytes(data['lifetime_bytes_saved']), fg='cyan', bold=True)}")
    click.echo()


# ── config ───────────────────────────────────────────────────────────────

@main.command()
@click.option("--show", is_flag=True, help="Show current settings")
@click.option("--set", "assignment", nargs=2, type=str, default=None, metavar="KEY VALUE",
              help=f"Set a setting ({', '.join(KNOWN_KEYS)})")
def config(show: bool, assignment: tuple[str, str] | None) -> None:
    """Show or change persisted defaults."""
    settings = Settings()

    if assignment:
        key, value = assignment
        if key not in KNOWN_KEYS:
            raise click.BadParameter(f"Unknown key '{key}'", param_hint="--set")
        settings.set(key, value)
        click.echo(f"{key} = {value}")
        return

    if show:
        click.echo(f"  {click.style('File:', bold=True)} {settings.path}")
        for key, value in settings.as_dict().items():
            shown = value if value is not None else click.style("(default)", fg="bright_black")
            click.echo(f"  {key:18s} {shown}")
        return

    click.echo("Use --show or --set KEY VALUE", err=True)
    sys.exit(1)
