"""Commands for listing and downloading raw log files through the RDS API."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import typer

from rdslogs.cli.common.context import FilesAppContext, build_files_context
from rdslogs.cli.common.exits import die, exit_from_exc, warn_exit
from rdslogs.cli.common.options import (
    CsvOpt,
    DestOpt,
    DryRunOpt,
    EndOpt,
    InstanceOpt,
    ProfileOpt,
    RegionOpt,
    StartOpt,
)
from rdslogs.cli.common.output import out
from rdslogs.cli.common.progress import download_with_progress
from rdslogs.core.download import parse_window_bound, select_files_in_window
from rdslogs.core.errors import LogFileNotFoundError, StoreAccessError
from rdslogs.core.listing import filter_log_file_names
from rdslogs.core.logfiles import LogFormat

files_app = typer.Typer(
    help="List / download PostgreSQL log files of an RDS instance.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@files_app.callback()
def _init(
    ctx: typer.Context,
    instance: str = InstanceOpt,
    region: str | None = RegionOpt,
    profile: str | None = ProfileOpt,
):
    """Initialize RDS log store context."""
    ctx.obj = build_files_context(instance, region=region, profile=profile)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def default_window(now: datetime | None = None) -> tuple[str, str]:
    """Return (today, tomorrow) in UTC as YYYY-MM-DD."""
    now = now or datetime.now(timezone.utc)
    tomorrow = now + timedelta(days=1)
    return now.strftime("%Y-%m-%d"), tomorrow.strftime("%Y-%m-%d")


def _parse_bound_or_exit(value: str, *, option_name: str) -> str:
    """Validate a window bound and convert invalid input into a CLI usage error."""
    try:
        return parse_window_bound(value)
    except ValueError as exc:
        out.error(f"Invalid value for {option_name}: {exc}")
        raise typer.Exit(2) from exc


def _list_names_or_exit(appctx: FilesAppContext, log_format: LogFormat) -> list[str]:
    """List the instance's log files of one format, newest first."""
    try:
        with out.status("Loading log files..."):
            names = appctx.store.list_file_names()
    except LogFileNotFoundError as exc:
        exit_from_exc(exc, message=f"DB instance '{appctx.instance}' not found.", code=1)
    except StoreAccessError as exc:
        exit_from_exc(exc, message=str(exc), code=1)
    return filter_log_file_names(names, log_format)


@files_app.command("list")
def list_files(
    ctx: typer.Context,
    csv: bool = CsvOpt,
):
    """List the log files currently available on the instance."""
    appctx: FilesAppContext = ctx.obj
    log_format = LogFormat.STRUCTURED if csv else LogFormat.PLAIN

    names = _list_names_or_exit(appctx, log_format)
    if not names:
        warn_exit(f"No {log_format.value} log files found.")

    out.header("Log files")
    out.info(f"Instance: {appctx.instance} | Files: {len(names)}")
    out.files_table(names, title=f"{log_format.value.capitalize()} log files")


@files_app.command()
def download(
    ctx: typer.Context,
    csv: bool = CsvOpt,
    start: str | None = StartOpt,
    end: str | None = EndOpt,
    dest: Path = DestOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Download the log files from the first one matching --start through the
    first one matching --end.
    """
    appctx: FilesAppContext = ctx.obj
    log_format = LogFormat.STRUCTURED if csv else LogFormat.PLAIN

    today, tomorrow = default_window()
    start = _parse_bound_or_exit(start or today, option_name="--start")
    end = _parse_bound_or_exit(end or tomorrow, option_name="--end")

    out.info(f"Fetching logs generated between dates [ {start} ] and [ {end} ] (UTC).")

    names = _list_names_or_exit(appctx, log_format)
    selected = select_files_in_window(names, start, end)
    if not selected:
        warn_exit("No log files found in the requested window.")

    out.files_table(selected, title="Selected log files")

    if dry_run:
        warn_exit("Dry-run enabled: no files were downloaded")

    try:
        dest.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        die(f"Cannot create destination directory '{dest}': {exc}", code=1)

    results = download_with_progress(appctx.store, selected, dest)
    out.download_results_table(results)

    failed = [r for r in results if not r.ok]
    if failed:
        out.error(f"Failed to download {len(failed)} log file(s).")
        raise typer.Exit(1)

    out.success(f"PostgreSQL logs download completed: {len(results)} file(s) in {dest}")
