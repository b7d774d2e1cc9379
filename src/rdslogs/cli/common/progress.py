"""Progress display for log file downloads."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from rdslogs.core.download import (
    LogFileDownloader,
    LogFileDownloadResult,
    download_log_files,
)

console = Console()
_MAX_FILE_NAME_WIDTH = 48


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def download_with_progress(
    store: LogFileDownloader,
    names: list[str],
    destination: str | Path,
) -> list[LogFileDownloadResult]:
    """
    Download files while showing a progress bar with:
      - x/y files completed and the number of failures
      - the file currently being downloaded

    Returns the per-file results in download order.
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.fields[current]}[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("failures=[bold red]{task.fields[failures]}[/]"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task_id = progress.add_task(
        "download",
        total=max(len(names), 1),
        current=_truncate(names[0], _MAX_FILE_NAME_WIDTH) if names else "",
        failures=0,
    )
    failures = 0
    remaining = iter(names[1:])

    def _on_file(result: LogFileDownloadResult) -> None:
        nonlocal failures
        if not result.ok:
            failures += 1
        upcoming = next(remaining, "")
        progress.update(
            task_id,
            advance=1,
            failures=failures,
            current=_truncate(upcoming, _MAX_FILE_NAME_WIDTH),
        )

    with progress:
        results = download_log_files(store, names, destination, on_file=_on_file)
        progress.update(task_id, completed=max(len(names), 1))

    return results
