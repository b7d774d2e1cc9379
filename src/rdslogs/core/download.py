"""Selection and download of raw log files for a date window.

Unlike the catalog loader, the window here is decided by plain substring
matching on file names: collection starts at the first file (in ascending
order) whose name contains the start value and stops after the first file
whose name contains the end value. Files before the start match are never
downloaded, even if their time range overlaps the window.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Protocol

from loguru import logger

from rdslogs.core.errors import RdsLogsError

_WINDOW_BOUND_RE = re.compile(r"\d{4}-\d{2}-\d{2}(-\d{2})?")


class LogFileDownloader(Protocol):
    """Interface for fetching one log file to a local path."""

    def download(self, name: str, destination: str | Path) -> int:
        """Write the complete file to `destination` and return its size in bytes."""
        ...


@dataclass(frozen=True)
class LogFileDownloadResult:
    """Result of downloading a single log file."""

    name: str
    path: Path
    ok: bool
    size_bytes: int = 0
    error: str | None = None


def parse_window_bound(value: str) -> str:
    """
    Validate a window bound of the form ``YYYY-MM-DD`` or ``YYYY-MM-DD-HH``.

    Returns:
        The stripped value, unchanged otherwise (it is matched as a substring).

    Raises:
        ValueError: If the value has another shape or is not a real date/hour.
    """
    value = value.strip()
    if not _WINDOW_BOUND_RE.fullmatch(value):
        raise ValueError(
            f"Invalid date '{value}'. Expected YYYY-MM-DD or YYYY-MM-DD-HH."
        )
    fmt = "%Y-%m-%d-%H" if len(value) > 10 else "%Y-%m-%d"
    try:
        datetime.strptime(value, fmt)
    except ValueError as exc:
        raise ValueError(f"Invalid date '{value}': {exc}") from exc
    return value


def select_files_in_window(names: Iterable[str], start: str, end: str) -> list[str]:
    """
    Return the file names from the first one containing `start` through the
    first one containing `end`, inclusive, in ascending order.
    """
    selected: list[str] = []
    collecting = False

    for name in sorted(names):
        if start in name:
            collecting = True
        if collecting:
            selected.append(name)
        if end in name:
            break

    return selected


def download_log_files(
    store: LogFileDownloader,
    names: Iterable[str],
    destination: str | Path,
    *,
    on_file: Callable[[LogFileDownloadResult], None] | None = None,
) -> list[LogFileDownloadResult]:
    """
    Download each file to ``destination/<name>``.

    A failing file is reported in its result and does not stop the others.

    Args:
        store: Store adapter used to fetch the files.
        names: File names to download, in download order.
        destination: Existing local directory.
        on_file: Optional callback invoked after each file (e.g. progress).
    """
    target_dir = Path(destination)
    results: list[LogFileDownloadResult] = []

    for name in names:
        path = target_dir / name
        logger.info(f"Downloading log file {name}")
        try:
            size = store.download(name, path)
            result = LogFileDownloadResult(name=name, path=path, ok=True, size_bytes=size)
        except (RdsLogsError, OSError) as exc:
            logger.warning(f"Download of {name} failed: {exc}")
            result = LogFileDownloadResult(name=name, path=path, ok=False, error=str(exc))

        results.append(result)
        if on_file is not None:
            on_file(result)

    return results
