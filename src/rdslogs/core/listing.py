"""Log file enumeration and format selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from loguru import logger

from rdslogs.core.logfiles import LogFormat


class LogFileLister(Protocol):
    """Interface of a store that can enumerate the instance's log files."""

    def list_file_names(self) -> list[str]:
        """Return all log file names currently available."""
        ...

    def structured_output_enabled(self) -> bool:
        """Return True if the instance writes structured (csvlog) files."""
        ...


@dataclass(frozen=True)
class LogFileListing:
    """File names selected for one run, all of the same format, newest first."""

    log_format: LogFormat
    names: list[str]


def filter_log_file_names(names: Iterable[str], log_format: LogFormat) -> list[str]:
    """
    Keep only names of the given format and sort them newest first.

    Names embed zero-padded UTC timestamps, so descending lexicographic
    order is descending chronological order.
    """
    return sorted(
        (n for n in names if LogFormat.of(n) == log_format),
        reverse=True,
    )


def list_log_file_names(
    lister: LogFileLister, *, prefer_structured: bool = True
) -> LogFileListing:
    """
    Select the log files to load.

    Structured files are used only when they are preferred AND the instance
    actually produces them; otherwise plain files are used. The two formats
    are never merged into one listing.
    """
    use_structured = prefer_structured and lister.structured_output_enabled()
    log_format = LogFormat.STRUCTURED if use_structured else LogFormat.PLAIN
    logger.info(f"Using {log_format.value} log format")

    names = filter_log_file_names(lister.list_file_names(), log_format)
    logger.debug(f"Found {len(names)} {log_format.value} log files")
    return LogFileListing(log_format=log_format, names=names)
