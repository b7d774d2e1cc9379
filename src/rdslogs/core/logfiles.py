"""Log file name parsing.

PostgreSQL on RDS / Aurora rotates its server log into files whose names
encode the UTC wall-clock time the file was opened, for example::

    postgresql.log.2024-01-02-0315      (minute rotation)
    postgresql.log.2024-01-02-03        (hourly rotation)
    postgresql.log.2024-01-02           (daily rotation)

With ``log_destination`` including ``csvlog`` every file also exists with a
``.csv`` suffix. This module turns such a name into a :class:`LogFile` that
carries the half-open time range the file's rows are guaranteed to fall in.
Names that do not match any known shape parse to ``None`` and are meant to
be skipped by callers.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

LOG_FILE_PREFIX = "postgresql.log."
STRUCTURED_SUFFIX = ".csv"


class LogFormat(str, Enum):
    """Output format of a log file (``csvlog`` vs. ``stderr``)."""

    STRUCTURED = "structured"
    PLAIN = "plain"

    @classmethod
    def of(cls, file_name: str) -> LogFormat:
        """Return the format a file name belongs to, judged by its suffix."""
        if file_name.endswith(STRUCTURED_SUFFIX):
            return cls.STRUCTURED
        return cls.PLAIN


class Granularity(str, Enum):
    """Rotation period encoded in a log file name."""

    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"

    @property
    def period(self) -> timedelta:
        return _PERIODS[self]


_PERIODS = {
    Granularity.MINUTE: timedelta(minutes=1),
    Granularity.HOUR: timedelta(hours=1),
    Granularity.DAY: timedelta(days=1),
}


@dataclass(frozen=True)
class TimeRange:
    """Half-open UTC interval ``[start, end)``."""

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: TimeRange) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class LogFile:
    """
    A recognized log file.

    Attributes:
        name: File name as reported by the store (no directory prefix).
        log_format: Structured (``.csv``) or plain.
        granularity: Rotation period encoded in the name.
        time_range: Interval every row of the file falls within.
    """

    name: str
    log_format: LogFormat
    granularity: Granularity
    time_range: TimeRange

    @property
    def is_structured(self) -> bool:
        return self.log_format == LogFormat.STRUCTURED


class FileNameShape(ABC):
    """One recognized file name layout."""

    granularity: Granularity

    @abstractmethod
    def match(self, name: str) -> TimeRange | None:
        """Return the file's time range, or None if the name has another shape."""
        ...


class RegexShape(FileNameShape):
    """
    Shape described by a regular expression over the timestamp part of a name.

    The pattern must define the named groups ``year``, ``month`` and ``day``
    and may define ``hour`` and ``minute``. Missing groups default to zero,
    which floors the start to the shape's granularity.
    """

    def __init__(self, granularity: Granularity, timestamp_pattern: str):
        self.granularity = granularity
        self.regex = re.compile(
            re.escape(LOG_FILE_PREFIX)
            + timestamp_pattern
            + f"(?:{re.escape(STRUCTURED_SUFFIX)})?"
        )

    def match(self, name: str) -> TimeRange | None:
        m = self.regex.fullmatch(name)
        if not m:
            return None
        parts = {k: int(v) for k, v in m.groupdict().items() if v is not None}
        try:
            start = datetime(
                parts["year"],
                parts["month"],
                parts["day"],
                parts.get("hour", 0),
                parts.get("minute", 0),
                tzinfo=timezone.utc,
            )
        except ValueError:
            # Right shape, impossible calendar value (month 13, hour 24, ...)
            return None
        return TimeRange(start=start, end=start + self.granularity.period)


_DATE = r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"

# Tried in order, first match wins.
SHAPES: tuple[FileNameShape, ...] = (
    RegexShape(Granularity.MINUTE, _DATE + r"-(?P<hour>\d{2})(?P<minute>\d{2})"),
    RegexShape(Granularity.HOUR, _DATE + r"-(?P<hour>\d{2})"),
    RegexShape(Granularity.DAY, _DATE),
)


def parse_log_file_name(
    name: str, log_format: LogFormat | None = None
) -> LogFile | None:
    """
    Parse a log file name into a :class:`LogFile`.

    Args:
        name: File name, e.g. ``postgresql.log.2024-01-02-03.csv``.
        log_format: If given, names of the other format do not match.

    Returns:
        The parsed log file, or None when the name is not recognized.
    """
    detected = LogFormat.of(name)
    if log_format is not None and detected != log_format:
        return None

    for shape in SHAPES:
        time_range = shape.match(name)
        if time_range is not None:
            return LogFile(
                name=name,
                log_format=detected,
                granularity=shape.granularity,
                time_range=time_range,
            )
    return None
