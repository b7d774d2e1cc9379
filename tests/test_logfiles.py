from datetime import datetime, timedelta, timezone
from itertools import combinations

import pytest

from rdslogs.core.logfiles import (
    Granularity,
    LogFormat,
    TimeRange,
    parse_log_file_name,
)


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("name", "granularity", "start", "period"),
    [
        ("postgresql.log.2024-01-02-0315", Granularity.MINUTE, _utc(2024, 1, 2, 3, 15), timedelta(minutes=1)),
        ("postgresql.log.2024-01-02-0315.csv", Granularity.MINUTE, _utc(2024, 1, 2, 3, 15), timedelta(minutes=1)),
        ("postgresql.log.2024-01-02-03", Granularity.HOUR, _utc(2024, 1, 2, 3), timedelta(hours=1)),
        ("postgresql.log.2024-01-02-03.csv", Granularity.HOUR, _utc(2024, 1, 2, 3), timedelta(hours=1)),
        ("postgresql.log.2024-01-02", Granularity.DAY, _utc(2024, 1, 2), timedelta(days=1)),
        ("postgresql.log.2024-01-02.csv", Granularity.DAY, _utc(2024, 1, 2), timedelta(days=1)),
    ],
)
def test_parse_recognizes_every_shape(name, granularity, start, period):
    log_file = parse_log_file_name(name)

    assert log_file is not None
    assert log_file.granularity == granularity
    assert log_file.time_range.start == start
    assert log_file.time_range.duration == period


def test_parse_floors_start_to_granularity():
    hour = parse_log_file_name("postgresql.log.2024-01-02-23")
    day = parse_log_file_name("postgresql.log.2024-12-31.csv")

    assert (hour.time_range.start.minute, hour.time_range.start.second) == (0, 0)
    assert (day.time_range.start.hour, day.time_range.start.minute) == (0, 0)
    assert day.time_range.end == _utc(2025, 1, 1)


def test_parse_returns_utc_timestamps():
    log_file = parse_log_file_name("postgresql.log.2024-07-01-12")

    assert log_file.time_range.start.tzinfo == timezone.utc


def test_parse_detects_format_from_suffix():
    assert parse_log_file_name("postgresql.log.2024-01-02-03.csv").log_format == LogFormat.STRUCTURED
    assert parse_log_file_name("postgresql.log.2024-01-02-03").log_format == LogFormat.PLAIN


def test_parse_with_explicit_format_rejects_other_variant():
    assert parse_log_file_name("postgresql.log.2024-01-02-03.csv", LogFormat.PLAIN) is None
    assert parse_log_file_name("postgresql.log.2024-01-02-03", LogFormat.STRUCTURED) is None
    assert parse_log_file_name("postgresql.log.2024-01-02-03", LogFormat.PLAIN) is not None


@pytest.mark.parametrize(
    "name",
    [
        "",
        "not-a-log-file",
        "postgresql.log",
        "postgresql.log.2024-01-02-3",
        "postgresql.log.2024-01-02-031",
        "postgresql.log.2024-1-02",
        "postgresql.log.2024-01-02-03.json",
        "postgresql.log.2024-01-02-03.csv.gz",
        "error/postgresql.log.2024-01-02-03",
        "postgresql.log.2024-13-02",
        "postgresql.log.2024-02-30-03",
        "postgresql.log.2024-01-02-24",
        "postgresql.log.2024-01-02-0360",
        "postgresqlXlogX2024-01-02",
        "postgresql.log.2024-01-0a",
    ],
)
def test_parse_skips_unrecognized_names(name):
    assert parse_log_file_name(name) is None


def test_hourly_structured_files_are_disjoint_and_contiguous():
    names = [f"postgresql.log.2024-01-02-{h:02d}.csv" for h in range(24)]
    ranges = [parse_log_file_name(n).time_range for n in names]

    for a, b in combinations(ranges, 2):
        assert not a.overlaps(b)
    for earlier, later in zip(ranges, ranges[1:]):
        assert earlier.end == later.start


def test_time_range_is_half_open():
    r = TimeRange(_utc(2024, 1, 2, 3), _utc(2024, 1, 2, 4))

    assert r.duration == timedelta(hours=1)
    assert not r.overlaps(TimeRange(_utc(2024, 1, 2, 4), _utc(2024, 1, 2, 5)))
    assert r.overlaps(TimeRange(_utc(2024, 1, 2, 3, 59), _utc(2024, 1, 2, 4)))
