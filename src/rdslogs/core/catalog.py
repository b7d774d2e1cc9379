"""Registration of log files as partitions of a unified log table.

Each log file becomes a child table (a ``log_fdw`` foreign table) that
inherits from one parent table, so that ``SELECT * FROM logs.postgres_logs``
reads every file. Structured partitions get a ``CHECK`` constraint on their
timestamp column derived from the file name, which lets the planner skip
files outside a queried time range (constraint exclusion).

A load always rebuilds the parent from scratch: the previous parent and all
of its partitions are dropped before the first new partition is created.
Runs against the same destination must not overlap.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, Sequence

from loguru import logger

from rdslogs.core.errors import (
    MixedLogFormatError,
    RdsLogsError,
    RegistrationError,
    StructuralMismatchError,
)
from rdslogs.core.listing import LogFileLister, list_log_file_names
from rdslogs.core.logfiles import LogFile, LogFormat, TimeRange, parse_log_file_name

DEFAULT_SCHEMA = "logs"
DEFAULT_TABLE = "postgres_logs"
TIMESTAMP_COLUMN = "log_time"

# "_YYYYMMDD_HHMI" appended to the parent name, inside PostgreSQL's NAMEDATALEN.
_PARTITION_SUFFIX_LEN = 14
_MAX_IDENTIFIER_LEN = 63


@dataclass(frozen=True)
class Column:
    """A column of a table as seen by the catalog."""

    name: str
    data_type: str


class CatalogAdapter(Protocol):
    """Interface of the table engine holding the unified log table."""

    def ensure_log_fdw(self) -> None:
        """Make sure the log file wrapper and its server are available."""
        ...

    def create_schema_if_absent(self, schema: str) -> None:
        ...

    def table_exists(self, schema: str, table: str) -> bool:
        ...

    def drop_table_cascade(self, schema: str, table: str) -> None:
        ...

    def create_partition_for_file(
        self, schema: str, partition: str, file_name: str
    ) -> None:
        """Create a table backed by the given log file."""
        ...

    def create_table_like(self, schema: str, table: str, template: str) -> None:
        """Create an empty table with the full structure of `template`."""
        ...

    def attach_as_child(self, schema: str, child: str, parent: str) -> None:
        ...

    def add_range_constraint(
        self,
        schema: str,
        table: str,
        column: str,
        lower: datetime,
        upper: datetime,
    ) -> None:
        """Require `lower <= column < upper` for every row of the table."""
        ...

    def column_shape(self, schema: str, table: str) -> list[Column]:
        """Return the table's columns in ordinal order."""
        ...


@dataclass(frozen=True)
class RegisteredPartition:
    """A log file registered as a partition of the unified table."""

    name: str
    file_name: str
    time_range: TimeRange
    constraint: TimeRange | None = None


@dataclass(frozen=True)
class LoadResult:
    """Outcome of a full load run."""

    schema: str
    table: str
    log_format: LogFormat
    replaced: bool = False
    partitions: list[RegisteredPartition] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.table}"

    @property
    def message(self) -> str:
        if not self.partitions:
            return (
                f"No Postgres log files found; table {self.full_name} was not created"
            )
        return f"Postgres logs loaded to table {self.full_name}"


def partition_name_for(parent: str, start: datetime) -> str:
    """Return the partition name for a file starting at `start` (minute precision)."""
    return f"{parent}_{start:%Y%m%d_%H%M}"


def _validate_table_name(table: str) -> None:
    if not table:
        raise ValueError("Table name must not be empty.")
    if len(table.encode()) + _PARTITION_SUFFIX_LEN > _MAX_IDENTIFIER_LEN:
        raise ValueError(
            f"Table name '{table}' is too long: partition names would exceed "
            f"{_MAX_IDENTIFIER_LEN} bytes."
        )


def bootstrap_catalog(catalog: CatalogAdapter, schema: str, table: str) -> bool:
    """
    Prepare the destination for a fresh load.

    Ensures the schema exists and drops a previous table of the same name
    together with every partition attached to it. The drop completes before
    anything new is created.

    Returns:
        True if a previous table was dropped.
    """
    _validate_table_name(table)
    catalog.ensure_log_fdw()
    catalog.create_schema_if_absent(schema)

    if not catalog.table_exists(schema, table):
        return False

    logger.warning(f"Table {schema}.{table} already exists. It will be dropped.")
    catalog.drop_table_cascade(schema, table)
    return True


def _shape_difference(partition: list[Column], parent: list[Column]) -> str | None:
    """Describe the first difference between two column shapes, if any."""
    if len(partition) != len(parent):
        return f"{len(partition)} columns vs. {len(parent)}"
    for mine, theirs in zip(partition, parent):
        if mine != theirs:
            return (
                f"column '{mine.name}' ({mine.data_type}) vs. "
                f"'{theirs.name}' ({theirs.data_type})"
            )
    return None


def _conflict_with(
    partition: str,
    log_file: LogFile,
    registered: Sequence[RegisteredPartition],
) -> RegisteredPartition | None:
    """Return an earlier partition of the run that `log_file` cannot coexist with."""
    for earlier in registered:
        if earlier.name == partition:
            return earlier
        if (
            log_file.is_structured
            and earlier.constraint is not None
            and earlier.constraint.overlaps(log_file.time_range)
        ):
            return earlier
    return None


def register_log_file(
    catalog: CatalogAdapter,
    file_name: str,
    *,
    schema: str,
    parent: str,
    is_first: bool,
    log_format: LogFormat,
    registered: Sequence[RegisteredPartition] = (),
) -> RegisteredPartition | None:
    """
    Register one log file as a partition of `schema.parent`.

    The first registered file also defines the parent: the parent is created
    with the partition's structure (no rows). Later partitions must have the
    same columns as the parent.

    Args:
        catalog: Table engine adapter.
        file_name: Name of the log file in the store.
        schema: Destination schema.
        parent: Name of the unified parent table.
        is_first: True if the parent does not exist yet in this run.
        log_format: Format of the current run; files of the other format
            are rejected.
        registered: Partitions already registered in this run. A file whose
            partition name is taken, or whose structured time range overlaps
            an earlier constraint (e.g. after a change of rotation period),
            is skipped.

    Returns:
        The registered partition, or None if the file was skipped.

    Raises:
        MixedLogFormatError: The file is not of the run's format.
        StructuralMismatchError: The partition's columns differ from the parent's.
    """
    log_file = parse_log_file_name(file_name)
    if log_file is None:
        logger.info(f"Skipping log file with unrecognized name: {file_name}")
        return None
    if log_file.log_format != log_format:
        raise MixedLogFormatError(
            f"Log file '{file_name}' is {log_file.log_format.value} but this run "
            f"loads {log_format.value} files."
        )

    time_range = log_file.time_range
    partition = partition_name_for(parent, time_range.start)
    earlier = _conflict_with(partition, log_file, registered)
    if earlier is not None:
        logger.warning(
            f"Skipping {file_name}: it collides with partition {earlier.name} "
            f"({earlier.file_name})"
        )
        return None

    logger.info(f"Registering {file_name} as {schema}.{partition}")

    catalog.create_partition_for_file(schema, partition, file_name)

    if is_first:
        catalog.create_table_like(schema, parent, partition)
    else:
        difference = _shape_difference(
            catalog.column_shape(schema, partition),
            catalog.column_shape(schema, parent),
        )
        if difference:
            raise StructuralMismatchError(partition, parent, difference)

    catalog.attach_as_child(schema, partition, parent)

    constraint = None
    if log_file.is_structured:
        catalog.add_range_constraint(
            schema, partition, TIMESTAMP_COLUMN, time_range.start, time_range.end
        )
        constraint = time_range

    return RegisteredPartition(
        name=partition,
        file_name=file_name,
        time_range=time_range,
        constraint=constraint,
    )


def load_log_files(
    catalog: CatalogAdapter,
    lister: LogFileLister | None = None,
    *,
    schema: str = DEFAULT_SCHEMA,
    table: str = DEFAULT_TABLE,
    prefer_structured: bool = True,
) -> LoadResult:
    """
    Load all available log files as partitions of `schema.table`.

    Any previous `schema.table` is replaced. Files are registered newest
    first. Unrecognized names, and files colliding with a newer partition of
    the run, are skipped; any other failure stops the run
    and leaves the partitions registered so far in place.

    Args:
        catalog: Table engine adapter.
        lister: Source of log file names; defaults to `catalog` itself.
        schema: Destination schema.
        table: Name of the unified parent table.
        prefer_structured: Use structured files when the instance writes them.
    """
    if lister is None:
        lister = catalog  # type: ignore[assignment]

    replaced = bootstrap_catalog(catalog, schema, table)
    listing = list_log_file_names(lister, prefer_structured=prefer_structured)

    partitions: list[RegisteredPartition] = []
    skipped: list[str] = []

    for file_name in listing.names:
        try:
            registered = register_log_file(
                catalog,
                file_name,
                schema=schema,
                parent=table,
                is_first=not partitions,
                log_format=listing.log_format,
                registered=partitions,
            )
        except RdsLogsError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise RegistrationError(file_name, str(exc)) from exc

        if registered is None:
            skipped.append(file_name)
        else:
            partitions.append(registered)

    result = LoadResult(
        schema=schema,
        table=table,
        log_format=listing.log_format,
        replaced=replaced,
        partitions=partitions,
        skipped=skipped,
    )
    logger.info(result.message)
    return result


def load_postgres_log_files(
    catalog: CatalogAdapter,
    schema: str = DEFAULT_SCHEMA,
    table: str = DEFAULT_TABLE,
    prefer_structured: bool = True,
) -> str:
    """Load all log files and return a confirmation naming the unified table."""
    return load_log_files(
        catalog,
        schema=schema,
        table=table,
        prefer_structured=prefer_structured,
    ).message
