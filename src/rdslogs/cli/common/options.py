"""Common CLI options for the CLI."""

from pathlib import Path

import typer

from rdslogs.cli.common.logger import DEFAULT_LOG_LEVEL
from rdslogs.core.catalog import DEFAULT_SCHEMA, DEFAULT_TABLE

LogLevelOpt = typer.Option(
    DEFAULT_LOG_LEVEL,
    "--log-level",
    envvar="RDSLOGS_LOG_LEVEL",
    help="Log level for diagnostics on stderr (DEBUG, INFO, WARNING, ERROR)",
)

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    envvar="AWS_PROFILE",
    help="AWS profile (from ~/.aws/config)",
)

RegionOpt = typer.Option(
    None,
    "--region",
    "-r",
    envvar=["RDSLOGS_REGION", "AWS_REGION"],
    help="AWS region of the DB instance",
)

InstanceOpt = typer.Option(
    ...,
    "--instance",
    "-d",
    envvar="RDSLOGS_INSTANCE",
    help="RDS / Aurora PostgreSQL DB instance identifier",
)

DsnOpt = typer.Option(
    None,
    "--dsn",
    envvar="RDSLOGS_DSN",
    help="PostgreSQL connection URL of the instance (postgresql://user@host/db)",
)

SchemaOpt = typer.Option(
    DEFAULT_SCHEMA,
    "--schema",
    envvar="RDSLOGS_SCHEMA",
    help="Schema of the unified log table (created if missing)",
)

TableOpt = typer.Option(
    DEFAULT_TABLE,
    "--table",
    envvar="RDSLOGS_TABLE",
    help="Name of the unified log table (replaced if it exists)",
)

PreferCsvOpt = typer.Option(
    True,
    "--csv/--no-csv",
    help="Use CSV log files when the instance writes them",
)

CsvOpt = typer.Option(
    False,
    "--csv/--no-csv",
    "-c",
    help="Use CSV log files instead of plain log files",
)

StartOpt = typer.Option(
    None,
    "--start",
    "-s",
    help="Start date of log file [YYYY-MM-DD or YYYY-MM-DD-HH]. Defaults to today (UTC)",
)

EndOpt = typer.Option(
    None,
    "--end",
    "-e",
    help="End date of log file [YYYY-MM-DD or YYYY-MM-DD-HH]. Defaults to tomorrow (UTC)",
)

DestOpt = typer.Option(
    Path("."),
    "--dest",
    help="Directory to write the downloaded files to",
    file_okay=False,
)

YesOpt = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt")

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show which files would be downloaded, but don't download anything",
)
