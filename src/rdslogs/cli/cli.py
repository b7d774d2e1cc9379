"""CLI application for RDS PostgreSQL log file tooling."""

import typer

from rdslogs.cli.commands.catalog import catalog_app
from rdslogs.cli.commands.files import files_app
from rdslogs.cli.common.logger import setup_logging
from rdslogs.cli.common.options import LogLevelOpt

app = typer.Typer(
    help="rdslogs - RDS / Aurora PostgreSQL log file tooling",
    no_args_is_help=True,
)


@app.callback()
def _main(log_level: str = LogLevelOpt):
    """Configure logging for all commands."""
    setup_logging(log_level)


app.add_typer(files_app, name="files", help="List / download raw log files.")
app.add_typer(catalog_app, name="catalog", help="Load log files as a unified table.")


if __name__ == "__main__":
    app()
