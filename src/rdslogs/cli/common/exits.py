"""
Exit handling for the rdslogs commands.

Commands never return an exit code themselves: they call one of these
helpers, which print through the shared `out` console and raise `typer.Exit`.
Code 1 is used for failed loads, downloads and store errors; code 2 for
invalid input that Typer did not already reject.
"""

from typing import NoReturn

import typer

from rdslogs.cli.common.output import out


def ok_exit(msg: str | None = None) -> NoReturn:
    """Stop with code 0, e.g. when the operator declines to replace a table."""
    if msg:
        out.info(msg)
    raise typer.Exit(0)


def die(msg: str, code: int = 1) -> NoReturn:
    """Print `msg` as an error and exit with `code`."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Print a warning and exit, e.g. when a window selects no log files."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = 1) -> NoReturn:
    """
    Report a store or catalog failure and exit.

    `message` is what the operator sees; `exc` (a boto, SQLAlchemy or
    rdslogs error) stays chained as the cause of the exit.
    """
    out.error(message)
    raise typer.Exit(code) from exc
