"""Commands for loading log files as a queryable table."""

from __future__ import annotations

import typer
from sqlalchemy.exc import SQLAlchemyError

from rdslogs.cli.common.context import CatalogAppContext, build_catalog_context
from rdslogs.cli.common.exits import die, exit_from_exc, ok_exit
from rdslogs.cli.common.options import (
    DsnOpt,
    PreferCsvOpt,
    SchemaOpt,
    TableOpt,
    YesOpt,
)
from rdslogs.cli.common.output import out
from rdslogs.core.catalog import load_log_files
from rdslogs.core.errors import (
    MixedLogFormatError,
    RegistrationError,
    StoreAccessError,
    StructuralMismatchError,
)

catalog_app = typer.Typer(
    help="Expose log files as tables through log_fdw.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@catalog_app.callback()
def _init(ctx: typer.Context, dsn: str | None = DsnOpt):
    """Initialize database context."""
    ctx.obj = build_catalog_context(dsn)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


@catalog_app.command()
def load(
    ctx: typer.Context,
    schema: str = SchemaOpt,
    table: str = TableOpt,
    csv: bool = PreferCsvOpt,
    yes: bool = YesOpt,
):
    """
    Load all available log files as partitions of one table.

    An existing table of the same name is dropped together with its
    partitions. Do not run concurrently for the same table.
    """
    appctx: CatalogAppContext = ctx.obj
    catalog = appctx.catalog

    try:
        exists = catalog.table_exists(schema, table)
    except SQLAlchemyError as exc:
        exit_from_exc(exc, message=f"Cannot query the database: {exc}", code=1)

    if exists and not yes:
        if not out.confirm(f"Table {schema}.{table} exists. Drop and reload it?"):
            ok_exit("Cancelled")

    try:
        with out.status("Loading log files..."):
            result = load_log_files(
                catalog,
                schema=schema,
                table=table,
                prefer_structured=csv,
            )
    except ValueError as exc:
        die(str(exc), code=2)
    except StructuralMismatchError as exc:
        exit_from_exc(exc, message=f"{exc}. The table is left partially loaded.")
    except MixedLogFormatError as exc:
        exit_from_exc(exc, message=str(exc))
    except RegistrationError as exc:
        exit_from_exc(exc, message=f"{exc}. The table is left partially loaded.")
    except StoreAccessError as exc:
        exit_from_exc(exc, message=str(exc))
    except SQLAlchemyError as exc:
        exit_from_exc(exc, message=f"Database error while preparing {schema}.{table}: {exc}")

    if not result.partitions:
        out.warn(result.message)
        raise typer.Exit(0)

    out.header("Registered partitions")
    out.kv(
        {
            "Table": result.full_name,
            "Format": result.log_format.value,
            "Partitions": len(result.partitions),
            "Replaced previous table": "yes" if result.replaced else "no",
        }
    )
    out.partitions_table(result.partitions)

    if result.skipped:
        out.warn(
            f"Skipped {len(result.skipped)} file(s): unrecognized names or "
            "overlapping partitions."
        )

    out.success(result.message)
