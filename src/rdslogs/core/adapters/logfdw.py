from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import String, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from rdslogs.core.catalog import Column
from rdslogs.core.errors import StoreAccessError

LOG_FDW_EXTENSION = "log_fdw"
DEFAULT_SERVER_NAME = "log_server"
RANGE_CONSTRAINT_NAME = "check_date_range"


class LogFdwCatalog:
    """
    Adapter around a PostgreSQL database with the ``log_fdw`` extension.

    It serves both as the log file lister (``list_postgres_log_files()``)
    and as the catalog holding the unified log table. Every method runs in
    its own transaction, committed on return.

    Identifiers are always quoted with the dialect's identifier quoting and
    values are bound as parameters; DDL literals are escaped by the dialect.
    """

    def __init__(self, engine: Engine, server_name: str = DEFAULT_SERVER_NAME) -> None:
        self.engine = engine
        self.server_name = server_name
        self._preparer = engine.dialect.identifier_preparer
        self._literal = String().literal_processor(dialect=engine.dialect)

    # -- quoting helpers -------------------------------------------------

    def _ident(self, name: str) -> str:
        return self._preparer.quote_identifier(name)

    def _table(self, schema: str, table: str) -> str:
        return f"{self._ident(schema)}.{self._ident(table)}"

    def _timestamp(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return f"{self._literal(value.isoformat(sep=' '))}::timestamptz"

    def _ddl(self, conn: Connection, statement: str) -> None:
        # exec_driver_sql: no bind parameter parsing of ":" in literals
        conn.exec_driver_sql(statement)

    # -- lister ----------------------------------------------------------

    def list_file_names(self) -> list[str]:
        """Return the log file names visible to ``log_fdw``."""
        try:
            with self.engine.begin() as conn:
                rows = conn.execute(
                    text("SELECT file_name FROM public.list_postgres_log_files()")
                )
                return [row.file_name for row in rows]
        except SQLAlchemyError as exc:
            raise StoreAccessError(f"Could not list log files: {exc}") from exc

    def structured_output_enabled(self) -> bool:
        """Return True if ``log_destination`` includes ``csvlog``."""
        try:
            with self.engine.begin() as conn:
                setting = conn.execute(
                    text(
                        "SELECT setting FROM pg_catalog.pg_settings "
                        "WHERE name = 'log_destination'"
                    )
                ).scalar()
        except SQLAlchemyError as exc:
            raise StoreAccessError(f"Could not read log_destination: {exc}") from exc
        return "csvlog" in (setting or "")

    # -- catalog ---------------------------------------------------------

    def ensure_log_fdw(self) -> None:
        """Create the ``log_fdw`` extension and its foreign server if missing."""
        with self.engine.begin() as conn:
            has_extension = conn.execute(
                text("SELECT count(1) FROM pg_catalog.pg_extension WHERE extname = :name"),
                {"name": LOG_FDW_EXTENSION},
            ).scalar()
            if not has_extension:
                self._ddl(conn, f"CREATE EXTENSION {self._ident(LOG_FDW_EXTENSION)}")

            has_server = conn.execute(
                text(
                    "SELECT count(1) FROM pg_catalog.pg_foreign_server "
                    "WHERE srvname = :name"
                ),
                {"name": self.server_name},
            ).scalar()
            if not has_server:
                self._ddl(
                    conn,
                    f"CREATE SERVER {self._ident(self.server_name)} "
                    f"FOREIGN DATA WRAPPER {self._ident(LOG_FDW_EXTENSION)}",
                )

    def create_schema_if_absent(self, schema: str) -> None:
        with self.engine.begin() as conn:
            self._ddl(conn, f"CREATE SCHEMA IF NOT EXISTS {self._ident(schema)}")

    def table_exists(self, schema: str, table: str) -> bool:
        with self.engine.begin() as conn:
            count = conn.execute(
                text(
                    "SELECT count(1) FROM information_schema.tables "
                    "WHERE table_schema = :schema AND table_name = :table"
                ),
                {"schema": schema, "table": table},
            ).scalar()
        return bool(count)

    def drop_table_cascade(self, schema: str, table: str) -> None:
        with self.engine.begin() as conn:
            # One NOTICE per dropped partition otherwise.
            self._ddl(conn, "SET LOCAL client_min_messages = warning")
            self._ddl(conn, f"DROP TABLE {self._table(schema, table)} CASCADE")

    def create_partition_for_file(
        self, schema: str, partition: str, file_name: str
    ) -> None:
        """Create a foreign table over `file_name` named `schema.partition`."""
        with self.engine.begin() as conn:
            # The helper creates the table in the first schema of the search path.
            conn.execute(
                text("SELECT set_config('search_path', :path, true)"),
                {"path": self._ident(schema)},
            )
            conn.execute(
                text(
                    "SELECT public.create_foreign_table_for_log_file("
                    ":table_name, :server_name, :file_name)"
                ),
                {
                    "table_name": partition,
                    "server_name": self.server_name,
                    "file_name": file_name,
                },
            )

    def create_table_like(self, schema: str, table: str, template: str) -> None:
        with self.engine.begin() as conn:
            self._ddl(
                conn,
                f"CREATE TABLE {self._table(schema, table)} "
                f"(LIKE {self._table(schema, template)} INCLUDING ALL)",
            )

    def attach_as_child(self, schema: str, child: str, parent: str) -> None:
        with self.engine.begin() as conn:
            self._ddl(
                conn,
                f"ALTER TABLE {self._table(schema, child)} "
                f"INHERIT {self._table(schema, parent)}",
            )

    def add_range_constraint(
        self,
        schema: str,
        table: str,
        column: str,
        lower: datetime,
        upper: datetime,
    ) -> None:
        with self.engine.begin() as conn:
            self._ddl(conn, self.range_constraint_sql(schema, table, column, lower, upper))

    def range_constraint_sql(
        self,
        schema: str,
        table: str,
        column: str,
        lower: datetime,
        upper: datetime,
    ) -> str:
        """Return the ``ALTER TABLE ... ADD CONSTRAINT`` statement for a range."""
        col = self._ident(column)
        return (
            f"ALTER TABLE {self._table(schema, table)} "
            f"ADD CONSTRAINT {self._ident(RANGE_CONSTRAINT_NAME)} "
            f"CHECK ({col} >= {self._timestamp(lower)} "
            f"AND {col} < {self._timestamp(upper)})"
        )

    def column_shape(self, schema: str, table: str) -> list[Column]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                text(
                    "SELECT a.attname AS name, "
                    "format_type(a.atttypid, a.atttypmod) AS data_type "
                    "FROM pg_catalog.pg_attribute a "
                    "JOIN pg_catalog.pg_class c ON c.oid = a.attrelid "
                    "JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace "
                    "WHERE n.nspname = :schema AND c.relname = :table "
                    "AND a.attnum > 0 AND NOT a.attisdropped "
                    "ORDER BY a.attnum"
                ),
                {"schema": schema, "table": table},
            )
            return [Column(name=row.name, data_type=row.data_type) for row in rows]
