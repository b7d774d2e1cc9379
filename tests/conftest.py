from __future__ import annotations

import sys
from pathlib import Path

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402

from rdslogs.core.catalog import Column  # noqa: E402

CSV_COLUMNS = [
    Column("log_time", "timestamp(3) with time zone"),
    Column("user_name", "text"),
    Column("database_name", "text"),
    Column("process_id", "integer"),
    Column("error_severity", "text"),
    Column("message", "text"),
]
PLAIN_COLUMNS = [Column("log_entry", "text")]


class FakeCatalog:
    """In-memory stand-in for a log_fdw database (lister + catalog)."""

    def __init__(self, files=(), *, structured=False, shapes=None, fail_on=()):
        self.files = list(files)
        self.structured = structured
        self.shapes = dict(shapes or {})
        self.fail_on = set(fail_on)
        self.schemas: set[str] = set()
        self.tables: dict[tuple[str, str], dict] = {}
        self.calls: list[str] = []
        self.log_fdw_ready = False

    # lister
    def list_file_names(self) -> list[str]:
        self.calls.append("list_file_names")
        return list(self.files)

    def structured_output_enabled(self) -> bool:
        return self.structured

    # catalog
    def ensure_log_fdw(self) -> None:
        self.calls.append("ensure_log_fdw")
        self.log_fdw_ready = True

    def create_schema_if_absent(self, schema: str) -> None:
        self.calls.append(f"create_schema:{schema}")
        self.schemas.add(schema)

    def table_exists(self, schema: str, table: str) -> bool:
        return (schema, table) in self.tables

    def drop_table_cascade(self, schema: str, table: str) -> None:
        self.calls.append(f"drop:{schema}.{table}")
        del self.tables[(schema, table)]
        for key in [k for k, v in self.tables.items() if v["parent"] == table]:
            del self.tables[key]

    def create_partition_for_file(self, schema, partition, file_name) -> None:
        self.calls.append(f"create_partition:{partition}")
        if file_name in self.fail_on:
            raise RuntimeError(f"could not open {file_name}")
        if (schema, partition) in self.tables:
            raise RuntimeError(f'relation "{partition}" already exists')
        default = CSV_COLUMNS if file_name.endswith(".csv") else PLAIN_COLUMNS
        self.tables[(schema, partition)] = {
            "columns": list(self.shapes.get(file_name, default)),
            "parent": None,
            "constraint": None,
            "file": file_name,
        }

    def create_table_like(self, schema, table, template) -> None:
        self.calls.append(f"create_like:{table}:{template}")
        self.tables[(schema, table)] = {
            "columns": list(self.tables[(schema, template)]["columns"]),
            "parent": None,
            "constraint": None,
            "file": None,
        }

    def attach_as_child(self, schema, child, parent) -> None:
        self.calls.append(f"attach:{child}:{parent}")
        assert (schema, parent) in self.tables
        self.tables[(schema, child)]["parent"] = parent

    def add_range_constraint(
        self, schema, table, column, lower: datetime, upper: datetime
    ) -> None:
        self.calls.append(f"constraint:{table}")
        self.tables[(schema, table)]["constraint"] = (column, lower, upper)

    def column_shape(self, schema, table) -> list[Column]:
        return list(self.tables[(schema, table)]["columns"])

    def children_of(self, schema: str, parent: str) -> list[str]:
        return sorted(
            name for (s, name), t in self.tables.items() if s == schema and t["parent"] == parent
        )


@pytest.fixture
def fake_catalog():
    """Factory for FakeCatalog instances."""
    return FakeCatalog
