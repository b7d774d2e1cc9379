from datetime import datetime, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import PLAIN_COLUMNS
from rdslogs.cli import cli
from rdslogs.cli.commands import catalog as catalog_cmd
from rdslogs.cli.commands import files as files_cmd
from rdslogs.cli.common.context import CatalogAppContext, FilesAppContext
from rdslogs.core.catalog import Column

runner = CliRunner()

REMOTE_FILES = [
    "postgresql.log.2024-01-01-23",
    "postgresql.log.2024-01-02-00",
    "postgresql.log.2024-01-02-00.csv",
    "postgresql.log.2024-01-02-23",
    "postgresql.log.2024-01-03-00",
    "postgresql.log.2024-01-03-01",
]


class _Store:
    def __init__(self, files):
        self.files = files
        self.downloaded: list[str] = []

    def list_file_names(self):
        return list(self.files)

    def download(self, name, destination):
        self.downloaded.append(name)
        Path(destination).write_text(f"{name}\n")
        return len(name) + 1


@pytest.fixture
def store(monkeypatch):
    store = _Store(REMOTE_FILES)

    def _build(instance, *, region, profile):
        return FilesAppContext(profile=profile, region=region, instance=instance, store=store)

    monkeypatch.setattr(files_cmd, "build_files_context", _build)
    return store


def _use_catalog(monkeypatch, catalog):
    monkeypatch.setattr(
        catalog_cmd,
        "build_catalog_context",
        lambda dsn: CatalogAppContext(engine=None, catalog=catalog),
    )


def test_default_window_is_today_through_tomorrow_utc():
    now = datetime(2024, 12, 31, 22, 0, tzinfo=timezone.utc)

    assert files_cmd.default_window(now) == ("2024-12-31", "2025-01-01")


def test_download_dry_run_selects_window_without_downloading(store, tmp_path):
    result = runner.invoke(
        cli.app,
        [
            "files", "--instance", "pgprod", "download",
            "--start", "2024-01-02", "--end", "2024-01-03",
            "--dest", str(tmp_path), "--dry-run",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Dry-run" in result.output
    assert store.downloaded == []


def test_download_writes_one_local_file_per_remote_file(store, tmp_path):
    result = runner.invoke(
        cli.app,
        [
            "files", "--instance", "pgprod", "download",
            "-s", "2024-01-02", "-e", "2024-01-03", "--dest", str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert store.downloaded == [
        "postgresql.log.2024-01-02-00",
        "postgresql.log.2024-01-02-23",
        "postgresql.log.2024-01-03-00",
    ]
    assert sorted(p.name for p in tmp_path.iterdir()) == store.downloaded


def test_download_csv_flag_only_considers_structured_files(store, tmp_path):
    result = runner.invoke(
        cli.app,
        [
            "files", "--instance", "pgprod", "download", "--csv",
            "-s", "2024-01-02", "-e", "2024-01-03", "--dest", str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert store.downloaded == ["postgresql.log.2024-01-02-00.csv"]


def test_download_rejects_malformed_dates(store, tmp_path):
    result = runner.invoke(
        cli.app,
        ["files", "--instance", "pgprod", "download", "--start", "02/01/2024"],
    )

    assert result.exit_code == 2
    assert store.downloaded == []


def test_catalog_load_prints_confirmation(monkeypatch, fake_catalog):
    catalog = fake_catalog(["postgresql.log.2024-01-02-03", "postgresql.log.2024-01-02-04"])
    _use_catalog(monkeypatch, catalog)

    result = runner.invoke(cli.app, ["catalog", "load", "--yes"])

    assert result.exit_code == 0, result.output
    assert "logs.postgres_logs" in result.output
    assert len(catalog.children_of("logs", "postgres_logs")) == 2


def test_catalog_load_structural_mismatch_exits_non_zero(monkeypatch, fake_catalog):
    catalog = fake_catalog(
        ["postgresql.log.2024-01-02-03", "postgresql.log.2024-01-02-04"],
        shapes={"postgresql.log.2024-01-02-03": PLAIN_COLUMNS + [Column("x", "text")]},
    )
    _use_catalog(monkeypatch, catalog)

    result = runner.invoke(cli.app, ["catalog", "load", "--yes"])

    assert result.exit_code == 1


def test_catalog_load_rejects_overlong_table_name(monkeypatch, fake_catalog):
    _use_catalog(monkeypatch, fake_catalog())

    result = runner.invoke(cli.app, ["catalog", "load", "--yes", "--table", "t" * 60])

    assert result.exit_code == 2
