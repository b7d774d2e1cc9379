"""Application context management for the CLI."""

from dataclasses import dataclass

from sqlalchemy.engine import Engine

from rdslogs.cli.common.exits import die
from rdslogs.core.adapters.logfdw import LogFdwCatalog
from rdslogs.core.adapters.rds import RDSLogStore
from rdslogs.core.auth import get_engine, get_rds_client
from rdslogs.core.errors import AuthError


@dataclass
class FilesAppContext:
    """Application context holding the RDS client and log store adapter."""

    profile: str | None
    region: str | None
    instance: str
    store: RDSLogStore


@dataclass
class CatalogAppContext:
    """Application context holding the database engine and catalog adapter."""

    engine: Engine
    catalog: LogFdwCatalog


def build_files_context(
    instance: str, *, region: str | None, profile: str | None
) -> FilesAppContext:
    """Build the context for commands that read log files through the RDS API."""
    try:
        client = get_rds_client(region=region, profile=profile)
    except AuthError as exc:
        die(str(exc), code=1)
    store = RDSLogStore(client, instance_id=instance)
    return FilesAppContext(profile=profile, region=region, instance=instance, store=store)


def build_catalog_context(dsn: str | None) -> CatalogAppContext:
    """Build the context for commands that operate on the log tables."""
    try:
        engine = get_engine(dsn)
    except AuthError as exc:
        die(str(exc), code=2)
    return CatalogAppContext(engine=engine, catalog=LogFdwCatalog(engine))
