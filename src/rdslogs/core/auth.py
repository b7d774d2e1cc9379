"""Client construction for AWS and the log database.

This module centralizes creation of the boto3 RDS client and of the
SQLAlchemy engine used for catalog operations, and turns configuration
problems into a single :class:`AuthError` the CLI can report.
"""

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ProfileNotFound
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError

from rdslogs.core.errors import AuthError

_DEFAULT_DRIVER = "postgresql+psycopg"


def _normalize_dsn(dsn: str) -> str:
    """
    Normalize a PostgreSQL DSN for SQLAlchemy.

    - ``postgres://`` and ``postgresql://`` select the psycopg driver
    - surrounding whitespace is removed
    """
    dsn = dsn.strip()
    for scheme in ("postgres://", "postgresql://"):
        if dsn.startswith(scheme):
            return f"{_DEFAULT_DRIVER}://{dsn[len(scheme):]}"
    return dsn


def get_rds_client(region: str | None = None, profile: str | None = None):
    """
    Create a boto3 RDS client.

    Credentials and the default region are resolved by boto3 (environment,
    ``~/.aws/config``, instance metadata). Retries use botocore's standard mode.
    """
    try:
        session = boto3.Session(profile_name=profile, region_name=region)
        return session.client(
            "rds",
            config=BotoConfig(retries={"max_attempts": 5, "mode": "standard"}),
        )
    except ProfileNotFound as exc:
        raise AuthError(f"AWS profile '{profile}' not found.") from exc
    except BotoCoreError as exc:
        raise AuthError(f"Could not create RDS client: {exc}") from exc


def get_engine(dsn: str | None) -> Engine:
    """Create a SQLAlchemy engine for the database that holds the log tables."""
    if not dsn:
        raise AuthError("Missing database DSN. Pass --dsn or set RDSLOGS_DSN.")
    try:
        url = make_url(_normalize_dsn(dsn))
        return create_engine(url, pool_pre_ping=True)
    except ArgumentError as exc:
        raise AuthError(f"Invalid database DSN: {exc}") from exc
