"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds the SQLAlchemy connection URL from environment-backed settings.
- Creates the Engine (connection pool + SQL execution entry point).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- Uses `URL.create(...)` so credentials stay environment-driven.
- SQLite is the default driver for local development and tests; connections
  are shared across the FastAPI threadpool, hence `check_same_thread=False`.
- All ORM models must inherit from `declarativeBase`.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import URL
from sqlalchemy.orm import declarative_base
from sqlalchemy.schema import MetaData
from portal.database.config.config import settings

connection_url = URL.create(
    drivername=settings.DB_DRIVER_NAME,
    username=settings.DB_USERNAME,
    password=settings.DB_PASSWORD,
    host=settings.DB_HOST,
    database=settings.DB_DATABASE_NAME,
)
"""SQLAlchemy connection URL built from Settings."""

connect_args = {"check_same_thread": False} if settings.DB_DRIVER_NAME.startswith("sqlite") else {}

connection_engine = create_engine(connection_url, connect_args=connect_args)
"""Engine object: core interface to the database (connections, pooling, SQL execution)."""

metadata = MetaData()
"""Schema-level information about tables, constraints and indexes, shared across all models."""

declarativeBase = declarative_base(metadata=metadata)
"""Root class for ORM models."""


def create_tables() -> None:
    """Create every table registered on `metadata` (no-op for existing ones)."""
    # entities must be imported so their tables are registered
    import portal.database.entities  # noqa: F401

    metadata.create_all(connection_engine)


def drop_tables() -> None:
    """Drop every table registered on `metadata`."""
    import portal.database.entities  # noqa: F401

    metadata.drop_all(connection_engine)
