"""Database engine setup.

Local state lives in SQLite at ``{root}/.basketctl/local.db`` (WAL mode).
The catalog backend defaults to ``{root}/.basketctl/catalog.db`` but any
SQLAlchemy URL can be configured via ``[backend] url``.

SQLAlchemy Core (not ORM) is used: every access is a short read or a
single-statement write, with no benefit from identity maps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from basketctl.infrastructure.database.schema import backend_metadata, local_metadata

LOCAL_DB_NAME = "local.db"
CATALOG_DB_NAME = "catalog.db"


def create_db_engine(url: str) -> Engine:
    """Create an engine; SQLite connections get WAL mode and foreign keys."""
    engine = create_engine(url, echo=False)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_local_database(state_dir: Path) -> Engine:
    """Create ``local.db`` with the key-value and event log tables.

    Idempotent — safe to call on an existing workspace.
    """
    state_dir.mkdir(parents=True, exist_ok=True)
    (state_dir / "plugins").mkdir(exist_ok=True)
    engine = create_db_engine(f"sqlite:///{state_dir / LOCAL_DB_NAME}")
    local_metadata.create_all(engine)
    return engine


def init_backend_database(state_dir: Path, url: str | None = None) -> Engine:
    """Connect to the catalog backend, creating its tables if missing."""
    if url is None:
        state_dir.mkdir(parents=True, exist_ok=True)
        url = f"sqlite:///{state_dir / CATALOG_DB_NAME}"
    engine = create_db_engine(url)
    backend_metadata.create_all(engine)
    return engine
