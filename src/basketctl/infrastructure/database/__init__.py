"""SQL catalog backend and local state tables via SQLAlchemy Core."""

from basketctl.infrastructure.database.engine import (
    create_db_engine,
    init_backend_database,
    init_local_database,
)
from basketctl.infrastructure.database.schema import (
    backend_metadata,
    discounts,
    event_wal,
    kv_store,
    local_metadata,
    products,
)

__all__ = [
    "backend_metadata",
    "create_db_engine",
    "discounts",
    "event_wal",
    "init_backend_database",
    "init_local_database",
    "kv_store",
    "local_metadata",
    "products",
]
