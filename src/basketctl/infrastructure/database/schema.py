"""SQLAlchemy Core table definitions.

Two separate metadata objects:

- ``backend_metadata`` — the catalog the storefront reads (products and
  discounts). In production this is the hosted relational backend.
- ``local_metadata`` — client-owned state: the key-value store holding the
  serialized cart and the notification event log. Never shared between
  clients.
"""

from __future__ import annotations

from sqlalchemy import (
    REAL,
    Boolean,
    Column,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

backend_metadata = MetaData()
local_metadata = MetaData()

# --- Backend catalog ---

products = Table(
    "products",
    backend_metadata,
    Column("id", Text, primary_key=True),
    Column("slug", Text, nullable=False, server_default=""),
    Column("price", REAL, nullable=False, server_default="0"),
    Column("qty", REAL, nullable=False, server_default="0"),  # stock on hand
    Column("is_weight", Boolean, nullable=False, server_default="0"),
    Column("is_online", Boolean, nullable=False, server_default="1"),
    Column("min_order_qty", REAL),
    Column("qty_step", REAL),
    Column("online_config", Text),  # JSON
    Column("updated", Text),
)

discounts = Table(
    "discounts",
    backend_metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Text, nullable=False),
    Column("discount_price", REAL),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("sort_order", Integer, nullable=False, server_default="0"),
    Index("ix_discounts_product", "product_id"),
)

# --- Local client state ---

kv_store = Table(
    "kv_store",
    local_metadata,
    Column("key", Text, primary_key=True),
    Column("value", Text, nullable=False),
    Column("updated", Text, nullable=False),
)

event_wal = Table(
    "event_wal",
    local_metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),  # pending | completed | failed | dead_letter
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
    Column("completed", Text),
    Index("ix_event_wal_status", "status"),
)
