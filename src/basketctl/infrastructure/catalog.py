"""Catalog backend — product, discount, and stock lookups.

The engine only depends on the three lookup protocols below. ``SqlCatalog``
implements all of them over the ``products`` / ``discounts`` tables; any
other backend (a REST client, a test fake) can stand in as long as it
honors the same contracts.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import delete, insert, select

from basketctl.domain.catalog import Discount, Product, index_products, parse_discounts
from basketctl.infrastructure.database.schema import discounts, products

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class ProductLookup(Protocol):
    def get_products_by_ids(self, ids: Iterable[str]) -> list[Product]: ...


class DiscountLookup(Protocol):
    def get_active_discounts(self, product_ids: Iterable[str]) -> list[Discount]:
        """Active discount rows; several per product are allowed."""
        ...


class StockSource(Protocol):
    async def fetch_stock(self, product_id: str) -> float:
        """Current stock on hand. May raise on transport/backend errors."""
        ...


def _unique_ids(ids: Iterable[Any]) -> list[str]:
    return list(dict.fromkeys(str(i) for i in ids if i))


class SqlCatalog:
    """SQLAlchemy-backed implementation of all catalog lookups."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_products_by_ids(self, ids: Iterable[str]) -> list[Product]:
        unique = _unique_ids(ids)
        if not unique:
            return []
        with self._engine.connect() as conn:
            rows = conn.execute(select(products).where(products.c.id.in_(unique))).fetchall()
        return [Product.model_validate(dict(row._mapping)) for row in rows]

    def get_product(self, product_id: str) -> Product | None:
        found = self.get_products_by_ids([product_id])
        return found[0] if found else None

    def get_active_discounts(self, product_ids: Iterable[str]) -> list[Discount]:
        unique = _unique_ids(product_ids)
        if not unique:
            return []
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(discounts)
                .where(discounts.c.product_id.in_(unique))
                .where(discounts.c.is_active.is_(True))
                .order_by(discounts.c.product_id, discounts.c.sort_order, discounts.c.id)
            ).fetchall()
        return parse_discounts(row._mapping for row in rows)

    def read_stock(self, product_id: str) -> float:
        """Blocking stock read. A missing product has no stock."""
        with self._engine.connect() as conn:
            value = conn.execute(
                select(products.c.qty).where(products.c.id == product_id)
            ).scalar_one_or_none()
        return 0.0 if value is None else float(value)

    async def fetch_stock(self, product_id: str) -> float:
        return await asyncio.to_thread(self.read_stock, product_id)

    # ------------------------------------------------------------------
    # Writes (catalog loading)
    # ------------------------------------------------------------------

    def upsert_products(self, items: Iterable[Product]) -> int:
        """Insert or replace products by id. Returns the number written."""
        rows = [_product_row(p) for p in index_products(items).values()]
        if not rows:
            return 0
        with self._engine.begin() as conn:
            conn.execute(delete(products).where(products.c.id.in_([r["id"] for r in rows])))
            conn.execute(insert(products), rows)
        logger.debug("Upserted %d products", len(rows))
        return len(rows)

    def replace_discounts(self, product_ids: Iterable[str], items: Iterable[Discount]) -> int:
        """Replace all discount rows for *product_ids* with *items*."""
        rows = [
            {
                "product_id": d.product_id,
                "discount_price": d.unit_price,
                "is_active": d.active,
                "sort_order": d.priority,
            }
            for d in items
        ]
        targets = _unique_ids(product_ids)
        with self._engine.begin() as conn:
            conn.execute(delete(discounts).where(discounts.c.product_id.in_(targets)))
            if rows:
                conn.execute(insert(discounts), rows)
        return len(rows)


def _product_row(product: Product) -> dict[str, Any]:
    config = product.online_config
    if config is not None and not isinstance(config, str):
        config = json.dumps(config)
    return {
        "id": product.id,
        "slug": product.slug,
        "price": product.price,
        "qty": product.qty,
        "is_weight": product.is_weight,
        "is_online": product.is_online,
        "min_order_qty": product.min_order_qty,
        "qty_step": product.qty_step,
        "online_config": config,
    }
