"""Tests for the SQL catalog backend."""

from __future__ import annotations

import asyncio

from basketctl.domain.catalog import Discount, Product
from basketctl.infrastructure.storefront import Storefront
from tests.conftest import seed_catalog


class TestProducts:
    def test_round_trip_coerces_config(self, store: Storefront) -> None:
        seed_catalog(store)
        apples = store.catalog.get_product("apples")
        assert apples is not None
        assert apples.is_weight is True
        assert apples.price == 3.0
        assert isinstance(apples.online_config, str)

    def test_decimal_comma_price(self, store: Storefront) -> None:
        seed_catalog(store)
        eggs = store.catalog.get_product("eggs")
        assert eggs is not None
        assert eggs.price == 2.5

    def test_missing_product(self, store: Storefront) -> None:
        assert store.catalog.get_product("ghost") is None
        assert store.catalog.get_products_by_ids([]) == []

    def test_get_by_ids_dedupes(self, store: Storefront) -> None:
        seed_catalog(store)
        found = store.catalog.get_products_by_ids(["bread", "bread", "", "ghost"])
        assert [p.id for p in found] == ["bread"]

    def test_upsert_replaces(self, store: Storefront) -> None:
        store.catalog.upsert_products([Product(id="p1", price=1.0)])
        store.catalog.upsert_products([Product(id="p1", price=2.0)])
        product = store.catalog.get_product("p1")
        assert product is not None
        assert product.price == 2.0

    def test_dict_config_serialized(self, store: Storefront) -> None:
        store.catalog.upsert_products([Product(id="p1", online_config={"min": 2})])
        product = store.catalog.get_product("p1")
        assert product is not None
        assert product.online_config == '{"min": 2}'


class TestDiscounts:
    def test_ordered_by_priority(self, store: Storefront) -> None:
        seed_catalog(store)
        found = store.catalog.get_active_discounts(["bread"])
        assert [d.unit_price for d in found] == [8.0, 9.0]
        assert [d.priority for d in found] == [1, 5]

    def test_inactive_excluded(self, store: Storefront) -> None:
        store.catalog.replace_discounts(
            ["p1"],
            [
                Discount(product_id="p1", unit_price=1.0, active=False),
                Discount(product_id="p1", unit_price=2.0),
            ],
        )
        assert [d.unit_price for d in store.catalog.get_active_discounts(["p1"])] == [2.0]

    def test_replace_clears_previous(self, store: Storefront) -> None:
        seed_catalog(store)
        store.catalog.replace_discounts(["bread"], [])
        assert store.catalog.get_active_discounts(["bread"]) == []


class TestStock:
    def test_read_stock(self, store: Storefront) -> None:
        seed_catalog(store)
        assert store.catalog.read_stock("eggs") == 3.0
        assert store.catalog.read_stock("ghost") == 0.0

    def test_fetch_stock_async(self, store: Storefront) -> None:
        seed_catalog(store)
        assert asyncio.run(store.catalog.fetch_stock("bread")) == 20.0
