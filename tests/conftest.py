"""Shared pytest fixtures and test helpers for basketctl tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from basketctl.config.settings import BasketSettings
from basketctl.domain.catalog import Discount, Product
from basketctl.infrastructure.storefront import Storefront

# Loose JSON config blob as stored on the backend row.
APPLES_CONFIG = {
    "unit": "kg",
    "is_weight": True,
    "min": 0.5,
    "step": 0.5,
    "options": [{"type": "bulk", "label": "5 kg+", "min_qty": 5, "unit_price": 2.0}],
}

SAMPLE_PRODUCTS: list[dict[str, Any]] = [
    {
        "id": "apples",
        "slug": "apples",
        "price": 3.0,
        "is_weight": True,
        "qty": 40,
        "online_config": json.dumps(APPLES_CONFIG),
    },
    {"id": "bread", "slug": "bread", "price": 10.0, "qty": 20},
    {"id": "eggs", "slug": "eggs", "price": "2,5", "qty": 3},
    {"id": "salt", "slug": "salt", "price": 1.0, "qty": 0},
    {"id": "old-cheese", "slug": "old-cheese", "price": 9.0, "qty": 5, "is_online": False},
]

SAMPLE_DISCOUNTS: list[dict[str, Any]] = [
    {"product_id": "bread", "discount_price": 8.0, "is_active": True, "sort_order": 1},
    {"product_id": "bread", "discount_price": 9.0, "is_active": True, "sort_order": 5},
]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> BasketSettings:
    return BasketSettings.from_cli(root=tmp_path, sync=True)


@pytest.fixture
def store(settings: BasketSettings) -> Iterator[Storefront]:
    """Storefront on a temp workspace with an empty catalog."""
    s = Storefront(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def stocked_store(store: Storefront) -> Storefront:
    """Storefront with the sample catalog loaded and a sync event bus."""
    seed_catalog(store)
    store.init_event_bus(sync=True)
    return store


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    """The sample catalog as a JSON document on disk."""
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"products": SAMPLE_PRODUCTS, "discounts": SAMPLE_DISCOUNTS}))
    return path


@pytest.fixture
def _isolated_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp workspace so the CLI creates isolated state.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.delenv("BASKETCTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def seed_catalog(store: Storefront) -> None:
    """Write the sample products and discounts into the catalog backend."""
    products = [Product.model_validate(row) for row in SAMPLE_PRODUCTS]
    discounts = [Discount.model_validate(row) for row in SAMPLE_DISCOUNTS]
    store.catalog.upsert_products(products)
    store.catalog.replace_discounts([p.id for p in products], discounts)


def set_stock(store: Storefront, product_id: str, qty: float) -> None:
    """Change a product's stock on the backend and drop the cached value."""
    product = store.catalog.get_product(product_id)
    assert product is not None
    store.catalog.upsert_products([product.model_copy(update={"qty": qty})])
    store.stock.invalidate(product_id)


class FakeStockSource:
    """In-memory stock backend that counts calls and can be gated or broken."""

    def __init__(self, stock: dict[str, Any] | None = None) -> None:
        self.stock: dict[str, Any] = dict(stock or {})
        self.calls: list[str] = []
        self.fail = False
        self.gate: Any = None  # asyncio.Event, created inside the test's loop

    async def fetch_stock(self, product_id: str) -> Any:
        self.calls.append(product_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ConnectionError("backend down")
        return self.stock.get(product_id, 0)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
