"""Shared service-layer helper functions."""

from __future__ import annotations

from collections.abc import Iterable

from basketctl.domain.catalog import Discount, Product, index_products
from basketctl.domain.resolver import pick_winning_discount
from basketctl.infrastructure.catalog import DiscountLookup, ProductLookup


def load_pricing_inputs(
    products: ProductLookup,
    discounts: DiscountLookup,
    product_ids: Iterable[str],
) -> tuple[dict[str, Product], dict[str, Discount]]:
    """Fetch products and their winning discounts for *product_ids* in one pass."""
    ids = list(dict.fromkeys(product_ids))
    by_id = index_products(products.get_products_by_ids(ids))
    winners = pick_winning_discount(discounts.get_active_discounts(ids))
    return by_id, winners
