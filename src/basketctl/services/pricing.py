"""PricingService — quotes for a product at a requested quantity."""

from __future__ import annotations

from typing import Any

from basketctl.domain.pricing import normalize_config
from basketctl.domain.quantity import format_quantity
from basketctl.domain.resolver import pick_winning_discount, quote_line
from basketctl.services.base import BaseService
from basketctl.services.result import ServiceResult, failure


class PricingService(BaseService):
    """Prices one product the way the cart would."""

    def quote(self, product_id: str, qty: Any = None) -> ServiceResult:
        """Normalize *qty* (default: the minimum order quantity) and price it.

        The payload carries the resolved pricing config alongside the line
        quote so callers can show the tier table.
        """
        op = "quote"
        product = self._store.catalog.get_product(product_id)
        if product is None or not product.is_online:
            return failure(op, "NOT_FOUND", f"No product found with ID: {product_id}")

        config = normalize_config(product.online_config, product)
        discount = pick_winning_discount(
            self._store.catalog.get_active_discounts([product_id])
        ).get(product_id)

        quote = quote_line(product, config.min_qty if qty is None else qty, discount)
        data = quote.model_dump(mode="json")
        data["display_qty"] = format_quantity(quote.normalized_qty, quote.unit, quote.is_weight)
        data["discount_unit_price"] = None if discount is None else discount.unit_price
        data["config"] = config.model_dump(mode="json")
        return ServiceResult(ok=True, op=op, data=data)
