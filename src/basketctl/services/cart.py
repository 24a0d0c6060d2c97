"""CartService — cart display and quantity controls.

Every mutation goes through ``CartStore.mutate`` and is followed by a stock
check of every line in the cart, so the persisted cart never holds more than the
backend reported on hand. Stock corrections surface as result warnings.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

from basketctl.domain.cart import (
    CartLine,
    LineKey,
    add_line,
    compute_totals,
    find_line,
    remove_line,
    set_line_qty,
)
from basketctl.domain.catalog import Product
from basketctl.domain.numbers import parse_number
from basketctl.domain.pricing import normalize_config
from basketctl.domain.quantity import format_quantity, normalize_quantity, step_quantity
from basketctl.domain.types import StepDirection
from basketctl.services._helpers import load_pricing_inputs
from basketctl.services.base import BaseService
from basketctl.services.reconcile import ReconcileService
from basketctl.services.result import ServiceResult, failure


class CartService(BaseService):
    """Reads and mutates the persisted cart."""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def show(self) -> ServiceResult:
        """Price every line against the live catalog."""
        return ServiceResult(ok=True, op="cart_show", data=self.snapshot())

    def snapshot(self) -> dict[str, Any]:
        """Display payload: priced items, totals, and skipped product ids."""
        lines = self._store.cart.get()
        products, discounts = load_pricing_inputs(
            self._store.catalog,
            self._store.catalog,
            (line.product_id for line in lines),
        )
        totals = compute_totals(lines, products, discounts)

        items: list[dict[str, Any]] = []
        for line, quote in zip(_priced(lines, products), totals.lines, strict=True):
            item = quote.model_dump(mode="json")
            item["qty"] = line.qty
            item["display_qty"] = format_quantity(
                quote.normalized_qty, quote.unit, quote.is_weight
            )
            items.append(item)

        return {
            "items": items,
            "subtotal": totals.subtotal,
            "original_subtotal": totals.original_subtotal,
            "discount_total": totals.discount_total,
            "count": totals.count,
            "skipped": totals.skipped,
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        product_id: str,
        qty: Any = None,
        *,
        variant_id: str | None = None,
    ) -> ServiceResult:
        """Add a product; *qty* defaults to its minimum order quantity.

        Adding to an existing line increases it; the sum is snapped to the
        product's step.
        """
        op = "cart_add"
        product = self._store.catalog.get_product(product_id)
        if product is None or not product.is_online:
            return failure(op, "NOT_FOUND", f"No product found with ID: {product_id}")

        config = normalize_config(product.online_config, product)
        if qty is None:
            amount = config.min_qty
        else:
            amount = parse_number(qty)
            if not math.isfinite(amount) or amount <= 0:
                return failure(op, "INVALID_QTY", f"Invalid quantity: {qty!r}")

        key: LineKey = (product_id, variant_id)

        def change(lines: list[CartLine]) -> list[CartLine]:
            merged = add_line(lines, product_id, amount, variant_id=variant_id)
            line = find_line(merged, key)
            if line is None:
                return merged
            return set_line_qty(merged, key, normalize_quantity(line.qty, config))

        return self._apply(op, key, change)

    def set_qty(
        self,
        product_id: str,
        qty: Any,
        *,
        variant_id: str | None = None,
    ) -> ServiceResult:
        """Replace a line's quantity. Zero or less removes the line."""
        op = "cart_set"
        key: LineKey = (product_id, variant_id)
        if find_line(self._store.cart.get(), key) is None:
            return failure(op, "NOT_FOUND", f"Product not in cart: {product_id}")

        amount = parse_number(qty)
        if not math.isfinite(amount):
            return failure(op, "INVALID_QTY", f"Invalid quantity: {qty!r}")
        if amount <= 0:
            return self._apply(op, key, lambda lines: remove_line(lines, key))

        product = self._store.catalog.get_product(product_id)
        if product is not None:
            amount = normalize_quantity(amount, normalize_config(product.online_config, product))
        return self._apply(op, key, lambda lines: set_line_qty(lines, key, amount))

    def step(
        self,
        product_id: str,
        direction: StepDirection,
        *,
        variant_id: str | None = None,
    ) -> ServiceResult:
        """Move a line one step up or down; stepping down past zero removes it."""
        op = f"cart_{direction}"
        key: LineKey = (product_id, variant_id)
        line = find_line(self._store.cart.get(), key)
        if line is None:
            return failure(op, "NOT_FOUND", f"Product not in cart: {product_id}")

        product = self._store.catalog.get_product(product_id)
        if product is None:
            return failure(op, "NOT_FOUND", f"No product found with ID: {product_id}")

        config = normalize_config(product.online_config, product)
        target = step_quantity(line.qty, direction, config)
        if target is None:
            return self._apply(op, key, lambda lines: remove_line(lines, key))
        return self._apply(op, key, lambda lines: set_line_qty(lines, key, target))

    def remove(self, product_id: str, *, variant_id: str | None = None) -> ServiceResult:
        op = "cart_remove"
        key: LineKey = (product_id, variant_id)
        if find_line(self._store.cart.get(), key) is None:
            return failure(op, "NOT_FOUND", f"Product not in cart: {product_id}")
        return self._apply(op, key, lambda lines: remove_line(lines, key))

    def clear(self) -> ServiceResult:
        op = "cart_clear"
        warnings: list[str] = []
        removed = len(self._store.cart.get())
        self._store.cart.clear()
        self._dispatch_event(
            "post_cart_change", {"op": op, "product_id": None, "qty": None}, warnings
        )
        data = self.snapshot()
        data["removed"] = removed
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _apply(
        self,
        op: str,
        key: LineKey,
        change: Callable[[list[CartLine]], list[CartLine]],
    ) -> ServiceResult:
        warnings: list[str] = []
        lines = self._store.cart.mutate(change, op=op)
        line = find_line(lines, key)
        self._dispatch_event(
            "post_cart_change",
            {"op": op, "product_id": key[0], "qty": None if line is None else line.qty},
            warnings,
        )

        if lines:
            ReconcileService(self._store).run(warnings=warnings)

        data = self.snapshot()
        current = find_line(self._store.cart.get(), key)
        data["line"] = None if current is None else current.model_dump(mode="json")
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)


def _priced(lines: list[CartLine], products: dict[str, Product]) -> list[CartLine]:
    """Lines that ``compute_totals`` prices, in the same order."""
    return [
        line
        for line in lines
        if (product := products.get(line.product_id)) is not None and product.is_online
    ]
