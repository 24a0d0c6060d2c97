"""CheckoutService — build the order payload from the current cart.

The payload is what an external order sink persists verbatim. Placing the
order is not handled here; the cart is cleared separately once the sink
confirms.
"""

from __future__ import annotations

from typing import Any

from basketctl.domain.cart import compute_totals
from basketctl.services._helpers import load_pricing_inputs
from basketctl.services.base import BaseService
from basketctl.services.reconcile import ReconcileService
from basketctl.services.result import ServiceResult, failure


class CheckoutService(BaseService):
    """Prepares checkout for the persisted cart."""

    def prepare(self, *, reconcile: bool = True) -> ServiceResult:
        """Re-check stock, re-price every line, and return the order items.

        Refuses an empty cart and a cart holding products that are missing
        from the catalog or offline.
        """
        op = "checkout"
        warnings: list[str] = []

        if reconcile and self._store.cart.get():
            ReconcileService(self._store).run(warnings=warnings)

        lines = self._store.cart.get()
        if not lines:
            return failure(op, "EMPTY_CART", "Cart is empty").model_copy(
                update={"warnings": warnings}
            )

        products, discounts = load_pricing_inputs(
            self._store.catalog,
            self._store.catalog,
            (line.product_id for line in lines),
        )
        totals = compute_totals(lines, products, discounts)
        if totals.skipped:
            return failure(
                op,
                "UNAVAILABLE_ITEMS",
                f"Unavailable products in cart: {', '.join(totals.skipped)}",
                product_ids=totals.skipped,
            ).model_copy(update={"warnings": warnings})

        items: list[dict[str, Any]] = [
            {
                "product_id": quote.product_id,
                "product_slug": quote.slug,
                "qty": quote.normalized_qty,
                "unit_price": quote.unit_price,
                "line_total": quote.line_total,
                "is_weight": quote.is_weight,
            }
            for quote in totals.lines
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "items": items,
                "subtotal": totals.subtotal,
                "original_subtotal": totals.original_subtotal,
                "discount_total": totals.discount_total,
                "count": totals.count,
            },
            warnings=warnings,
        )
