"""Pluggy hook specifications for storefront notifications.

Both events are dispatched fire-and-forget through the EventBus; a plugin
that raises never affects the cart.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("basketctl")


class BasketctlHookSpec:
    """Hook specifications for the basketctl plugin system."""

    @hookspec
    def post_stock_correction(
        self,
        product_id: str,
        variant_id: str | None,
        action: str,
        previous_qty: float,
        new_qty: float | None,
        message: str,
    ) -> None:
        """Called after a cart line was removed or clamped against live stock.

        ``action`` is ``"remove"`` or ``"clamp"``; ``new_qty`` is None for
        removals. ``message`` is the shopper-facing notice.
        """

    @hookspec
    def post_cart_change(
        self,
        op: str,
        product_id: str | None,
        qty: float | None,
    ) -> None:
        """Called after a cart mutation (``qty`` None when the line is gone)."""
