"""Command: price a product at a quantity."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from basketctl.commands._base import BasketCommand, qty_option

if TYPE_CHECKING:
    from basketctl.commands._context import AppContext


@click.command(
    cls=BasketCommand,
    examples="""\
  basketctl quote apples --qty 4.7
  basketctl quote eggs --qty 12
  basketctl --json quote cheese""",
)
@click.argument("product_id")
@qty_option("Requested quantity (default: minimum order).")
@click.pass_obj
def quote(app: AppContext, product_id: str, qty: str | None) -> None:
    """Quote PRODUCT_ID: snapped quantity, unit price, and line total."""
    from basketctl.services.pricing import PricingService

    app.emit(PricingService(app.store).quote(product_id, qty))
