"""Command group: cart display and quantity controls."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from basketctl.commands._base import BasketGroup, line_target, qty_option
from basketctl.domain.types import StepDirection

if TYPE_CHECKING:
    from basketctl.commands._context import AppContext

@click.group(
    cls=BasketGroup,
    examples="""\
  basketctl cart show
  basketctl cart add apples --qty 1.5
  basketctl cart inc apples
  basketctl cart set eggs 12
  basketctl cart remove eggs
  basketctl cart clear""",
)
def cart() -> None:
    """View and change the cart."""


@cart.command("show")
@click.pass_obj
def show(app: AppContext) -> None:
    """Show priced cart lines and totals."""
    from basketctl.services.cart import CartService

    app.emit(CartService(app.store).show())


@cart.command(
    "add",
    examples="""\
  basketctl cart add apples
  basketctl cart add apples --qty 2,5""",
)
@line_target
@qty_option("Quantity to add (default: minimum order).")
@click.pass_obj
def add(app: AppContext, product_id: str, qty: str | None, variant_id: str | None) -> None:
    """Add PRODUCT_ID to the cart."""
    from basketctl.services.cart import CartService

    app.emit(CartService(app.store).add(product_id, qty, variant_id=variant_id))


@cart.command("set")
@line_target
@click.argument("qty")
@click.pass_obj
def set_qty(app: AppContext, product_id: str, qty: str, variant_id: str | None) -> None:
    """Set the quantity of PRODUCT_ID (0 removes it)."""
    from basketctl.services.cart import CartService

    app.emit(CartService(app.store).set_qty(product_id, qty, variant_id=variant_id))


@cart.command("inc")
@line_target
@click.pass_obj
def inc(app: AppContext, product_id: str, variant_id: str | None) -> None:
    """Increase PRODUCT_ID by one step."""
    from basketctl.services.cart import CartService

    app.emit(CartService(app.store).step(product_id, StepDirection.INC, variant_id=variant_id))


@cart.command("dec")
@line_target
@click.pass_obj
def dec(app: AppContext, product_id: str, variant_id: str | None) -> None:
    """Decrease PRODUCT_ID by one step; removes it below the minimum quantity."""
    from basketctl.services.cart import CartService

    app.emit(CartService(app.store).step(product_id, StepDirection.DEC, variant_id=variant_id))


@cart.command("remove")
@line_target
@click.pass_obj
def remove(app: AppContext, product_id: str, variant_id: str | None) -> None:
    """Remove PRODUCT_ID from the cart."""
    from basketctl.services.cart import CartService

    app.emit(CartService(app.store).remove(product_id, variant_id=variant_id))


@cart.command("clear")
@click.pass_obj
def clear(app: AppContext) -> None:
    """Remove every line."""
    from basketctl.services.cart import CartService

    app.emit(CartService(app.store).clear())
