"""Command: prepare the order payload for checkout."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from basketctl.commands._base import BasketCommand

if TYPE_CHECKING:
    from basketctl.commands._context import AppContext


@click.command(
    cls=BasketCommand,
    examples="""\
  basketctl checkout
  basketctl --json checkout > order.json
  basketctl checkout --no-reconcile""",
)
@click.option(
    "--reconcile/--no-reconcile",
    default=True,
    show_default=True,
    help="Re-check stock before pricing.",
)
@click.pass_obj
def checkout(app: AppContext, reconcile: bool) -> None:
    """Re-price the cart and print the order items and totals."""
    from basketctl.services.checkout import CheckoutService

    app.emit(CheckoutService(app.store).prepare(reconcile=reconcile))
