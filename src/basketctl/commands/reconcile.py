"""Command: check the cart against live stock."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from basketctl.commands._base import BasketCommand

if TYPE_CHECKING:
    from basketctl.commands._context import AppContext


@click.command(
    cls=BasketCommand,
    examples="""\
  basketctl reconcile
  basketctl --sync reconcile""",
)
@click.pass_obj
def reconcile(app: AppContext) -> None:
    """Remove out-of-stock lines and clamp lines above available stock."""
    from basketctl.services.reconcile import ReconcileService

    app.emit(ReconcileService(app.store).reconcile())
