"""Command group: catalog management."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from basketctl.commands._base import BasketGroup

if TYPE_CHECKING:
    from basketctl.commands._context import AppContext


@click.group(
    cls=BasketGroup,
    examples="""\
  basketctl catalog load catalog.json
  basketctl --json catalog load ./fixtures/store.json""",
)
def catalog() -> None:
    """Manage the local catalog backend."""


@catalog.command(
    "load",
    examples="""\
  basketctl catalog load catalog.json""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def load(app: AppContext, file: Path) -> None:
    """Upsert products and discounts from a JSON FILE."""
    from basketctl.services.catalog import CatalogService

    app.emit(CatalogService(app.store).load(file))
