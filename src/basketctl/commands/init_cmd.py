"""Command: workspace initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from basketctl.commands._base import BasketCommand

if TYPE_CHECKING:
    from basketctl.commands._context import AppContext

_INIT_EXAMPLES = """\
  basketctl init
  basketctl init ./shop --name corner-market
  basketctl init . --currency EUR"""


@click.command("init", cls=BasketCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--name", default=None, help="Store name (default: directory name).")
@click.option("--currency", default="$", show_default=True, help="Currency symbol.")
@click.pass_obj
def init_cmd(app: AppContext, path: str, name: str | None, currency: str) -> None:
    """Initialize a basketctl workspace."""
    from basketctl.services.init import InitService

    root = Path(path).resolve()
    app.emit(InitService.init_workspace(root, name=name, currency_symbol=currency))
