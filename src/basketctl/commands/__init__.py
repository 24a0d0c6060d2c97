"""Subcommand modules for basketctl.

``register_commands()`` uses deferred imports to keep ``basketctl --help``
fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root group."""
    # --- Groups ---
    from basketctl.commands.cart import cart
    from basketctl.commands.catalog import catalog

    cli.add_command(cart)
    cli.add_command(catalog)

    # --- Standalone commands ---
    from basketctl.commands.checkout import checkout
    from basketctl.commands.init_cmd import init_cmd
    from basketctl.commands.quote import quote
    from basketctl.commands.reconcile import reconcile

    cli.add_command(init_cmd)
    cli.add_command(quote)
    cli.add_command(reconcile)
    cli.add_command(checkout)
