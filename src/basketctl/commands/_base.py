"""Shared Click pieces for basketctl commands.

Commands and groups built on :class:`BasketCommand` / :class:`BasketGroup`
take an ``examples`` block, printed by an eager ``--examples`` flag so
``--help`` stays short. The parameter decorators below keep the cart and
quote commands agreeing on how a line and a quantity are named.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])


class _ExamplesMixin:
    """Adds the ``examples`` keyword and the matching ``--examples`` flag."""

    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._print_examples,
                    help="Show usage examples.",
                )
            )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)


class BasketCommand(_ExamplesMixin, click.Command):
    pass


class BasketGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands default to :class:`BasketCommand`."""

    command_class = BasketCommand


def line_target(func: F) -> F:
    """``PRODUCT_ID`` argument plus ``--variant``, identifying one cart line."""
    func = click.option(
        "--variant",
        "variant_id",
        default=None,
        help="Legacy variant id of the line.",
    )(func)
    return click.argument("product_id")(func)


def qty_option(help_text: str) -> Callable[[F], F]:
    """Optional ``--qty``; decimal commas are accepted downstream."""
    return click.option("--qty", default=None, metavar="QTY", help=help_text)
