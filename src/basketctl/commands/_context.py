"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy Storefront initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from basketctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from basketctl.config.settings import BasketSettings
    from basketctl.infrastructure.storefront import Storefront
    from basketctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The storefront is created on first use so ``--help`` and ``--version``
    never touch a database.
    """

    def __init__(self, settings: BasketSettings) -> None:
        self.settings = settings
        self._store: Storefront | None = None

        from basketctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> Storefront:
        """The storefront instance (created lazily on first access)."""
        if self._store is None:
            from basketctl.infrastructure.storefront import Storefront

            self._store = Storefront(self.settings)
            self._store.init_event_bus(sync=self.settings.sync)
        return self._store

    def close(self) -> None:
        """Release the storefront, flushing queued plugin events."""
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so they don't
          pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
            currency_symbol=self.settings.store.currency_symbol,
            decimals=self.settings.store.decimals,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON output already carries the warnings.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
            click.echo(output, err=True)
            raise SystemExit(1)
