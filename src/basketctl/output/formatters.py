"""Rich/JSON output selection.

The CLI renders ServiceResult for humans (Rich tables, colors) or machines
(``--json``). The formatter picks the mode from :class:`OutputSettings`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from basketctl.output.renderers import MoneyFormat, render_quiet, render_result

if TYPE_CHECKING:
    from basketctl.services.result import ServiceResult


class OutputSettings(BaseModel):
    """Output mode plus the store's money format."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    currency_symbol: str = "$"
    decimals: int = 2


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display according to *settings*."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    money = MoneyFormat(symbol=settings.currency_symbol, decimals=settings.decimals)
    return render_result(result, verbose=settings.verbose, money=money)
