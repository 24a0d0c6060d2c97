"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from basketctl.output.console import create_console, get_output, style_for_action

if TYPE_CHECKING:
    from rich.console import Console

    from basketctl.services.result import ServiceResult


@dataclass(frozen=True)
class MoneyFormat:
    """Currency rendering: ``MoneyFormat("$", 2)(3.5) == "$3.50"``."""

    symbol: str = "$"
    decimals: int = 2

    def __call__(self, value: Any) -> str:
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            return "-"
        return f"{self.symbol}{value:,.{max(0, self.decimals)}f}"


# ── Public API ────────────────────────────────────────────────────────


def render_result(
    result: ServiceResult,
    *,
    verbose: bool = False,
    money: MoneyFormat | None = None,
) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal, which is
    the case inside Click's CliRunner and piped output.
    """
    console = create_console()
    fmt = money or MoneyFormat()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose, money=fmt)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(
            f"{item.get('product_id', '')}\t{item.get('qty', '')}"
            for item in items
            if isinstance(item, dict)
        )
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="basket.ok")
    op = Text(f"  {result.op}", style="basket.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="basket.key")
    if key.endswith("_id"):
        v = Text(str(value), style="basket.id")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_totals(console: Console, data: dict[str, Any], money: MoneyFormat) -> None:
    discount_total = data.get("discount_total", 0.0) or 0.0
    if discount_total > 0:
        console.print(
            Text.assemble(
                ("  Before discounts: ", "basket.key"),
                (money(data.get("original_subtotal")), "basket.struck"),
            )
        )
        console.print(
            Text.assemble(
                ("  You save: ", "basket.key"),
                (money(discount_total), "basket.saving"),
            )
        )
    console.print(
        Text.assemble(
            (f"  Subtotal ({data.get('count', 0)} items): ", "basket.key"),
            (money(data.get("subtotal")), "basket.money"),
        )
    )


def _line_table(items: list[dict[str, Any]], money: MoneyFormat, *, verbose: bool) -> Table:
    """Build a Rich Table of priced cart lines."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Product", style="basket.id", no_wrap=True)
    table.add_column("Qty", justify="right")
    table.add_column("Unit", justify="right")
    table.add_column("Total", justify="right", style="basket.money")
    table.add_column("Saving", justify="right", style="basket.saving")
    if verbose:
        table.add_column("Base", justify="right", style="dim")

    for item in items:
        pct = item.get("discount_percent", 0) or 0
        row = [
            str(item.get("slug") or item.get("product_id", "")),
            str(item.get("display_qty", item.get("normalized_qty", ""))),
            money(item.get("unit_price")),
            money(item.get("line_total")),
            f"-{pct}%" if pct > 0 else "",
        ]
        if verbose:
            row.append(money(item.get("base_total")))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="basket.error")
    op = Text(f"  {result.op}", style="basket.op")
    console.print(label, op, Text(" — "), msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Cart renderers ────────────────────────────────────────────────────


def _render_cart(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    money: MoneyFormat,
) -> None:
    """Render the priced cart; mutations get a status line first."""
    d = result.data
    if result.op != "cart_show":
        _status_line(console, result)

    items = d.get("items", [])
    if not items:
        console.print("  Cart is empty.")
    else:
        console.print(_line_table(items, money, verbose=verbose))
        _render_totals(console, d, money)

    skipped = d.get("skipped", [])
    if skipped:
        console.print(Text(f"  Unavailable: {', '.join(skipped)}", style="basket.warning"))


def _render_quote(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    money: MoneyFormat,
) -> None:
    d = result.data
    _field(console, "product_id", d.get("product_id", ""))
    _field(console, "qty", d.get("display_qty", d.get("normalized_qty", "")))
    _field(console, "unit_price", money(d.get("unit_price")))
    _field(console, "line_total", money(d.get("line_total")))
    if d.get("discount_percent"):
        saving = money(d.get("discount_amount"))
        _field(console, "saving", f"{saving} (-{d['discount_percent']}%)")

    tiers = (d.get("config") or {}).get("tiers", [])
    if tiers:
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Tier")
        table.add_column("Quantity", justify="right")
        table.add_column("Unit price", justify="right", style="basket.money")
        for tier in tiers:
            if tier.get("type") == "exact":
                span = f"{tier.get('qty')}"
            else:
                lower, upper = tier.get("min_qty"), tier.get("max_qty")
                span = f"{lower}+" if upper is None else f"{lower}-{upper}"
            table.add_row(str(tier.get("label", "")), span, money(tier.get("unit_price")))
        console.print(table)


def _render_reconcile(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    money: MoneyFormat,
) -> None:
    _status_line(console, result)
    d = result.data
    corrections = d.get("corrections", [])
    _field(console, "checked", d.get("checked", 0))
    _field(console, "corrections", len(corrections))
    for c in corrections:
        action = str(c.get("action", ""))
        style = style_for_action(action)
        label = f"[{style}]{action}[/{style}]" if style else action
        after = "" if c.get("new_qty") is None else f" -> {c['new_qty']}"
        console.print(f"  {label} {c.get('product_id', '')}: {c.get('previous_qty')}{after}")


def _render_checkout(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    money: MoneyFormat,
) -> None:
    _status_line(console, result)
    d = result.data
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Product", style="basket.id", no_wrap=True)
    table.add_column("Qty", justify="right")
    table.add_column("Unit", justify="right")
    table.add_column("Total", justify="right", style="basket.money")
    for item in d.get("items", []):
        table.add_row(
            str(item.get("product_slug") or item.get("product_id", "")),
            str(item.get("qty", "")),
            money(item.get("unit_price")),
            money(item.get("line_total")),
        )
    console.print(table)
    _render_totals(console, d, money)


# ── Generic renderers ─────────────────────────────────────────────────


def _render_fields(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    money: MoneyFormat,
) -> None:
    """Status line plus scalar fields (init, catalog load)."""
    _status_line(console, result)
    for key, value in result.data.items():
        if not isinstance(value, (dict, list)):
            _field(console, key, value)


def _render_generic(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    money: MoneyFormat,
) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Cart
    "cart_show": _render_cart,
    "cart_add": _render_cart,
    "cart_set": _render_cart,
    "cart_inc": _render_cart,
    "cart_dec": _render_cart,
    "cart_remove": _render_cart,
    "cart_clear": _render_cart,
    # Pricing / stock / checkout
    "quote": _render_quote,
    "reconcile": _render_reconcile,
    "checkout": _render_checkout,
    # Setup
    "init": _render_fields,
    "catalog_load": _render_fields,
}
