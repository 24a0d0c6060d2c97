"""Cart lines, pure cart mutations, stock decisions, and totals.

A cart line never stores a price. Every display recomputes the line from
the product's current config, live base price, and winning discount via
:func:`compute_totals`.

All mutation helpers return a new list; the caller (``CartStore``) owns
persistence and change notification.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence

from pydantic import AliasChoices, BaseModel, Field

from basketctl.domain.catalog import Discount, Product
from basketctl.domain.numbers import parse_number
from basketctl.domain.pricing import PricingConfig
from basketctl.domain.quantity import fit_quantity, normalize_quantity
from basketctl.domain.resolver import LineQuote, quote_line
from basketctl.domain.types import StockAction

OUT_OF_STOCK_MESSAGE = "Out of stock: removed from cart"
CLAMPED_MESSAGE = "Not enough stock: quantity adjusted"
BELOW_MINIMUM_MESSAGE = "Not enough stock for the minimum order: removed from cart"

LineKey = tuple[str, str | None]


class CartLine(BaseModel):
    """One product in the cart. ``variant_id`` is legacy and ignored by pricing."""

    model_config = {"frozen": True}

    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId"))
    variant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("variant_id", "variantId")
    )
    qty: float

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.variant_id)


class CartTotals(BaseModel):
    """Cart-level display totals plus the per-line quotes they came from."""

    model_config = {"frozen": True}

    subtotal: float = 0.0
    original_subtotal: float = 0.0
    discount_total: float = 0.0
    count: int = 0
    lines: list[LineQuote] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)


class StockCorrection(BaseModel):
    """A corrective change made to one line after a stock check."""

    model_config = {"frozen": True}

    product_id: str
    variant_id: str | None = None
    action: StockAction
    previous_qty: float
    new_qty: float | None = None
    stock: int
    message: str


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def find_line(lines: Sequence[CartLine], key: LineKey) -> CartLine | None:
    for line in lines:
        if line.key == key:
            return line
    return None


def add_line(
    lines: Sequence[CartLine],
    product_id: str,
    qty: float,
    *,
    variant_id: str | None = None,
) -> list[CartLine]:
    """Add *qty* of a product, merging into an existing line for the same key.

    Non-finite or non-positive quantities leave the cart unchanged.
    """
    amount = parse_number(qty)
    if not math.isfinite(amount) or amount <= 0:
        return list(lines)

    key = (product_id, variant_id)
    if find_line(lines, key) is None:
        return [*lines, CartLine(product_id=product_id, variant_id=variant_id, qty=amount)]
    return [
        line.model_copy(update={"qty": line.qty + amount}) if line.key == key else line
        for line in lines
    ]


def set_line_qty(lines: Sequence[CartLine], key: LineKey, qty: float) -> list[CartLine]:
    """Replace a line's quantity; zero, negative or non-finite removes it."""
    amount = parse_number(qty)
    if not math.isfinite(amount) or amount <= 0:
        return remove_line(lines, key)
    return [line.model_copy(update={"qty": amount}) if line.key == key else line for line in lines]


def remove_line(lines: Sequence[CartLine], key: LineKey) -> list[CartLine]:
    return [line for line in lines if line.key != key]


def distinct_keys(lines: Iterable[CartLine]) -> list[LineKey]:
    """Line keys in first-seen order, without duplicates."""
    return list(dict.fromkeys(line.key for line in lines))


# ---------------------------------------------------------------------------
# Stock reconciliation (pure decision)
# ---------------------------------------------------------------------------


def decide_stock_action(qty: float, stock: int) -> StockAction:
    """Decide what a stock count means for a line holding *qty*.

    ``stock <= 0`` removes the line, ``stock < qty`` clamps it, anything
    else leaves it alone.
    """
    if stock <= 0:
        return StockAction.REMOVE
    current = parse_number(qty)
    safe_qty = current if math.isfinite(current) else 0.0
    if safe_qty > stock:
        return StockAction.CLAMP
    return StockAction.UNCHANGED


def apply_stock(
    lines: Sequence[CartLine],
    key: LineKey,
    stock: int,
    config: PricingConfig | None = None,
) -> tuple[list[CartLine], StockCorrection | None]:
    """Correct the line at *key* against *stock*.

    With *config* the line is judged by its normalized quantity and a clamp
    lands on the largest orderable quantity within stock; when that is
    below the product's minimum the line is removed instead.

    Returns the new line list and the correction made, or ``None`` when the
    line is absent or already satisfiable. Re-applying the same stock count
    is a no-op.
    """
    line = find_line(lines, key)
    if line is None:
        return list(lines), None

    held = line.qty if config is None else normalize_quantity(line.qty, config)
    action = decide_stock_action(held, stock)
    if action == StockAction.UNCHANGED:
        return list(lines), None

    target: float | None = None
    message = OUT_OF_STOCK_MESSAGE
    if action == StockAction.CLAMP:
        target = float(stock) if config is None else fit_quantity(stock, config)
        if target is None:
            action = StockAction.REMOVE
            message = BELOW_MINIMUM_MESSAGE
        else:
            message = CLAMPED_MESSAGE

    correction = StockCorrection(
        product_id=line.product_id,
        variant_id=line.variant_id,
        action=action,
        previous_qty=line.qty,
        new_qty=target,
        stock=stock,
        message=message,
    )
    if target is None:
        return remove_line(lines, key), correction
    return set_line_qty(lines, key, target), correction


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def compute_totals(
    lines: Iterable[CartLine],
    products_by_id: Mapping[str, Product],
    discounts_by_id: Mapping[str, Discount] | None = None,
) -> CartTotals:
    """Price every line and sum the cart.

    Lines whose product is missing or offline are skipped (listed in
    ``skipped``) rather than failing the whole cart. ``discounts_by_id``
    holds the already-picked winning discount per product.
    """
    discounts = discounts_by_id or {}
    quotes: list[LineQuote] = []
    skipped: list[str] = []
    subtotal = 0.0
    original_subtotal = 0.0

    for line in lines:
        product = products_by_id.get(line.product_id)
        if product is None or not product.is_online:
            skipped.append(line.product_id)
            continue

        quote = quote_line(
            product,
            line.qty,
            discounts.get(line.product_id),
            variant_id=line.variant_id,
        )
        quotes.append(quote)
        subtotal += quote.line_total
        original_subtotal += quote.base_total

    discount_total = min(original_subtotal, max(0.0, original_subtotal - subtotal))
    return CartTotals(
        subtotal=subtotal,
        original_subtotal=original_subtotal,
        discount_total=discount_total,
        count=len(quotes),
        lines=quotes,
        skipped=skipped,
    )
