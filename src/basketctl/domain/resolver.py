"""Price resolution — tier selection, discount overlay, and per-line quotes.

Resolution order for a normalized quantity:

1. Exact tier whose ``qty`` equals the quantity (3 decimals).
2. Bulk tier containing the quantity with the greatest ``min_qty``.
3. The base price.

Discounts are an overlay on step 3 only: :func:`quote_line` passes the
winning discount's price as the base price, so a matching tier always
takes precedence over a discount.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from pydantic import BaseModel

from basketctl.domain.catalog import Discount, Product
from basketctl.domain.numbers import finite_or, round_half_up
from basketctl.domain.pricing import PricingConfig, normalize_config
from basketctl.domain.quantity import WEIGHT_DECIMALS, normalize_quantity


class LineQuote(BaseModel):
    """Display-ready pricing for one product at one quantity."""

    model_config = {"frozen": True}

    product_id: str
    variant_id: str | None = None
    slug: str = ""
    unit: str
    is_weight: bool
    normalized_qty: float
    unit_price: float
    base_unit_price: float
    line_total: float
    base_total: float
    discount_amount: float
    discount_percent: int


def resolve_unit_price(config: PricingConfig, base_price: float, qty: float) -> float:
    """Select the unit price for an already-normalized *qty*."""
    target = round_half_up(qty, WEIGHT_DECIMALS)

    for tier in config.exact_tiers:
        if round_half_up(tier.qty, WEIGHT_DECIMALS) == target:
            return tier.unit_price

    matching = [t for t in config.bulk_tiers if t.contains(qty)]
    if matching:
        return max(matching, key=lambda t: t.min_qty).unit_price

    return finite_or(base_price, 0.0)


def discount_percent(base_total: float, line_total: float) -> int:
    """Whole-number percent saved, never negative.

    Examples:
        >>> discount_percent(10.0, 8.0)
        20
        >>> discount_percent(0.0, 5.0)
        0
    """
    if not (math.isfinite(base_total) and base_total > 0):
        return 0
    if not (math.isfinite(line_total) and line_total >= 0):
        return 0
    pct = round_half_up((base_total - line_total) / base_total * 100)
    return max(0, int(pct))


def pick_winning_discount(discounts: Iterable[Discount]) -> dict[str, Discount]:
    """Choose at most one discount per product.

    Among active discounts the lowest ``priority`` wins; on a tie the
    first one seen is kept.
    """
    winners: dict[str, Discount] = {}
    for discount in discounts:
        if not discount.active:
            continue
        current = winners.get(discount.product_id)
        if current is None or discount.priority < current.priority:
            winners[discount.product_id] = discount
    return winners


def quote_line(
    product: Product,
    qty: float,
    discount: Discount | None = None,
    *,
    variant_id: str | None = None,
) -> LineQuote:
    """Normalize *qty* and price it for *product*, applying *discount* on fallback."""
    config = normalize_config(product.online_config, product)
    normalized = normalize_quantity(qty, config)

    base_unit = discount.unit_price if discount is not None else product.price
    unit_price = resolve_unit_price(config, base_unit, normalized)
    line_total = unit_price * normalized
    base_total = product.price * normalized

    return LineQuote(
        product_id=product.id,
        variant_id=variant_id,
        slug=product.slug,
        unit=config.unit,
        is_weight=config.is_weight,
        normalized_qty=normalized,
        unit_price=unit_price,
        base_unit_price=product.price,
        line_total=line_total,
        base_total=base_total,
        discount_amount=max(0.0, base_total - line_total),
        discount_percent=discount_percent(base_total, line_total),
    )
