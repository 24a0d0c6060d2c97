"""Quantity normalization — min/step snapping for cart and quote quantities.

Weight products are sold in fractional kilograms (3 decimal places),
count products in whole units. Both snap to the config's step the same
way; only the final rounding differs.
"""

from __future__ import annotations

import math
from typing import Any

from basketctl.domain.numbers import format_number, parse_number, round_half_up
from basketctl.domain.pricing import PricingConfig
from basketctl.domain.types import StepDirection

WEIGHT_DECIMALS = 3
_GRID_EPSILON = 1e-9


def normalize_quantity(requested: Any, config: PricingConfig) -> float:
    """Clamp and snap *requested* to the config's minimum and step.

    1. Non-finite input becomes ``config.min_qty``.
    2. Clamp up to ``min_qty`` (no upper bound; stock is not a pricing concern).
    3. Snap to the nearest multiple of ``step_qty``, halves rounding up.
    4. Re-clamp to ``min_qty`` in case snapping went below it.
    5. Round to 3 decimals for weight, to an integer otherwise.

    Idempotent for every finite input.
    """
    value = parse_number(requested)
    if not math.isfinite(value):
        value = config.min_qty

    value = max(value, config.min_qty)
    value = round_half_up(value / config.step_qty) * config.step_qty
    value = max(value, config.min_qty)

    if config.is_weight:
        return round_half_up(value, WEIGHT_DECIMALS)
    return round_half_up(value)


def step_quantity(current: Any, direction: StepDirection, config: PricingConfig) -> float | None:
    """Apply one +/- press to *current*.

    Returns the normalized new quantity, or ``None`` when a decrement would
    drop below ``min_qty`` or reach zero (the caller removes the line).
    """
    value = parse_number(current)
    if not math.isfinite(value):
        value = 0.0

    if direction == StepDirection.DEC:
        nxt = round_half_up(value - config.step_qty, WEIGHT_DECIMALS)
        if nxt < config.min_qty or nxt <= 0:
            return None
        return normalize_quantity(nxt, config)
    return normalize_quantity(value + config.step_qty, config)


def fit_quantity(limit: Any, config: PricingConfig) -> float | None:
    """Largest normalized quantity that does not exceed *limit*.

    ``None`` when even the smallest orderable quantity is above it.

    Examples:
        >>> packs = PricingConfig(unit="pcs", is_weight=False, min_qty=2, step_qty=2)
        >>> fit_quantity(3, packs)
        2.0
    """
    value = parse_number(limit)
    if not math.isfinite(value) or value <= 0:
        return None

    steps = math.floor(value / config.step_qty + _GRID_EPSILON)
    while steps >= 0:
        candidate = normalize_quantity(steps * config.step_qty, config)
        if candidate <= value + _GRID_EPSILON:
            return candidate
        steps -= 1
    return None


def format_quantity(qty: float, unit: str, is_weight: bool) -> str:
    """Human label for a quantity: ``"3 pcs"``, ``"500 g"``, ``"1.25 kg"``."""
    if not is_weight:
        return f"{int(round_half_up(qty))} {unit}"
    if 0 < qty < 1:
        return f"{int(round_half_up(qty * 1000))} g"
    return f"{format_number(round_half_up(qty, 2))} {unit}"
