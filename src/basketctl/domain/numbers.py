"""Numeric coercion for loosely-typed catalog values.

Catalog rows carry prices and quantities as numbers, numeric strings,
strings with a decimal comma, or garbage. Everything funnels through
:func:`parse_number` so the rest of the domain only sees floats.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any


def parse_number(value: Any) -> float:
    """Coerce *value* to a float, returning NaN when it is not numeric.

    Examples:
        >>> parse_number("2,5")
        2.5
        >>> parse_number(" 3 ")
        3.0
        >>> parse_number(4)
        4.0
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", ".", 1)
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def finite_or(value: Any, default: float) -> float:
    """Parse *value*, substituting *default* when it is not a finite number."""
    number = parse_number(value)
    return number if math.isfinite(number) else default


def positive_or(value: Any, default: float) -> float:
    """Parse *value*, substituting *default* unless it is finite and > 0."""
    number = parse_number(value)
    return number if math.isfinite(number) and number > 0 else default


def round_half_up(value: float, places: int = 0) -> float:
    """Round to *places* decimals with halves going away from zero.

    ``round()`` uses banker's rounding, which would make ``2.5`` snap to
    ``2`` and break step snapping for half-step quantities.

    Examples:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(4.0005, 3)
        4.001
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    try:
        return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # Magnitude beyond decimal precision; nothing left to round.
        return value


def format_number(value: float) -> str:
    """Render a float without a trailing ``.0`` for integral values."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)
