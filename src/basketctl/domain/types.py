"""Classification enums shared across the pricing engine."""

from __future__ import annotations

from enum import StrEnum


class TierType(StrEnum):
    """Discriminator for price tiers in a product's online config."""

    EXACT = "exact"
    BULK = "bulk"


class StockAction(StrEnum):
    """Outcome of checking one cart line against live stock."""

    UNCHANGED = "unchanged"
    CLAMP = "clamp"
    REMOVE = "remove"


class StepDirection(StrEnum):
    """Quantity control direction (the +/- buttons)."""

    INC = "inc"
    DEC = "dec"
