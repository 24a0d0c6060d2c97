"""Pricing configuration model — per-product quantity rules and price tiers.

A product's ``online_config`` is free-form JSON edited by hand in the
admin backend. :func:`normalize_config` turns whatever is stored there
into a validated :class:`PricingConfig`:

- ``unit`` / ``is_weight`` / ``min`` / ``step`` override the product row
  when valid, otherwise the product row (or the weight/count default) wins.
- ``options`` is a list of tiers. Each is either ``exact`` (a point price
  for one quantity) or ``bulk`` (a price for a quantity range). Invalid
  entries are dropped, never raised.

Tier order is part of the contract: all exact tiers ascending by ``qty``,
then all bulk tiers ascending by ``min_qty``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Protocol

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, model_validator

from basketctl.domain.numbers import format_number, parse_number, positive_or
from basketctl.domain.types import TierType

WEIGHT_UNIT = "kg"
COUNT_UNIT = "pcs"
WEIGHT_DEFAULT_QTY = 0.5
COUNT_DEFAULT_QTY = 1.0


# ---------------------------------------------------------------------------
# Tier models
# ---------------------------------------------------------------------------


class ExactTier(BaseModel):
    """A fixed unit price for exactly one quantity (e.g. "1 kg bag")."""

    model_config = {"frozen": True}

    type: Literal["exact"] = "exact"
    id: str
    label: str = Field(min_length=1)
    qty: float = Field(gt=0, allow_inf_nan=False)
    unit_price: float = Field(ge=0, allow_inf_nan=False)


class BulkTier(BaseModel):
    """A unit price for any quantity within ``[min_qty, max_qty]``.

    ``max_qty=None`` means the range is unbounded above.
    """

    model_config = {"frozen": True}

    type: Literal["bulk"] = "bulk"
    id: str
    label: str = Field(min_length=1)
    min_qty: float = Field(ge=0, allow_inf_nan=False)
    max_qty: Annotated[float, Field(allow_inf_nan=False)] | None = None
    unit_price: float = Field(ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_range(self) -> BulkTier:
        if self.max_qty is not None and self.max_qty < self.min_qty:
            msg = f"max_qty {self.max_qty} < min_qty {self.min_qty}"
            raise ValueError(msg)
        return self

    def contains(self, qty: float) -> bool:
        return self.min_qty <= qty and (self.max_qty is None or qty <= self.max_qty)


PriceTier = Annotated[ExactTier | BulkTier, Field(discriminator="type")]

_TIER_ADAPTER: TypeAdapter[ExactTier | BulkTier] = TypeAdapter(PriceTier)


class PricingConfig(BaseModel):
    """Validated quantity rules and tiers for one product."""

    model_config = {"frozen": True}

    unit: str
    is_weight: bool
    min_qty: float = Field(gt=0, allow_inf_nan=False)
    step_qty: float = Field(gt=0, allow_inf_nan=False)
    tiers: tuple[PriceTier, ...] = ()

    @property
    def exact_tiers(self) -> list[ExactTier]:
        return [t for t in self.tiers if isinstance(t, ExactTier)]

    @property
    def bulk_tiers(self) -> list[BulkTier]:
        return [t for t in self.tiers if isinstance(t, BulkTier)]


class PricedProduct(Protocol):
    """The product fields pricing needs (satisfied by ``Product``)."""

    @property
    def is_weight(self) -> bool: ...

    @property
    def price(self) -> float: ...

    @property
    def min_order_qty(self) -> float | None: ...

    @property
    def qty_step(self) -> float | None: ...


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def default_qty(is_weight: bool) -> float:
    """Fallback minimum and step: half a kilo for weight, one piece otherwise."""
    return WEIGHT_DEFAULT_QTY if is_weight else COUNT_DEFAULT_QTY


def default_unit(is_weight: bool) -> str:
    return WEIGHT_UNIT if is_weight else COUNT_UNIT


def normalize_config(raw: Any, product: PricedProduct) -> PricingConfig:
    """Build a :class:`PricingConfig` from a raw ``online_config`` blob.

    Never raises. Any invalid field falls back to a default derived from
    the product row.

    Args:
        raw: The stored config — a mapping, a JSON string, or anything else
            (treated as empty).
        product: The product the config belongs to.
    """
    data = _coerce_mapping(raw)

    product_weight = bool(product.is_weight)
    fallback = default_qty(product_weight)
    base_min = positive_or(product.min_order_qty, fallback)
    base_step = positive_or(product.qty_step, fallback)

    raw_unit = data.get("unit")
    unit = str(raw_unit).strip() if raw_unit else ""
    raw_weight = data.get("is_weight")

    return PricingConfig(
        unit=unit or default_unit(product_weight),
        is_weight=raw_weight if isinstance(raw_weight, bool) else product_weight,
        min_qty=positive_or(data.get("min"), base_min),
        step_qty=positive_or(data.get("step"), base_step),
        tiers=parse_tiers(data.get("options")),
    )


def parse_tiers(options: Any) -> tuple[ExactTier | BulkTier, ...]:
    """Parse raw tier entries into the resolver's canonical order."""
    if not isinstance(options, (list, tuple)):
        return ()

    exact: list[ExactTier] = []
    bulk: list[BulkTier] = []
    for entry in options:
        tier = _parse_tier(entry)
        if isinstance(tier, ExactTier):
            exact.append(tier)
        elif isinstance(tier, BulkTier):
            bulk.append(tier)

    exact.sort(key=lambda t: t.qty)
    bulk.sort(key=lambda t: t.min_qty)
    return (*exact, *bulk)


def _parse_tier(entry: Any) -> ExactTier | BulkTier | None:
    if not isinstance(entry, Mapping):
        return None

    kind = entry.get("type")
    raw_label = entry.get("label")
    label = "" if raw_label is None else str(raw_label).strip()
    unit_price = parse_number(entry.get("unit_price"))

    candidate: dict[str, Any]
    if kind == TierType.EXACT:
        qty = parse_number(entry.get("qty"))
        candidate = {
            "type": "exact",
            "id": _tier_id(entry, label, qty),
            "label": label,
            "qty": qty,
            "unit_price": unit_price,
        }
    elif kind == TierType.BULK:
        min_qty = parse_number(entry.get("min_qty"))
        raw_max = entry.get("max_qty")
        max_qty = None if raw_max is None or str(raw_max).strip() == "" else parse_number(raw_max)
        candidate = {
            "type": "bulk",
            "id": _tier_id(entry, label, min_qty),
            "label": label,
            "min_qty": min_qty,
            "max_qty": max_qty,
            "unit_price": unit_price,
        }
    else:
        return None

    try:
        return _TIER_ADAPTER.validate_python(candidate)
    except ValidationError:
        return None


def _tier_id(entry: Mapping[str, Any], label: str, qty: float) -> str:
    raw_id = entry.get("id")
    if raw_id:
        return str(raw_id)
    return f"{label}_{format_number(qty)}"


def _coerce_mapping(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return {}
    return raw if isinstance(raw, Mapping) else {}
