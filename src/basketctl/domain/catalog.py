"""Catalog records as the pricing engine sees them.

Backend rows are loosely typed (numeric strings, NULLs, decimal commas).
These models coerce at the boundary so pricing code can trust its inputs:
non-finite or negative prices and stock become ``0``, unparseable
optional quantities become ``None``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from basketctl.domain.numbers import finite_or, parse_number


class Product(BaseModel):
    """A catalog product with its raw pricing config and live stock count."""

    model_config = {"frozen": True}

    id: str
    slug: str = ""
    price: float = 0.0
    is_weight: bool = False
    min_order_qty: float | None = None
    qty_step: float | None = None
    online_config: Any = None
    qty: float = 0.0
    is_online: bool = True

    @field_validator("id", "slug", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("price", "qty", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return max(0.0, finite_or(value, 0.0))

    @field_validator("min_order_qty", "qty_step", mode="before")
    @classmethod
    def _coerce_optional_qty(cls, value: Any) -> float | None:
        number = parse_number(value)
        return number if math.isfinite(number) else None

    @field_validator("is_weight", mode="before")
    @classmethod
    def _coerce_weight(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("is_online", mode="before")
    @classmethod
    def _coerce_online(cls, value: Any) -> bool:
        # Only an explicit false takes a product offline.
        return True if value is None else bool(value)


class Discount(BaseModel):
    """A discounted unit price for one product.

    Lower ``priority`` wins among active discounts for the same product.
    """

    model_config = {"frozen": True}

    product_id: str
    unit_price: float = Field(
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("unit_price", "discount_price"),
    )
    active: bool = Field(default=True, validation_alias=AliasChoices("active", "is_active"))
    priority: int = Field(default=0, validation_alias=AliasChoices("priority", "sort_order"))

    @field_validator("product_id", mode="before")
    @classmethod
    def _coerce_product_id(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("unit_price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> float:
        return parse_number(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _coerce_priority(cls, value: Any) -> int:
        return int(finite_or(value, 0.0))


def parse_discounts(rows: Iterable[Mapping[str, Any]]) -> list[Discount]:
    """Validate discount rows, silently dropping malformed ones."""
    discounts: list[Discount] = []
    for row in rows:
        try:
            discount = Discount.model_validate(dict(row))
        except ValidationError:
            continue
        if discount.product_id:
            discounts.append(discount)
    return discounts


def index_products(products: Iterable[Product]) -> dict[str, Product]:
    """Map products by id; later duplicates replace earlier ones."""
    return {p.id: p for p in products if p.id}
