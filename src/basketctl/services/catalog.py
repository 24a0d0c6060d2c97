"""CatalogService — load products and discounts into the catalog backend."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from basketctl.domain.catalog import Product, parse_discounts
from basketctl.services.base import BaseService
from basketctl.services.result import ServiceResult, failure

logger = logging.getLogger(__name__)


class CatalogService(BaseService):
    """Imports catalog documents of the form ``{products: [...], discounts: [...]}``."""

    def load(self, path: Path) -> ServiceResult:
        """Upsert products and replace their discounts from a JSON file.

        Discounts for every product in the document are replaced, so a
        product listed without discounts ends up with none.
        """
        op = "catalog_load"
        try:
            document: Any = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            return failure(op, "NOT_FOUND", f"Cannot read catalog file: {path}", error=str(exc))
        except ValueError as exc:
            return failure(op, "INVALID_CATALOG", f"Invalid JSON in {path}: {exc}")

        if not isinstance(document, dict) or not isinstance(document.get("products", []), list):
            return failure(
                op,
                "INVALID_CATALOG",
                "Catalog must be an object with a 'products' list",
            )

        warnings: list[str] = []
        products: list[Product] = []
        for index, row in enumerate(document.get("products", [])):
            try:
                product = Product.model_validate(row)
            except ValidationError as exc:
                warnings.append(f"Skipped product #{index}: {exc.error_count()} invalid field(s)")
                continue
            if not product.id:
                warnings.append(f"Skipped product #{index}: missing id")
                continue
            products.append(product)

        raw_discounts = document.get("discounts", [])
        if not isinstance(raw_discounts, list):
            return failure(op, "INVALID_CATALOG", "'discounts' must be a list")
        rows = [row for row in raw_discounts if isinstance(row, dict)]
        discounts = parse_discounts(rows)
        if len(discounts) < len(raw_discounts):
            warnings.append(f"Skipped {len(raw_discounts) - len(discounts)} invalid discount(s)")

        catalog = self._store.catalog
        product_count = catalog.upsert_products(products)
        known = {p.id for p in products}
        discount_count = catalog.replace_discounts(
            known | {d.product_id for d in discounts},
            discounts,
        )
        orphans = sorted({d.product_id for d in discounts} - known)
        if orphans:
            warnings.append(
                f"Discounts reference products not in this file: {', '.join(orphans)}"
            )

        # Stock may have changed under cached entries.
        self._store.stock.invalidate()
        logger.info(
            "Loaded %d products and %d discounts from %s", product_count, discount_count, path
        )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(path),
                "products": product_count,
                "discounts": discount_count,
            },
            warnings=warnings,
        )

