"""Stock reconciliation — keep cart lines satisfiable against live stock.

:class:`StockReconciler` is the async engine. Whenever the cart changes it
schedules one background check per line key; a check reads stock through
the shared cache with ``not_before`` set to the mutation time, then
removes or clamps the line. Checks for the same key coalesce: a change
that arrives while a check is running makes that check run once more
instead of starting a second one.

:class:`ReconcileService` wraps one full pass for synchronous callers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from basketctl.domain.cart import (
    CartLine,
    LineKey,
    StockCorrection,
    apply_stock,
    distinct_keys,
)
from basketctl.domain.pricing import PricingConfig, normalize_config
from basketctl.services.base import BaseService
from basketctl.services.result import ServiceResult

if TYPE_CHECKING:
    from basketctl.infrastructure.cart_store import CartChange, CartStore
    from basketctl.infrastructure.stock_cache import StockCache

logger = logging.getLogger(__name__)

STOCK_CORRECTION_OP = "stock_correction"

CorrectionListener = Callable[[StockCorrection], None]
ConfigLookup = Callable[[str], PricingConfig | None]


class StockReconciler:
    """Background stock enforcement for one cart.

    Parameters:
        cart: The cart to correct. Corrections go through ``cart.mutate``.
        stock: Shared stock cache.
        on_correction: Called once per correction made, e.g. to show a
            notice or dispatch a plugin event.
        configs: Pricing config per product id, so clamps land on an
            orderable quantity. Without it lines clamp to the raw count.
    """

    def __init__(
        self,
        cart: CartStore,
        stock: StockCache,
        *,
        on_correction: CorrectionListener | None = None,
        configs: ConfigLookup | None = None,
    ) -> None:
        self._cart = cart
        self._stock = stock
        self._on_correction = on_correction
        self._configs = configs
        self._alive = True
        self._tasks: dict[LineKey, asyncio.Task[list[StockCorrection]]] = {}
        self._requested: dict[LineKey, float] = {}
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def alive(self) -> bool:
        return self._alive

    def watch(self) -> None:
        """Subscribe to cart changes. Checks are only scheduled from a running loop."""
        if self._unsubscribe is None:
            self._unsubscribe = self._cart.subscribe(self._on_cart_change)

    def schedule(self, keys: Iterable[LineKey] | None = None) -> None:
        """Start (or re-arm) a check for each key; defaults to every cart line.

        Must be called from a running event loop.
        """
        if not self._alive:
            return
        loop = asyncio.get_running_loop()
        stamp = self._stock.now()
        targets = distinct_keys(self._cart.get()) if keys is None else list(keys)
        for key in targets:
            self._requested[key] = stamp
            task = self._tasks.get(key)
            if task is None or task.done():
                self._tasks[key] = loop.create_task(self._run_key(key))

    async def drain(self) -> list[StockCorrection]:
        """Wait for every scheduled check and return the corrections made."""
        corrections: list[StockCorrection] = []
        while self._tasks:
            snapshot = dict(self._tasks)
            results = await asyncio.gather(*snapshot.values(), return_exceptions=True)
            for key, task in snapshot.items():
                if self._tasks.get(key) is task:
                    del self._tasks[key]
            for result in results:
                if isinstance(result, BaseException):
                    logger.warning("Stock check failed", exc_info=result)
                    continue
                corrections.extend(result)
        return corrections

    async def reconcile(self, keys: Iterable[LineKey] | None = None) -> list[StockCorrection]:
        """Check *keys* (default: every line) and wait for the outcome."""
        self.schedule(keys)
        return await self.drain()

    def close(self) -> None:
        """Stop reacting to the cart. Results arriving afterwards are dropped."""
        self._alive = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._requested.clear()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_cart_change(self, change: CartChange) -> None:
        if change.op == STOCK_CORRECTION_OP or not change.lines:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self.schedule(distinct_keys(change.lines))

    async def _run_key(self, key: LineKey) -> list[StockCorrection]:
        corrections: list[StockCorrection] = []
        while self._alive:
            stamp = self._requested.pop(key, None)
            if stamp is None:
                break
            correction = await self._check(key, stamp)
            if correction is not None:
                corrections.append(correction)
        return corrections

    async def _check(self, key: LineKey, not_before: float) -> StockCorrection | None:
        product_id, _ = key
        stock = await self._stock.get_stock(product_id, not_before=not_before)
        if not self._alive:
            return None

        config = None if self._configs is None else self._configs(product_id)
        made: list[StockCorrection] = []

        def correct(lines: list[CartLine]) -> list[CartLine]:
            updated, correction = apply_stock(lines, key, stock, config)
            if correction is not None:
                made.append(correction)
            return updated

        self._cart.mutate(correct, op=STOCK_CORRECTION_OP)
        if not made:
            return None

        correction = made[0]
        logger.info(
            "Stock correction for %s: %s (stock %d)",
            correction.product_id,
            correction.action,
            correction.stock,
        )
        if self._on_correction is not None:
            try:
                self._on_correction(correction)
            except Exception:
                logger.warning("Correction listener failed", exc_info=True)
        return correction


class ReconcileService(BaseService):
    """Runs a full stock pass over the persisted cart."""

    def reconcile(self) -> ServiceResult:
        """Remove out-of-stock lines and clamp over-stock ones."""
        op = "reconcile"
        warnings: list[str] = []
        checked = len(distinct_keys(self._store.cart.get()))
        corrections = self.run(warnings=warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "checked": checked,
                "corrections": [c.model_dump(mode="json") for c in corrections],
                "items": [line.model_dump(mode="json") for line in self._store.cart.get()],
            },
            warnings=warnings,
        )

    def run(
        self,
        keys: Iterable[LineKey] | None = None,
        *,
        warnings: list[str] | None = None,
    ) -> list[StockCorrection]:
        """One blocking pass over *keys*; correction messages go to *warnings*."""
        sink = warnings if warnings is not None else []

        def notify(correction: StockCorrection) -> None:
            sink.append(correction.message)
            self._dispatch_event(
                "post_stock_correction",
                {
                    "product_id": correction.product_id,
                    "variant_id": correction.variant_id,
                    "action": str(correction.action),
                    "previous_qty": correction.previous_qty,
                    "new_qty": correction.new_qty,
                    "message": correction.message,
                },
                sink,
            )

        reconciler = StockReconciler(
            self._store.cart,
            self._store.stock,
            on_correction=notify,
            configs=self._pricing_config,
        )
        try:
            return asyncio.run(reconciler.reconcile(keys))
        finally:
            reconciler.close()

    def _pricing_config(self, product_id: str) -> PricingConfig | None:
        product = self._store.catalog.get_product(product_id)
        if product is None:
            return None
        return normalize_config(product.online_config, product)
