"""Shared, time-bounded stock cache with in-flight request coalescing.

Every stock read in the process goes through one :class:`StockCache`:

- an entry is reused until ``ttl_seconds`` have passed since its fetch
  was issued;
- concurrent requests for the same product share one backend call;
- a failed fetch resolves to ``fail_safe_qty`` and that value is cached
  like any other, so a flapping backend is not hammered.

Callers that must observe stock *after* some event (a cart mutation) pass
``not_before``: entries and in-flight fetches issued earlier are ignored.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from basketctl.domain.numbers import parse_number

if TYPE_CHECKING:
    from basketctl.infrastructure.catalog import StockSource

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30.0


def coerce_stock(raw: Any) -> int:
    """Whole units on hand; unreadable or negative stock counts as zero.

    Examples:
        >>> coerce_stock(3.9)
        3
        >>> coerce_stock("n/a")
        0
    """
    value = parse_number(raw)
    if not math.isfinite(value) or value <= 0:
        return 0
    return int(value)


@dataclass(frozen=True)
class StockCacheEntry:
    product_id: str
    qty: int
    fetched_at: float
    failed: bool = False


@dataclass(frozen=True)
class _InFlight:
    task: asyncio.Task[int]
    started_at: float


class StockCache:
    """Per-process stock cache keyed by product id.

    Parameters:
        source: Backend stock lookup (``await source.fetch_stock(id)``).
        ttl_seconds: Lifetime of an entry, measured from fetch start.
        fail_safe_qty: Stock assumed when a lookup raises.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        source: StockSource,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        fail_safe_qty: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._ttl = ttl_seconds
        self._fail_safe_qty = max(0, int(fail_safe_qty))
        self._clock = clock
        self._entries: dict[str, StockCacheEntry] = {}
        self._in_flight: dict[str, _InFlight] = {}

    def now(self) -> float:
        """Current reading of the cache clock, usable as ``not_before``."""
        return self._clock()

    def peek(self, product_id: str) -> StockCacheEntry | None:
        """The cached entry for *product_id*, fresh or not, without fetching."""
        return self._entries.get(product_id)

    def invalidate(self, product_id: str | None = None) -> None:
        """Drop one entry, or every entry when *product_id* is None."""
        if product_id is None:
            self._entries.clear()
        else:
            self._entries.pop(product_id, None)

    async def get_stock(self, product_id: str, *, not_before: float | None = None) -> int:
        """Stock on hand for *product_id*, from cache or a (shared) fetch."""
        if not product_id:
            return 0

        entry = self._entries.get(product_id)
        if entry is not None and self._is_usable(entry.fetched_at, not_before, check_ttl=True):
            return entry.qty

        pending = self._in_flight.get(product_id)
        if pending is not None and self._is_usable(pending.started_at, not_before):
            return await asyncio.shield(pending.task)

        started_at = self._clock()
        task = asyncio.ensure_future(self._fetch(product_id, started_at))
        record = _InFlight(task=task, started_at=started_at)
        self._in_flight[product_id] = record
        task.add_done_callback(lambda _t: self._forget(product_id, record))
        return await asyncio.shield(task)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _is_usable(
        self,
        issued_at: float,
        not_before: float | None,
        *,
        check_ttl: bool = False,
    ) -> bool:
        if not_before is not None and issued_at < not_before:
            return False
        if check_ttl and self._clock() - issued_at >= self._ttl:
            return False
        return True

    async def _fetch(self, product_id: str, started_at: float) -> int:
        failed = False
        try:
            raw = await self._source.fetch_stock(product_id)
        except Exception:
            logger.warning(
                "Stock lookup failed for %s; assuming %d",
                product_id,
                self._fail_safe_qty,
                exc_info=True,
            )
            qty = self._fail_safe_qty
            failed = True
        else:
            qty = coerce_stock(raw)

        current = self._entries.get(product_id)
        # A fetch issued later may have landed first; keep the newer reading.
        if current is None or current.fetched_at <= started_at:
            self._entries[product_id] = StockCacheEntry(
                product_id=product_id,
                qty=qty,
                fetched_at=started_at,
                failed=failed,
            )
        return qty

    def _forget(self, product_id: str, record: _InFlight) -> None:
        if self._in_flight.get(product_id) is record:
            del self._in_flight[product_id]
