"""Built-in notifications plugin — the shopper-facing notice channel.

Stock corrections are logged at INFO and kept in ``notices`` so an
embedding UI can show them as toasts. Cart changes are logged at DEBUG.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import pluggy

hookimpl = pluggy.HookimplMarker("basketctl")

logger = logging.getLogger(__name__)


class NotificationsPlugin:
    """Records stock-correction notices.

    Config keys (``[plugins.notifications]``): ``enabled`` (default true),
    ``max_notices`` (default 50; oldest notices are dropped first).
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self._config = {"enabled": True, "max_notices": 50, **(config or {})}
        self._lock = threading.Lock()
        self._notices: list[dict[str, Any]] = []

    @property
    def enabled(self) -> bool:
        return bool(self._config.get("enabled", True))

    @property
    def notices(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._notices)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @hookimpl
    def post_stock_correction(
        self,
        product_id: str,
        variant_id: str | None,
        action: str,
        previous_qty: float,
        new_qty: float | None,
        message: str,
    ) -> None:
        if not self.enabled:
            return
        notice = {
            "product_id": product_id,
            "variant_id": variant_id,
            "action": action,
            "previous_qty": previous_qty,
            "new_qty": new_qty,
            "message": message,
        }
        limit = max(1, int(self._config.get("max_notices", 50)))
        with self._lock:
            self._notices.append(notice)
            del self._notices[:-limit]
        logger.info("%s (%s)", message, product_id)

    @hookimpl
    def post_cart_change(self, op: str, product_id: str | None, qty: float | None) -> None:
        if not self.enabled:
            return
        logger.debug("Cart %s: %s -> %s", op, product_id, qty)
