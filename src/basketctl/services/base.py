"""BaseService — foundation for all basketctl services.

Every service receives a :class:`Storefront` at construction time. The
storefront provides the catalog backend, the persisted cart, and the
shared stock cache.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from basketctl.infrastructure.storefront import Storefront

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class CheckoutService(BaseService):
            def prepare(self) -> ServiceResult:
                lines = self._store.cart.get()
                ...
    """

    def __init__(self, store: Storefront) -> None:
        self._store = store

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str] | None = None,
    ) -> None:
        """Dispatch a plugin event. No-op if the event bus is not initialized.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self._store.event_bus
        if bus is None:
            return
        try:
            bus.dispatch(hook_name, payload)
        except Exception:
            logger.debug("Event dispatch failed for %s", hook_name, exc_info=True)
            if warnings is not None:
                warnings.append(f"Event dispatch failed for {hook_name}")
