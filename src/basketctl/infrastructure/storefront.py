"""Storefront — the container every service works against.

Owns the two database engines, the catalog backend, the persisted cart,
the process-wide stock cache, and (once initialized) the plugin event bus.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from basketctl.infrastructure.cart_store import CartStore, KeyValueStore, SqlKeyValueStore
from basketctl.infrastructure.catalog import SqlCatalog
from basketctl.infrastructure.database.engine import init_backend_database, init_local_database
from basketctl.infrastructure.stock_cache import StockCache

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from basketctl.config.settings import BasketSettings
    from basketctl.infrastructure.catalog import StockSource

logger = logging.getLogger(__name__)


class Storefront:
    """Repository of everything one storefront client needs.

    Constructed once at CLI startup from :class:`BasketSettings` and stored
    in ``click.Context.obj``. Services receive it via :class:`BaseService`.

    *storage* and *stock_source* replace the SQL-backed defaults, e.g. to
    keep the cart in memory or to read stock from a remote backend.
    """

    def __init__(
        self,
        settings: BasketSettings,
        *,
        storage: KeyValueStore | None = None,
        stock_source: StockSource | None = None,
    ) -> None:
        self._settings = settings
        self._local_engine: Engine = init_local_database(settings.state_dir)
        self._backend_engine: Engine = init_backend_database(
            settings.state_dir, settings.backend.url
        )
        self._catalog = SqlCatalog(self._backend_engine)
        self._cart = CartStore(
            storage if storage is not None else SqlKeyValueStore(self._local_engine),
            key=settings.cart.storage_key,
        )
        self._stock = StockCache(
            stock_source if stock_source is not None else self._catalog,
            ttl_seconds=settings.stock.ttl_seconds,
            fail_safe_qty=settings.stock.fail_safe_qty,
        )
        self._event_bus: Any | None = None

    @property
    def root(self) -> Path:
        return self._settings.root

    @property
    def settings(self) -> BasketSettings:
        return self._settings

    @property
    def local_engine(self) -> Engine:
        """Engine for client-owned state (cart, event log)."""
        return self._local_engine

    @property
    def backend_engine(self) -> Engine:
        return self._backend_engine

    @property
    def catalog(self) -> SqlCatalog:
        return self._catalog

    @property
    def cart(self) -> CartStore:
        return self._cart

    @property
    def stock(self) -> StockCache:
        return self._stock

    @property
    def event_bus(self) -> Any | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool = False) -> None:
        """Initialize the plugin event bus.

        Creates a PluginManager, discovers entry-point and local plugins,
        registers the built-in notifications plugin, and wires up the
        EventBus. Called by AppContext when the storefront is first accessed.
        """
        from basketctl.plugins.builtins.notifications import NotificationsPlugin
        from basketctl.plugins.event_bus import EventBus
        from basketctl.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load(local_dir=self._settings.state_dir / "plugins")

        notifications = NotificationsPlugin(config=self._settings.plugins.notifications)
        pm.register_plugin(notifications, name="notifications-builtin")

        self._event_bus = EventBus(self._local_engine, pm, sync=sync)

    def close(self) -> None:
        """Flush pending events and release database connections."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
        self._local_engine.dispose()
        self._backend_engine.dispose()
        logger.debug("Storefront at %s closed", self.root)
