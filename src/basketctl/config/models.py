"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, basketctl.toml only contains
overrides. A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# --- basketctl.toml sections ---


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    name: str = "my-store"
    currency_symbol: str = "$"
    decimals: int = 2


class StockConfig(BaseModel):
    """[stock] section.

    ``fail_safe_qty`` is the stock assumed when a lookup fails. Zero blocks
    sales during a backend outage; raise it only if overselling is acceptable.
    """

    model_config = {"frozen": True}

    ttl_seconds: float = 30.0
    fail_safe_qty: int = 0


class CartConfig(BaseModel):
    """[cart] section."""

    model_config = {"frozen": True}

    storage_key: str = "basket_cart"


class BackendConfig(BaseModel):
    """[backend] section. ``url=None`` uses the workspace SQLite catalog."""

    model_config = {"frozen": True}

    url: str | None = None


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    notifications: dict[str, Any] = Field(default_factory=lambda: {"enabled": True})


class BasketConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    store: StoreConfig = Field(default_factory=StoreConfig)
    stock: StockConfig = Field(default_factory=StockConfig)
    cart: CartConfig = Field(default_factory=CartConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
