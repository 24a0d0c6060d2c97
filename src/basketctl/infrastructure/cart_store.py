"""Client-owned cart persistence.

The cart is a JSON array of lines stored under one fixed key in a local
key-value store, read once on construction and written on every mutation.
:class:`CartStore` is the single owner of the in-memory cart: consumers
read with ``get()``, change it with ``mutate()``, and react to changes
through ``subscribe()``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError
from sqlalchemy import delete, insert, select

from basketctl.domain.cart import CartLine
from basketctl.infrastructure.database.schema import kv_store

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal string key-value storage (localStorage semantics)."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class SqlKeyValueStore:
    """Key-value storage backed by the local ``kv_store`` table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_item(self, key: str) -> str | None:
        with self._engine.connect() as conn:
            return conn.execute(
                select(kv_store.c.value).where(kv_store.c.key == key)
            ).scalar_one_or_none()

    def set_item(self, key: str, value: str) -> None:
        updated = datetime.now(UTC).isoformat()
        with self._engine.begin() as conn:
            conn.execute(delete(kv_store).where(kv_store.c.key == key))
            conn.execute(insert(kv_store).values(key=key, value=value, updated=updated))

    def remove_item(self, key: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(delete(kv_store).where(kv_store.c.key == key))


class MemoryKeyValueStore:
    """In-process key-value storage, for embedding and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


@dataclass(frozen=True)
class CartChange:
    """Notification payload for cart subscribers."""

    op: str
    previous: tuple[CartLine, ...]
    lines: tuple[CartLine, ...]


CartListener = Callable[[CartChange], None]


class CartStore:
    """The cart's single source of truth, persisted under *key*.

    Mutations that leave the lines unchanged are not written and do not
    notify subscribers.
    """

    def __init__(self, storage: KeyValueStore, key: str = "basket_cart") -> None:
        self._storage = storage
        self._key = key
        self._listeners: list[CartListener] = []
        self._lines: tuple[CartLine, ...] = tuple(self._load())

    @property
    def key(self) -> str:
        return self._key

    def get(self) -> list[CartLine]:
        return list(self._lines)

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mutate(
        self,
        change: Callable[[list[CartLine]], list[CartLine]],
        *,
        op: str = "mutate",
    ) -> list[CartLine]:
        """Apply *change* to the current lines, persist, and notify.

        *change* receives a copy of the current lines and returns the new
        list. Returns the lines after the mutation.
        """
        previous = self._lines
        updated = tuple(change(list(previous)))
        if updated == previous:
            return list(previous)

        self._lines = updated
        self._save()
        self._notify(CartChange(op=op, previous=previous, lines=updated))
        return list(updated)

    def clear(self) -> None:
        self.mutate(lambda _lines: [], op="clear")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load(self) -> list[CartLine]:
        raw = self._storage.get_item(self._key)
        if not raw:
            return []
        try:
            data: Any = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable cart payload under %r", self._key)
            return []
        if not isinstance(data, list):
            logger.warning("Discarding non-list cart payload under %r", self._key)
            return []

        lines: list[CartLine] = []
        for item in data:
            try:
                lines.append(CartLine.model_validate(item))
            except ValidationError:
                logger.debug("Skipping malformed cart line %r", item)
        return lines

    def _save(self) -> None:
        payload = json.dumps([line.model_dump() for line in self._lines])
        self._storage.set_item(self._key, payload)

    def _notify(self, change: CartChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.warning("Cart listener failed for %s", change.op, exc_info=True)
