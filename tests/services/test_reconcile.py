"""Tests for stock reconciliation."""

from __future__ import annotations

import asyncio

from basketctl.domain.cart import (
    BELOW_MINIMUM_MESSAGE,
    CLAMPED_MESSAGE,
    OUT_OF_STOCK_MESSAGE,
    CartLine,
    StockCorrection,
)
from basketctl.domain.pricing import PricingConfig
from basketctl.domain.types import StockAction
from basketctl.infrastructure.cart_store import CartStore, MemoryKeyValueStore
from basketctl.infrastructure.stock_cache import StockCache
from basketctl.infrastructure.storefront import Storefront
from basketctl.services.reconcile import STOCK_CORRECTION_OP, ReconcileService, StockReconciler
from tests.conftest import FakeClock, FakeStockSource, set_stock


def _setup(
    stock: dict[str, int], lines: list[CartLine]
) -> tuple[CartStore, FakeStockSource, FakeClock, StockCache]:
    cart = CartStore(MemoryKeyValueStore())
    cart.mutate(lambda _: lines, op="seed")
    source, clock = FakeStockSource(stock), FakeClock()
    cache = StockCache(source, clock=clock)
    return cart, source, clock, cache


class TestStockReconciler:
    def test_clamps_and_removes(self) -> None:
        cart, _, _, cache = _setup(
            {"eggs": 3, "salt": 0, "bread": 10},
            [
                CartLine(product_id="eggs", qty=5),
                CartLine(product_id="salt", qty=1),
                CartLine(product_id="bread", qty=2),
            ],
        )
        reconciler = StockReconciler(cart, cache)
        corrections = asyncio.run(reconciler.reconcile())

        assert {(c.product_id, c.action) for c in corrections} == {
            ("eggs", StockAction.CLAMP),
            ("salt", StockAction.REMOVE),
        }
        assert cart.get() == [
            CartLine(product_id="eggs", qty=3),
            CartLine(product_id="bread", qty=2),
        ]

    def test_clamp_uses_pricing_config(self) -> None:
        cart, _, _, cache = _setup(
            {"buns": 3, "rolls": 1},
            [CartLine(product_id="buns", qty=6), CartLine(product_id="rolls", qty=4)],
        )
        pairs = PricingConfig(unit="pcs", is_weight=False, min_qty=2, step_qty=2)
        reconciler = StockReconciler(cart, cache, configs=lambda _pid: pairs)

        corrections = asyncio.run(reconciler.reconcile())

        assert cart.get() == [CartLine(product_id="buns", qty=2)]
        assert {(c.product_id, c.action, c.message) for c in corrections} == {
            ("buns", StockAction.CLAMP, CLAMPED_MESSAGE),
            ("rolls", StockAction.REMOVE, BELOW_MINIMUM_MESSAGE),
        }

    def test_second_pass_is_quiet(self) -> None:
        cart, _, clock, cache = _setup({"eggs": 3}, [CartLine(product_id="eggs", qty=5)])
        reconciler = StockReconciler(cart, cache)
        asyncio.run(reconciler.reconcile())
        clock.advance(1)
        assert asyncio.run(reconciler.reconcile()) == []

    def test_listener_called_per_correction(self) -> None:
        cart, _, _, cache = _setup({"eggs": 0}, [CartLine(product_id="eggs", qty=1)])
        seen: list[StockCorrection] = []
        reconciler = StockReconciler(cart, cache, on_correction=seen.append)
        asyncio.run(reconciler.reconcile())
        assert [c.message for c in seen] == [OUT_OF_STOCK_MESSAGE]

    def test_failing_listener_does_not_stop_correction(self) -> None:
        cart, _, _, cache = _setup({"eggs": 0}, [CartLine(product_id="eggs", qty=1)])

        def broken(correction: StockCorrection) -> None:
            raise RuntimeError("toast failed")

        asyncio.run(StockReconciler(cart, cache, on_correction=broken).reconcile())
        assert cart.get() == []

    def test_backend_failure_uses_fail_safe(self) -> None:
        cart, source, _, cache = _setup({"eggs": 9}, [CartLine(product_id="eggs", qty=1)])
        source.fail = True
        corrections = asyncio.run(StockReconciler(cart, cache).reconcile())
        assert [c.action for c in corrections] == [StockAction.REMOVE]

    def test_watch_schedules_on_change(self) -> None:
        cart, source, clock, cache = _setup({"eggs": 2}, [])
        reconciler = StockReconciler(cart, cache)

        async def scenario() -> list[StockCorrection]:
            reconciler.watch()
            clock.advance(1)
            cart.mutate(lambda lines: [CartLine(product_id="eggs", qty=4)], op="cart_add")
            return await reconciler.drain()

        corrections = asyncio.run(scenario())
        assert [c.new_qty for c in corrections] == [2.0]
        assert cart.get() == [CartLine(product_id="eggs", qty=2)]
        assert source.calls == ["eggs"]

    def test_own_corrections_do_not_reschedule(self) -> None:
        cart, source, clock, cache = _setup({"eggs": 2}, [])
        reconciler = StockReconciler(cart, cache)

        async def scenario() -> None:
            reconciler.watch()
            cart.mutate(lambda lines: [CartLine(product_id="eggs", qty=4)], op="cart_add")
            await reconciler.drain()
            cart.mutate(
                lambda lines: [CartLine(product_id="eggs", qty=1)], op=STOCK_CORRECTION_OP
            )
            await reconciler.drain()

        asyncio.run(scenario())
        assert source.calls == ["eggs"]

    def test_changes_during_check_coalesce(self) -> None:
        cart, source, clock, cache = _setup({"eggs": 5}, [CartLine(product_id="eggs", qty=1)])
        reconciler = StockReconciler(cart, cache)

        async def scenario() -> list[StockCorrection]:
            source.gate = asyncio.Event()
            reconciler.schedule([("eggs", None)])
            await asyncio.sleep(0)
            clock.advance(1)
            cart.mutate(lambda lines: [CartLine(product_id="eggs", qty=7)], op="cart_set")
            reconciler.schedule([("eggs", None)])
            reconciler.schedule([("eggs", None)])
            source.gate.set()
            return await reconciler.drain()

        corrections = asyncio.run(scenario())
        assert len(source.calls) == 2
        assert [c.new_qty for c in corrections] == [5.0]

    def test_watch_without_loop_does_nothing(self) -> None:
        cart, source, _, cache = _setup({"eggs": 0}, [])
        reconciler = StockReconciler(cart, cache)
        reconciler.watch()
        cart.mutate(lambda lines: [CartLine(product_id="eggs", qty=1)], op="cart_add")
        assert source.calls == []
        assert cart.get() == [CartLine(product_id="eggs", qty=1)]

    def test_close_drops_late_results(self) -> None:
        cart, source, _, cache = _setup({"eggs": 0}, [CartLine(product_id="eggs", qty=1)])
        reconciler = StockReconciler(cart, cache)

        async def scenario() -> list[StockCorrection]:
            source.gate = asyncio.Event()
            reconciler.schedule()
            await asyncio.sleep(0)
            reconciler.close()
            source.gate.set()
            return await reconciler.drain()

        assert asyncio.run(scenario()) == []
        assert reconciler.alive is False
        assert cart.get() == [CartLine(product_id="eggs", qty=1)]

    def test_schedule_after_close_is_noop(self) -> None:
        cart, source, _, cache = _setup({"eggs": 0}, [CartLine(product_id="eggs", qty=1)])
        reconciler = StockReconciler(cart, cache)
        reconciler.close()
        assert asyncio.run(reconciler.reconcile()) == []
        assert source.calls == []


class TestReconcileService:
    def test_reports_corrections(self, stocked_store: Storefront) -> None:
        stocked_store.cart.mutate(
            lambda _: [
                CartLine(product_id="eggs", qty=5),
                CartLine(product_id="salt", qty=2),
                CartLine(product_id="bread", qty=1),
            ]
        )
        result = ReconcileService(stocked_store).reconcile()
        assert result.ok
        assert result.op == "reconcile"
        assert result.data["checked"] == 3
        assert len(result.data["corrections"]) == 2
        assert [i["product_id"] for i in result.data["items"]] == ["eggs", "bread"]
        assert set(result.warnings) == {CLAMPED_MESSAGE, OUT_OF_STOCK_MESSAGE}

    def test_dispatches_events(self, stocked_store: Storefront) -> None:
        stocked_store.cart.mutate(lambda _: [CartLine(product_id="salt", qty=2)])
        ReconcileService(stocked_store).reconcile()
        assert stocked_store.event_bus is not None
        assert stocked_store.event_bus.status_counts() == {"completed": 1}

    def test_empty_cart(self, stocked_store: Storefront) -> None:
        result = ReconcileService(stocked_store).reconcile()
        assert result.data == {"checked": 0, "corrections": [], "items": []}

    def test_sees_stock_changed_after_cache(self, stocked_store: Storefront) -> None:
        stocked_store.cart.mutate(lambda _: [CartLine(product_id="bread", qty=4)])
        assert ReconcileService(stocked_store).reconcile().data["corrections"] == []
        set_stock(stocked_store, "bread", 2)
        result = ReconcileService(stocked_store).reconcile()
        assert result.data["corrections"][0]["new_qty"] == 2.0
