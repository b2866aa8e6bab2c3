"""Unit tests for the async auction registry."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from vickrey.auction.errors import DuplicateBidder, InvalidConfig, Unauthorized
from vickrey.auction.registry import AuctionRegistry, UnknownAuction
from vickrey.payments.dispatch import PaymentDispatchError
from vickrey.payments.events import PaymentEvent, PaymentKind
from vickrey.storage.in_memory import InMemoryStorage
from vickrey.transport.timestamps import ManualClock

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def dispatcher():
    mock = AsyncMock()
    mock.dispatch = AsyncMock()
    return mock


@pytest.fixture
def registry(storage, dispatcher, clock):
    return AuctionRegistry(storage, dispatcher, clock=clock, max_bidders=5)


class TestAuctionRegistry:
    @pytest.mark.asyncio
    async def test_create_persists_snapshot(self, registry, storage):
        snapshot = await registry.create("Owner", START + timedelta(minutes=1), 3000)
        assert snapshot["auction_id"].startswith("auc_")
        assert snapshot["state"] == "open"
        assert snapshot["max_bidders"] == 5
        stored = await storage.get_snapshot(snapshot["auction_id"])
        assert stored == snapshot

    @pytest.mark.asyncio
    async def test_create_with_explicit_id_rejects_reuse(self, registry):
        await registry.create("Owner", START, 100, auction_id="job-1")
        with pytest.raises(ValueError):
            await registry.create("Owner", START, 100, auction_id="job-1")

    @pytest.mark.asyncio
    async def test_create_rejects_invalid_config(self, registry):
        with pytest.raises(InvalidConfig):
            await registry.create("Owner", START, 0)
        assert await registry.list_snapshots() == []

    @pytest.mark.asyncio
    async def test_unknown_auction(self, registry):
        with pytest.raises(UnknownAuction):
            await registry.place_bid("missing", "A", 10)
        with pytest.raises(KeyError):
            await registry.snapshot("missing")

    @pytest.mark.asyncio
    async def test_full_lifecycle_dispatches_payments(self, registry, storage, dispatcher, clock):
        snapshot = await registry.create("Owner", START + timedelta(minutes=1), 3000, auction_id="a1")
        await registry.place_bid("a1", "Bidder1", 2750)
        await registry.place_bid("a1", "Bidder2", 2500)
        assert (await storage.get_snapshot("a1"))["lowest"] == {"bidder": "Bidder2", "amount": 2500.0}

        clock.advance(minutes=2)
        closed = await registry.close("a1")
        assert closed["state"] == "ended"
        assert closed["payments_dispatched"] is True
        assert closed["winner"] == "Bidder2"
        assert closed["settlement_price"] == 2750.0
        assert [p["recipient"] for p in closed["payments"]] == ["Bidder1"]
        dispatched = dispatcher.dispatch.await_args_list[0].args[0]
        assert dispatched == [PaymentEvent(PaymentKind.REFUND, "Bidder1", pytest.approx(275), "a1")]

        delivered = await registry.deliver("a1", "Bidder2")
        assert delivered["state"] == "delivered"
        assert [(p["kind"], p["recipient"]) for p in delivered["payments"]] == [
            ("pay_owner", "Owner"),
            ("refund", "Bidder2"),
        ]
        payments = await registry.payments("a1")
        assert [p["kind"] for p in payments] == ["refund", "pay_owner", "refund"]
        assert payments[1]["amount"] == 2750.0
        assert snapshot["auction_id"] == "a1"

    @pytest.mark.asyncio
    async def test_engine_errors_propagate_without_side_effects(self, registry, storage, dispatcher, clock):
        await registry.create("Owner", START + timedelta(minutes=1), 3000, auction_id="a2")
        await registry.place_bid("a2", "A", 100)
        with pytest.raises(DuplicateBidder):
            await registry.place_bid("a2", "A", 90)
        clock.advance(minutes=2)
        await registry.close("a2")
        dispatcher.dispatch.reset_mock()
        with pytest.raises(Unauthorized):
            await registry.deliver("a2", "B")
        dispatcher.dispatch.assert_not_awaited()
        assert (await storage.get_snapshot("a2"))["state"] == "ended"

    @pytest.mark.asyncio
    async def test_list_snapshots(self, registry):
        await registry.create("Owner", START, 100, auction_id="x")
        await registry.create("Owner", START, 200, auction_id="y")
        ids = sorted(s["auction_id"] for s in await registry.list_snapshots())
        assert ids == ["x", "y"]

    @pytest.mark.asyncio
    async def test_count(self, registry):
        assert await registry.count() == 0
        await registry.create("Owner", START, 100, auction_id="x")
        assert await registry.count() == 1

    @pytest.mark.asyncio
    async def test_dispatch_failure_keeps_committed_result(self, registry, storage, dispatcher, clock):
        await registry.create("Owner", START + timedelta(minutes=1), 3000, auction_id="a3")
        await registry.place_bid("a3", "A", 1000)
        await registry.place_bid("a3", "B", 800)
        clock.advance(minutes=2)
        dispatcher.dispatch.side_effect = PaymentDispatchError("503 Service Unavailable")

        closed = await registry.close("a3")

        assert closed["state"] == "ended"
        assert closed["payments_dispatched"] is False
        assert "503" in closed["dispatch_error"]
        assert [p["recipient"] for p in await registry.payments("a3")] == ["A"]
        assert (await storage.get_snapshot("a3"))["state"] == "ended"
