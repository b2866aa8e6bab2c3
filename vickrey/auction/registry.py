"""Glue between auction engines, snapshot storage, and payment dispatch."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any

from ..ledger.billing import DEFAULT_DEPOSIT_RATE
from ..payments.dispatch import PaymentDispatchError, PaymentDispatcher
from ..payments.events import PaymentEvent, PaymentOutbox
from ..storage import AuctionStorage
from ..transport.timestamps import Clock, system_clock
from .engine import DEFAULT_MAX_BIDDERS, AuctionEngine
from .models import AuctionConfig, Bid

logger = logging.getLogger(__name__)


class UnknownAuction(KeyError):
    """Raised when an auction id is not hosted by this registry."""


class AuctionRegistry:
    def __init__(
        self,
        storage: AuctionStorage,
        dispatcher: PaymentDispatcher,
        *,
        clock: Clock = system_clock,
        max_bidders: int = DEFAULT_MAX_BIDDERS,
        deposit_rate: float = DEFAULT_DEPOSIT_RATE,
    ) -> None:
        self._storage = storage
        self._dispatcher = dispatcher
        self._clock = clock
        self._max_bidders = max_bidders
        self._deposit_rate = deposit_rate
        self._engines: dict[str, tuple[AuctionEngine, PaymentOutbox]] = {}
        self._lock = asyncio.Lock()

    async def create(
        self,
        owner: str,
        end_time: datetime,
        market_price: float,
        auction_id: str | None = None,
    ) -> dict[str, Any]:
        config = AuctionConfig(owner=owner, end_time=end_time, market_price=market_price)
        auction_id = auction_id or f"auc_{uuid.uuid4().hex}"
        outbox = PaymentOutbox()
        engine = AuctionEngine(
            config,
            clock=self._clock,
            sink=outbox,
            max_bidders=self._max_bidders,
            deposit_rate=self._deposit_rate,
            auction_id=auction_id,
        )
        async with self._lock:
            if auction_id in self._engines:
                raise ValueError(f"auction {auction_id} already exists")
            self._engines[auction_id] = (engine, outbox)
        logger.info(
            "auction=%s created by %s, market price %s, ends %s",
            auction_id,
            owner,
            config.market_price,
            config.end_time.isoformat(),
        )
        return await self._storage.save_snapshot(engine.snapshot())

    async def count(self) -> int:
        async with self._lock:
            return len(self._engines)

    async def snapshot(self, auction_id: str) -> dict[str, Any]:
        engine, _ = await self._lookup(auction_id)
        return engine.snapshot()

    async def place_bid(self, auction_id: str, bidder: str, amount: float) -> Bid:
        engine, _ = await self._lookup(auction_id)
        bid = engine.place_bid(bidder, amount)
        await self._storage.save_snapshot(engine.snapshot())
        return bid

    async def close(self, auction_id: str) -> dict[str, Any]:
        engine, outbox = await self._lookup(auction_id)
        engine.close_auction()
        return await self._settle(engine, outbox.drain())

    async def deliver(self, auction_id: str, bidder: str) -> dict[str, Any]:
        engine, outbox = await self._lookup(auction_id)
        engine.deliver_item(bidder)
        return await self._settle(engine, outbox.drain())

    async def payments(self, auction_id: str) -> list[dict[str, Any]]:
        await self._lookup(auction_id)
        return await self._storage.list_payments(auction_id)

    async def list_snapshots(self) -> list[dict[str, Any]]:
        async with self._lock:
            engines = [engine for engine, _ in self._engines.values()]
        return [engine.snapshot() for engine in engines]

    async def _lookup(self, auction_id: str) -> tuple[AuctionEngine, PaymentOutbox]:
        async with self._lock:
            try:
                return self._engines[auction_id]
            except KeyError as exc:
                raise UnknownAuction(f"auction {auction_id} not found") from exc

    async def _settle(self, engine: AuctionEngine, events: list[PaymentEvent]) -> dict[str, Any]:
        snapshot = await self._storage.save_snapshot(engine.snapshot())
        for event in events:
            await self._storage.append_payment(snapshot["auction_id"], event.to_dict())
        result = {
            **snapshot,
            "payments": [event.to_dict() for event in events],
            "payments_dispatched": True,
        }
        try:
            await self._dispatcher.dispatch(events)
        except PaymentDispatchError as exc:
            logger.error("auction=%s payment dispatch failed: %s", snapshot["auction_id"], exc)
            result["payments_dispatched"] = False
            result["dispatch_error"] = str(exc)
        return result
