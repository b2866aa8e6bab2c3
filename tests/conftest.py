from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from vickrey.auction.engine import AuctionEngine
from vickrey.auction.models import AuctionConfig
from vickrey.payments.events import PaymentOutbox
from vickrey.transport.timestamps import ManualClock

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
END = START + timedelta(minutes=1)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START)


@pytest.fixture
def outbox() -> PaymentOutbox:
    return PaymentOutbox()


@pytest.fixture
def make_engine(clock, outbox):
    def _make(market_price: float = 3000, **kwargs) -> AuctionEngine:
        config = AuctionConfig(owner="Owner", end_time=END, market_price=market_price)
        kwargs.setdefault("auction_id", "auc_test")
        kwargs.setdefault("sink", outbox)
        return AuctionEngine(config, clock=clock, **kwargs)

    return _make


@pytest.fixture
def engine(make_engine) -> AuctionEngine:
    return make_engine()
