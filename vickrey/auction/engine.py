"""Sealed-bid second-price procurement auction.

The lowest bidder wins the contract and is paid the second-lowest bid. Every
bidder leaves a good-faith deposit which is refunded to losers when the
auction closes and to the winner once the item is delivered.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Any, Optional

from ..ledger.billing import DEFAULT_DEPOSIT_RATE, deposit_for, settlement_price
from ..ledger.deposits import DepositLedger
from ..payments.events import LoggingPaymentSink, PaymentEvent, PaymentKind, PaymentSink
from ..transport.timestamps import Clock, system_clock
from .errors import (
    AlreadyDelivered,
    AuctionClosed,
    AuctionOngoing,
    DuplicateBidder,
    InvalidBid,
    InvalidConfig,
    NotEnded,
    Unauthorized,
)
from .fsm import AuctionEvent, AuctionState, transition
from .models import AuctionConfig, Bid
from .selection import LowestTwo

logger = logging.getLogger(__name__)

DEFAULT_MAX_BIDDERS = 30


class AuctionEngine:
    def __init__(
        self,
        config: AuctionConfig,
        *,
        clock: Clock = system_clock,
        sink: PaymentSink | None = None,
        max_bidders: int = DEFAULT_MAX_BIDDERS,
        deposit_rate: float = DEFAULT_DEPOSIT_RATE,
        auction_id: str | None = None,
    ) -> None:
        if isinstance(max_bidders, bool) or not isinstance(max_bidders, int) or max_bidders < 1:
            raise InvalidConfig("max_bidders must be a positive integer")
        if not 0 <= deposit_rate < 1:
            raise InvalidConfig("deposit_rate must be within [0, 1)")
        self._config = config
        self._clock = clock
        self._sink = sink if sink is not None else LoggingPaymentSink()
        self._max_bidders = max_bidders
        self._deposit_rate = deposit_rate
        self._auction_id = auction_id
        self._state = AuctionState.OPEN
        self._bids: list[Bid] = []
        self._deposits = DepositLedger()
        self._tracker = LowestTwo()
        self._lock = threading.Lock()

    # Read-only queries -------------------------------------------------------

    @property
    def auction_id(self) -> str | None:
        return self._auction_id

    @property
    def config(self) -> AuctionConfig:
        return self._config

    @property
    def max_bidders(self) -> int:
        return self._max_bidders

    @property
    def state(self) -> AuctionState:
        with self._lock:
            return self._state

    @property
    def ended(self) -> bool:
        return self.state is not AuctionState.OPEN

    @property
    def delivered(self) -> bool:
        return self.state is AuctionState.DELIVERED

    @property
    def lowest(self) -> Optional[Bid]:
        with self._lock:
            return self._tracker.lowest

    @property
    def second_lowest(self) -> Optional[Bid]:
        with self._lock:
            return self._tracker.second_lowest

    @property
    def winner(self) -> Optional[str]:
        with self._lock:
            if self._state is AuctionState.OPEN or self._tracker.lowest is None:
                return None
            return self._tracker.lowest.bidder

    @property
    def bids(self) -> tuple[Bid, ...]:
        with self._lock:
            return tuple(self._bids)

    @property
    def bid_count(self) -> int:
        with self._lock:
            return len(self._bids)

    def deposit_of(self, bidder: str) -> float:
        with self._lock:
            return self._deposits.outstanding(bidder)

    def settlement_price(self) -> Optional[float]:
        with self._lock:
            if self._state is AuctionState.OPEN:
                return None
            return self._settlement_price()

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            lowest = self._tracker.lowest
            second = self._tracker.second_lowest
            ended = self._state is not AuctionState.OPEN
            return {
                "auction_id": self._auction_id,
                **self._config.to_dict(),
                "state": self._state.value,
                "max_bidders": self._max_bidders,
                "deposit_rate": self._deposit_rate,
                "bids": [bid.to_dict() for bid in self._bids],
                "deposits": [entry.to_dict() for entry in self._deposits],
                "lowest": lowest.to_dict() if lowest else None,
                "second_lowest": second.to_dict() if second else None,
                "winner": lowest.bidder if ended and lowest else None,
                "settlement_price": self._settlement_price() if ended else None,
            }

    # Operations --------------------------------------------------------------

    def place_bid(self, bidder: str, amount: float) -> Bid:
        with self._lock:
            if (
                self._state is not AuctionState.OPEN
                or self._clock() > self._config.end_time
                or len(self._bids) >= self._max_bidders
            ):
                raise AuctionClosed("auction has ended or reached maximum bidders")
            if not isinstance(bidder, str) or not bidder:
                raise InvalidBid("bidder must be a non-empty string")
            if isinstance(amount, bool) or not isinstance(amount, (int, float)):
                raise InvalidBid("bid amount must be a number")
            try:
                value = float(amount)
            except OverflowError as exc:
                raise InvalidBid("bid must be positive and less than market price") from exc
            if not math.isfinite(value):
                raise InvalidBid("bid amount must be a finite number")
            if value <= 0 or value >= self._config.market_price:
                raise InvalidBid("bid must be positive and less than market price")
            if bidder in self._deposits:
                raise DuplicateBidder(f"{bidder} has already placed a bid")

            self._state = transition(self._state, AuctionEvent.BID_ACCEPTED)
            bid = Bid(bidder, value)
            self._deposits.record(bidder, deposit_for(bid.amount, self._deposit_rate))
            self._bids.append(bid)
            self._tracker.offer(bid)
        logger.debug("auction=%s accepted bid from %s", self._auction_id, bidder)
        return bid

    def close_auction(self) -> list[PaymentEvent]:
        with self._lock:
            if self._state is not AuctionState.OPEN:
                raise AuctionClosed("auction has already ended")
            if self._clock() < self._config.end_time and len(self._bids) < self._max_bidders:
                raise AuctionOngoing("auction is still ongoing")

            self._state = transition(self._state, AuctionEvent.AUCTION_CLOSED)
            if len(self._bids) == 1:
                self._tracker.collapse()
            lowest = self._tracker.lowest
            events = []
            for bid in self._bids:
                if lowest is not None and bid.bidder == lowest.bidder:
                    continue
                refund = self._deposits.settle(bid.bidder)
                if refund is not None:
                    events.append(self._event(PaymentKind.REFUND, bid.bidder, refund))
            price = self._settlement_price()
            self._publish(events)
        logger.info(
            "auction=%s ended: lowest bidder=%s settlement price=%s",
            self._auction_id,
            lowest.bidder if lowest else None,
            price,
        )
        return events

    def deliver_item(self, bidder: str) -> list[PaymentEvent]:
        with self._lock:
            if self._state is AuctionState.OPEN:
                raise NotEnded("auction has not ended yet")
            lowest = self._tracker.lowest
            if lowest is None or bidder != lowest.bidder:
                raise Unauthorized("only the lowest bidder can deliver the item")
            if self._state is AuctionState.DELIVERED:
                raise AlreadyDelivered("item has already been delivered")

            self._state = transition(self._state, AuctionEvent.ITEM_DELIVERED)
            price = self._settlement_price()
            events = [self._event(PaymentKind.PAY_OWNER, self._config.owner, price)]
            refund = self._deposits.settle(lowest.bidder)
            if refund is not None:
                events.append(self._event(PaymentKind.REFUND, lowest.bidder, refund))
            self._publish(events)
        logger.info("auction=%s delivered by %s, owner paid %s", self._auction_id, bidder, price)
        return events

    # Internals ---------------------------------------------------------------

    def _settlement_price(self) -> Optional[float]:
        return settlement_price(self._tracker.lowest, self._tracker.second_lowest, len(self._bids))

    def _event(self, kind: PaymentKind, recipient: str, amount: float) -> PaymentEvent:
        return PaymentEvent(kind=kind, recipient=recipient, amount=amount, auction_id=self._auction_id)

    def _publish(self, events: list[PaymentEvent]) -> None:
        # Deposits are already settled; a sink failure must not hide later events.
        for event in events:
            try:
                self._sink.emit(event)
            except Exception:
                logger.error(
                    "auction=%s payment sink failed for %s %s",
                    self._auction_id,
                    event.kind.value,
                    event.recipient,
                    exc_info=True,
                )
