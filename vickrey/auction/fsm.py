"""Auction lifecycle finite state machine."""

from __future__ import annotations

from enum import Enum


class AuctionState(str, Enum):
    OPEN = "open"
    ENDED = "ended"
    DELIVERED = "delivered"


class AuctionEvent(str, Enum):
    BID_ACCEPTED = "bid_accepted"
    AUCTION_CLOSED = "auction_closed"
    ITEM_DELIVERED = "item_delivered"


_TRANSITIONS = {
    (AuctionState.OPEN, AuctionEvent.BID_ACCEPTED): AuctionState.OPEN,
    (AuctionState.OPEN, AuctionEvent.AUCTION_CLOSED): AuctionState.ENDED,
    (AuctionState.ENDED, AuctionEvent.ITEM_DELIVERED): AuctionState.DELIVERED,
}


def transition(current: AuctionState, event: AuctionEvent) -> AuctionState:
    try:
        return _TRANSITIONS[(current, event)]
    except KeyError as exc:
        raise ValueError(f"invalid transition from {current} via {event}") from exc
