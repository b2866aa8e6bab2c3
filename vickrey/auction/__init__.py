"""Auction core: engine, lifecycle and bid selection."""

from .engine import AuctionEngine
from .errors import (
    AlreadyDelivered,
    AuctionClosed,
    AuctionError,
    AuctionOngoing,
    DuplicateBidder,
    InvalidBid,
    InvalidConfig,
    NotEnded,
    Unauthorized,
)
from .models import AuctionConfig, Bid

__all__ = [
    "AlreadyDelivered",
    "AuctionClosed",
    "AuctionConfig",
    "AuctionEngine",
    "AuctionError",
    "AuctionOngoing",
    "Bid",
    "DuplicateBidder",
    "InvalidBid",
    "InvalidConfig",
    "NotEnded",
    "Unauthorized",
]
