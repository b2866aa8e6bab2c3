"""Typed failures raised by the auction engine.

Every error is a caller-correctable precondition violation. None of them is
retried and none leaves the engine partially mutated.
"""

from __future__ import annotations


class AuctionError(Exception):
    """Base class for all auction precondition failures."""


class InvalidConfig(AuctionError, ValueError):
    """Raised when an auction is constructed with invalid parameters."""


class InvalidBid(AuctionError, ValueError):
    """Raised when a bid amount or bidder identifier is not acceptable."""


class AuctionClosed(AuctionError):
    """Raised when a bid arrives after the deadline, at capacity, or after close."""


class DuplicateBidder(AuctionError):
    """Raised when a bidder that already holds a deposit bids again."""


class AuctionOngoing(AuctionError):
    """Raised when closing before the deadline with capacity still available."""


class NotEnded(AuctionError):
    """Raised when delivery is attempted before the auction was closed."""


class Unauthorized(AuctionError):
    """Raised when someone other than the lowest bidder attempts delivery."""


class AlreadyDelivered(AuctionError):
    """Raised when delivery is attempted a second time."""
