"""Shared auction data structures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..transport.timestamps import format_timestamp
from .errors import InvalidConfig


@dataclass(frozen=True)
class Bid:
    bidder: str
    amount: float

    def to_dict(self) -> dict[str, Any]:
        return {"bidder": self.bidder, "amount": self.amount}


@dataclass(frozen=True)
class AuctionConfig:
    """Immutable parameters fixed when an auction is created."""

    owner: str
    end_time: datetime
    market_price: float

    def __post_init__(self) -> None:
        if not isinstance(self.owner, str) or not self.owner:
            raise InvalidConfig("owner must be a non-empty string")
        if not isinstance(self.end_time, datetime):
            raise InvalidConfig("end_time must be a datetime")
        if self.end_time.tzinfo is None:
            object.__setattr__(self, "end_time", self.end_time.replace(tzinfo=timezone.utc))
        try:
            market_price = float(self.market_price)
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidConfig("market_price must be a number") from exc
        if not market_price > 0:
            raise InvalidConfig("market_price must be greater than zero")
        object.__setattr__(self, "market_price", market_price)

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "end_time": format_timestamp(self.end_time),
            "market_price": self.market_price,
        }
