"""Billing utilities such as deposit and settlement price calculation."""

from __future__ import annotations

from typing import Optional

from ..auction.models import Bid

DEFAULT_DEPOSIT_RATE = 0.1


def deposit_for(amount: float, rate: float = DEFAULT_DEPOSIT_RATE) -> float:
    return amount * rate


def settlement_price(
    lowest: Optional[Bid],
    second_lowest: Optional[Bid],
    bid_count: int,
) -> Optional[float]:
    if lowest is None:
        return None
    if bid_count == 1 or second_lowest is None:
        return lowest.amount
    return second_lowest.amount
