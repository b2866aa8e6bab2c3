"""Winner selection helpers."""

from __future__ import annotations

from typing import Iterable, Optional

from .models import Bid


class LowestTwo:
    """Streaming tracker of the two lowest bids seen so far.

    An unset cell stands for +infinity. Ties keep arrival order: a later bid
    of equal amount never displaces an earlier one.
    """

    __slots__ = ("lowest", "second_lowest")

    def __init__(self) -> None:
        self.lowest: Optional[Bid] = None
        self.second_lowest: Optional[Bid] = None

    def offer(self, bid: Bid) -> None:
        if self.lowest is None or bid.amount < self.lowest.amount:
            self.second_lowest = self.lowest
            self.lowest = bid
        elif self.second_lowest is None or bid.amount < self.second_lowest.amount:
            self.second_lowest = bid

    def collapse(self) -> None:
        """Make the sole bid stand in for the runner-up."""
        self.second_lowest = self.lowest


def two_lowest(bids: Iterable[Bid]) -> tuple[Optional[Bid], Optional[Bid]]:
    """Scan-based reference for the two lowest bids in arrival order."""
    ranked = sorted(enumerate(bids), key=lambda item: (item[1].amount, item[0]))
    lowest = ranked[0][1] if ranked else None
    second_lowest = ranked[1][1] if len(ranked) > 1 else None
    return lowest, second_lowest
