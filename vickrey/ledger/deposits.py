"""Good-faith deposit ledger with explicit settlement tracking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional


@dataclass
class DepositEntry:
    bidder: str
    amount: float
    settled: bool = False

    @property
    def outstanding(self) -> float:
        return 0.0 if self.settled else self.amount

    def to_dict(self) -> dict[str, Any]:
        return {"bidder": self.bidder, "amount": self.amount, "settled": self.settled}


class DepositLedger:
    def __init__(self) -> None:
        self._entries: dict[str, DepositEntry] = {}

    def __contains__(self, bidder: object) -> bool:
        return bidder in self._entries

    def __iter__(self) -> Iterator[DepositEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, bidder: str, amount: float) -> DepositEntry:
        if bidder in self._entries:
            raise KeyError(f"deposit for {bidder} already recorded")
        entry = DepositEntry(bidder, amount)
        self._entries[bidder] = entry
        return entry

    def get(self, bidder: str) -> Optional[DepositEntry]:
        return self._entries.get(bidder)

    def outstanding(self, bidder: str) -> float:
        entry = self._entries.get(bidder)
        return entry.outstanding if entry else 0.0

    def settle(self, bidder: str) -> Optional[float]:
        """Mark a deposit as paid out.

        Returns the refundable amount the first time and ``None`` afterwards,
        so a deposit can never be refunded twice.
        """
        entry = self._entries[bidder]
        if entry.settled:
            return None
        entry.settled = True
        return entry.amount
