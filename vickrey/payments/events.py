"""Typed payment notifications emitted by the auction engine.

The engine never moves money. It reports what should be transferred to a
sink, and an external payment collaborator acts on those reports.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Optional, Protocol

logger = logging.getLogger(__name__)


class PaymentKind(str, Enum):
    REFUND = "refund"
    PAY_OWNER = "pay_owner"


@dataclass(frozen=True)
class PaymentEvent:
    kind: PaymentKind
    recipient: str
    amount: float
    auction_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "recipient": self.recipient,
            "amount": self.amount,
            "auction_id": self.auction_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PaymentEvent":
        return cls(
            kind=PaymentKind(data["kind"]),
            recipient=data["recipient"],
            amount=float(data["amount"]),
            auction_id=data.get("auction_id"),
        )


class PaymentSink(Protocol):
    def emit(self, event: PaymentEvent) -> None: ...


class LoggingPaymentSink:
    def emit(self, event: PaymentEvent) -> None:
        logger.info(
            "[payment] auction=%s %s %s amount=%.2f",
            event.auction_id,
            event.kind.value,
            event.recipient,
            event.amount,
        )


class PaymentOutbox:
    """In-memory sink that buffers events until they are drained."""

    def __init__(self) -> None:
        self._pending: Deque[PaymentEvent] = deque()

    def __len__(self) -> int:
        return len(self._pending)

    def emit(self, event: PaymentEvent) -> None:
        self._pending.append(event)

    def drain(self) -> list[PaymentEvent]:
        events = list(self._pending)
        self._pending.clear()
        return events
