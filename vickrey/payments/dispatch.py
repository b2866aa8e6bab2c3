"""Forward payment events to the external payment collaborator."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from ..transport.canonical_json import canonical_dumps
from .events import PaymentEvent

logger = logging.getLogger(__name__)


class PaymentDispatchError(RuntimeError):
    """Raised when the payment backend rejects or cannot receive an event."""


class _DispatchProtocol:
    async def send(self, event: PaymentEvent) -> None:  # pragma: no cover - protocol
        raise NotImplementedError

    async def close(self) -> None:
        return None


class _LocalDispatch(_DispatchProtocol):
    async def send(self, event: PaymentEvent) -> None:
        logger.info(
            "[local-payments] auction=%s %s recipient=%s amount=%.2f",
            event.auction_id,
            event.kind.value,
            event.recipient,
            event.amount,
        )


class _WebhookDispatch(_DispatchProtocol):
    def __init__(self, options: dict[str, Any], client: httpx.AsyncClient | None = None) -> None:
        self._url = options.get("url")
        if not self._url:
            raise ValueError("webhook payments backend requires url")
        self._timeout = int(options.get("timeout_ms", 2000)) / 1000
        self._client = client or httpx.AsyncClient()

    async def send(self, event: PaymentEvent) -> None:
        try:
            response = await self._client.post(
                self._url,
                content=canonical_dumps(event.to_dict()),
                headers={"content-type": "application/json"},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "payment webhook failed for auction=%s recipient=%s",
                event.auction_id,
                event.recipient,
                exc_info=True,
            )
            raise PaymentDispatchError(str(exc)) from exc

    async def close(self) -> None:
        await self._client.aclose()


class PaymentDispatcher:
    def __init__(
        self,
        backend: str = "local",
        options: dict[str, Any] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        options = options or {}
        if backend == "webhook":
            self._dispatch: _DispatchProtocol = _WebhookDispatch(options, client)
        elif backend == "local":
            self._dispatch = _LocalDispatch()
        else:
            raise ValueError(f"unknown payments backend {backend}")
        self.backend = backend

    async def dispatch(self, events: Iterable[PaymentEvent]) -> None:
        for event in events:
            await self._dispatch.send(event)

    async def close(self) -> None:
        await self._dispatch.close()
