"""In-memory storage backend for auction snapshots and payment events."""

from __future__ import annotations

import asyncio
from copy import deepcopy
from typing import Any


class InMemoryStorage:
    def __init__(self) -> None:
        self._snapshots: dict[str, dict[str, Any]] = {}
        self._payments: dict[str, list[dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    async def save_snapshot(self, snapshot: dict[str, Any]) -> dict[str, Any]:
        async with self._lock:
            self._snapshots[snapshot["auction_id"]] = deepcopy(snapshot)
            return deepcopy(snapshot)

    async def get_snapshot(self, auction_id: str) -> dict[str, Any]:
        async with self._lock:
            try:
                return deepcopy(self._snapshots[auction_id])
            except KeyError as exc:
                raise KeyError(f"auction {auction_id} not found") from exc

    async def list_snapshots(self) -> list[dict[str, Any]]:
        async with self._lock:
            return [deepcopy(snapshot) for snapshot in self._snapshots.values()]

    async def append_payment(self, auction_id: str, event: dict[str, Any]) -> None:
        async with self._lock:
            self._payments.setdefault(auction_id, []).append(deepcopy(event))

    async def list_payments(self, auction_id: str) -> list[dict[str, Any]]:
        async with self._lock:
            return [deepcopy(event) for event in self._payments.get(auction_id, [])]
