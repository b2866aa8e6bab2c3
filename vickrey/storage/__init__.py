"""Storage backend factory."""

from __future__ import annotations

from typing import Protocol

from ..config import ServerConfig
from .in_memory import InMemoryStorage
from .redis import RedisStorage


class AuctionStorage(Protocol):
    async def save_snapshot(self, snapshot: dict) -> dict: ...

    async def get_snapshot(self, auction_id: str) -> dict: ...

    async def list_snapshots(self) -> list[dict]: ...

    async def append_payment(self, auction_id: str, event: dict) -> None: ...

    async def list_payments(self, auction_id: str) -> list[dict]: ...


def build_storage(config: ServerConfig) -> AuctionStorage:
    backend = config.storage.backend
    options = dict(config.storage.options)
    if backend == "in_memory":
        return InMemoryStorage()
    if backend == "redis":
        return RedisStorage(**options)
    raise ValueError(f"unknown storage backend {backend}")
