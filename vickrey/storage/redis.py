"""Redis storage backend using redis-py asyncio client."""

from __future__ import annotations

from typing import Any

from redis import asyncio as aioredis

from ..transport.canonical_json import canonical_dumps, canonical_loads


class RedisStorage:
    def __init__(
        self,
        *,
        url: str = "",
        prefix: str = "vickrey",
        client: aioredis.Redis | None = None,
    ) -> None:
        if client is None and not url:
            raise ValueError("redis url missing")
        self._redis = client if client is not None else aioredis.from_url(url)
        self._prefix = prefix.rstrip(":")

    def _snapshot_key(self, auction_id: str) -> str:
        return f"{self._prefix}:auction:{auction_id}"

    def _payments_key(self, auction_id: str) -> str:
        return f"{self._prefix}:payments:{auction_id}"

    async def save_snapshot(self, snapshot: dict[str, Any]) -> dict[str, Any]:
        await self._redis.set(self._snapshot_key(snapshot["auction_id"]), canonical_dumps(snapshot))
        return snapshot

    async def get_snapshot(self, auction_id: str) -> dict[str, Any]:
        raw = await self._redis.get(self._snapshot_key(auction_id))
        if raw is None:
            raise KeyError(auction_id)
        return canonical_loads(raw)

    async def list_snapshots(self) -> list[dict[str, Any]]:
        pattern = self._snapshot_key("*")
        keys: list[str] = []
        cursor = 0
        while True:
            cursor, batch = await self._redis.scan(cursor=cursor, match=pattern, count=100)
            keys.extend(batch)
            if cursor == 0:
                break
        if not keys:
            return []
        values = await self._redis.mget(keys)
        return [canonical_loads(value) for value in values if value]

    async def append_payment(self, auction_id: str, event: dict[str, Any]) -> None:
        await self._redis.rpush(self._payments_key(auction_id), canonical_dumps(event))

    async def list_payments(self, auction_id: str) -> list[dict[str, Any]]:
        values = await self._redis.lrange(self._payments_key(auction_id), 0, -1)
        return [canonical_loads(value) for value in values]
