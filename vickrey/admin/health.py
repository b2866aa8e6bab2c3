"""Liveness report covering hosted auctions and configured backends."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request

from ..auction.registry import AuctionRegistry
from ..config import ServerConfig
from ..transport.timestamps import format_timestamp

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_registry(request: Request) -> AuctionRegistry:
    return request.app.state.auction_registry


def _get_config(request: Request) -> ServerConfig:
    return request.app.state.server_config


@router.get("/health")
async def health(
    request: Request,
    registry: AuctionRegistry = Depends(_get_registry),
    config: ServerConfig = Depends(_get_config),
) -> dict[str, Any]:
    started = request.app.state.start_time
    return {
        "status": "healthy",
        "started_at": format_timestamp(started),
        "uptime_seconds": int((datetime.now(timezone.utc) - started).total_seconds()),
        "hosted_auctions": await registry.count(),
        "storage_backend": config.storage.backend,
        "payments_backend": config.payments.backend,
    }
