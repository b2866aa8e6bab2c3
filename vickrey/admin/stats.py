"""Operational stats endpoint."""

from __future__ import annotations

from collections import Counter
from typing import Any

from fastapi import APIRouter, Depends, Request

from ..auction.registry import AuctionRegistry

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_registry(request: Request) -> AuctionRegistry:
    return request.app.state.auction_registry


@router.get("/stats")
async def stats(registry: AuctionRegistry = Depends(_get_registry)) -> dict[str, Any]:
    snapshots = await registry.list_snapshots()
    total_auctions = len(snapshots)
    total_bids = sum(len(snapshot.get("bids", [])) for snapshot in snapshots)
    states: Counter[str] = Counter(snapshot["state"] for snapshot in snapshots)
    wins_by_bidder: Counter[str] = Counter()
    settled_volume = 0.0
    held_deposits = 0.0

    for snapshot in snapshots:
        winner = snapshot.get("winner")
        if winner:
            wins_by_bidder[winner] += 1
        if snapshot["state"] == "delivered" and snapshot.get("settlement_price") is not None:
            settled_volume += snapshot["settlement_price"]
        for entry in snapshot.get("deposits", []):
            if not entry["settled"]:
                held_deposits += entry["amount"]

    no_bid_count = sum(1 for snapshot in snapshots if not snapshot.get("bids"))
    return {
        "total_auctions": total_auctions,
        "total_bids": total_bids,
        "auctions_by_state": dict(states),
        "no_bid_rate": round(no_bid_count / total_auctions, 4) if total_auctions else 0.0,
        "wins_by_bidder": dict(wins_by_bidder),
        "settled_volume": round(settled_volume, 2),
        "held_deposits": round(held_deposits, 2),
    }
