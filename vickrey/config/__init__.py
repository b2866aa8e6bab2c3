"""Configuration helpers for the auction server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml

_DEFAULT_SERVER_CONFIG = Path(__file__).resolve().parent / "server.yaml"


@dataclass(frozen=True)
class AuctionSettings:
    max_bidders: int
    deposit_rate: float


@dataclass(frozen=True)
class StorageConfig:
    backend: str
    options: Mapping[str, Any]


@dataclass(frozen=True)
class PaymentsConfig:
    backend: str
    options: Mapping[str, Any]


@dataclass(frozen=True)
class ServerConfig:
    listen: Mapping[str, Any]
    auction: AuctionSettings
    storage: StorageConfig
    payments: PaymentsConfig


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    return yaml.safe_load(path.read_text()) or {}


def load_server_config(path: Path) -> ServerConfig:
    data = _load_yaml(path)
    auction = data.get("auction", {})
    storage = data.get("storage", {})
    payments = data.get("payments", {})
    return ServerConfig(
        listen=data.get("listen", {}),
        auction=AuctionSettings(
            max_bidders=int(auction.get("max_bidders", 30)),
            deposit_rate=float(auction.get("deposit_rate", 0.1)),
        ),
        storage=StorageConfig(
            backend=str(storage.get("backend", "in_memory")),
            options=dict(storage.get("options") or {}),
        ),
        payments=PaymentsConfig(
            backend=str(payments.get("backend", "local")),
            options=dict(payments.get("options") or {}),
        ),
    )


@lru_cache(maxsize=1)
def get_server_config() -> ServerConfig:
    return load_server_config(Path(os.getenv("VICKREY_CONFIG_PATH", _DEFAULT_SERVER_CONFIG)))
