"""Unit tests for configuration loading and storage selection."""

from __future__ import annotations

import pytest

from vickrey.config import get_server_config, load_server_config
from vickrey.storage import build_storage
from vickrey.storage.in_memory import InMemoryStorage


def test_default_config_ships_with_package():
    config = get_server_config()
    assert config.auction.max_bidders == 30
    assert config.auction.deposit_rate == pytest.approx(0.1)
    assert config.storage.backend == "in_memory"
    assert config.payments.backend == "local"


def test_load_overrides(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text(
        "auction:\n"
        "  max_bidders: 3\n"
        "  deposit_rate: 0.05\n"
        "payments:\n"
        "  backend: webhook\n"
        "  options:\n"
        "    url: https://payments.test\n"
    )
    config = load_server_config(path)
    assert config.auction.max_bidders == 3
    assert config.auction.deposit_rate == 0.05
    assert config.storage.backend == "in_memory"
    assert config.payments.options["url"] == "https://payments.test"


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("")
    config = load_server_config(path)
    assert config.auction.max_bidders == 30
    assert isinstance(build_storage(config), InMemoryStorage)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_server_config(tmp_path / "absent.yaml")


def test_unknown_storage_backend(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("storage:\n  backend: tape\n")
    with pytest.raises(ValueError):
        build_storage(load_server_config(path))


@pytest.mark.asyncio
async def test_in_memory_storage_returns_copies():
    storage = InMemoryStorage()
    snapshot = {"auction_id": "a1", "bids": []}
    await storage.save_snapshot(snapshot)
    loaded = await storage.get_snapshot("a1")
    loaded["bids"].append({"bidder": "X"})
    assert (await storage.get_snapshot("a1"))["bids"] == []
    with pytest.raises(KeyError):
        await storage.get_snapshot("missing")
    await storage.append_payment("a1", {"kind": "refund"})
    assert await storage.list_payments("a1") == [{"kind": "refund"}]
    assert await storage.list_payments("other") == []
