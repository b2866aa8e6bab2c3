"""Expose currently loaded server config for debugging."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..config import ServerConfig
from ..validation.validator import SchemaRegistry

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_config(request: Request) -> ServerConfig:
    return request.app.state.server_config


def _get_schemas(request: Request) -> SchemaRegistry:
    return request.app.state.schema_registry


@router.get("/config")
async def config(
    request: Request,
    config: ServerConfig = Depends(_get_config),
    schemas: SchemaRegistry = Depends(_get_schemas),
) -> dict:
    return {
        "max_bidders": config.auction.max_bidders,
        "deposit_rate": config.auction.deposit_rate,
        "storage_backend": config.storage.backend,
        "payments_backend": config.payments.backend,
        "schemas": schemas.names,
        "version": request.app.version,
    }
