from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from jsonschema import ValidationError

from . import __version__
from .admin import config as admin_config
from .admin import health as admin_health
from .admin import stats as admin_stats
from .auction.errors import (
    AlreadyDelivered,
    AuctionClosed,
    AuctionError,
    AuctionOngoing,
    DuplicateBidder,
    InvalidBid,
    InvalidConfig,
    NotEnded,
    Unauthorized,
)
from .auction.registry import AuctionRegistry, UnknownAuction
from .config import ServerConfig, get_server_config
from .payments.dispatch import PaymentDispatcher
from .storage import build_storage
from .transport.timestamps import TimestampError, parse_timestamp
from .validation.validator import SchemaRegistry, get_schema_registry

ERROR_STATUS = {
    InvalidConfig: 422,
    InvalidBid: 422,
    DuplicateBidder: 409,
    AuctionClosed: 409,
    AuctionOngoing: 409,
    NotEnded: 409,
    AlreadyDelivered: 409,
    Unauthorized: 403,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    server_config = get_server_config()
    schema_registry = get_schema_registry()
    storage = build_storage(server_config)
    dispatcher = PaymentDispatcher(
        backend=server_config.payments.backend,
        options=dict(server_config.payments.options),
    )
    registry = AuctionRegistry(
        storage,
        dispatcher,
        max_bidders=server_config.auction.max_bidders,
        deposit_rate=server_config.auction.deposit_rate,
    )

    app.state.server_config = server_config
    app.state.schema_registry = schema_registry
    app.state.storage = storage
    app.state.dispatcher = dispatcher
    app.state.auction_registry = registry
    app.state.start_time = datetime.now(timezone.utc)

    yield

    await dispatcher.close()


app = FastAPI(
    title="Vickrey Procurement Auction Server",
    version=__version__,
    docs_url="/docs",
    lifespan=lifespan,
)

app.include_router(admin_health.router)
app.include_router(admin_stats.router)
app.include_router(admin_config.router)


@app.exception_handler(AuctionError)
async def auction_error_handler(request: Request, exc: AuctionError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.exception_handler(UnknownAuction)
async def unknown_auction_handler(request: Request, exc: UnknownAuction) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.args[0], "error": "UnknownAuction"})


# Dependency helpers ---------------------------------------------------------


def get_server_settings(request: Request) -> ServerConfig:
    return request.app.state.server_config


def get_schema_service(request: Request) -> SchemaRegistry:
    return request.app.state.schema_registry


def get_auction_registry(request: Request) -> AuctionRegistry:
    return request.app.state.auction_registry


def validate_payload(schemas: SchemaRegistry, schema_name: str, payload: dict[str, Any]) -> None:
    try:
        schemas.validate(schema_name, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc.message)) from exc


# Routes ---------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root(settings: ServerConfig = Depends(get_server_settings)) -> dict[str, Any]:
    return {
        "service": "vickrey-auction",
        "version": app.version,
        "auction": {
            "max_bidders": settings.auction.max_bidders,
            "deposit_rate": settings.auction.deposit_rate,
        },
        "payments_backend": settings.payments.backend,
    }


@app.get("/ping", tags=["meta"])
async def ping() -> dict[str, Any]:
    return {"status": "ok", "version": app.version}


@app.post("/auctions", tags=["auction"], status_code=status.HTTP_201_CREATED)
async def create_auction(
    payload: dict[str, Any] = Body(...),
    schemas: SchemaRegistry = Depends(get_schema_service),
    registry: AuctionRegistry = Depends(get_auction_registry),
) -> dict[str, Any]:
    validate_payload(schemas, "create_auction", payload)
    try:
        end_time = parse_timestamp(payload["end_time"])
    except TimestampError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    try:
        return await registry.create(
            owner=payload["owner"],
            end_time=end_time,
            market_price=payload["market_price"],
            auction_id=payload.get("auction_id"),
        )
    except InvalidConfig:
        raise
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.get("/auctions/{auction_id}", tags=["auction"])
async def get_auction(
    auction_id: str,
    registry: AuctionRegistry = Depends(get_auction_registry),
) -> dict[str, Any]:
    return await registry.snapshot(auction_id)


@app.post("/auctions/{auction_id}/bids", tags=["auction"], status_code=status.HTTP_201_CREATED)
async def place_bid(
    auction_id: str,
    payload: dict[str, Any] = Body(...),
    schemas: SchemaRegistry = Depends(get_schema_service),
    registry: AuctionRegistry = Depends(get_auction_registry),
) -> dict[str, Any]:
    validate_payload(schemas, "place_bid", payload)
    bid = await registry.place_bid(auction_id, payload["bidder"], payload["amount"])
    return {"status": "accepted", "auction_id": auction_id, "bid": bid.to_dict()}


@app.post("/auctions/{auction_id}/close", tags=["auction"])
async def close_auction(
    auction_id: str,
    registry: AuctionRegistry = Depends(get_auction_registry),
) -> dict[str, Any]:
    return await registry.close(auction_id)


@app.post("/auctions/{auction_id}/deliver", tags=["auction"])
async def deliver_item(
    auction_id: str,
    payload: dict[str, Any] = Body(...),
    schemas: SchemaRegistry = Depends(get_schema_service),
    registry: AuctionRegistry = Depends(get_auction_registry),
) -> dict[str, Any]:
    validate_payload(schemas, "deliver_item", payload)
    return await registry.deliver(auction_id, payload["bidder"])


@app.get("/auctions/{auction_id}/payments", tags=["payments"])
async def list_payments(
    auction_id: str,
    registry: AuctionRegistry = Depends(get_auction_registry),
) -> list[dict[str, Any]]:
    return await registry.payments(auction_id)
