"""FastAPI application exposing the marketplace data layer to the mobile client."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Literal, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rwa_market.config import load_config
from rwa_market.models import CreateAssetInput, WriteResult
from rwa_market.services import MarketServices, build_services

logger = structlog.get_logger("api")

app = FastAPI(
    title="RWA Marketplace API",
    description="Assets, bids, purchases and connection health for the marketplace app",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_services: MarketServices | None = None


def get_services() -> MarketServices:
    """Dependency returning the process-wide service graph, built on first use."""
    global _services
    if _services is None:
        _services = build_services(load_config(os.environ.get("MARKET_CONFIG_PATH", "config.yaml")))
        logger.info("services_built", store_configured=_services.store.is_configured())
    return _services


@app.on_event("shutdown")
async def shutdown_event():
    if _services is not None:
        await _services.aclose()


def _write_response(result: WriteResult, services: MarketServices) -> WriteResult:
    """Failed writes become 502, or 503 when the store is not configured."""
    if result.success:
        return result
    status = 503 if not services.store.is_configured() else 502
    raise HTTPException(status_code=status, detail=result.error)


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BidRequest(_Body):
    bidder_id: str = Field(min_length=1)
    amount: float = Field(gt=0)


class PurchaseRequest(_Body):
    buyer_wallet: str = Field(min_length=1)
    price: float = Field(gt=0)


class ProfileUpdateRequest(_Body):
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class ProStatusRequest(_Body):
    is_pro: bool
    plan: Optional[Literal["monthly", "annual"]] = None


@app.get("/api/health")
async def health_check():
    """Liveness only; see /api/connections for the remote services."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


# ═══════════════════════════════════════════════════════════════
# Assets
# ═══════════════════════════════════════════════════════════════


@app.get("/api/assets")
async def list_assets(services: MarketServices = Depends(get_services)):
    return await services.assets.fetch_all()


@app.get("/api/assets/{asset_id}")
async def get_asset(asset_id: str, services: MarketServices = Depends(get_services)):
    asset = await services.assets.fetch_one(asset_id)
    if asset is None:
        raise HTTPException(status_code=404, detail=f"Asset {asset_id} not found")
    return asset


@app.post("/api/assets", status_code=201)
async def create_asset(body: CreateAssetInput, services: MarketServices = Depends(get_services)):
    return _write_response(await services.assets.create_asset(body), services)


@app.post("/api/assets/{asset_id}/bids", status_code=201)
async def place_bid(asset_id: str, body: BidRequest, services: MarketServices = Depends(get_services)):
    result = await services.assets.place_bid(asset_id, body.bidder_id, body.amount)
    return _write_response(result, services)


@app.post("/api/assets/{asset_id}/purchase")
async def purchase_asset(asset_id: str, body: PurchaseRequest, services: MarketServices = Depends(get_services)):
    result = await services.assets.purchase_asset(asset_id, body.buyer_wallet, body.price)
    return _write_response(result, services)


@app.get("/api/stats")
async def platform_stats(services: MarketServices = Depends(get_services)):
    return await services.assets.fetch_platform_stats()


# ═══════════════════════════════════════════════════════════════
# Users, wallets, profiles
# ═══════════════════════════════════════════════════════════════


@app.get("/api/users/{user_id}/notifications")
async def list_notifications(user_id: str, services: MarketServices = Depends(get_services)):
    return await services.assets.fetch_notifications(user_id)


@app.patch("/api/users/{user_id}")
async def update_user(user_id: str, body: ProfileUpdateRequest, services: MarketServices = Depends(get_services)):
    result = await services.assets.update_user_profile(
        user_id, name=body.name, bio=body.bio, avatar=body.avatar,
    )
    return _write_response(result, services)


@app.put("/api/profiles/{wallet}/pro")
async def update_pro_status(wallet: str, body: ProStatusRequest, services: MarketServices = Depends(get_services)):
    result = await services.assets.update_pro_status(wallet, body.is_pro, body.plan)
    return _write_response(result, services)


@app.get("/api/wallets/{address}/transactions")
async def list_transactions(address: str, services: MarketServices = Depends(get_services)):
    return await services.assets.fetch_transactions(address)


@app.get("/api/wallets/{address}/balance")
async def wallet_balance(address: str, services: MarketServices = Depends(get_services)):
    return {"address": address, "balance": await services.chain.get_wallet_balance(address)}


@app.get("/api/wallets/{address}/nfts")
async def wallet_nfts(address: str, services: MarketServices = Depends(get_services)):
    return await services.chain.get_nfts_for_owner(address)


@app.get("/api/chain/price")
async def reference_price(services: MarketServices = Depends(get_services)):
    return {
        "asset": services.config.chain.price_asset_id,
        "usd": await services.chain.get_reference_price(),
    }


# ═══════════════════════════════════════════════════════════════
# Connections and diagnostics
# ═══════════════════════════════════════════════════════════════


@app.get("/api/connections")
async def connection_status(services: MarketServices = Depends(get_services)):
    """Latest snapshot without probing."""
    status = services.health.status
    return {
        "snapshot": status.snapshot.model_dump(mode="json", by_alias=True),
        "testing": status.testing,
    }


@app.post("/api/connections/test")
async def test_connections(services: MarketServices = Depends(get_services)):
    snapshot = await services.health.test_all()
    return snapshot.model_dump(mode="json", by_alias=True)


@app.get("/api/errors")
async def recent_errors(service: Optional[str] = None, services: MarketServices = Depends(get_services)):
    """Recent failed remote calls, newest last."""
    reports = services.errors.for_service(service) if service else services.errors.reports
    return [
        {
            "service": r.service,
            "method": r.method,
            "kind": r.error.kind.value,
            "message": r.error.message,
            "code": r.error.code,
            "status": r.error.status,
            "ts": r.ts.isoformat(),
        }
        for r in reports
    ]
