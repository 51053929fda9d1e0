"""Pydantic domain models."""

from rwa_market.models.asset import (
    CATEGORIES,
    ActivityEvent,
    AssetOwner,
    BidOffer,
    CreateAssetInput,
    DomainAsset,
    PlatformStats,
    PricePoint,
    WriteResult,
)
from rwa_market.models.health import (
    ChainHealth,
    ConnectionStatusSnapshot,
    PinningHealth,
    ServiceHealth,
    StoreHealth,
    WalletProtocolStatus,
)

__all__ = [
    "CATEGORIES",
    "ActivityEvent",
    "AssetOwner",
    "BidOffer",
    "ChainHealth",
    "ConnectionStatusSnapshot",
    "CreateAssetInput",
    "DomainAsset",
    "PinningHealth",
    "PlatformStats",
    "PricePoint",
    "ServiceHealth",
    "StoreHealth",
    "WalletProtocolStatus",
    "WriteResult",
]
