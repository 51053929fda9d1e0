"""Normalized asset model served to the app.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AssetCategory = Literal["Real Estate", "Art", "Collectibles", "Intellectual Property", "Commodities"]
SaleType = Literal["fixed", "auction"]
Blockchain = Literal["Ethereum", "Polygon"]

CATEGORIES: tuple[str, ...] = ("Real Estate", "Art", "Collectibles", "Intellectual Property", "Commodities")


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AssetOwner(_Wire):
    """Lightweight user projection embedded in assets and bids."""

    id: str
    name: str
    avatar: str = ""
    wallet: str = ""


class BidOffer(_Wire):
    id: str
    bidder: AssetOwner
    amount: float
    amount_usd: float = 0.0
    timestamp: str = ""


class ActivityEvent(_Wire):
    id: str
    type: str
    from_: str = Field(default="", alias="from")
    to: str = ""
    price: float | None = None
    timestamp: str = ""


class PricePoint(_Wire):
    month: str
    price: float


class DomainAsset(_Wire):
    id: str
    name: str
    description: str = ""
    image: str = ""
    category: str
    price: float
    price_usd: float = 0.0
    owner: AssetOwner
    creator: AssetOwner
    token_id: str = ""
    contract_address: str = ""
    blockchain: str = "Ethereum"
    token_standard: str = "ERC-721"
    status: str = "Buy Now"
    sale_type: str = "fixed"
    royalty: float = 0.0
    supply: int = 1
    views: int = 0
    favorites: int = 0
    listed_at: str | None = None
    price_history: list[PricePoint] = Field(default_factory=list)
    bids: list[BidOffer] = Field(default_factory=list)
    activity: list[ActivityEvent] = Field(default_factory=list)

    @field_validator("price_history", "bids", "activity", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class PlatformStats(_Wire):
    total_volume: float
    assets_listed: int
    active_users: int


class WriteResult(_Wire):
    """Outcome of a primary write plus any advisory writes that failed."""

    success: bool
    id: str | None = None
    tx_hash: str | None = None
    error: str | None = None
    failed_side_effects: list[str] = Field(default_factory=list)


class CreateAssetInput(_Wire):
    name: str = Field(min_length=1)
    description: str = ""
    image: str = ""
    category: AssetCategory
    price: float = Field(gt=0)
    sale_type: SaleType = "fixed"
    royalty: float = Field(default=0.0, ge=0, le=100)
    supply: int = Field(default=1, ge=1)
    owner_wallet: str = Field(min_length=1)
    token_id: str | None = None
    contract_address: str | None = None
    blockchain: Blockchain = "Ethereum"
    ipfs_hash: str | None = None
