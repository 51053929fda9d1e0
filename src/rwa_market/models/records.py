"""Raw store records, one model per table, field for field.

These only live inside the assembler's mapping step. Unknown columns are
ignored so a store migration that adds a column never breaks mapping;
missing required columns fail validation and the row is dropped.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class AssetRecord(_Record):
    id: str
    name: str
    description: str | None = None
    image: str | None = None
    category: str
    price: float
    price_usd: float = 0.0
    owner_id: str
    creator_id: str
    token_id: str | None = None
    contract_address: str | None = None
    blockchain: str = "Ethereum"
    token_standard: str = "ERC-721"
    status: str = "Buy Now"
    sale_type: str = "fixed"
    royalty: float = 0.0
    supply: int = 1
    views: int = 0
    favorites: int = 0
    ipfs_hash: str | None = None
    listed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class UserRecord(_Record):
    id: str
    name: str
    avatar: str = ""
    wallet: str = ""
    bio: str | None = None
    is_verified: bool = False
    followers_count: int = 0
    following_count: int = 0


class BidRecord(_Record):
    id: str
    asset_id: str
    bidder_id: str
    amount: float
    amount_usd: float = 0.0
    created_at: str | None = None


class ActivityRecord(_Record):
    id: str
    asset_id: str
    type: str
    from_address: str | None = None
    to_address: str | None = None
    price: float | None = None
    created_at: str | None = None


class PriceHistoryRecord(_Record):
    id: str
    asset_id: str
    month: str
    price: float
    recorded_at: str | None = None


class PlatformStatsRecord(_Record):
    id: str
    total_volume: float | None = None
    assets_listed: int | None = None
    active_users: int | None = None


class NotificationRecord(_Record):
    id: str
    user_id: str
    type: str
    title: str
    message: str = ""
    read: bool = False
    asset_id: str | None = None
    created_at: str | None = None


class TransactionRecord(_Record):
    id: str
    type: str
    asset_id: str
    from_address: str
    to_address: str
    price: float
    status: str = "completed"
    tx_hash: str | None = None
    created_at: str | None = None


class ProfileRecord(_Record):
    id: str
    wallet: str
    is_pro: bool = False
    pro_plan: str | None = None
    pro_since: str | None = None
    pro_renews_at: str | None = None
