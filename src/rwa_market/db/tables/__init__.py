"""Import all table modules so Base.metadata knows about them."""

from rwa_market.db.tables.marketplace import (
    ActivityRow,
    AssetRow,
    BidRow,
    NotificationRow,
    PlatformStatsRow,
    PriceHistoryRow,
    ProfileRow,
    TransactionRow,
    UserRow,
)

__all__ = [
    "ActivityRow",
    "AssetRow",
    "BidRow",
    "NotificationRow",
    "PlatformStatsRow",
    "PriceHistoryRow",
    "ProfileRow",
    "TransactionRow",
    "UserRow",
]
