"""Entity assembler: joins store records into ``DomainAsset`` and owns the write paths.

Reads never fail: an unconfigured or failing store, an empty table, or a
batch in which every row is malformed all resolve to the bundled reference
dataset. Writes report their outcome in a ``WriteResult``.
"""

from __future__ import annotations

import asyncio
import calendar
import secrets
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, Literal

from rwa_market.assets.mapping import build_asset, parse_record, parse_records
from rwa_market.connectors import ChainConnector, StoreConnector
from rwa_market.fallback import FallbackDataProvider
from rwa_market.logging import get_logger
from rwa_market.models import CreateAssetInput, DomainAsset, PlatformStats, WriteResult
from rwa_market.models.records import (
    NotificationRecord,
    PlatformStatsRecord,
    ProfileRecord,
    TransactionRecord,
)
from rwa_market.resilience import CallResult, ErrorKind, MappingError, RemoteError

log = get_logger("assets")

SideEffect = tuple[str, Callable[[], Awaitable[CallResult[Any]]]]

ProPlan = Literal["monthly", "annual"]

DEFAULT_REFERENCE_PRICE = 3200.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def add_months(moment: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` later, clamped to the month's last day."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def new_tx_hash() -> str:
    return "0x" + secrets.token_hex(32)


class EntityAssembler:
    """Read and write paths for assets, bids, purchases and profiles."""

    def __init__(
        self,
        store: StoreConnector,
        chain: ChainConnector | None = None,
        fallback: FallbackDataProvider | None = None,
    ) -> None:
        self.store = store
        self.chain = chain
        self.fallback = fallback if fallback is not None else FallbackDataProvider()
        self.executor = store.executor

    # --- Asset reads ---

    async def fetch_all(self) -> list[DomainAsset]:
        if not self.store.is_configured():
            log.info("store_not_configured_serving_fallback", op="fetch_all")
            return self.fallback.assets()

        try:
            raw_assets = await self.store.fetch_assets()
            if not raw_assets:
                log.info("no_remote_assets_serving_fallback")
                return self.fallback.assets()

            assembled = await asyncio.gather(*(self._assemble(raw) for raw in raw_assets))
            assets = [asset for asset in assembled if asset is not None]
            if not assets:
                log.warning("all_assets_failed_mapping", count=len(raw_assets))
                return self.fallback.assets()

            log.info("assets_fetched", count=len(assets), dropped=len(raw_assets) - len(assets))
            return assets
        except Exception as exc:
            log.exception("fetch_all_failed")
            self.executor.report(RemoteError.from_exception(exc), method="fetch_all")
            return self.fallback.assets()

    async def fetch_one(self, asset_id: str) -> DomainAsset | None:
        if not self.store.is_configured():
            return self.fallback.asset(asset_id)

        try:
            raw = await self.store.fetch_asset(asset_id)
            if raw is None:
                return self.fallback.asset(asset_id)
            asset = await self._assemble(raw)
            return asset if asset is not None else self.fallback.asset(asset_id)
        except Exception as exc:
            log.exception("fetch_one_failed", asset_id=asset_id)
            self.executor.report(RemoteError.from_exception(exc), method="fetch_one")
            return self.fallback.asset(asset_id)

    async def _assemble(self, raw: Any) -> DomainAsset | None:
        """Five concurrent lookups and a mapping step for one raw asset.

        Returns None when the asset cannot be mapped.
        """
        row = raw if isinstance(raw, dict) else {}
        asset_id = row.get("id")
        if asset_id is None:
            self._mapping_failed(MappingError(None, "asset row has no id"))
            return None

        owner, creator, bids, activities, history = await asyncio.gather(
            self._user(row.get("owner_id")),
            self._user(row.get("creator_id")),
            self.store.fetch_bids(asset_id),
            self.store.fetch_activities(asset_id),
            self.store.fetch_price_history(asset_id),
        )
        try:
            return build_asset(
                raw,
                owner=owner,
                creator=creator,
                bids=bids,
                activities=activities,
                price_history=history,
                known_owner=self.fallback.owner,
            )
        except MappingError as exc:
            self._mapping_failed(exc)
            return None

    async def _user(self, user_id: Any) -> dict | None:
        if not user_id:
            return None
        return await self.store.fetch_user(str(user_id))

    def _mapping_failed(self, exc: MappingError) -> None:
        log.warning("asset_mapping_failed", asset_id=exc.record_id, reason=exc.reason)
        self.executor.report(
            RemoteError(message=str(exc), kind=ErrorKind.MAPPING),
            method="map_asset",
        )

    # --- Secondary reads ---

    async def fetch_platform_stats(self) -> PlatformStats:
        fallback = self.fallback.stats()
        if not self.store.is_configured():
            return fallback

        raw = await self.store.fetch_platform_stats()
        if raw is None:
            return fallback
        try:
            record = parse_record(PlatformStatsRecord, raw)
        except MappingError as exc:
            log.warning("platform_stats_mapping_failed", reason=exc.reason)
            return fallback

        return PlatformStats(
            total_volume=record.total_volume if record.total_volume is not None else fallback.total_volume,
            assets_listed=record.assets_listed if record.assets_listed is not None else fallback.assets_listed,
            active_users=record.active_users if record.active_users is not None else fallback.active_users,
        )

    async def fetch_notifications(self, user_id: str) -> list[NotificationRecord]:
        if not self.store.is_configured():
            return []
        records, errors = parse_records(NotificationRecord, await self.store.fetch_notifications(user_id))
        if errors:
            log.warning("notification_rows_skipped", user_id=user_id, count=len(errors))
        return records

    async def fetch_transactions(self, wallet: str) -> list[TransactionRecord]:
        if not self.store.is_configured():
            return []
        records, errors = parse_records(TransactionRecord, await self.store.fetch_transactions(wallet))
        if errors:
            log.warning("transaction_rows_skipped", wallet=wallet, count=len(errors))
        return records

    # --- Writes ---

    async def create_asset(self, data: CreateAssetInput) -> WriteResult:
        if not self.store.is_configured():
            return self._not_configured("create_asset")

        reference_price = await self._reference_price()
        row = {
            "name": data.name,
            "description": data.description,
            "image": data.image,
            "category": data.category,
            "price": data.price,
            "price_usd": round(data.price * reference_price, 2),
            "owner_id": data.owner_wallet,
            "creator_id": data.owner_wallet,
            "token_id": data.token_id or "",
            "contract_address": data.contract_address or "",
            "blockchain": data.blockchain,
            "token_standard": "ERC-1155" if data.supply > 1 else "ERC-721",
            "status": "Auction" if data.sale_type == "auction" else "Buy Now",
            "sale_type": data.sale_type,
            "royalty": data.royalty,
            "supply": data.supply,
            "views": 0,
            "favorites": 0,
            "ipfs_hash": data.ipfs_hash,
            "listed_at": _utcnow().isoformat(),
        }
        result = await self.executor.capture(lambda: self.store.insert_asset(row), method="create_asset")
        if result.error is not None:
            return WriteResult(success=False, error=result.error.message)

        asset_id = (result.data or {}).get("id")
        if asset_id is None:
            return WriteResult(success=False, error="store did not return the new asset id")
        asset_id = str(asset_id)
        log.info("asset_created", asset_id=asset_id, name=data.name)

        failed = await self._run_side_effects([
            ("minted_activity", lambda: self.store.insert_activity({
                "asset_id": asset_id,
                "type": "Minted",
                "from_address": "NullAddress",
                "to_address": data.owner_wallet,
                "price": data.price,
            })),
            ("listed_activity", lambda: self.store.insert_activity({
                "asset_id": asset_id,
                "type": "Listed",
                "from_address": data.owner_wallet,
                "to_address": "Marketplace",
                "price": data.price,
            })),
        ])
        return WriteResult(success=True, id=asset_id, failed_side_effects=failed)

    async def place_bid(self, asset_id: str, bidder_id: str, amount: float) -> WriteResult:
        if not self.store.is_configured():
            return self._not_configured("place_bid")
        if amount <= 0:
            return WriteResult(success=False, error="bid amount must be positive")

        reference_price = await self._reference_price()
        row = {
            "asset_id": asset_id,
            "bidder_id": bidder_id,
            "amount": amount,
            "amount_usd": round(amount * reference_price, 2),
        }
        result = await self.executor.capture(lambda: self.store.insert_bid(row), method="place_bid")
        if result.error is not None:
            return WriteResult(success=False, error=result.error.message)

        bid_id = (result.data or {}).get("id")
        log.info("bid_placed", asset_id=asset_id, amount=amount)

        failed = await self._run_side_effects([
            ("bid_activity", lambda: self.store.insert_activity({
                "asset_id": asset_id,
                "type": "Bid",
                "from_address": bidder_id,
                "to_address": "Marketplace",
                "price": amount,
            })),
            ("owner_notification", lambda: self._notify_owner_of_bid(asset_id, amount)),
        ])
        return WriteResult(
            success=True,
            id=str(bid_id) if bid_id is not None else None,
            failed_side_effects=failed,
        )

    async def _notify_owner_of_bid(self, asset_id: str, amount: float) -> CallResult[None]:
        summary = await self.store.fetch_asset_summary(asset_id)
        if summary is None:
            return CallResult.success(None)
        return await self.store.insert_notification({
            "user_id": summary.get("owner_id") or "system",
            "type": "bid",
            "title": "New Bid Received",
            "message": f"A bid of {amount} ETH was placed on {summary.get('name') or 'your asset'}",
            "read": False,
            "asset_id": asset_id,
        })

    async def purchase_asset(self, asset_id: str, buyer_wallet: str, price: float) -> WriteResult:
        if not self.store.is_configured():
            return self._not_configured("purchase_asset")

        summary = await self.store.fetch_asset_summary(asset_id) or {}
        seller = summary.get("owner_id") or "marketplace"
        asset_name = summary.get("name") or "Asset"
        tx_hash = new_tx_hash()

        row = {
            "type": "Buy",
            "asset_id": asset_id,
            "from_address": seller,
            "to_address": buyer_wallet,
            "price": price,
            "status": "completed",
            "tx_hash": tx_hash,
        }
        result = await self.executor.capture(
            lambda: self.store.insert_transaction(row), method="purchase_asset",
        )
        if result.error is not None:
            return WriteResult(success=False, error=result.error.message)

        tx_id = (result.data or {}).get("id")
        log.info("purchase_recorded", asset_id=asset_id, tx_hash=tx_hash)

        effects: list[SideEffect] = [
            ("sold_activity", lambda: self.store.insert_activity({
                "asset_id": asset_id,
                "type": "Sold",
                "from_address": seller,
                "to_address": buyer_wallet,
                "price": price,
            })),
            ("ownership_transfer", lambda: self.store.update_asset(
                asset_id, {"owner_id": buyer_wallet, "status": "Buy Now"},
            )),
        ]
        if seller != "marketplace":
            effects.append(("seller_notification", lambda: self.store.insert_notification({
                "user_id": seller,
                "type": "sale",
                "title": "Asset Sold!",
                "message": f'Your asset "{asset_name}" was sold for {price} ETH',
                "read": False,
                "asset_id": asset_id,
            })))
        effects.append(("buyer_notification", lambda: self.store.insert_notification({
            "user_id": buyer_wallet,
            "type": "purchase",
            "title": "Purchase Complete",
            "message": f'You purchased "{asset_name}" for {price} ETH',
            "read": False,
            "asset_id": asset_id,
        })))

        failed = await self._run_side_effects(effects)
        return WriteResult(
            success=True,
            id=str(tx_id) if tx_id is not None else None,
            tx_hash=tx_hash,
            failed_side_effects=failed,
        )

    async def update_pro_status(self, wallet: str, is_pro: bool, plan: ProPlan | None = None) -> WriteResult:
        if not self.store.is_configured():
            return self._not_configured("update_pro_status")

        now = _utcnow()
        renews_at = None
        if is_pro:
            renews_at = add_months(now, 12 if plan == "annual" else 1).isoformat()
        row = {
            "wallet": wallet,
            "is_pro": is_pro,
            "pro_plan": plan,
            "pro_since": now.isoformat() if is_pro else None,
            "pro_renews_at": renews_at,
        }
        result = await self.executor.capture(lambda: self.store.upsert_profile(row), method="update_pro_status")
        if result.error is not None:
            return WriteResult(success=False, error=result.error.message)
        log.info("pro_status_updated", wallet=wallet, is_pro=is_pro, plan=plan)

        try:
            profile = parse_record(ProfileRecord, result.data)
        except MappingError as exc:
            log.warning("profile_mapping_failed", wallet=wallet, reason=exc.reason)
            return WriteResult(success=True)
        return WriteResult(success=True, id=profile.id)

    async def update_user_profile(
        self,
        user_id: str,
        *,
        name: str | None = None,
        bio: str | None = None,
        avatar: str | None = None,
    ) -> WriteResult:
        if not self.store.is_configured():
            return self._not_configured("update_user_profile")

        updates = {k: v for k, v in (("name", name), ("bio", bio), ("avatar", avatar)) if v is not None}
        if not updates:
            return WriteResult(success=True, id=user_id)
        result = await self.executor.capture(
            lambda: self.store.update_user(user_id, updates), method="update_user_profile",
        )
        if result.error is not None:
            return WriteResult(success=False, error=result.error.message)
        return WriteResult(success=True, id=user_id)

    # --- helpers ---

    async def _reference_price(self) -> float:
        if self.chain is None:
            return DEFAULT_REFERENCE_PRICE
        return await self.chain.get_reference_price()

    async def _run_side_effects(self, effects: list[SideEffect]) -> list[str]:
        """Run advisory writes in order; return the names of those that failed."""
        failed: list[str] = []
        for name, effect in effects:
            result = await self.executor.capture(effect, method=name)
            if result.error is not None:
                log.warning("side_effect_failed", side_effect=name, error=result.error.message)
                failed.append(name)
        return failed

    def _not_configured(self, method: str) -> WriteResult:
        log.warning("write_skipped_store_not_configured", method=method)
        return WriteResult(success=False, error=RemoteError.not_configured(self.store.service).message)
