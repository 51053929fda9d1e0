"""Tests for the marketplace write paths and their side effects."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from conftest import STORE_CONFIG, FakePostgrest
from rwa_market.assets import EntityAssembler
from rwa_market.assets.assembler import add_months, new_tx_hash
from rwa_market.config import ChainConfig, StoreConfig
from rwa_market.connectors import ChainConnector, StoreConnector
from rwa_market.models import CreateAssetInput
from rwa_market.resilience import CallResult

OWNER = "0x4eD1aa22bb33cc44dd55ee66ff7788993a8C"


def _input(**overrides) -> CreateAssetInput:
    data = {
        "name": "Harbour Loft #3",
        "description": "Fractional loft",
        "image": "ipfs://cid",
        "category": "Real Estate",
        "price": 2.0,
        "sale_type": "fixed",
        "royalty": 5,
        "supply": 1,
        "owner_wallet": OWNER,
    }
    data.update(overrides)
    return CreateAssetInput(**data)


@pytest.fixture
def assembler(store, chain):
    return EntityAssembler(store, chain)


class TestCreateAsset:
    def test_creates_and_logs_activity(self, assembler, fake_store):
        result = asyncio.run(assembler.create_asset(_input()))

        assert result.success is True
        assert result.failed_side_effects == []
        row = fake_store.tables["assets"][0]
        assert row["id"] == result.id
        assert row["price_usd"] == 6400.0
        assert row["token_standard"] == "ERC-721"
        assert row["status"] == "Buy Now"
        assert row["owner_id"] == OWNER
        assert row["creator_id"] == OWNER
        assert [a["type"] for a in fake_store.tables["activities"]] == ["Minted", "Listed"]
        assert fake_store.tables["activities"][0]["from_address"] == "NullAddress"
        assert fake_store.tables["activities"][1]["to_address"] == "Marketplace"

    def test_multi_supply_auction(self, assembler, fake_store):
        asyncio.run(assembler.create_asset(_input(supply=50, sale_type="auction")))
        row = fake_store.tables["assets"][0]
        assert row["token_standard"] == "ERC-1155"
        assert row["status"] == "Auction"

    def test_accepts_camel_case_payload(self):
        data = CreateAssetInput.model_validate({
            "name": "x", "category": "Art", "price": 1, "ownerWallet": OWNER, "saleType": "auction",
        })
        assert data.owner_wallet == OWNER
        assert data.sale_type == "auction"

    def test_round_trip_despite_side_effect_failure(self, assembler, fake_store):
        fake_store.fail("activities", method="POST", status=500, message="activity log down")
        result = asyncio.run(assembler.create_asset(_input()))

        assert result.success is True
        assert result.failed_side_effects == ["minted_activity", "listed_activity"]

        asset = asyncio.run(assembler.fetch_one(result.id))
        assert asset.name == "Harbour Loft #3"
        assert asset.price == 2.0
        assert asset.category == "Real Estate"
        assert asset.owner.wallet == OWNER

    def test_primary_failure_surfaces(self, assembler, fake_store):
        fake_store.fail("assets", method="POST", status=403, code="42501", message="permission denied for table assets")
        result = asyncio.run(assembler.create_asset(_input()))

        assert result.success is False
        assert result.error == "permission denied for table assets"
        assert fake_store.tables["activities"] == []

    def test_unconfigured_store(self, chain):
        assembler = EntityAssembler(StoreConnector(StoreConfig()), chain)
        result = asyncio.run(assembler.create_asset(_input()))
        assert result.success is False
        assert result.error == "store not configured"

    def test_chain_down_uses_default_price(self, assembler, fake_store, fake_chain):
        fake_chain.offline = True
        asyncio.run(assembler.create_asset(_input(price=1.0)))
        assert fake_store.tables["assets"][0]["price_usd"] == 3200.0

    def test_unconfigured_chain_is_never_called(self, store, fake_store):
        calls = []
        chain = ChainConnector(ChainConfig(), transport=httpx.MockTransport(lambda r: calls.append(r)))
        result = asyncio.run(EntityAssembler(store, chain).create_asset(_input(price=1.0)))

        assert result.success is True
        assert calls == []
        assert fake_store.tables["assets"][0]["price_usd"] == 3200.0


class TestPlaceBid:
    def test_records_bid_activity_and_notifies_owner(self, assembler, fake_store):
        fake_store.seed("assets", {"id": "a1", "name": "Tower", "owner_id": "u1", "price": 3})
        result = asyncio.run(assembler.place_bid("a1", "u2", 2.5))

        assert result.success is True
        assert result.id == fake_store.tables["bids"][0]["id"]
        assert fake_store.tables["bids"][0]["amount_usd"] == 8000.0
        assert fake_store.tables["activities"][0]["type"] == "Bid"
        note = fake_store.tables["notifications"][0]
        assert note["user_id"] == "u1"
        assert note["title"] == "New Bid Received"
        assert note["message"] == "A bid of 2.5 ETH was placed on Tower"

    def test_notification_failure_is_advisory(self, assembler, fake_store, sink):
        fake_store.seed("assets", {"id": "a1", "name": "Tower", "owner_id": "u1", "price": 3})
        fake_store.fail("notifications", method="POST", status=500, message="down")
        result = asyncio.run(assembler.place_bid("a1", "u2", 1.0))

        assert result.success is True
        assert result.failed_side_effects == ["owner_notification"]
        assert len(fake_store.tables["bids"]) == 1
        assert sink.reports[-1].method == "owner_notification"

    def test_unknown_asset_skips_notification(self, assembler, fake_store):
        result = asyncio.run(assembler.place_bid("ghost", "u2", 1.0))
        assert result.success is True
        assert result.failed_side_effects == []
        assert fake_store.tables["notifications"] == []

    def test_rejected_bid(self, assembler, fake_store):
        fake_store.fail("bids", method="POST", status=409, message="duplicate bid")
        result = asyncio.run(assembler.place_bid("a1", "u2", 1.0))
        assert result.success is False
        assert result.error == "duplicate bid"
        assert fake_store.tables["activities"] == []

    def test_non_positive_amount(self, assembler, fake_store):
        result = asyncio.run(assembler.place_bid("a1", "u2", 0))
        assert result.success is False
        assert fake_store.requests == []


class TestPurchaseAsset:
    def test_full_purchase(self, assembler, fake_store):
        fake_store.seed("assets", {"id": "a1", "name": "Tower", "owner_id": "0xseller", "price": 3, "status": "Auction"})
        result = asyncio.run(assembler.purchase_asset("a1", "0xbuyer", 3.0))

        assert result.success is True
        assert result.failed_side_effects == []
        assert result.tx_hash.startswith("0x") and len(result.tx_hash) == 66

        tx = fake_store.tables["transactions"][0]
        assert (tx["from_address"], tx["to_address"], tx["tx_hash"]) == ("0xseller", "0xbuyer", result.tx_hash)
        assert fake_store.tables["activities"][0]["type"] == "Sold"
        asset = fake_store.tables["assets"][0]
        assert asset["owner_id"] == "0xbuyer"
        assert asset["status"] == "Buy Now"
        notes = fake_store.tables["notifications"]
        assert [(n["user_id"], n["type"]) for n in notes] == [("0xseller", "sale"), ("0xbuyer", "purchase")]
        assert notes[0]["message"] == 'Your asset "Tower" was sold for 3.0 ETH'

    def test_unknown_seller(self, assembler, fake_store):
        result = asyncio.run(assembler.purchase_asset("ghost", "0xbuyer", 1.0))

        assert result.success is True
        assert fake_store.tables["transactions"][0]["from_address"] == "marketplace"
        notes = fake_store.tables["notifications"]
        assert [n["type"] for n in notes] == ["purchase"]
        assert notes[0]["message"] == 'You purchased "Asset" for 1.0 ETH'

    def test_ownership_transfer_failure_is_listed(self, assembler, fake_store):
        fake_store.seed("assets", {"id": "a1", "name": "Tower", "owner_id": "0xseller", "price": 3})
        fake_store.fail("assets", method="PATCH", status=500, message="update failed")
        result = asyncio.run(assembler.purchase_asset("a1", "0xbuyer", 3.0))

        assert result.success is True
        assert result.failed_side_effects == ["ownership_transfer"]
        assert len(fake_store.tables["notifications"]) == 2

    def test_transaction_failure(self, assembler, fake_store):
        fake_store.fail("transactions", method="POST", status=500, message="insert failed")
        result = asyncio.run(assembler.purchase_asset("a1", "0xbuyer", 3.0))
        assert result.success is False
        assert result.tx_hash is None
        assert result.error == "insert failed"


class TestProfiles:
    def test_pro_monthly(self, assembler, fake_store):
        result = asyncio.run(assembler.update_pro_status("0xabc", True, "monthly"))
        assert result.success is True
        profile = fake_store.tables["profiles"][0]
        assert profile["is_pro"] is True
        assert result.id == profile["id"]
        assert profile["pro_plan"] == "monthly"
        since = datetime.fromisoformat(profile["pro_since"])
        renews = datetime.fromisoformat(profile["pro_renews_at"])
        assert 28 <= (renews - since).days <= 31

    def test_pro_annual_then_cancel(self, assembler, fake_store):
        asyncio.run(assembler.update_pro_status("0xabc", True, "annual"))
        profile = fake_store.tables["profiles"][0]
        since = datetime.fromisoformat(profile["pro_since"])
        renews = datetime.fromisoformat(profile["pro_renews_at"])
        assert 365 <= (renews - since).days <= 366

        cancelled = asyncio.run(assembler.update_pro_status("0xabc", False))
        assert cancelled.id == profile["id"]
        assert len(fake_store.tables["profiles"]) == 1
        assert fake_store.tables["profiles"][0]["is_pro"] is False
        assert fake_store.tables["profiles"][0]["pro_renews_at"] is None

    def test_missing_profiles_table(self, chain):
        fake = FakePostgrest(tables=("assets",))
        store = StoreConnector(STORE_CONFIG, transport=httpx.MockTransport(fake.handler))
        result = asyncio.run(EntityAssembler(store, chain).update_pro_status("0xabc", True))
        assert result.success is False
        assert "does not exist" in result.error

    def test_profile_row_without_id_still_succeeds(self, assembler, monkeypatch, store):
        async def upsert_without_body(row):
            return CallResult.success(None)

        monkeypatch.setattr(store, "upsert_profile", upsert_without_body)
        result = asyncio.run(assembler.update_pro_status("0xabc", True))
        assert result.success is True
        assert result.id is None

    def test_update_user_profile(self, assembler, fake_store):
        fake_store.seed("users", {"id": "u1", "name": "Old", "bio": "old bio"})
        result = asyncio.run(assembler.update_user_profile("u1", name="New"))
        assert result.success is True
        assert fake_store.tables["users"][0]["name"] == "New"
        assert fake_store.tables["users"][0]["bio"] == "old bio"

    def test_empty_profile_update_is_noop(self, assembler, fake_store):
        result = asyncio.run(assembler.update_user_profile("u1"))
        assert result.success is True
        assert fake_store.requests == []


class TestHelpers:
    def test_add_months_clamps_day(self):
        jan31 = datetime(2026, 1, 31, 12, tzinfo=timezone.utc)
        assert add_months(jan31, 1) == datetime(2026, 2, 28, 12, tzinfo=timezone.utc)
        assert add_months(jan31, 12) == datetime(2027, 1, 31, 12, tzinfo=timezone.utc)
        assert add_months(datetime(2026, 11, 15), 2) == datetime(2027, 1, 15)

    def test_tx_hash_unique(self):
        assert new_tx_hash() != new_tx_hash()
