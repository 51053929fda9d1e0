"""Tests for the chain connector."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from rwa_market.config import ChainConfig
from rwa_market.connectors import ChainConnector
from rwa_market.connectors.chain import is_wallet_address, parse_hex_quantity

WALLET = "0x7a3B5e1f0c2d4a6b8c9d0e1f2a3b4c5d6e7f9f2E"


class TestHelpers:
    def test_parse_hex_quantity(self):
        assert parse_hex_quantity("0xf4240") == 1_000_000
        assert parse_hex_quantity("0x0") == 0

    def test_parse_hex_quantity_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_hex_quantity("1000")
        with pytest.raises(ValueError):
            parse_hex_quantity(None)

    def test_wallet_address(self):
        assert is_wallet_address(WALLET)
        assert not is_wallet_address("")
        assert not is_wallet_address("0x123")
        assert not is_wallet_address("7a3B5e1f0c2d4a6b")


class TestProbe:
    def test_unconfigured_makes_no_requests(self):
        calls = []
        chain = ChainConnector(ChainConfig(), transport=httpx.MockTransport(lambda r: calls.append(r)))
        report = asyncio.run(chain.test_connection())

        assert calls == []
        assert report.configured is False
        assert report.connected is False
        assert report.latency_ms is None
        assert report.error == "RPC URL not set"

    def test_healthy(self, chain):
        report = asyncio.run(chain.test_connection())

        assert report.configured is True
        assert report.connected is True
        assert report.block_number == 1_000_000
        assert report.reference_price == 3200.0
        assert report.latency_ms is not None
        assert report.error is None

    def test_zero_height_is_not_connected(self, chain, fake_chain):
        fake_chain.block_number = 0
        report = asyncio.run(chain.test_connection())
        assert report.connected is False
        assert report.error == "Failed to get block number"

    def test_network_failure(self, chain, fake_chain, sink):
        fake_chain.offline = True
        report = asyncio.run(chain.test_connection())

        assert report.configured is True
        assert report.connected is False
        assert report.error == "connection refused"
        assert sink.reports == []

    def test_price_feed_down_uses_default(self, chain, fake_chain):
        fake_chain.price = None
        report = asyncio.run(chain.test_connection())
        assert report.connected is True
        assert report.reference_price == 3200.0


class TestReads:
    def test_block_number(self, chain):
        assert asyncio.run(chain.get_block_number()) == 1_000_000

    def test_block_number_fallback(self, chain, fake_chain, sink):
        fake_chain.offline = True
        assert asyncio.run(chain.get_block_number()) == 0
        assert sink.for_service("chain")[0].method == "get_block_number"

    def test_reference_price(self, chain, fake_chain):
        fake_chain.price = 2987.5
        assert asyncio.run(chain.get_reference_price()) == 2987.5

    def test_reference_price_fallback(self, chain, fake_chain):
        fake_chain.offline = True
        assert asyncio.run(chain.get_reference_price()) == 3200.0

    def test_reference_price_unconfigured_makes_no_requests(self):
        calls = []
        chain = ChainConnector(
            ChainConfig(default_reference_price=2500.0),
            transport=httpx.MockTransport(lambda r: calls.append(r)),
        )
        assert asyncio.run(chain.get_reference_price()) == 2500.0
        assert calls == []

    def test_wallet_balance(self, chain, fake_chain):
        assert asyncio.run(chain.get_wallet_balance(WALLET)) == "1.5000"
        sent = fake_chain.requests[-1]
        assert b"eth_getBalance" in sent.content

    def test_wallet_balance_invalid_address_short_circuits(self, chain, fake_chain):
        assert asyncio.run(chain.get_wallet_balance("bogus")) == "0.0000"
        assert fake_chain.requests == []

    def test_wallet_balance_fallback(self, chain, fake_chain):
        fake_chain.offline = True
        assert asyncio.run(chain.get_wallet_balance(WALLET)) == "0.0000"

    def test_nfts_for_owner_uses_nft_endpoint(self, chain, fake_chain):
        fake_chain.nfts = [{"tokenId": "1"}]
        assert asyncio.run(chain.get_nfts_for_owner(WALLET)) == [{"tokenId": "1"}]
        sent = fake_chain.requests[-1]
        assert sent.url.path == "/nft/v3/rpc-key/getNFTsForOwner"
        assert sent.url.params["owner"] == WALLET
        assert sent.url.params["pageSize"] == "100"

    def test_nfts_fallback(self, chain, fake_chain):
        fake_chain.offline = True
        assert asyncio.run(chain.get_nfts_for_owner(WALLET)) == []

    def test_rpc_error_body(self, chain, sink):
        result = asyncio.run(chain._rpc("eth_unknown", []))
        assert result.ok is False
        assert result.error.message == "method not found"
        assert result.error.code == "-32601"
