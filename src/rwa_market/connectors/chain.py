"""Chain connector: JSON-RPC provider plus the public reference price feed."""

from __future__ import annotations

import time
from typing import Any

import httpx

from rwa_market.config import ChainConfig
from rwa_market.connectors.base import HttpConnector, elapsed_ms
from rwa_market.logging import get_logger
from rwa_market.models import ChainHealth
from rwa_market.resilience import CallResult, RemoteError, SafeCallExecutor

log = get_logger("chain")

WEI_PER_ETH = 10**18


def is_wallet_address(address: str) -> bool:
    return bool(address) and address.startswith("0x") and len(address) >= 10


def parse_hex_quantity(raw: Any) -> int:
    """Decode a JSON-RPC hex quantity such as ``"0xf4240"``."""
    if not isinstance(raw, str) or not raw.startswith("0x"):
        raise ValueError(f"not a hex quantity: {raw!r}")
    return int(raw, 16)


class ChainConnector(HttpConnector):
    """Async client for the blockchain RPC provider."""

    service = "chain"

    def __init__(
        self,
        config: ChainConfig,
        executor: SafeCallExecutor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            configured=config.configured,
            timeout_s=config.timeout_s,
            executor=executor,
            transport=transport,
        )
        self.config = config

    # --- Raw calls ---

    async def _rpc(self, method: str, params: list[Any]) -> CallResult[Any]:
        if not self.is_configured():
            return CallResult.failure(RemoteError.not_configured(self.service))

        http = await self._get_http()
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        try:
            resp = await http.post(self.config.rpc_url, json=payload)
        except httpx.HTTPError as exc:
            return CallResult.failure(RemoteError.from_exception(exc))

        if not resp.is_success:
            return CallResult.failure(RemoteError(
                message=f"RPC returned {resp.status_code}", status=resp.status_code,
            ))
        try:
            body = resp.json()
        except ValueError:
            return CallResult.failure(RemoteError(message="RPC returned a non-JSON body"))

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            return CallResult.failure(RemoteError(
                message=str(error.get("message", "RPC error")),
                code=str(error.get("code")) if error.get("code") is not None else None,
            ))
        return CallResult.success(body.get("result") if isinstance(body, dict) else None)

    async def _fetch_quantity(self, method: str, params: list[Any]) -> CallResult[int]:
        result = await self._rpc(method, params)
        if result.error is not None or result.data is None:
            return result
        try:
            return CallResult.success(parse_hex_quantity(result.data))
        except ValueError as exc:
            return CallResult.failure(RemoteError(message=str(exc)))

    async def _fetch_reference_price(self) -> CallResult[float]:
        asset_id = self.config.price_asset_id
        http = await self._get_http()
        try:
            resp = await http.get(
                self.config.price_url,
                params={"ids": asset_id, "vs_currencies": "usd"},
            )
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            return CallResult.failure(RemoteError.from_exception(exc))
        except ValueError:
            return CallResult.failure(RemoteError(message="price feed returned a non-JSON body"))

        price = (body.get(asset_id) or {}).get("usd") if isinstance(body, dict) else None
        if not price:
            return CallResult.success(None)
        return CallResult.success(float(price))

    async def _fetch_nfts(self, owner: str) -> CallResult[list[dict]]:
        base_url = (self.config.rpc_url or "").replace("/v2/", "/nft/v3/")
        http = await self._get_http()
        try:
            resp = await http.get(
                f"{base_url}/getNFTsForOwner",
                params={"owner": owner, "withMetadata": "true", "pageSize": 100},
                headers={"accept": "application/json"},
            )
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            return CallResult.failure(RemoteError.from_exception(exc))
        except ValueError:
            return CallResult.failure(RemoteError(message="NFT endpoint returned a non-JSON body"))
        return CallResult.success(body.get("ownedNfts") if isinstance(body, dict) else None)

    # --- Functional reads ---

    async def get_block_number(self) -> int:
        if not self.is_configured():
            return 0
        return await self.executor.execute(
            lambda: self._fetch_quantity("eth_blockNumber", []), 0, method="get_block_number",
        )

    async def get_reference_price(self) -> float:
        """USD price of the reference asset, or the configured default."""
        if not self.is_configured():
            return self.config.default_reference_price
        return await self.executor.execute(
            self._fetch_reference_price,
            self.config.default_reference_price,
            method="get_reference_price",
        )

    async def get_wallet_balance(self, address: str) -> str:
        """Native balance in ETH, formatted to 4 decimals."""
        if not is_wallet_address(address) or not self.is_configured():
            return "0.0000"
        wei = await self.executor.execute(
            lambda: self._fetch_quantity("eth_getBalance", [address, "latest"]),
            0,
            method="get_wallet_balance",
        )
        return f"{wei / WEI_PER_ETH:.4f}"

    async def get_nfts_for_owner(self, address: str) -> list[dict]:
        if not is_wallet_address(address) or not self.is_configured():
            return []
        return await self.executor.execute(
            lambda: self._fetch_nfts(address), [], method="get_nfts_for_owner",
        )

    # --- Health probe ---

    async def test_connection(self) -> ChainHealth:
        if not self.is_configured():
            log.info("chain_not_configured")
            return ChainHealth(configured=False, error="RPC URL not set")

        start = time.monotonic()
        result = await self.executor.capture(
            lambda: self._fetch_quantity("eth_blockNumber", []),
            method="test_connection",
            report=False,
        )
        latency_ms = elapsed_ms(start)

        if result.error is not None:
            log.warning("chain_probe_failed", error=result.error.message)
            return ChainHealth(configured=True, connected=False, latency_ms=latency_ms, error=result.error.message)
        if not result.data:
            return ChainHealth(
                configured=True, connected=False, latency_ms=latency_ms, error="Failed to get block number",
            )

        price = await self.get_reference_price()
        log.info("chain_probe_ok", block_number=result.data, latency_ms=latency_ms)
        return ChainHealth(
            configured=True,
            connected=True,
            block_number=result.data,
            reference_price=price,
            latency_ms=latency_ms,
        )
