"""Pinning connector: reachability of the IPFS pinning service."""

from __future__ import annotations

import time
from typing import Any

import httpx

from rwa_market.config import PinningConfig
from rwa_market.connectors.base import HttpConnector, elapsed_ms
from rwa_market.logging import get_logger
from rwa_market.models import PinningHealth
from rwa_market.resilience import CallResult, ErrorKind, RemoteError, SafeCallExecutor

log = get_logger("pinning")


class PinningConnector(HttpConnector):
    """Async client for the pinning service API."""

    service = "pinning"

    def __init__(
        self,
        config: PinningConfig,
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

    def _client_kwargs(self) -> dict[str, Any]:
        return {
            "base_url": self.config.api_url.rstrip("/"),
            "headers": {"Authorization": f"Bearer {self.config.jwt or ''}"},
        }

    def ipfs_url(self, cid: str) -> str:
        return f"{self.config.gateway_url.rstrip('/')}/ipfs/{cid}"

    async def _test_authentication(self) -> CallResult[dict]:
        if not self.is_configured():
            return CallResult.failure(RemoteError.not_configured(self.service))

        http = await self._get_http()
        try:
            resp = await http.get("/data/testAuthentication")
        except httpx.HTTPError as exc:
            return CallResult.failure(RemoteError.from_exception(exc))

        if not resp.is_success:
            kind = ErrorKind.PERMISSION if resp.status_code in (401, 403) else ErrorKind.REMOTE
            return CallResult.failure(RemoteError(
                message=f"{resp.status_code} {resp.reason_phrase.lower()}",
                kind=kind,
                status=resp.status_code,
            ))
        try:
            return CallResult.success(resp.json())
        except ValueError:
            return CallResult.success(None)

    async def test_connection(self) -> PinningHealth:
        if not self.is_configured():
            log.info("pinning_not_configured")
            return PinningHealth(configured=False, error="Pinning JWT not set")

        start = time.monotonic()
        result = await self.executor.capture(
            self._test_authentication, method="test_connection", report=False,
        )
        latency_ms = elapsed_ms(start)

        if result.error is not None:
            log.warning("pinning_probe_failed", error=result.error.message, status=result.error.status)
            return PinningHealth(configured=True, connected=False, latency_ms=latency_ms, error=result.error.message)

        log.info("pinning_probe_ok", latency_ms=latency_ms)
        return PinningHealth(configured=True, connected=True, latency_ms=latency_ms)
