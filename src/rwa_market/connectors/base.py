"""Shared async HTTP plumbing for the service connectors."""

from __future__ import annotations

import time
from typing import Any

import httpx

from rwa_market.resilience import SafeCallExecutor


class HttpConnector:
    """Lazily-created ``httpx.AsyncClient`` plus the connector's executor.

    ``transport`` is injectable so tests can swap in ``httpx.MockTransport``.
    """

    service = "service"

    def __init__(
        self,
        *,
        configured: bool,
        timeout_s: float,
        executor: SafeCallExecutor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._configured = configured
        self._timeout_s = timeout_s
        self.executor = executor if executor is not None else SafeCallExecutor(self.service)
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    def is_configured(self) -> bool:
        return self._configured

    def _client_kwargs(self) -> dict[str, Any]:
        return {}

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._transport,
                **self._client_kwargs(),
            )
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()


def elapsed_ms(start: float) -> int:
    """Milliseconds since a ``time.monotonic()`` reading."""
    return int((time.monotonic() - start) * 1000)
