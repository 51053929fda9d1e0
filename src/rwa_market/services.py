"""Wiring: one set of connectors, assembler and health aggregator per process."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from rwa_market.assets import EntityAssembler
from rwa_market.config import AppConfig
from rwa_market.connectors import ChainConnector, PinningConnector, StoreConnector
from rwa_market.fallback import FallbackDataProvider
from rwa_market.health import HealthAggregator
from rwa_market.resilience import LoggingErrorSink, RecordingErrorSink, SafeCallExecutor


@dataclass
class MarketServices:
    config: AppConfig
    errors: RecordingErrorSink
    store: StoreConnector
    chain: ChainConnector
    pinning: PinningConnector
    assets: EntityAssembler
    health: HealthAggregator

    async def aclose(self) -> None:
        for connector in (self.store, self.chain, self.pinning):
            await connector.close()


def build_services(
    config: AppConfig,
    *,
    transports: dict[str, httpx.AsyncBaseTransport] | None = None,
    fallback: FallbackDataProvider | None = None,
) -> MarketServices:
    """Build the service graph. ``transports`` maps service name to a transport override."""
    transports = transports or {}
    errors = RecordingErrorSink(forward_to=LoggingErrorSink())

    store = StoreConnector(
        config.store,
        executor=SafeCallExecutor("store", errors),
        transport=transports.get("store"),
    )
    chain = ChainConnector(
        config.chain,
        executor=SafeCallExecutor("chain", errors),
        transport=transports.get("chain"),
    )
    pinning = PinningConnector(
        config.pinning,
        executor=SafeCallExecutor("pinning", errors),
        transport=transports.get("pinning"),
    )
    return MarketServices(
        config=config,
        errors=errors,
        store=store,
        chain=chain,
        pinning=pinning,
        assets=EntityAssembler(store, chain, fallback),
        health=HealthAggregator(store, chain, pinning, config.wallet_protocol),
    )
