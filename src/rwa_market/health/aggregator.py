"""Connection health aggregator: one concurrent probe cycle across all services."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Protocol

from rwa_market.config import WalletProtocolConfig
from rwa_market.health.status import ConnectionStatusStore
from rwa_market.logging import get_logger
from rwa_market.models import (
    ChainHealth,
    ConnectionStatusSnapshot,
    PinningHealth,
    ServiceHealth,
    StoreHealth,
    WalletProtocolStatus,
)

log = get_logger("health")


class Probeable(Protocol):
    service: str

    def is_configured(self) -> bool: ...

    async def test_connection(self) -> ServiceHealth: ...


class HealthAggregator:
    def __init__(
        self,
        store: Probeable,
        chain: Probeable,
        pinning: Probeable,
        wallet_protocol: WalletProtocolConfig,
        status: ConnectionStatusStore | None = None,
    ) -> None:
        self.store = store
        self.chain = chain
        self.pinning = pinning
        self.wallet_protocol = wallet_protocol
        self.status = status if status is not None else ConnectionStatusStore(
            ConnectionStatusSnapshot.initial(wallet_protocol.configured)
        )

    async def test_all(self) -> ConnectionStatusSnapshot:
        """Probe every service and publish the merged snapshot.

        A call made while a cycle is running returns the current snapshot
        without probing anything.
        """
        if not self.status.try_begin():
            log.info("connection_test_already_running")
            return self.status.snapshot

        try:
            store, chain, pinning = await asyncio.gather(
                self._probe(self.store, StoreHealth),
                self._probe(self.chain, ChainHealth),
                self._probe(self.pinning, PinningHealth),
            )
            snapshot = ConnectionStatusSnapshot(
                store=store,
                chain=chain,
                pinning=pinning,
                wallet_protocol=WalletProtocolStatus(configured=self.wallet_protocol.configured),
                last_tested=datetime.now(timezone.utc),
            )
            self.status.publish(snapshot)
        finally:
            if self.status.testing:
                self.status.abort()

        self._log_summary(snapshot)
        return snapshot

    async def _probe(self, connector: Probeable, report_cls: type[ServiceHealth]) -> ServiceHealth:
        try:
            return await connector.test_connection()
        except Exception:
            log.exception("connection_probe_raised", service=connector.service)
            return report_cls(configured=connector.is_configured(), connected=False, error="test failed")

    def _log_summary(self, snapshot: ConnectionStatusSnapshot) -> None:
        for name, report in (("store", snapshot.store), ("chain", snapshot.chain), ("pinning", snapshot.pinning)):
            log.info(
                "connection_status",
                service=name,
                configured=report.configured,
                connected=report.connected,
                latency_ms=report.latency_ms,
                error=report.error,
            )
        log.info(
            "connections_tested",
            wallet_protocol_configured=snapshot.wallet_protocol.configured,
            connected=sum(1 for r in (snapshot.store, snapshot.chain, snapshot.pinning) if r.connected),
        )
