"""Per-service health reports and the aggregated connection snapshot."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class ServiceHealth(BaseModel):
    """Result of one connector probe.

    ``connected`` implies ``configured``. An unconfigured service is never
    probed, so it carries no latency and no capability flags.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    configured: bool
    connected: bool = False
    latency_ms: int | None = None
    error: str | None = None

    @model_validator(mode="after")
    def check_connected_requires_configured(self) -> ServiceHealth:
        if self.connected and not self.configured:
            raise ValueError("a service cannot be connected without being configured")
        if not self.configured and self.latency_ms is not None:
            raise ValueError("an unconfigured service is never probed")
        return self


class StoreHealth(ServiceHealth):
    can_read: bool = False
    can_write: bool = False
    tables: list[str] | None = None


class ChainHealth(ServiceHealth):
    block_number: int | None = None
    reference_price: float | None = None


class PinningHealth(ServiceHealth):
    pass


class WalletProtocolStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    configured: bool


class ConnectionStatusSnapshot(BaseModel):
    """Everything the connections screen shows, replaced whole per cycle."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    store: StoreHealth | None = None
    chain: ChainHealth | None = None
    pinning: PinningHealth | None = None
    wallet_protocol: WalletProtocolStatus
    last_tested: datetime | None = None

    @classmethod
    def initial(cls, wallet_protocol_configured: bool) -> ConnectionStatusSnapshot:
        return cls(wallet_protocol=WalletProtocolStatus(configured=wallet_protocol_configured))
