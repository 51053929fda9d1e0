"""Connection health: per-service probes merged into one snapshot."""

from rwa_market.health.aggregator import HealthAggregator
from rwa_market.health.status import ConnectionStatusStore

__all__ = ["ConnectionStatusStore", "HealthAggregator"]
