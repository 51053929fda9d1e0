"""Static reference data used when a remote service is unavailable."""

from rwa_market.fallback.dataset import ASSETS, OWNERS, STATS, FallbackDataProvider

__all__ = ["ASSETS", "OWNERS", "STATS", "FallbackDataProvider"]
