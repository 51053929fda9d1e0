"""Configuration system."""

from rwa_market.config.loader import load_config
from rwa_market.config.schema import (
    AppConfig,
    ChainConfig,
    PinningConfig,
    StoreConfig,
    WalletProtocolConfig,
)

__all__ = [
    "AppConfig",
    "ChainConfig",
    "PinningConfig",
    "StoreConfig",
    "WalletProtocolConfig",
    "load_config",
]
