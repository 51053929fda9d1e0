"""Connectors for the external services behind the marketplace."""

from rwa_market.connectors.chain import ChainConnector
from rwa_market.connectors.pinning import PinningConnector
from rwa_market.connectors.store import StoreConnector

__all__ = ["ChainConnector", "PinningConnector", "StoreConnector"]
