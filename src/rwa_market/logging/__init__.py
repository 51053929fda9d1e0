"""Structured logging."""

from rwa_market.logging.setup import get_logger, redact_secrets, setup_logging

__all__ = ["get_logger", "redact_secrets", "setup_logging"]
